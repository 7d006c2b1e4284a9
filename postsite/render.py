from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, TemplateError
from markupsafe import Markup

from .errors import RenderError
from .markup import render_body

TAG_RE = re.compile(r"<[^>]+>")

TEMPLATE_NAMES = ("post", "list", "index", "recommendations")


def strip_tags(html_text: str) -> str:
    return TAG_RE.sub("", html_text)


def markdown_filter(text: str) -> Markup:
    return Markup(render_body(str(text), name="markdown filter"))


def create_environment(templates_dir: Path, site: Optional[dict] = None) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(templates_dir)),
        autoescape=True,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["markdown"] = markdown_filter
    env.filters["strip_tags"] = strip_tags
    env.globals["site"] = site or {}
    return env


def compile_template(env: Environment, source: str, name: str) -> Template:
    try:
        template = env.from_string(source)
    except TemplateError as exc:
        raise RenderError(name, str(exc)) from exc
    template.name = name
    return template


def read_template(templates_dir: Path, name: str) -> str:
    path = templates_dir / f"{name}.html"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise RenderError(f"{name} template", f"cannot read {path}: {exc.strerror or exc}") from exc


def load_template(env: Environment, templates_dir: Path, name: str) -> Template:
    return compile_template(env, read_template(templates_dir, name), name)


def render(template: Template, context: dict) -> str:
    name = template.name or "template"
    try:
        return template.render(context)
    except RenderError:
        raise
    except Exception as exc:
        raise RenderError(name, f"{type(exc).__name__}: {exc}") from exc
