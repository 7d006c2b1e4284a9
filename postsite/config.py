from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigurationError
from .utils import parse_bool, parse_int

try:
    import tomllib as toml
except ImportError:
    try:
        import tomli as toml
    except ImportError:  # pragma: no cover - optional dependency
        toml = None

try:
    import yaml
except ImportError:  # pragma: no cover - optional dependency
    yaml = None

MAX_WORKERS = 32


def parse_data_file(path: Path) -> object:
    """Parse a TOML, YAML or JSON file, picked by suffix."""
    suffix = path.suffix.lower()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc
    if suffix == ".toml":
        if toml is None:
            raise ConfigurationError("TOML config requires tomllib (Python 3.11+) or tomli.")
        try:
            return toml.loads(text)
        except Exception as exc:  # pragma: no cover - depends on parser
            raise ConfigurationError(f"Invalid TOML in config file {path}: {exc}") from exc
    if suffix in {".yml", ".yaml"}:
        if yaml is None:
            raise ConfigurationError("YAML config requires PyYAML.")
        try:
            return yaml.safe_load(text)
        except Exception as exc:  # pragma: no cover - depends on parser
            raise ConfigurationError(f"Invalid YAML in config file {path}: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid JSON in config file {path}: {exc}") from exc


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    data = parse_data_file(path)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config must be a mapping: {path}")
    return data


def load_post_entries(path: Path) -> list[dict]:
    """Read the raw post table: a list, or a mapping with a ``posts`` list."""
    if not path.exists():
        raise ConfigurationError(f"Posts file not found: {path}")
    data = parse_data_file(path)
    if isinstance(data, dict):
        data = data.get("posts")
    if data is None:
        return []
    if not isinstance(data, list):
        raise ConfigurationError(f"Posts file must hold a list of posts: {path}")
    for position, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise ConfigurationError(f"Post #{position} in {path} is not a mapping")
    return data


@dataclass
class Settings:
    posts_file: Path = Path("posts.yaml")
    templates: Path = Path("templates")
    output: Path = Path("bin")
    static: Path = Path("static")
    examples: Path = Path("examples")
    site_title: str = "Blog"
    site_description: str = ""
    site_link: str = ""
    site_image: str = ""
    author: str = ""
    custom_domain: str = ""
    feed_full_content: bool = False
    build_workers: int = 0

    @property
    def workers(self) -> int:
        workers = self.build_workers
        if workers <= 0:
            workers = os.cpu_count() or 1
        return max(1, min(workers, MAX_WORKERS))

    @property
    def site_url(self) -> str:
        site_url = self.site_link.strip()
        if not site_url and self.custom_domain:
            site_url = f"https://{self.custom_domain.strip()}"
        return site_url

    @classmethod
    def from_mapping(cls, values: dict) -> "Settings":
        defaults = cls()

        def path_value(key: str) -> Path:
            value = values.get(key)
            return getattr(defaults, key) if value in (None, "") else Path(str(value))

        def str_value(key: str) -> str:
            value = values.get(key)
            return getattr(defaults, key) if value is None else str(value)

        return cls(
            posts_file=path_value("posts_file"),
            templates=path_value("templates"),
            output=path_value("output"),
            static=path_value("static"),
            examples=path_value("examples"),
            site_title=str_value("site_title"),
            site_description=str_value("site_description"),
            site_link=str_value("site_link"),
            site_image=str_value("site_image"),
            author=str_value("author"),
            custom_domain=str_value("custom_domain").strip(),
            feed_full_content=parse_bool(values.get("feed_full_content", defaults.feed_full_content)),
            build_workers=parse_int(values.get("build_workers"), defaults.build_workers),
        )
