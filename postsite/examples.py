from __future__ import annotations

import ast
import re
import textwrap
from dataclasses import dataclass
from pathlib import Path

from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor

from .errors import ConfigurationError, RenderError

RE_REQUIRE = re.compile(r"^\s*\[require:(?P<pattern>[^\]]+)\]\s*$")
FENCE_RE = re.compile(r"^(?P<indent>[ \t]*)(`{3,}|~{3,})")
IGNORE_START = "# snippet:ignore:start"
IGNORE_END = "# snippet:ignore:end"
IGNORE_LINE = "# snippet:ignore"


@dataclass(frozen=True)
class Snippet:
    name: str
    code: str
    source: Path


def snippet_name(parts: list[str]) -> str:
    words = []
    for part in parts:
        if part.startswith("Test"):
            part = part[len("Test"):]
        elif part.startswith("test_"):
            part = part[len("test_"):]
        words.append(part.replace("_", " ").strip().lower())
    return " ".join(word for word in words if word)


def strip_ignored(lines: list[str]) -> list[str]:
    out = []
    skipping = False
    for line in lines:
        stripped = line.strip()
        if stripped == IGNORE_START:
            skipping = True
            continue
        if stripped == IGNORE_END:
            skipping = False
            continue
        if skipping or stripped.endswith(IGNORE_LINE):
            continue
        out.append(line)
    return out


def _function_body(node: ast.FunctionDef, lines: list[str]) -> str:
    body = node.body
    # Drop the docstring, it is the test's description, not the example.
    if body and isinstance(body[0], ast.Expr) and isinstance(getattr(body[0], "value", None), ast.Constant):
        if isinstance(body[0].value.value, str) and len(body) > 1:
            body = body[1:]
    start = body[0].lineno - 1
    # Include comments sitting between the signature and the first statement.
    while start > node.lineno and lines[start - 1].strip().startswith("#"):
        start -= 1
    chunk = strip_ignored(lines[start : node.end_lineno])
    return textwrap.dedent("\n".join(chunk)).strip("\n")


def parse_snippets(path: Path) -> list[Snippet]:
    text = path.read_text(encoding="utf-8")
    try:
        tree = ast.parse(text, filename=str(path))
    except SyntaxError as exc:
        raise ConfigurationError(f"Cannot parse example file {path}: {exc}") from exc
    lines = text.splitlines()
    snippets = []

    def visit(nodes: list[ast.stmt], parents: list[str]) -> None:
        for node in nodes:
            if isinstance(node, ast.ClassDef):
                visit(node.body, parents + [node.name])
            elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)) and node.name.startswith("test"):
                name = snippet_name(parents + [node.name])
                snippets.append(Snippet(name=name, code=_function_body(node, lines), source=path))

    visit(tree.body, [])
    return snippets


def collect_snippets(examples_dir: Path) -> list[Snippet]:
    if not examples_dir.exists():
        return []
    snippets = []
    for path in sorted(examples_dir.rglob("*.py"), key=lambda p: p.as_posix()):
        snippets.extend(parse_snippets(path))
    return snippets


def find_snippet(snippets: list[Snippet], pattern: str) -> Snippet:
    try:
        regex = re.compile(pattern.strip())
    except re.error as exc:
        raise RenderError(f"[require:{pattern}]", f"bad pattern: {exc}") from exc
    for snippet in snippets:
        if regex.search(snippet.name):
            return snippet
    raise RenderError(f"[require:{pattern}]", "no example matches")


class RequirePreprocessor(Preprocessor):
    def __init__(self, md, snippets: list[Snippet]):
        super().__init__(md)
        self.snippets = snippets

    def run(self, lines: list[str]) -> list[str]:
        out = []
        in_fence = False
        fence_marker = ""
        for line in lines:
            fence_match = FENCE_RE.match(line)
            if fence_match:
                marker = fence_match.group(2)
                if not in_fence:
                    in_fence = True
                    fence_marker = marker
                elif marker == fence_marker:
                    in_fence = False
                    fence_marker = ""
                out.append(line)
                continue
            match = None if in_fence else RE_REQUIRE.match(line)
            if not match:
                out.append(line)
                continue
            snippet = find_snippet(self.snippets, match.group("pattern"))
            out.extend(["```python", *snippet.code.splitlines(), "```"])
        return out


class RequireExtension(Extension):
    def __init__(self, snippets: list[Snippet], **kwargs):
        super().__init__(**kwargs)
        self.snippets = snippets

    def extendMarkdown(self, md):
        # Runs ahead of fenced_code (priority 25) so the inserted block gets highlighted.
        md.preprocessors.register(RequirePreprocessor(md, self.snippets), "require_example", 28)
