from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from postsite.errors import RenderError
from postsite.examples import collect_snippets, find_snippet, snippet_name
from postsite.markup import render_body

EXAMPLES = textwrap.dedent(
    '''
    import asyncio


    class TestFastify:
        def test_basic_example(self):
            """Server replies with a greeting."""
            # The handler is a coroutine
            async def handler():
                return "Hello, World!"

            # snippet:ignore:start
            result = asyncio.run(handler())
            # snippet:ignore:end
            assert result == "Hello, World!"  # snippet:ignore

        def test_basic_error(self):
            raise_it = True


    def test_top_level():
        value = 42
    '''
)


@pytest.fixture
def snippets(tmp_path: Path):
    (tmp_path / "fastify_examples.py").write_text(EXAMPLES, encoding="utf-8")
    return collect_snippets(tmp_path)


def test_snippet_names():
    assert snippet_name(["TestFastify", "test_basic_example"]) == "fastify basic example"
    assert snippet_name(["test_top_level"]) == "top level"


def test_collect_snippets_strips_ignored_lines(snippets):
    assert [snippet.name for snippet in snippets] == [
        "fastify basic example",
        "fastify basic error",
        "top level",
    ]
    code = snippets[0].code
    assert code.startswith("# The handler is a coroutine")
    assert "async def handler():" in code
    assert "asyncio.run" not in code
    assert "assert" not in code
    assert "Server replies" not in code


def test_find_snippet_uses_first_match(snippets):
    assert find_snippet(snippets, "fastify basic").name == "fastify basic example"
    with pytest.raises(RenderError, match="no example matches"):
        find_snippet(snippets, "express")


def test_require_block_is_expanded_and_highlighted(snippets):
    html = render_body("Intro\n\n[require:fastify basic error]\n\nOutro\n", snippets)
    assert 'class="codehilite"' in html
    assert "raise_it" in html
    assert "[require:" not in html


def test_unknown_require_fails_the_render(snippets):
    with pytest.raises(RenderError):
        render_body("[require:does not exist]\n", snippets)


def test_missing_examples_directory(tmp_path: Path):
    assert collect_snippets(tmp_path / "nope") == []


def test_require_inside_a_fence_is_left_alone(snippets):
    source = "Usage:\n\n```\n[require:does not exist]\n```\n\n[require:top level]\n"
    html = render_body(source, snippets)
    assert "[require:does not exist]" in html
    assert "value" in html
