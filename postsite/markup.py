from __future__ import annotations

from typing import Optional

import markdown

from .content import decode_content
from .errors import BuildError, RenderError
from .examples import RequireExtension, Snippet
from .posts import PostRecord, TransformedPost


def new_markdown(snippets: Optional[list[Snippet]] = None) -> markdown.Markdown:
    # Markdown instances keep per-document state, so every conversion gets its own.
    extensions = ["fenced_code", "tables", "codehilite"]
    if snippets:
        extensions.append(RequireExtension(snippets))
    return markdown.Markdown(
        extensions=extensions,
        extension_configs={"codehilite": {"guess_lang": False, "css_class": "codehilite"}},
    )


def render_body(raw: bytes | str, snippets: Optional[list[Snippet]] = None, name: str = "<markdown>") -> str:
    text = decode_content(raw, name)
    try:
        return new_markdown(snippets).convert(text)
    except BuildError:
        raise
    except Exception as exc:
        raise RenderError(name, str(exc)) from exc


def first_line(text: str) -> str:
    end = text.find("\n")
    return text if end == -1 else text[:end]


def derive_preview(raw: bytes | str, snippets: Optional[list[Snippet]] = None, name: str = "<markdown>") -> str:
    return render_body(first_line(decode_content(raw, name)), snippets, name)


def transform_post(post: PostRecord, raw: bytes | str, snippets: Optional[list[Snippet]] = None) -> TransformedPost:
    name = str(post.source_path)
    text = decode_content(raw, name)
    content = render_body(text, snippets, name)
    if post.preview_text is not None:
        preview = render_body(post.preview_text, snippets, f"{name} (preview)")
    else:
        preview = derive_preview(text, snippets, name)
    return TransformedPost(record=post, content=content, preview=preview)
