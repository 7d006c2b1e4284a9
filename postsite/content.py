from __future__ import annotations

from .errors import ContentReadError
from .posts import PostRecord


def load_content(post: PostRecord) -> bytes:
    path = post.source_path
    if not path.is_file():
        raise ContentReadError(path, "no such file")
    try:
        return path.read_bytes()
    except OSError as exc:
        raise ContentReadError(path, exc.strerror or str(exc)) from exc


def decode_content(raw: bytes | str, path: object = "<memory>") -> str:
    if isinstance(raw, str):
        return raw
    try:
        return raw.decode("utf-8").lstrip("\ufeff")
    except UnicodeDecodeError as exc:
        raise ContentReadError(str(path), f"not valid UTF-8 ({exc.reason})") from exc
