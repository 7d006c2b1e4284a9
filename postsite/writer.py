from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path

from .errors import WriteError


@dataclass(frozen=True)
class Page:
    path: str
    payload: str | bytes


def write_text(path: Path, text: str | bytes) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(text, bytes):
            path.write_bytes(text)
        else:
            path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise WriteError(path, exc.strerror or str(exc)) from exc


def write_page(output_dir: Path, page: Page) -> Path:
    path = output_dir / page.path
    write_text(path, page.payload)
    return path


def copy_static(static_dir: Path, output_dir: Path) -> None:
    try:
        for item in static_dir.iterdir():
            dest = output_dir / item.name
            if item.is_dir():
                if dest.exists():
                    shutil.rmtree(dest)
                shutil.copytree(item, dest)
            else:
                output_dir.mkdir(parents=True, exist_ok=True)
                shutil.copy2(item, dest)
    except OSError as exc:
        raise WriteError(output_dir, f"cannot copy static assets from {static_dir}: {exc}") from exc
