from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Optional

from .errors import ConfigurationError
from .utils import parse_date

KNOWN_KEYS = {"src", "source", "dest", "destination", "title", "date", "tags", "preview"}


@dataclass(frozen=True)
class Destination:
    directory: str
    name: str

    @property
    def path(self) -> str:
        name = self.name if self.name.endswith(".html") else f"{self.name}.html"
        directory = PurePosixPath(self.directory.strip("/") or ".")
        return (directory / name).as_posix()


@dataclass(frozen=True)
class PostRecord:
    id: int
    source_path: Path
    destination: Destination
    title: str
    publish_date: dt.date
    tags: tuple[str, ...] = ()
    preview_text: Optional[str] = None
    extra: dict = field(default_factory=dict, compare=False)

    @property
    def url(self) -> str:
        return f"/{self.destination.path}"


@dataclass(frozen=True)
class TransformedPost:
    """A post with its markdown already rendered; built once per run."""

    record: PostRecord
    content: str
    preview: str

    @property
    def title(self) -> str:
        return self.record.title

    @property
    def url(self) -> str:
        return self.record.url

    @property
    def publish_date(self) -> dt.date:
        return self.record.publish_date

    @property
    def tags(self) -> tuple[str, ...]:
        return self.record.tags

    @property
    def extra(self) -> dict:
        return self.record.extra


def _dedupe(values: list) -> tuple[str, ...]:
    seen: list[str] = []
    for value in values:
        tag = str(value).strip()
        if tag and tag not in seen:
            seen.append(tag)
    return tuple(seen)


def _require(entry: dict, keys: tuple[str, ...], position: int) -> object:
    for key in keys:
        value = entry.get(key)
        if value not in (None, ""):
            return value
    raise ConfigurationError(f"Post #{position} is missing required field '{keys[0]}'")


def load_posts(entries: list[dict], base_dir: Path = Path(".")) -> list[PostRecord]:
    posts: list[PostRecord] = []
    sources: dict[Path, int] = {}
    destinations: dict[str, int] = {}
    for position, entry in enumerate(entries):
        source = Path(str(_require(entry, ("src", "source"), position)))
        if not source.is_absolute():
            source = base_dir / source

        dest = _require(entry, ("dest", "destination"), position)
        if not isinstance(dest, dict):
            raise ConfigurationError(f"Post #{position} destination must be a mapping")
        directory = PurePosixPath(str(dest.get("directory") or ".").strip()).as_posix().strip("/") or "."
        name = str(dest.get("name") or "").strip()
        if not name:
            raise ConfigurationError(f"Post #{position} destination has no name")

        title = str(_require(entry, ("title",), position))
        try:
            publish_date = parse_date(_require(entry, ("date",), position))
        except ValueError as exc:
            raise ConfigurationError(f"Post #{position} ({title}) has an invalid date: {exc}") from exc

        tags = entry.get("tags") or []
        if isinstance(tags, str):
            tags = [tags]
        if not isinstance(tags, (list, tuple)):
            raise ConfigurationError(f"Post #{position} ({title}) tags must be a list or a string")

        key = source.resolve()
        if key in sources:
            raise ConfigurationError(f"Post #{position} reuses source {source} from post #{sources[key]}")
        sources[key] = position
        destination = Destination(directory=directory, name=name)
        dest_key = destination.path
        if dest_key in destinations:
            raise ConfigurationError(
                f"Post #{position} ({title}) reuses destination {dest_key} "
                f"from post #{destinations[dest_key]}"
            )
        destinations[dest_key] = position

        preview = entry.get("preview")
        posts.append(
            PostRecord(
                id=position,
                source_path=source,
                destination=destination,
                title=title,
                publish_date=publish_date,
                tags=_dedupe(list(tags)),
                preview_text=str(preview) if preview not in (None, "") else None,
                extra={k: v for k, v in entry.items() if k not in KNOWN_KEYS},
            )
        )
    return posts


def newest_first(posts: list) -> list:
    def key(post: object) -> tuple:
        record = getattr(post, "record", post)
        return record.publish_date, record.id

    return sorted(posts, key=key, reverse=True)


def tag_path(tag: str) -> str:
    return f"tag/{tag.lower()}.html"


def build_tag_index(posts: list[PostRecord]) -> dict[str, list[PostRecord]]:
    tag_map: dict[str, list[PostRecord]] = {}
    for post in newest_first(posts):
        for tag in post.tags:
            tag_map.setdefault(tag, []).append(post)

    paths: dict[str, str] = {}
    for tag in tag_map:
        path = tag_path(tag)
        if path in paths:
            raise ConfigurationError(f"Tags '{paths[path]}' and '{tag}' both map to {path}")
        paths[path] = tag
    return tag_map
