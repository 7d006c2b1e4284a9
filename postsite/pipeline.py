"""Build orchestration.

A run is a fixed sequence of fan-out/fan-in phases. Every unit inside a phase
writes its own output paths, so units share no mutable state and the only
coordination needed is waiting for the whole phase before the next starts.
"""
from __future__ import annotations

import time
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, TypeVar

from jinja2 import Template

from .config import Settings, load_post_entries
from .errors import ConfigurationError
from .content import load_content
from .examples import Snippet, collect_snippets
from .feed import Channel
from .markup import transform_post
from .pages import feed_page, generated_paths, index_pages, pagination_pages, post_page, recommendations_page, tag_pages
from .posts import PostRecord, TransformedPost, build_tag_index, load_posts, newest_first
from .render import TEMPLATE_NAMES, create_environment, load_template
from .writer import Page, copy_static, write_page

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class BuildReport:
    written: list[Path] = field(default_factory=list)
    posts: int = 0
    tags: int = 0
    elapsed: float = 0.0


def fan_out(fn: Callable[[T], R], items: Iterable[T], workers: int = 1) -> list[R]:
    """Run ``fn`` over ``items`` concurrently and return results in input order.

    The first failure is re-raised once the units already running have
    finished; units that had not started yet are cancelled.
    """
    items = list(items)
    if not items:
        return []
    workers = max(1, min(workers, len(items)))
    if workers == 1:
        return [fn(item) for item in items]
    executor = ThreadPoolExecutor(max_workers=workers)
    try:
        futures = [executor.submit(fn, item) for item in items]
        done, _ = wait(futures, return_when=FIRST_EXCEPTION)
        failed = [future for future in futures if future in done and future.exception() is not None]
        if failed:
            executor.shutdown(wait=True, cancel_futures=True)
            raise failed[0].exception()
        return [future.result() for future in futures]
    finally:
        executor.shutdown(wait=True)


class Build:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.output_dir = settings.output
        self.workers = settings.workers
        self.report = BuildReport()

    def write(self, pages: list[Page]) -> list[Path]:
        return [write_page(self.output_dir, page) for page in pages]

    def load_registry(self) -> tuple[list[PostRecord], dict[str, list[PostRecord]]]:
        posts_file = self.settings.posts_file
        posts = load_posts(load_post_entries(posts_file), posts_file.parent)
        tag_index = build_tag_index(posts)
        reserved = generated_paths(tag_index, len(posts), self.settings.custom_domain)
        for post in posts:
            if post.destination.path in reserved:
                raise ConfigurationError(
                    f"Post #{post.id} ({post.title}) would overwrite the generated page {post.destination.path}"
                )
        return posts, tag_index

    def acquire(self, posts: list[PostRecord], snippets: list[Snippet]) -> tuple[dict, dict]:
        env = create_environment(
            self.settings.templates,
            {
                "title": self.settings.site_title,
                "description": self.settings.site_description,
                "link": self.settings.site_url,
            },
        )

        def unit(item: tuple[str, object]) -> tuple[str, object]:
            kind, value = item
            if kind == "template":
                return kind, load_template(env, self.settings.templates, value)
            return kind, transform_post(value, load_content(value), snippets)

        work = [("template", name) for name in TEMPLATE_NAMES] + [("post", post) for post in posts]
        templates: dict[str, Template] = {}
        transformed: dict[int, TransformedPost] = {}
        for kind, result in fan_out(unit, work, self.workers):
            if kind == "template":
                templates[result.name] = result
            else:
                transformed[result.record.id] = result
        return templates, transformed

    def compile_posts(self, templates: dict, transformed: dict, all_posts: list[PostRecord]) -> None:
        print("Generating posts")
        posts = [transformed[record.id] for record in all_posts]

        def unit(post: TransformedPost) -> list[Path]:
            print(f'Writing "{post.title}"')
            return self.write([post_page(templates["post"], post, all_posts)])

        for written in fan_out(unit, posts, self.workers):
            self.report.written.extend(written)

    def aggregate(self, templates: dict, transformed: dict, tag_index: dict, all_posts: list[PostRecord]) -> None:
        settings = self.settings
        posts = list(transformed.values())
        channel = Channel(
            title=settings.site_title,
            description=settings.site_description,
            link=settings.site_url,
            image=settings.site_image,
            author=settings.author,
        )
        units: list[Callable[[], list[Page]]] = [
            lambda: tag_pages(templates["list"], tag_index, transformed, all_posts),
            lambda: index_pages(templates["index"], posts, all_posts, settings.custom_domain),
            lambda: pagination_pages(templates["list"], posts, all_posts),
            lambda: [feed_page(channel, posts, settings.feed_full_content)],
            lambda: [recommendations_page(templates["recommendations"])],
        ]
        for written in fan_out(lambda unit: self.write(unit()), units, self.workers):
            self.report.written.extend(written)

    def run(self) -> BuildReport:
        start = time.perf_counter()
        posts, tag_index = self.load_registry()
        all_posts = newest_first(posts)
        snippets = collect_snippets(self.settings.examples)

        templates, transformed = self.acquire(posts, snippets)
        self.compile_posts(templates, transformed, all_posts)
        self.aggregate(templates, transformed, tag_index, all_posts)

        if self.settings.static.exists():
            copy_static(self.settings.static, self.output_dir)

        self.report.posts = len(posts)
        self.report.tags = len(tag_index)
        self.report.elapsed = time.perf_counter() - start
        return self.report


def run_build(settings: Settings) -> BuildReport:
    return Build(settings).run()
