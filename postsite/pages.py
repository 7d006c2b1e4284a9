from __future__ import annotations

import html

from jinja2 import Template

from .feed import Channel, FeedItem, render_rss, strip_empty_content
from .posts import PostRecord, TransformedPost, newest_first, tag_path
from .render import render, strip_tags
from .utils import join_url
from .writer import Page

PAGE_SIZE = 8


def post_page(template: Template, post: TransformedPost, all_posts: list[PostRecord]) -> Page:
    html_doc = render(
        template,
        {
            "post": post,
            "content": post.content,
            "allPosts": all_posts,
        },
    )
    return Page(post.record.destination.path, html_doc)


def tag_pages(
    template: Template,
    tag_index: dict[str, list[PostRecord]],
    transformed: dict[int, TransformedPost],
    all_posts: list[PostRecord],
) -> list[Page]:
    pages = []
    for tag, records in tag_index.items():
        html_doc = render(
            template,
            {
                "tag": tag,
                "posts": [transformed[record.id] for record in records],
                "allPosts": all_posts,
                "pageNum": 0,
                "isLastPage": True,
            },
        )
        pages.append(Page(tag_path(tag), html_doc))
    return pages


def index_pages(
    template: Template, posts: list[TransformedPost], all_posts: list[PostRecord], domain: str = ""
) -> list[Page]:
    html_doc = render(template, {"posts": newest_first(posts), "allPosts": all_posts})
    pages = [Page("index.html", html_doc)]
    if domain:
        pages.append(Page("CNAME", f"{domain}\n"))
    return pages


def pagination_slices(total: int) -> list[tuple[int, int, bool]]:
    """Return (page_num, start, is_last) for every listing page after the index."""
    slices = []
    for start in range(PAGE_SIZE, total, PAGE_SIZE):
        slices.append((start // PAGE_SIZE, start, start + PAGE_SIZE >= total))
    return slices


def generated_paths(tag_index: dict[str, list[PostRecord]], total: int, domain: str = "") -> set[str]:
    """Paths the aggregate pages will write for a registry of ``total`` posts."""
    paths = {"index.html", "feed.xml", "recommendations.html"}
    if domain:
        paths.add("CNAME")
    paths.update(tag_path(tag) for tag in tag_index)
    paths.update(f"page/{page_num}.html" for page_num, _, _ in pagination_slices(total))
    return paths


def pagination_pages(
    template: Template, posts: list[TransformedPost], all_posts: list[PostRecord]
) -> list[Page]:
    ordered = newest_first(posts)
    pages = []
    for page_num, start, is_last in pagination_slices(len(ordered)):
        html_doc = render(
            template,
            {
                "tag": f"Page {page_num}",
                "posts": ordered[start : start + PAGE_SIZE],
                "allPosts": all_posts,
                "pageNum": page_num,
                "isLastPage": is_last,
            },
        )
        pages.append(Page(f"page/{page_num}.html", html_doc))
    return pages


def feed_page(channel: Channel, posts: list[TransformedPost], full_content: bool = False) -> Page:
    items = []
    for post in newest_first(posts):
        items.append(
            FeedItem(
                title=post.title,
                link=join_url(channel.link, post.url) if channel.link else post.url,
                date=post.publish_date,
                description=html.unescape(strip_tags(post.preview)).strip(),
                content=post.content if full_content else "",
                categories=list(post.tags),
            )
        )
    return Page("feed.xml", strip_empty_content(render_rss(channel, items)))


def recommendations_page(template: Template) -> Page:
    return Page("recommendations.html", render(template, {}))
