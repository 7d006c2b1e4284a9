from __future__ import annotations

import datetime as dt
import html
from dataclasses import dataclass, field

from .utils import join_url, rfc822_date

EMPTY_CONTENT = "<content:encoded/>"


@dataclass
class Channel:
    title: str
    description: str
    link: str
    image: str = ""
    author: str = ""


@dataclass
class FeedItem:
    title: str
    link: str
    date: dt.date
    description: str = ""
    content: str = ""
    categories: list[str] = field(default_factory=list)


def cdata(text: str) -> str:
    return "<![CDATA[" + text.replace("]]>", "]]]]><![CDATA[>") + "]]>"


def render_item(item: FeedItem, author: str) -> str:
    lines = [
        "<item>",
        f"<title>{html.escape(item.title)}</title>",
        f"<link>{html.escape(item.link)}</link>",
        f'<guid isPermaLink="true">{html.escape(item.link)}</guid>',
        f"<pubDate>{rfc822_date(item.date)}</pubDate>",
    ]
    if item.description:
        lines.append(f"<description>{html.escape(item.description)}</description>")
    if author:
        lines.append(f"<dc:creator>{html.escape(author)}</dc:creator>")
    lines.extend(f"<category>{html.escape(name)}</category>" for name in item.categories)
    lines.append(f"<content:encoded>{cdata(item.content)}</content:encoded>" if item.content else EMPTY_CONTENT)
    lines.append("</item>")
    return "\n".join(lines)


def render_rss(channel: Channel, items: list[FeedItem], build_date: dt.date | None = None) -> str:
    """Render an RSS 2.0 document; items are written in the order given."""
    if build_date is None:
        build_date = items[0].date if items else dt.date.today()
    head = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<rss version="2.0" xmlns:dc="http://purl.org/dc/elements/1.1/" '
        'xmlns:content="http://purl.org/rss/1.0/modules/content/" '
        'xmlns:atom="http://www.w3.org/2005/Atom">',
        "<channel>",
        f"<title>{html.escape(channel.title)}</title>",
        f"<link>{html.escape(channel.link)}</link>",
        f"<description>{html.escape(channel.description)}</description>",
        f"<lastBuildDate>{rfc822_date(build_date)}</lastBuildDate>",
        "<docs>https://validator.w3.org/feed/docs/rss2.html</docs>",
    ]
    if channel.link:
        head.append(
            f'<atom:link href="{html.escape(join_url(channel.link, "feed.xml"))}" '
            'rel="self" type="application/rss+xml"/>'
        )
    if channel.image:
        head.extend(
            [
                "<image>",
                f"<title>{html.escape(channel.title)}</title>",
                f"<url>{html.escape(channel.image)}</url>",
                f"<link>{html.escape(channel.link)}</link>",
                "</image>",
            ]
        )
    body = [render_item(item, channel.author) for item in items]
    return "\n".join(head + body + ["</channel>", "</rss>"])


def strip_empty_content(text: str) -> str:
    return "\n".join(line for line in text.split("\n") if line != EMPTY_CONTENT).replace(EMPTY_CONTENT, "")
