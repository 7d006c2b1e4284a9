from __future__ import annotations

import datetime as dt
import json
from pathlib import Path

import pytest

from postsite.config import Settings

TEMPLATES = {
    "post.html": "<h1>{{ post.title }}</h1>\n{{ content | safe }}\n",
    "list.html": (
        "{{ tag }}|{{ pageNum }}|{{ isLastPage }}\n"
        "{% for item in posts %}{{ item.url }}\n{% endfor %}"
    ),
    "index.html": "{% for item in posts %}{{ item.url }}\n{% endfor %}",
    "recommendations.html": "{% filter markdown %}# Picks{% endfilter %}",
}


def post_entry(index: int, tags: list[str] | None = None, date: dt.date | None = None) -> dict:
    date = date or dt.date(2020, 1, 1) + dt.timedelta(days=index)
    return {
        "src": f"posts/post{index}.md",
        "dest": {"directory": date.strftime("%Y/%m/%d"), "name": f"post-{index}"},
        "title": f"Post {index}",
        "date": date.isoformat(),
        "tags": tags if tags is not None else [],
    }


class SiteFactory:
    def __init__(self, root: Path) -> None:
        self.root = root

    def __call__(self, entries: list[dict], bodies: dict[int, str] | None = None, **overrides) -> Settings:
        bodies = bodies or {}
        templates = self.root / "templates"
        templates.mkdir(parents=True, exist_ok=True)
        for name, text in TEMPLATES.items():
            (templates / name).write_text(text, encoding="utf-8")
        posts_dir = self.root / "posts"
        posts_dir.mkdir(exist_ok=True)
        for position, entry in enumerate(entries):
            body = bodies.get(position, f"Intro of {entry['title']}\n\nBody of {entry['title']}.\n")
            if body is not None:
                (self.root / entry["src"]).write_text(body, encoding="utf-8")
        posts_file = self.root / "posts.json"
        posts_file.write_text(json.dumps({"posts": entries}), encoding="utf-8")
        values = {
            "posts_file": posts_file,
            "templates": templates,
            "output": self.root / "bin",
            "static": self.root / "static",
            "examples": self.root / "examples",
            "site_title": "Test Blog",
            "site_link": "https://blog.test",
            "build_workers": 4,
        }
        values.update(overrides)
        return Settings.from_mapping(values)


@pytest.fixture
def make_site(tmp_path: Path) -> SiteFactory:
    return SiteFactory(tmp_path)
