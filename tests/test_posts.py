from __future__ import annotations

import datetime as dt
from pathlib import Path

import pytest

from postsite.errors import ConfigurationError
from postsite.posts import Destination, build_tag_index, load_posts, newest_first


def entry(src: str, directory: str, name: str, date: str, tags=None, **extra) -> dict:
    data = {
        "src": src,
        "dest": {"directory": directory, "name": name},
        "title": name.replace("-", " ").title(),
        "date": date,
        "tags": tags or [],
    }
    data.update(extra)
    return data


def test_load_posts_assigns_ids_and_resolves_sources(tmp_path: Path):
    posts = load_posts(
        [
            entry("a.md", "./2013/04/29/", "mean-stack", "2013-04-29", ["MongoDB", "NodeJS"]),
            entry("b.md", "2013/05/12", "validate-forms", dt.date(2013, 5, 12), image="/img/b.png"),
        ],
        tmp_path,
    )
    assert [post.id for post in posts] == [0, 1]
    assert posts[0].source_path == tmp_path / "a.md"
    assert posts[0].destination == Destination("2013/04/29", "mean-stack")
    assert posts[0].url == "/2013/04/29/mean-stack.html"
    assert posts[1].publish_date == dt.date(2013, 5, 12)
    assert posts[1].extra == {"image": "/img/b.png"}


def test_destination_path_keeps_existing_suffix():
    assert Destination(".", "about.html").path == "about.html"
    assert Destination("2013/06/06", "61").path == "2013/06/06/61.html"


def test_tags_are_deduplicated():
    posts = load_posts([entry("a.md", "x", "a", "2020-01-01", ["Python", "Python", " asyncio ", ""])])
    assert posts[0].tags == ("Python", "asyncio")


def test_missing_title_is_a_configuration_error():
    data = entry("a.md", "x", "a", "2020-01-01")
    del data["title"]
    with pytest.raises(ConfigurationError, match="title"):
        load_posts([data])


def test_invalid_date_is_a_configuration_error():
    with pytest.raises(ConfigurationError, match="invalid date"):
        load_posts([entry("a.md", "x", "a", "not-a-date")])


def test_duplicate_destination_is_a_configuration_error():
    with pytest.raises(ConfigurationError, match="reuses destination"):
        load_posts(
            [
                entry("a.md", "2014/01/01", "same-name", "2014-01-01"),
                entry("b.md", "2014/01/01/", "same-name", "2014-01-02"),
            ]
        )


def test_destination_with_and_without_suffix_collide():
    with pytest.raises(ConfigurationError, match="reuses destination x/post.html"):
        load_posts([entry("a.md", "x", "post", "2014-01-01"), entry("b.md", "x", "post.html", "2014-01-02")])


def test_tags_must_be_a_list_or_a_string():
    data = entry("a.md", "x", "a", "2020-01-01")
    data["tags"] = 5
    with pytest.raises(ConfigurationError, match="tags must be a list"):
        load_posts([data])
    data["tags"] = "Python"
    assert load_posts([data])[0].tags == ("Python",)


def test_duplicate_source_is_a_configuration_error():
    with pytest.raises(ConfigurationError, match="reuses source"):
        load_posts([entry("a.md", "x", "a", "2014-01-01"), entry("a.md", "y", "b", "2014-01-02")])


def test_same_name_in_different_directories_is_allowed():
    posts = load_posts([entry("a.md", "x", "page", "2014-01-01"), entry("b.md", "y", "page", "2014-01-02")])
    assert len(posts) == 2


def test_tag_index_lists_posts_newest_first():
    posts = load_posts(
        [
            entry("a.md", "x", "a", "2013-04-29", ["MongoDB", "AngularJS"]),
            entry("b.md", "x", "b", "2013-05-12", ["MongoDB"]),
            entry("c.md", "x", "c", "2013-06-21", ["Paleo"]),
            entry("d.md", "x", "d", "2013-07-22", ["MongoDB", "AngularJS"]),
        ]
    )
    tags = build_tag_index(posts)
    assert [post.destination.name for post in tags["MongoDB"]] == ["d", "b", "a"]
    assert [post.destination.name for post in tags["AngularJS"]] == ["d", "a"]
    assert [post.destination.name for post in tags["Paleo"]] == ["c"]


def test_tag_index_rejects_tags_sharing_a_page():
    posts = load_posts([entry("a.md", "x", "a", "2020-01-01", ["NodeJS"]), entry("b.md", "x", "b", "2020-01-02", ["nodejs"])])
    with pytest.raises(ConfigurationError, match="tag/nodejs.html"):
        build_tag_index(posts)


def test_newest_first_breaks_ties_by_registry_order():
    posts = load_posts(
        [
            entry("a.md", "x", "a", "2020-01-01"),
            entry("b.md", "x", "b", "2020-01-01"),
            entry("c.md", "x", "c", "2019-12-31"),
        ]
    )
    assert [post.destination.name for post in newest_first(posts)] == ["b", "a", "c"]
