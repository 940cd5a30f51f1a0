"""
tests/test_text.py -- Unit tests for core/text.py helpers.

Pure functions, no fixtures: slugify, timestamped_slug, calculate_read_time,
pagination_meta.
"""

from __future__ import annotations

import re

from core.text import calculate_read_time, pagination_meta, slugify, timestamped_slug


class TestSlugify:
    def test_punctuation_and_whitespace(self) -> None:
        assert slugify("Hello, World!  Test") == "hello-world-test"

    def test_collapses_hyphens_and_trims_edges(self) -> None:
        assert slugify("  --Data -- Science--  ") == "data-science"

    def test_drops_non_ascii(self) -> None:
        assert slugify("Café Culture") == "caf-culture"

    def test_empty_when_nothing_survives(self) -> None:
        assert slugify("!!!") == ""

    def test_already_slug_is_unchanged(self) -> None:
        assert slugify("machine-learning-101") == "machine-learning-101"


def test_timestamped_slug_appends_millis() -> None:
    result = timestamped_slug("my-post")
    assert re.fullmatch(r"my-post-\d{13}", result), result


class TestReadTime:
    def test_minimum_is_one_minute(self) -> None:
        assert calculate_read_time("") == 1
        assert calculate_read_time("short text") == 1

    def test_rounds_up(self) -> None:
        assert calculate_read_time("word " * 201) == 2

    def test_exact_multiple(self) -> None:
        assert calculate_read_time("word " * 400) == 2

    def test_html_tags_and_markdown_markers_are_ignored(self) -> None:
        # Tags contribute no words; the markers are stripped, not counted.
        content = "<p>" + "**bold** " * 200 + "</p>" + "<img src='x.png'/>" * 50
        assert calculate_read_time(content) == 1


class TestPaginationMeta:
    def test_first_page_with_more(self) -> None:
        meta = pagination_meta(total=25, limit=10, offset=0)
        assert meta == {
            "total": 25,
            "limit": 10,
            "offset": 0,
            "has_more": True,
            "page": 1,
            "total_pages": 3,
        }

    def test_last_page(self) -> None:
        meta = pagination_meta(total=25, limit=10, offset=20)
        assert meta["has_more"] is False
        assert meta["page"] == 3

    def test_empty_result(self) -> None:
        meta = pagination_meta(total=0, limit=10, offset=0)
        assert meta["has_more"] is False
        assert meta["total_pages"] == 0
