"""
tests/test_bookmarks.py -- Unit tests for bookmarks, the reading list and
the dashboard aggregates.

Fixtures used (from conftest.py): content_store.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from content.articles import ArticleService
from content.bookmarks import BOOKMARKS, READING_LIST, BookmarkService
from content.categories import CategoryService
from content.dashboard import DashboardService, month_start
from core.errors import ArticleNotFound

READER = 5


@pytest.fixture
def bookmarks(content_store) -> BookmarkService:
    return BookmarkService(content_store)


@pytest.fixture
def article_ids(content_store) -> list[int]:
    category = CategoryService(content_store).create_category("Saved Things")
    service = ArticleService(content_store)
    return [
        service.create_article(
            {"title": f"Article {i}", "content": "body", "category_id": category.id, "status": "published"},
            author_id=1,
        ).id
        for i in range(3)
    ]


class TestSavedArticles:
    @pytest.mark.parametrize(
        "kind, added, exists",
        [
            (BOOKMARKS, "Bookmark added successfully", "Article already bookmarked"),
            (READING_LIST, "Added to reading list successfully", "Article already in reading list"),
        ],
    )
    def test_add_twice_reports_existing(self, bookmarks, article_ids, kind, added, exists) -> None:
        assert bookmarks.add(kind, READER, article_ids[0]) == {"message": added}
        assert bookmarks.add(kind, READER, article_ids[0]) == {"message": exists}
        _, total = bookmarks.list_saved(kind, READER)
        assert total == 1

    def test_lists_are_independent(self, bookmarks, article_ids) -> None:
        bookmarks.add(BOOKMARKS, READER, article_ids[0])
        bookmarks.add(READING_LIST, READER, article_ids[1])
        saved, _ = bookmarks.list_saved(BOOKMARKS, READER)
        queued, _ = bookmarks.list_saved(READING_LIST, READER)
        assert [s.article.id for s in saved] == [article_ids[0]]
        assert [s.article.id for s in queued] == [article_ids[1]]

    def test_newest_first_with_pagination(self, bookmarks, article_ids) -> None:
        for article_id in article_ids:
            bookmarks.add(BOOKMARKS, READER, article_id)
        page, total = bookmarks.list_saved(BOOKMARKS, READER, limit=2, offset=0)
        assert total == 3
        assert [s.article.id for s in page] == [article_ids[2], article_ids[1]]
        assert page[0].created_at

    def test_per_user(self, bookmarks, article_ids) -> None:
        bookmarks.add(BOOKMARKS, READER, article_ids[0])
        assert bookmarks.list_saved(BOOKMARKS, READER + 1) == ([], 0)

    def test_unknown_article(self, bookmarks) -> None:
        with pytest.raises(ArticleNotFound):
            bookmarks.add(BOOKMARKS, READER, 999)

    def test_remove_is_idempotent(self, bookmarks, article_ids) -> None:
        bookmarks.add(READING_LIST, READER, article_ids[0])
        expected = {"message": "Removed from reading list successfully"}
        assert bookmarks.remove(READING_LIST, READER, article_ids[0]) == expected
        assert bookmarks.remove(READING_LIST, READER, article_ids[0]) == expected
        assert bookmarks.list_saved(READING_LIST, READER) == ([], 0)


class TestDashboard:
    def test_month_start(self) -> None:
        now = datetime(2024, 3, 17, 15, 30, tzinfo=timezone.utc)
        assert month_start(now) == "2024-03-01T00:00:00+00:00"

    def test_content_metrics(self, content_store, article_ids) -> None:
        service = ArticleService(content_store)
        first = service.get_article(article_ids[0])
        service.get_article_by_slug(first.slug)
        service.get_article_by_slug(first.slug)

        metrics = DashboardService(content_store).content_metrics()
        assert metrics["total_articles"] == 3
        assert metrics["total_categories"] == 1
        assert metrics["total_page_views"] == 2
        # Published just now, so they count toward this month.
        assert metrics["monthly_views"] == 2
        assert [a.id for a in metrics["recent_articles"]] == list(reversed(article_ids))
        assert all(entry.action_type == "article_created" for entry in metrics["recent_activity"])

    def test_empty_store(self, content_store) -> None:
        metrics = DashboardService(content_store).content_metrics()
        assert metrics["total_articles"] == 0
        assert metrics["total_page_views"] == 0
        assert metrics["recent_articles"] == []
