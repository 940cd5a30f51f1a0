"""
tests/test_articles.py -- Unit tests for ArticleService (content/articles.py).

Covers:
  - create: slug from title, timestamp suffix on collision, read time,
    publish_date stamped on publish, unknown category
  - list: status filter, category slug filter (unknown slug ignored),
    search, sort order, bookmarked ids for a reader
  - read by slug: view count increments, related articles capped at 3
  - update: revision snapshot of the pre-edit state, read time recomputed,
    explicit None clears nullable fields only
  - delete: comments, revisions and saved entries go with the article

Fixtures used (from conftest.py): content_store.
"""

from __future__ import annotations

import re

import pytest

from content.articles import RELATED_ARTICLES_LIMIT, ArticleService
from content.bookmarks import BOOKMARKS, BookmarkService
from content.categories import CategoryService
from content.comments import CommentService
from core.errors import ArticleNotFound, CategoryNotFound

AUTHOR = 1
READER = 2


@pytest.fixture
def articles(content_store) -> ArticleService:
    return ArticleService(content_store)


@pytest.fixture
def category_id(content_store) -> int:
    return CategoryService(content_store).create_category("Engineering").id


def _create(articles: ArticleService, category_id: int, title: str, **extra):
    data = {"title": title, "content": "Some body text", "category_id": category_id, **extra}
    return articles.create_article(data, author_id=AUTHOR)


class TestCreateArticle:
    def test_defaults(self, articles: ArticleService, category_id: int) -> None:
        article = _create(articles, category_id, "Hello World")
        assert article.slug == "hello-world"
        assert article.status == "draft"
        assert article.publish_date is None
        assert article.read_time_minutes == 1
        assert article.view_count == 0
        assert article.author_id == AUTHOR

    def test_publish_stamps_publish_date(self, articles: ArticleService, category_id: int) -> None:
        article = _create(articles, category_id, "Live", status="published")
        assert article.publish_date

    def test_slug_collision_gets_timestamp_suffix(self, articles: ArticleService, category_id: int) -> None:
        _create(articles, category_id, "Same Title")
        second = _create(articles, category_id, "Same Title")
        assert re.fullmatch(r"same-title-\d{13}", second.slug), second.slug

    def test_read_time_from_content(self, articles: ArticleService, category_id: int) -> None:
        article = _create(articles, category_id, "Long", content="word " * 450)
        assert article.read_time_minutes == 3

    def test_unknown_category(self, articles: ArticleService) -> None:
        with pytest.raises(CategoryNotFound):
            articles.create_article({"title": "x", "content": "y", "category_id": 999}, author_id=AUTHOR)

    def test_activity_logged(self, articles: ArticleService, category_id: int, content_store) -> None:
        article = _create(articles, category_id, "Logged")
        entry = content_store.recent_activity(1)[0]
        assert (entry.action_type, entry.target_id, entry.user_id) == ("article_created", article.id, AUTHOR)


class TestListArticles:
    def test_defaults_to_published_only(self, articles: ArticleService, category_id: int) -> None:
        _create(articles, category_id, "Draft One")
        published = _create(articles, category_id, "Live One", status="published")
        page, total, bookmarked = articles.list_articles()
        assert [a.id for a in page] == [published.id]
        assert total == 1
        assert bookmarked == set()

    def test_status_none_lists_everything(self, articles: ArticleService, category_id: int) -> None:
        _create(articles, category_id, "Draft One")
        _create(articles, category_id, "Live One", status="published")
        _, total, _ = articles.list_articles(status=None)
        assert total == 2

    def test_category_filter(self, articles: ArticleService, category_id: int, content_store) -> None:
        other = CategoryService(content_store).create_category("Design")
        mine = _create(articles, category_id, "Mine", status="published")
        _create(articles, other.id, "Theirs", status="published")
        page, total, _ = articles.list_articles(category_slug="engineering")
        assert total == 1
        assert page[0].id == mine.id

    def test_unknown_category_slug_is_ignored(self, articles: ArticleService, category_id: int) -> None:
        _create(articles, category_id, "Visible", status="published")
        _, total, _ = articles.list_articles(category_slug="no-such-category")
        assert total == 1

    def test_search_title_and_excerpt(self, articles: ArticleService, category_id: int) -> None:
        _create(articles, category_id, "Python Tips", status="published")
        _create(articles, category_id, "Other", status="published", excerpt="all about PYTHON")
        _create(articles, category_id, "Unrelated", status="published")
        _, total, _ = articles.list_articles(search="python")
        assert total == 2

    def test_sort_by_title_ascending(self, articles: ArticleService, category_id: int) -> None:
        for title in ("Charlie", "Alpha", "Bravo"):
            _create(articles, category_id, title, status="published")
        page, _, _ = articles.list_articles(sort="title", order="asc")
        assert [a.title for a in page] == ["Alpha", "Bravo", "Charlie"]

    def test_pagination(self, articles: ArticleService, category_id: int) -> None:
        for i in range(5):
            _create(articles, category_id, f"Post {i}", status="published")
        page, total, _ = articles.list_articles(limit=2, offset=4)
        assert total == 5
        assert len(page) == 1

    def test_bookmarked_ids_for_reader(self, articles: ArticleService, category_id: int, content_store) -> None:
        saved = _create(articles, category_id, "Saved", status="published")
        _create(articles, category_id, "Not Saved", status="published")
        BookmarkService(content_store).add(BOOKMARKS, READER, saved.id)
        _, _, bookmarked = articles.list_articles(user_id=READER)
        assert bookmarked == {saved.id}


class TestReadArticle:
    def test_view_count_increments(self, articles: ArticleService, category_id: int) -> None:
        article = _create(articles, category_id, "Popular", status="published")
        assert articles.get_article_by_slug(article.slug).article.view_count == 1
        assert articles.get_article_by_slug(article.slug).article.view_count == 2
        assert articles.get_article(article.id).view_count == 2

    def test_detail_carries_category_and_related(self, articles: ArticleService, category_id: int) -> None:
        main = _create(articles, category_id, "Main", status="published")
        for i in range(RELATED_ARTICLES_LIMIT + 1):
            _create(articles, category_id, f"Sibling {i}", status="published")
        _create(articles, category_id, "Sibling Draft")

        detail = articles.get_article_by_slug(main.slug)
        assert detail.category is not None and detail.category.id == category_id
        assert len(detail.related) == RELATED_ARTICLES_LIMIT
        assert all(a.id != main.id and a.status == "published" for a in detail.related)
        assert detail.is_bookmarked is False

    def test_is_bookmarked_for_reader(self, articles: ArticleService, category_id: int, content_store) -> None:
        article = _create(articles, category_id, "Keep", status="published")
        BookmarkService(content_store).add(BOOKMARKS, READER, article.id)
        assert articles.get_article_by_slug(article.slug, user_id=READER).is_bookmarked is True

    def test_unknown_slug(self, articles: ArticleService) -> None:
        with pytest.raises(ArticleNotFound):
            articles.get_article_by_slug("missing")


class TestUpdateArticle:
    def test_revision_snapshots_previous_state(self, articles: ArticleService, category_id: int) -> None:
        article = _create(articles, category_id, "First Title", content="first body")
        articles.update_article(article.id, {"title": "Second Title", "content": "second body"}, user_id=AUTHOR)
        articles.update_article(article.id, {"title": "Third Title"}, user_id=READER)

        revisions = articles.get_revisions(article.id)
        assert [r.title for r in revisions] == ["Second Title", "First Title"]
        assert revisions[-1].content_snapshot == "first body"
        assert revisions[0].user_id == READER
        assert articles.get_article(article.id).title == "Third Title"

    def test_read_time_recomputed(self, articles: ArticleService, category_id: int) -> None:
        article = _create(articles, category_id, "Grows")
        updated = articles.update_article(article.id, {"content": "word " * 1000}, user_id=AUTHOR)
        assert updated.read_time_minutes == 5

    def test_publishing_stamps_date_once(self, articles: ArticleService, category_id: int) -> None:
        article = _create(articles, category_id, "Later")
        published = articles.update_article(article.id, {"status": "published"}, user_id=AUTHOR)
        assert published.publish_date
        again = articles.update_article(article.id, {"title": "Later Still"}, user_id=AUTHOR)
        assert again.publish_date == published.publish_date

    def test_none_clears_nullable_and_skips_required(self, articles: ArticleService, category_id: int) -> None:
        article = _create(articles, category_id, "Has Excerpt", excerpt="short")
        updated = articles.update_article(article.id, {"excerpt": None, "title": None}, user_id=AUTHOR)
        assert updated.excerpt is None
        assert updated.title == "Has Excerpt"

    def test_slug_change_kept_unique(self, articles: ArticleService, category_id: int) -> None:
        taken = _create(articles, category_id, "Taken")
        other = _create(articles, category_id, "Other")
        updated = articles.update_article(other.id, {"slug": taken.slug}, user_id=AUTHOR)
        assert updated.slug != taken.slug
        assert updated.slug.startswith("taken-")

    def test_unknown_category(self, articles: ArticleService, category_id: int) -> None:
        article = _create(articles, category_id, "Stays")
        with pytest.raises(CategoryNotFound):
            articles.update_article(article.id, {"category_id": 999}, user_id=AUTHOR)
        assert articles.get_revisions(article.id) == []

    def test_unknown_article(self, articles: ArticleService) -> None:
        with pytest.raises(ArticleNotFound):
            articles.update_article(999, {"title": "x"}, user_id=AUTHOR)


class TestDeleteArticle:
    def test_dependents_removed(self, articles: ArticleService, category_id: int, content_store) -> None:
        article = _create(articles, category_id, "Short Lived", status="published")
        articles.update_article(article.id, {"title": "Edited"}, user_id=AUTHOR)
        CommentService(content_store).create_comment(article.id, READER, "Nice")
        bookmarks = BookmarkService(content_store)
        bookmarks.add(BOOKMARKS, READER, article.id)

        assert articles.delete_article(article.id, user_id=AUTHOR) == {"message": "Article deleted successfully"}
        with pytest.raises(ArticleNotFound):
            articles.get_article(article.id)
        assert content_store.list_revisions(article.id) == []
        assert content_store.comment_parent_map(article.id) == {}
        assert bookmarks.list_saved(BOOKMARKS, READER) == ([], 0)

    def test_unknown_article(self, articles: ArticleService) -> None:
        with pytest.raises(ArticleNotFound):
            articles.delete_article(999, user_id=AUTHOR)
