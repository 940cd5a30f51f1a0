"""
content/articles.py -- Article listing, reading, authoring and revisions.

Slugs: derived from the title when absent. A colliding slug gets the current
epoch milliseconds appended (core.text.timestamped_slug); the suffix differs
on every call, so re-submitting the same title yields a new slug each time.

Revisions: update_article() snapshots the PRE-edit title and content and
applies the edit in one transaction, so there is never a revision without
its edit or an edit without its revision.

Views: get_article_by_slug() counts a view with a server-side increment
(view_count = view_count + 1), never read-modify-write.

Layer rule: no imports from api/ or auth/. Authors and readers are plain ids.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError

from content.models import ActivityLog, Article, ArticleDetail, Revision
from content.store import ContentStore
from core.db import now_iso, store_errors
from core.errors import ArticleNotFound, CategoryNotFound, CreateFailed, DeleteFailed, FetchFailed, UpdateFailed
from core.text import calculate_read_time, slugify, timestamped_slug

logger = logging.getLogger("inkwell.content")

RELATED_ARTICLES_LIMIT = 3

_EDITABLE_FIELDS = (
    "title",
    "slug",
    "excerpt",
    "content",
    "featured_image_url",
    "category_id",
    "status",
    "publish_date",
    "schedule_date",
    "stick_to_front_page",
)
_NULLABLE_FIELDS = ("excerpt", "featured_image_url", "publish_date", "schedule_date")


class ArticleService:
    def __init__(self, store: ContentStore) -> None:
        self.store = store

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_articles(
        self,
        limit: int = 10,
        offset: int = 0,
        category_slug: Optional[str] = None,
        status: Optional[str] = "published",
        search: Optional[str] = None,
        sort: str = "publish_date",
        order: str = "desc",
        user_id: Optional[int] = None,
    ) -> tuple[list[Article], int, set[int]]:
        """Return (page, total, bookmarked_ids).

        An unknown category slug does not narrow the listing. bookmarked_ids
        is the subset of the page the given reader has bookmarked (empty for
        anonymous readers).
        """
        with store_errors(FetchFailed):
            category_id = None
            if category_slug:
                category = self.store.get_category_by_slug(category_slug)
                if category is not None:
                    category_id = category.id
            articles, total = self.store.list_articles(
                limit=limit,
                offset=offset,
                status=status,
                category_id=category_id,
                search=search,
                sort=sort,
                order=order,
            )
            bookmarked: set[int] = set()
            if user_id is not None:
                bookmarked = self.store.saved_article_ids("bookmarks", user_id, [a.id for a in articles])
        return articles, total, bookmarked

    def get_article(self, article_id: int) -> Article:
        with store_errors(FetchFailed):
            article = self.store.get_article(article_id)
        if article is None:
            raise ArticleNotFound()
        return article

    def get_article_by_slug(self, slug: str, user_id: Optional[int] = None) -> ArticleDetail:
        """Fetch an article for reading and count the view."""
        with store_errors(FetchFailed):
            article = self.store.get_article_by_slug(slug)
        if article is None:
            raise ArticleNotFound()

        with store_errors(UpdateFailed):
            self.store.increment_view_count(article.id)
        article.view_count += 1

        with store_errors(FetchFailed):
            category = self.store.get_category(article.category_id)
            related = self.store.related_articles(article.category_id, article.id, RELATED_ARTICLES_LIMIT)
            is_bookmarked = False
            if user_id is not None:
                is_bookmarked = article.id in self.store.saved_article_ids("bookmarks", user_id, [article.id])
        return ArticleDetail(article=article, category=category, is_bookmarked=is_bookmarked, related=related)

    def get_revisions(self, article_id: int) -> list[Revision]:
        with store_errors(FetchFailed):
            if self.store.get_article(article_id) is None:
                raise ArticleNotFound()
            return self.store.list_revisions(article_id)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_article(self, data: dict, author_id: int) -> Article:
        """Create an article from validated fields.

        data must hold title, content and category_id; the rest is optional.
        A published article gets publish_date = now unless one is given.
        """
        with store_errors(FetchFailed):
            if self.store.get_category(data["category_id"]) is None:
                raise CategoryNotFound()
            slug = self._unique_slug(data.get("slug") or slugify(data["title"]))

        status = data.get("status") or "draft"
        publish_date = data.get("publish_date")
        if status == "published" and not publish_date:
            publish_date = now_iso()

        article = Article(
            title=data["title"],
            slug=slug,
            content=data["content"],
            author_id=author_id,
            category_id=data["category_id"],
            excerpt=data.get("excerpt"),
            featured_image_url=data.get("featured_image_url"),
            status=status,
            publish_date=publish_date,
            schedule_date=data.get("schedule_date"),
            stick_to_front_page=bool(data.get("stick_to_front_page", False)),
            read_time_minutes=calculate_read_time(data["content"]),
        )
        with store_errors(CreateFailed):
            try:
                article_id = self.store.create_article(article)
            except IntegrityError:
                # Lost a race for the slug between the check and the insert.
                article.slug = timestamped_slug(article.slug)
                article_id = self.store.create_article(article)
            created = self.store.get_article(article_id)
        if created is None:
            raise CreateFailed("Failed to create article.")
        self._log(author_id, "article_created", created.id, f'Created article "{created.title}"')
        return created

    def update_article(self, article_id: int, data: dict, user_id: int) -> Article:
        changes = {
            k: v for k, v in data.items() if k in _EDITABLE_FIELDS and (v is not None or k in _NULLABLE_FIELDS)
        }
        with store_errors(FetchFailed):
            existing = self.store.get_article(article_id)
            if existing is None:
                raise ArticleNotFound()
            if "category_id" in changes and self.store.get_category(changes["category_id"]) is None:
                raise CategoryNotFound()
            new_slug = changes.get("slug")
            if new_slug and new_slug != existing.slug:
                changes["slug"] = self._unique_slug(new_slug)

        if "content" in changes:
            changes["read_time_minutes"] = calculate_read_time(changes["content"])
        if changes.get("status") == "published" and not (changes.get("publish_date") or existing.publish_date):
            changes["publish_date"] = now_iso()

        revision = Revision(
            article_id=article_id,
            user_id=user_id,
            title=existing.title,
            content_snapshot=existing.content,
        )
        with store_errors(UpdateFailed):
            self.store.update_article_with_revision(article_id, revision, **changes)
            updated = self.store.get_article(article_id)
        if updated is None:
            raise ArticleNotFound()
        self._log(user_id, "article_updated", article_id, f'Updated article "{updated.title}"')
        return updated

    def delete_article(self, article_id: int, user_id: int) -> dict:
        """Delete an article with its comments, revisions and saved entries."""
        article = self.get_article(article_id)
        with store_errors(DeleteFailed):
            self.store.delete_articles([article_id])
        logger.info("Article deleted (article_id=%s, by user_id=%s)", article_id, user_id)
        self._log(user_id, "article_deleted", article_id, f'Deleted article "{article.title}"')
        return {"message": "Article deleted successfully"}

    def _unique_slug(self, slug: str) -> str:
        if self.store.article_slug_exists(slug):
            return timestamped_slug(slug)
        return slug

    def _log(self, user_id: int, action: str, target_id: int, description: str) -> None:
        with store_errors(CreateFailed):
            self.store.log_activity(
                ActivityLog(
                    user_id=user_id,
                    action_type=action,
                    target_type="article",
                    target_id=target_id,
                    description=description,
                )
            )
