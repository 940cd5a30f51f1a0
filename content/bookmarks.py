"""
content/bookmarks.py -- Per-user bookmarks and reading list.

Both lists have the same shape (user_id, article_id, created_at) with a
composite primary key, so one service drives both through ContentStore's
"kind" argument. Saving twice is not an error: the unique-constraint
violation from the store is reported back as "already saved".
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from content.models import SavedArticle
from content.store import ContentStore
from core.db import store_errors
from core.errors import ArticleNotFound, CreateFailed, DeleteFailed, FetchFailed

BOOKMARKS = "bookmarks"
READING_LIST = "reading_list"

_MESSAGES = {
    BOOKMARKS: {
        "added": "Bookmark added successfully",
        "exists": "Article already bookmarked",
        "removed": "Bookmark removed successfully",
    },
    READING_LIST: {
        "added": "Added to reading list successfully",
        "exists": "Article already in reading list",
        "removed": "Removed from reading list successfully",
    },
}


class BookmarkService:
    def __init__(self, store: ContentStore) -> None:
        self.store = store

    def list_saved(self, kind: str, user_id: int, limit: int = 10, offset: int = 0) -> tuple[list[SavedArticle], int]:
        """Newest-first page of a user's saved articles plus the total."""
        with store_errors(FetchFailed):
            return self.store.list_saved(kind, user_id, limit, offset)

    def add(self, kind: str, user_id: int, article_id: int) -> dict:
        with store_errors(FetchFailed):
            if self.store.get_article(article_id) is None:
                raise ArticleNotFound()
        with store_errors(CreateFailed):
            try:
                self.store.add_saved(kind, user_id, article_id)
            except IntegrityError:
                return {"message": _MESSAGES[kind]["exists"]}
        return {"message": _MESSAGES[kind]["added"]}

    def remove(self, kind: str, user_id: int, article_id: int) -> dict:
        """Idempotent: removing an article that is not saved still succeeds."""
        with store_errors(DeleteFailed):
            self.store.remove_saved(kind, user_id, article_id)
        return {"message": _MESSAGES[kind]["removed"]}
