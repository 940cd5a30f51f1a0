"""
content/comments.py -- Threaded article comments.

Threading: top-level comments are paginated; their replies are nested up to
MAX_REPLY_DEPTH levels below the top-level comment and anything deeper is
left out of the tree. All replies of an article are fetched in one query and
threaded in memory instead of one query per comment.

Only "visible" comments appear in threads. A reply under a hidden or flagged
comment is therefore hidden with it.

Ownership: only the author may edit a comment. Deleting is allowed for the
author or an admin, and removes the comment's whole reply subtree.

Layer rule: no imports from api/ or auth/.
"""

from __future__ import annotations

import logging
from typing import Optional

from content.categories import collect_subtree
from content.models import Comment
from content.store import ContentStore
from core.db import store_errors
from core.errors import ArticleNotFound, CommentNotFound, CreateFailed, DeleteFailed, FetchFailed, UpdateFailed

logger = logging.getLogger("inkwell.content")

MAX_REPLY_DEPTH = 3


def thread_replies(top_level: list[Comment], replies: list[Comment], max_depth: int = MAX_REPLY_DEPTH) -> None:
    """Attach replies to their parents in place, at most max_depth levels deep."""
    by_parent: dict[int, list[Comment]] = {}
    for reply in replies:
        by_parent.setdefault(reply.parent_comment_id, []).append(reply)

    def attach(comment: Comment, level: int) -> None:
        if level > max_depth:
            comment.replies = []
            return
        comment.replies = by_parent.get(comment.id, [])
        for child in comment.replies:
            attach(child, level + 1)

    for comment in top_level:
        attach(comment, 1)


class CommentService:
    def __init__(self, store: ContentStore) -> None:
        self.store = store

    def get_article_comments(self, article_id: int, limit: int = 10, offset: int = 0) -> tuple[list[Comment], int]:
        with store_errors(FetchFailed):
            top_level, total = self.store.list_top_level_comments(article_id, limit, offset)
            replies = self.store.list_visible_replies(article_id) if top_level else []
        thread_replies(top_level, replies)
        return top_level, total

    def create_comment(
        self,
        article_id: int,
        user_id: int,
        content: str,
        parent_comment_id: Optional[int] = None,
    ) -> Comment:
        with store_errors(FetchFailed):
            if self.store.get_article(article_id) is None:
                raise ArticleNotFound()
            if parent_comment_id is not None:
                parent = self.store.get_comment(parent_comment_id)
                if parent is None or parent.article_id != article_id:
                    raise CommentNotFound("Parent comment not found.")

        comment = Comment(
            article_id=article_id,
            user_id=user_id,
            content=content,
            parent_comment_id=parent_comment_id,
        )
        with store_errors(CreateFailed):
            comment_id = self.store.create_comment(comment)
            created = self.store.get_comment(comment_id)
        if created is None:
            raise CreateFailed("Failed to create comment.")
        return created

    def update_comment(self, comment_id: int, user_id: int, content: str) -> Comment:
        """Edit the text of a comment the user owns. Others get CommentNotFound."""
        with store_errors(UpdateFailed):
            if not self.store.update_comment(comment_id, user_id, content):
                raise CommentNotFound()
            return self.store.get_comment(comment_id)

    def delete_comment(self, comment_id: int, user_id: int, is_admin: bool = False) -> dict:
        with store_errors(FetchFailed):
            comment = self.store.get_comment(comment_id)
        if comment is None or (not is_admin and comment.user_id != user_id):
            raise CommentNotFound()

        with store_errors(DeleteFailed):
            thread = collect_subtree(self.store.comment_parent_map(comment.article_id), comment_id)
            self.store.delete_comment_thread(thread)
        if is_admin and comment.user_id != user_id:
            logger.info("Comment removed by admin (comment_id=%s, admin_id=%s)", comment_id, user_id)
        return {"message": "Comment deleted successfully"}

    def flag_comment(self, comment_id: int) -> dict:
        with store_errors(UpdateFailed):
            if not self.store.set_comment_status(comment_id, "flagged"):
                raise CommentNotFound()
        logger.info("Comment flagged for review (comment_id=%s)", comment_id)
        return {"message": "Comment flagged for review"}
