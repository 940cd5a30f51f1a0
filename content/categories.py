"""
content/categories.py -- Category tree manager.

Categories form a forest: each node has at most one parent, and roots have
parent_category_id = None. Every tree operation works on an in-memory
{id: parent_id} map read in ONE query (ContentStore.parent_map), so the
walks below never issue a query per hop.

Invariants:
  - No cycles. update_category() and reorder_categories() refuse any change
    that would make a category its own ancestor (CircularReference).
  - Bounded walks. is_descendant() and collect_subtree() keep a visited set
    and stop after len(parents) steps, so a cycle already present in stored
    data cannot hang a request.
  - Orphans are roots. A parent_category_id pointing at a missing row is
    treated as "no parent" when the forest is built.

Deletion cascades: deleting a category also deletes its whole subtree, and
the articles of every deleted category follow article_action:
  move_to_parent         -> the deleted category's own parent, or
                            "Uncategorized" when it has none
  move_to_uncategorized  -> the lazily created "Uncategorized" category
  delete                 -> the articles (and their comments, revisions,
                            bookmarks) are removed
The migration and the deletes run in a single transaction.

Layer rule: no imports from api/ or auth/.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError

from content.models import ARTICLE_ACTIONS, ActivityLog, Category, CategoryUpdate
from content.store import ContentStore
from core.db import store_errors
from core.errors import (
    CategoryNotFound,
    CircularReference,
    CreateFailed,
    DeleteFailed,
    FetchFailed,
    InvalidArticleAction,
    InvalidSlug,
    ParentNotFound,
    SlugExists,
    UpdateFailed,
)
from core.text import slugify

logger = logging.getLogger("inkwell.content")

_UPDATABLE_FIELDS = ("name", "slug", "description", "parent_category_id", "sort_order")
_NULLABLE_FIELDS = ("description", "parent_category_id")


# ---------------------------------------------------------------------------
# Pure tree helpers
# ---------------------------------------------------------------------------


def build_forest(categories: list[Category]) -> list[Category]:
    """Group a flat, ordered list into root nodes with nested children.

    Input order is preserved within every sibling list. Nodes whose parent is
    missing from the input become roots.
    """
    by_id = {c.id: c for c in categories}
    for category in categories:
        category.children = []
    roots: list[Category] = []
    for category in categories:
        parent = by_id.get(category.parent_category_id) if category.parent_category_id is not None else None
        if parent is None or parent is category:
            roots.append(category)
        else:
            parent.children.append(category)
    return roots


def is_descendant(parents: dict[int, Optional[int]], ancestor_id: int, candidate_id: int) -> bool:
    """True if ancestor_id appears on candidate_id's parent chain.

    The walk starts at candidate_id itself, so is_descendant(p, x, x) is True.
    It stops at a None parent, at an id absent from the map, at a node seen
    before, or after len(parents) + 1 steps, whichever comes first.
    """
    visited: set[int] = set()
    current: Optional[int] = candidate_id
    for _ in range(len(parents) + 1):
        if current is None or current in visited:
            return False
        if current == ancestor_id:
            return True
        visited.add(current)
        current = parents.get(current)
    return False


def collect_subtree(parents: dict[int, Optional[int]], root_id: int) -> list[int]:
    """Return root_id plus every descendant id, root first (breadth-first)."""
    children: dict[int, list[int]] = {}
    for node_id, parent_id in parents.items():
        if parent_id is not None:
            children.setdefault(parent_id, []).append(node_id)

    ordered = [root_id]
    seen = {root_id}
    index = 0
    while index < len(ordered):
        for child_id in children.get(ordered[index], []):
            if child_id not in seen:
                seen.add(child_id)
                ordered.append(child_id)
        index += 1
    return ordered


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class CategoryService:
    def __init__(self, store: ContentStore) -> None:
        self.store = store

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_categories(self, include_children: bool = True) -> list[Category]:
        """Flat list ordered by sort_order, or the forest of root categories."""
        with store_errors(FetchFailed):
            categories = self.store.list_categories()
        if not include_children:
            return categories
        return build_forest(categories)

    def get_category(self, category_id: int) -> Category:
        with store_errors(FetchFailed):
            category = self.store.get_category(category_id)
        if category is None:
            raise CategoryNotFound()
        return category

    def get_category_by_slug(self, slug: str) -> tuple[Category, Optional[Category]]:
        """Return (category, parent). category.children holds its direct children."""
        with store_errors(FetchFailed):
            category = self.store.get_category_by_slug(slug)
            if category is None:
                raise CategoryNotFound()
            parent = None
            if category.parent_category_id is not None:
                parent = self.store.get_category(category.parent_category_id)
            category.children = self.store.list_children(category.id)
        return category, parent

    def is_descendant(self, ancestor_id: int, candidate_id: int) -> bool:
        with store_errors(FetchFailed):
            parents = self.store.parent_map()
        return is_descendant(parents, ancestor_id, candidate_id)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_category(
        self,
        name: str,
        slug: Optional[str] = None,
        description: Optional[str] = None,
        parent_category_id: Optional[int] = None,
        sort_order: int = 0,
        actor_id: Optional[int] = None,
    ) -> Category:
        slug = slug or slugify(name)
        if not slug:
            raise InvalidSlug()
        with store_errors(FetchFailed):
            if self.store.get_category_by_slug(slug) is not None:
                raise SlugExists()
            if parent_category_id is not None and self.store.get_category(parent_category_id) is None:
                raise ParentNotFound()

        category = Category(
            name=name,
            slug=slug,
            description=description,
            parent_category_id=parent_category_id,
            sort_order=sort_order,
        )
        with store_errors(CreateFailed):
            try:
                category_id = self.store.create_category(category)
            except IntegrityError as exc:
                raise SlugExists() from exc
            created = self.store.get_category(category_id)
        if created is None:
            raise CreateFailed("Failed to create category.")
        self._log(actor_id, "category_created", created.id, f'Created category "{name}"')
        return created

    def update_category(self, category_id: int, fields: dict, actor_id: Optional[int] = None) -> Category:
        """Apply a partial update.

        fields may contain any of name, slug, description, parent_category_id,
        sort_order. An explicit parent_category_id of None moves the category
        to the root level; an absent key leaves the parent unchanged.
        """
        changes = {
            k: v
            for k, v in fields.items()
            if k in _UPDATABLE_FIELDS and (v is not None or k in _NULLABLE_FIELDS)
        }
        with store_errors(FetchFailed):
            existing = self.store.get_category(category_id)
            if existing is None:
                raise CategoryNotFound()

            new_parent = changes.get("parent_category_id")
            if new_parent is not None:
                if new_parent == category_id:
                    raise CircularReference("Category cannot be its own parent.")
                if self.store.get_category(new_parent) is None:
                    raise ParentNotFound()
                if is_descendant(self.store.parent_map(), category_id, new_parent):
                    raise CircularReference("Cannot set a descendant as parent.")

            new_slug = changes.get("slug")
            if "slug" in changes and not new_slug:
                raise InvalidSlug()
            if new_slug and new_slug != existing.slug:
                if self.store.get_category_by_slug(new_slug) is not None:
                    raise SlugExists()

        if not changes:
            return existing
        with store_errors(UpdateFailed):
            try:
                self.store.update_category(category_id, **changes)
            except IntegrityError as exc:
                raise SlugExists() from exc
            updated = self.store.get_category(category_id)
        if updated is None:
            raise CategoryNotFound()
        self._log(actor_id, "category_updated", category_id, f'Updated category "{updated.name}"')
        return updated

    def delete_category(
        self,
        category_id: int,
        article_action: str = "move_to_parent",
        actor_id: Optional[int] = None,
    ) -> dict:
        """Delete a category and its subtree, migrating or deleting articles."""
        if article_action not in ARTICLE_ACTIONS:
            raise InvalidArticleAction(detail=f"article_action must be one of {', '.join(ARTICLE_ACTIONS)}")

        with store_errors(FetchFailed):
            category = self.store.get_category(category_id)
            if category is None:
                raise CategoryNotFound()
            doomed = collect_subtree(self.store.parent_map(), category_id)
            has_articles = self.store.count_articles_in(doomed) > 0

        # Uncategorized is only created when there is something to move into it.
        target: Optional[int] = None
        if has_articles and article_action != "delete":
            if article_action == "move_to_parent" and category.parent_category_id is not None:
                target = category.parent_category_id
            else:
                with store_errors(CreateFailed):
                    target = self.store.get_or_create_uncategorized()
        if target is not None and target in doomed:
            raise InvalidArticleAction("Articles cannot be moved into a category that is being deleted.")

        with store_errors(DeleteFailed):
            affected = self.store.delete_categories(doomed, move_articles_to=target)

        logger.info(
            "Category deleted (category_id=%s, subtree=%d, articles=%d, action=%s)",
            category_id,
            len(doomed),
            affected,
            article_action,
        )
        self._log(actor_id, "category_deleted", category_id, f'Deleted category "{category.name}"')
        return {"message": "Category deleted successfully"}

    def reorder_categories(self, updates: list[CategoryUpdate]) -> dict:
        """Apply a batch of position/parent changes all-or-nothing.

        Every update is validated against the final tree (the current parents
        with the whole batch applied), so a batch that swaps two subtrees is
        judged as a whole rather than step by step.
        """
        with store_errors(FetchFailed):
            parents = self.store.parent_map()

        final = dict(parents)
        for update in updates:
            if update.id not in parents:
                raise CategoryNotFound(detail=f"category {update.id}")
            if update.parent_category_id is not None and update.parent_category_id not in parents:
                raise ParentNotFound(detail=f"category {update.parent_category_id}")
            final[update.id] = update.parent_category_id

        for update in updates:
            if update.parent_category_id is None:
                continue
            if update.parent_category_id == update.id:
                raise CircularReference("Category cannot be its own parent.")
            if is_descendant(final, update.id, update.parent_category_id):
                raise CircularReference("Cannot set a descendant as parent.")

        with store_errors(UpdateFailed):
            self.store.apply_category_updates(updates)
        return {"message": "Categories reordered successfully"}

    def _log(self, actor_id: Optional[int], action: str, target_id: int, description: str) -> None:
        if actor_id is None:
            return
        with store_errors(CreateFailed):
            self.store.log_activity(
                ActivityLog(
                    user_id=actor_id,
                    action_type=action,
                    target_type="category",
                    target_id=target_id,
                    description=description,
                )
            )
