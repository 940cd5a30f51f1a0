"""
content/models.py -- Domain dataclasses for published content.

These are pure data containers with zero logic. Tree building, slug rules,
comment threading and article migration live in the content services; SQL
lives in content/store.py.

Separation of concerns: these dataclasses are the content domain's truth,
just as auth/models.py is the identity domain's truth. User ids appear here
only as plain integers -- content/ never imports auth/.

id is None before a record is written to the database.
"""

from dataclasses import dataclass, field
from typing import Optional

ARTICLE_STATUSES = ("draft", "published", "scheduled")
COMMENT_STATUSES = ("visible", "hidden", "flagged")
ARTICLE_ACTIONS = ("move_to_parent", "move_to_uncategorized", "delete")

UNCATEGORIZED_SLUG = "uncategorized"


@dataclass
class Category:
    """A node in the category forest.

    parent_category_id is None for roots. article_count is derived from the
    articles table at read time and is never written. children is only
    populated by the hierarchical listing.
    """

    name: str
    slug: str
    id: Optional[int] = None
    description: Optional[str] = None
    parent_category_id: Optional[int] = None
    sort_order: int = 0
    article_count: int = 0
    created_at: str = ""
    updated_at: str = ""
    children: list["Category"] = field(default_factory=list)


@dataclass
class CategoryUpdate:
    """One entry of a reorder batch: new position and parent for a category."""

    id: int
    sort_order: int
    parent_category_id: Optional[int] = None


@dataclass
class Article:
    title: str
    slug: str
    content: str
    author_id: int
    category_id: int
    id: Optional[int] = None
    excerpt: Optional[str] = None
    featured_image_url: Optional[str] = None
    status: str = "draft"  # "draft" | "published" | "scheduled"
    publish_date: Optional[str] = None
    schedule_date: Optional[str] = None
    stick_to_front_page: bool = False
    read_time_minutes: int = 1
    view_count: int = 0
    created_at: str = ""
    updated_at: str = ""


@dataclass
class Revision:
    """Snapshot of an article's title and content taken just before an edit.

    Append-only: revisions are never updated, only removed with their article.
    """

    article_id: int
    user_id: int
    title: str
    content_snapshot: str
    id: Optional[int] = None
    created_at: str = ""


@dataclass
class Comment:
    article_id: int
    user_id: int
    content: str
    id: Optional[int] = None
    parent_comment_id: Optional[int] = None
    status: str = "visible"  # "visible" | "hidden" | "flagged"
    created_at: str = ""
    updated_at: str = ""
    replies: list["Comment"] = field(default_factory=list)


@dataclass
class SavedArticle:
    """A bookmark or reading-list entry, joined with its article."""

    user_id: int
    article: Article
    created_at: str = ""


@dataclass
class ActivityLog:
    user_id: int
    action_type: str  # e.g. "category_created", "article_updated"
    target_type: str  # "category" | "article"
    description: str
    target_id: Optional[int] = None
    id: Optional[int] = None
    created_at: str = ""


@dataclass
class ArticleDetail:
    """Single-article view: the article plus what the reader page shows around it."""

    article: Article
    category: Optional[Category] = None
    is_bookmarked: bool = False
    related: list[Article] = field(default_factory=list)
