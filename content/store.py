"""
content/store.py -- SQLAlchemy-backed persistence layer for Inkwell content.

Uses SQLAlchemy Core (not ORM) so the domain dataclasses in content/models.py
remain the authoritative domain representation.

Pattern: Repository + Data Mapper. ContentStore is the repository (one clean
interface per entity). The _row_to_* functions are the mappers. Services
never touch SQL directly.

Transactions: single-row operations each run in their own short transaction.
The multi-step writes that must not be left half-done run inside ONE
engine.begin() block and either fully apply or fully roll back:
  - delete_categories()            -- article migration/removal + category delete
  - apply_category_updates()       -- a whole reorder batch
  - update_article_with_revision() -- revision snapshot + article update
  - delete_articles()              -- articles plus their comments, revisions, saves

Dependent rows (comments, revisions, bookmarks) are removed explicitly rather
than through FOREIGN KEY ... ON DELETE CASCADE, so behaviour is identical on
SQLite (where FK enforcement is off by default) and PostgreSQL.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = ContentStore()                               # SQLite default
    store = ContentStore("postgresql://user:pw@host/db") # PostgreSQL
    cat_id = store.create_category(Category(name="News", slug="news"))
    store.list_categories()
    store.close()
"""

from typing import Optional

from sqlalchemy import (
    Boolean,
    Column,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
    Text,
    func,
    or_,
    select,
)
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from content.models import (
    UNCATEGORIZED_SLUG,
    ActivityLog,
    Article,
    Category,
    CategoryUpdate,
    Comment,
    Revision,
    SavedArticle,
)
from core.db import make_engine, now_iso

_DEFAULT_DB_URL = "sqlite:///inkwell.db"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_categories = Table(
    "categories",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False),
    Column("slug", String(120), nullable=False, unique=True),
    Column("description", Text),
    Column("parent_category_id", Integer, index=True),  # NULL for roots
    Column("sort_order", Integer, nullable=False, server_default="0"),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

_articles = Table(
    "articles",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(255), nullable=False),
    Column("slug", String(300), nullable=False, unique=True),
    Column("excerpt", Text),
    Column("content", Text, nullable=False),
    Column("featured_image_url", Text),
    Column("author_id", Integer, nullable=False, index=True),
    Column("category_id", Integer, nullable=False, index=True),
    Column("status", String(20), nullable=False, server_default="draft"),
    Column("publish_date", String(32)),
    Column("schedule_date", String(32)),
    Column("stick_to_front_page", Boolean, nullable=False, server_default="0"),
    Column("read_time_minutes", Integer, nullable=False, server_default="1"),
    Column("view_count", Integer, nullable=False, server_default="0"),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

_revisions = Table(
    "revisions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("article_id", Integer, nullable=False, index=True),
    Column("user_id", Integer, nullable=False),
    Column("title", String(255), nullable=False),
    Column("content_snapshot", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
)

_comments = Table(
    "comments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("article_id", Integer, nullable=False, index=True),
    Column("user_id", Integer, nullable=False),
    Column("parent_comment_id", Integer),
    Column("content", Text, nullable=False),
    Column("status", String(20), nullable=False, server_default="visible"),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

_bookmarks = Table(
    "bookmarks",
    metadata,
    Column("user_id", Integer, nullable=False),
    Column("article_id", Integer, nullable=False),
    Column("created_at", String(32), nullable=False),
    PrimaryKeyConstraint("user_id", "article_id", name="pk_bookmarks"),
)

_reading_list = Table(
    "reading_list",
    metadata,
    Column("user_id", Integer, nullable=False),
    Column("article_id", Integer, nullable=False),
    Column("created_at", String(32), nullable=False),
    PrimaryKeyConstraint("user_id", "article_id", name="pk_reading_list"),
)

_activity_logs = Table(
    "activity_logs",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False),
    Column("action_type", String(50), nullable=False),
    Column("target_type", String(20), nullable=False),
    Column("target_id", Integer),
    Column("description", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
)

# Saved-article lists share one shape; the service picks the table by name.
_SAVED_TABLES: dict[str, Table] = {"bookmarks": _bookmarks, "reading_list": _reading_list}

_ARTICLE_SORT_COLUMNS = {
    "publish_date": _articles.c.publish_date,
    "view_count": _articles.c.view_count,
    "title": _articles.c.title,
}

_CATEGORY_MUTABLE_FIELDS = frozenset({"name", "slug", "description", "parent_category_id", "sort_order"})
_ARTICLE_MUTABLE_FIELDS = frozenset(
    {
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
        "read_time_minutes",
    }
)

# Correlated subquery: article_count is derived, never stored.
_article_count = (
    select(func.count(_articles.c.id))
    .where(_articles.c.category_id == _categories.c.id)
    .correlate(_categories)
    .scalar_subquery()
    .label("article_count")
)


def _check_fields(fields: dict, allowed: frozenset) -> None:
    unknown = set(fields) - allowed
    if unknown:
        raise ValueError(f"Unknown or immutable fields: {sorted(unknown)!r}")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ContentStore:
    """Repository for categories, articles, comments, saved articles and activity."""

    def __init__(self, db_url: str = _DEFAULT_DB_URL, engine: Optional[Engine] = None) -> None:
        self.engine: Engine = engine or make_engine(db_url)
        metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def list_categories(self) -> list[Category]:
        """All categories ordered by sort_order (ties broken by id)."""
        query = select(_categories, _article_count).order_by(_categories.c.sort_order, _categories.c.id)
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_category(r) for r in rows]

    def get_category(self, category_id: int) -> Optional[Category]:
        return self._one_category(_categories.c.id == category_id)

    def get_category_by_slug(self, slug: str) -> Optional[Category]:
        return self._one_category(_categories.c.slug == slug)

    def list_children(self, parent_id: int) -> list[Category]:
        query = (
            select(_categories, _article_count)
            .where(_categories.c.parent_category_id == parent_id)
            .order_by(_categories.c.sort_order, _categories.c.id)
        )
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_category(r) for r in rows]

    def parent_map(self) -> dict[int, Optional[int]]:
        """Return {category_id: parent_category_id} for every category in one query.

        The tree walks (descendant checks, subtree collection) run in memory
        over this map instead of issuing one query per hop.
        """
        with self.engine.connect() as conn:
            rows = conn.execute(select(_categories.c.id, _categories.c.parent_category_id)).fetchall()
        return {row.id: row.parent_category_id for row in rows}

    def create_category(self, category: Category) -> int:
        """Insert a category. Raises sqlalchemy.exc.IntegrityError on a duplicate slug."""
        with self.engine.begin() as conn:
            return self._insert_category(conn, category)

    def update_category(self, category_id: int, **fields) -> bool:
        _check_fields(fields, _CATEGORY_MUTABLE_FIELDS)
        if not fields:
            return False
        fields["updated_at"] = now_iso()
        with self.engine.begin() as conn:
            result = conn.execute(_categories.update().where(_categories.c.id == category_id).values(**fields))
        return result.rowcount > 0

    def get_or_create_uncategorized(self) -> int:
        """Return the id of the singleton "Uncategorized" category, creating it if absent.

        Two concurrent callers can both miss the SELECT; the loser's INSERT
        hits the UNIQUE(slug) constraint and we re-read the winner's row.
        """
        existing = self.get_category_by_slug(UNCATEGORIZED_SLUG)
        if existing is not None:
            return existing.id
        try:
            return self.create_category(
                Category(name="Uncategorized", slug=UNCATEGORIZED_SLUG, description="Uncategorized articles")
            )
        except IntegrityError:
            return self.get_category_by_slug(UNCATEGORIZED_SLUG).id

    def delete_categories(self, category_ids: list[int], move_articles_to: Optional[int]) -> int:
        """Delete a set of categories and deal with their articles atomically.

        move_articles_to: target category id for the articles, or None to
        delete the articles (with their comments, revisions and saves).

        Returns the number of articles moved or deleted.
        """
        if not category_ids:
            return 0
        with self.engine.begin() as conn:
            article_ids = [
                row.id
                for row in conn.execute(
                    select(_articles.c.id).where(_articles.c.category_id.in_(category_ids))
                ).fetchall()
            ]
            if article_ids:
                if move_articles_to is None:
                    self._delete_articles(conn, article_ids)
                else:
                    conn.execute(
                        _articles.update()
                        .where(_articles.c.id.in_(article_ids))
                        .values(category_id=move_articles_to, updated_at=now_iso())
                    )
            conn.execute(_categories.delete().where(_categories.c.id.in_(category_ids)))
        return len(article_ids)

    def apply_category_updates(self, updates: list[CategoryUpdate]) -> int:
        """Apply a reorder batch in one transaction. Returns rows updated.

        If any statement fails the whole batch rolls back.
        """
        now = now_iso()
        count = 0
        with self.engine.begin() as conn:
            for update in updates:
                result = conn.execute(
                    _categories.update()
                    .where(_categories.c.id == update.id)
                    .values(
                        sort_order=update.sort_order,
                        parent_category_id=update.parent_category_id,
                        updated_at=now,
                    )
                )
                count += result.rowcount
        return count

    def count_categories(self) -> int:
        with self.engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(_categories)).scalar() or 0

    def _insert_category(self, conn: Connection, category: Category) -> int:
        now = now_iso()
        result = conn.execute(
            _categories.insert().values(
                name=category.name,
                slug=category.slug,
                description=category.description,
                parent_category_id=category.parent_category_id,
                sort_order=category.sort_order or 0,
                created_at=now,
                updated_at=now,
            )
        )
        return result.inserted_primary_key[0]

    def _one_category(self, condition) -> Optional[Category]:
        with self.engine.connect() as conn:
            row = conn.execute(select(_categories, _article_count).where(condition)).fetchone()
        return _row_to_category(row) if row is not None else None

    # ------------------------------------------------------------------
    # Articles
    # ------------------------------------------------------------------

    def create_article(self, article: Article) -> int:
        """Insert an article. Raises IntegrityError on a duplicate slug."""
        now = now_iso()
        with self.engine.begin() as conn:
            result = conn.execute(
                _articles.insert().values(
                    title=article.title,
                    slug=article.slug,
                    excerpt=article.excerpt,
                    content=article.content,
                    featured_image_url=article.featured_image_url,
                    author_id=article.author_id,
                    category_id=article.category_id,
                    status=article.status,
                    publish_date=article.publish_date,
                    schedule_date=article.schedule_date,
                    stick_to_front_page=article.stick_to_front_page,
                    read_time_minutes=article.read_time_minutes,
                    view_count=0,
                    created_at=now,
                    updated_at=now,
                )
            )
            return result.inserted_primary_key[0]

    def get_article(self, article_id: int) -> Optional[Article]:
        return self._one_article(_articles.c.id == article_id)

    def get_article_by_slug(self, slug: str) -> Optional[Article]:
        return self._one_article(_articles.c.slug == slug)

    def article_slug_exists(self, slug: str) -> bool:
        with self.engine.connect() as conn:
            return conn.execute(select(_articles.c.id).where(_articles.c.slug == slug)).first() is not None

    def list_articles(
        self,
        limit: int = 10,
        offset: int = 0,
        status: Optional[str] = "published",
        category_id: Optional[int] = None,
        search: Optional[str] = None,
        sort: str = "publish_date",
        order: str = "desc",
    ) -> tuple[list[Article], int]:
        """Return one page of articles plus the total matching count.

        search is a case-insensitive substring match on title and excerpt.
        Unknown sort keys fall back to publish_date.
        """
        conditions = []
        if status:
            conditions.append(_articles.c.status == status)
        if category_id is not None:
            conditions.append(_articles.c.category_id == category_id)
        if search:
            pattern = f"%{search.lower()}%"
            conditions.append(
                or_(func.lower(_articles.c.title).like(pattern), func.lower(_articles.c.excerpt).like(pattern))
            )

        column = _ARTICLE_SORT_COLUMNS.get(sort, _articles.c.publish_date)
        ordering = column.asc() if order == "asc" else column.desc()
        query = select(_articles).where(*conditions).order_by(ordering, _articles.c.id.desc())
        count_query = select(func.count()).select_from(_articles).where(*conditions)
        with self.engine.connect() as conn:
            rows = conn.execute(query.limit(limit).offset(offset)).fetchall()
            total = conn.execute(count_query).scalar() or 0
        return [_row_to_article(r) for r in rows], total

    def related_articles(self, category_id: int, exclude_id: int, limit: int = 3) -> list[Article]:
        """Newest published articles in the same category, excluding one."""
        query = (
            select(_articles)
            .where(
                _articles.c.category_id == category_id,
                _articles.c.status == "published",
                _articles.c.id != exclude_id,
            )
            .order_by(_articles.c.publish_date.desc(), _articles.c.id.desc())
            .limit(limit)
        )
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_article(r) for r in rows]

    def increment_view_count(self, article_id: int) -> None:
        """Atomic server-side increment; concurrent readers never lose a view."""
        with self.engine.begin() as conn:
            conn.execute(
                _articles.update()
                .where(_articles.c.id == article_id)
                .values(view_count=_articles.c.view_count + 1)
            )

    def update_article_with_revision(self, article_id: int, revision: Revision, **fields) -> bool:
        """Record a revision snapshot and apply the update in one transaction."""
        _check_fields(fields, _ARTICLE_MUTABLE_FIELDS)
        now = now_iso()
        with self.engine.begin() as conn:
            conn.execute(
                _revisions.insert().values(
                    article_id=revision.article_id,
                    user_id=revision.user_id,
                    title=revision.title,
                    content_snapshot=revision.content_snapshot,
                    created_at=now,
                )
            )
            result = conn.execute(
                _articles.update().where(_articles.c.id == article_id).values(updated_at=now, **fields)
            )
        return result.rowcount > 0

    def delete_articles(self, article_ids: list[int]) -> int:
        with self.engine.begin() as conn:
            return self._delete_articles(conn, article_ids)

    def list_revisions(self, article_id: int) -> list[Revision]:
        query = (
            _revisions.select()
            .where(_revisions.c.article_id == article_id)
            .order_by(_revisions.c.created_at.desc(), _revisions.c.id.desc())
        )
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_revision(r) for r in rows]

    def count_articles(self) -> int:
        with self.engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(_articles)).scalar() or 0

    def count_articles_in(self, category_ids: list[int]) -> int:
        if not category_ids:
            return 0
        query = select(func.count()).select_from(_articles).where(_articles.c.category_id.in_(category_ids))
        with self.engine.connect() as conn:
            return conn.execute(query).scalar() or 0

    def total_views(self, published_since: Optional[str] = None) -> int:
        """Sum of view counts, optionally limited to articles published since an ISO date."""
        query = select(func.coalesce(func.sum(_articles.c.view_count), 0))
        if published_since:
            query = query.where(_articles.c.publish_date >= published_since)
        with self.engine.connect() as conn:
            return conn.execute(query).scalar() or 0

    def recent_articles(self, limit: int = 5) -> list[Article]:
        query = select(_articles).order_by(_articles.c.created_at.desc(), _articles.c.id.desc()).limit(limit)
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_article(r) for r in rows]

    def _delete_articles(self, conn: Connection, article_ids: list[int]) -> int:
        if not article_ids:
            return 0
        conn.execute(_comments.delete().where(_comments.c.article_id.in_(article_ids)))
        conn.execute(_revisions.delete().where(_revisions.c.article_id.in_(article_ids)))
        for table in _SAVED_TABLES.values():
            conn.execute(table.delete().where(table.c.article_id.in_(article_ids)))
        result = conn.execute(_articles.delete().where(_articles.c.id.in_(article_ids)))
        return result.rowcount

    def _one_article(self, condition) -> Optional[Article]:
        with self.engine.connect() as conn:
            row = conn.execute(_articles.select().where(condition)).fetchone()
        return _row_to_article(row) if row is not None else None

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def create_comment(self, comment: Comment) -> int:
        now = now_iso()
        with self.engine.begin() as conn:
            result = conn.execute(
                _comments.insert().values(
                    article_id=comment.article_id,
                    user_id=comment.user_id,
                    parent_comment_id=comment.parent_comment_id,
                    content=comment.content,
                    status=comment.status,
                    created_at=now,
                    updated_at=now,
                )
            )
            return result.inserted_primary_key[0]

    def get_comment(self, comment_id: int) -> Optional[Comment]:
        with self.engine.connect() as conn:
            row = conn.execute(_comments.select().where(_comments.c.id == comment_id)).fetchone()
        return _row_to_comment(row) if row is not None else None

    def list_top_level_comments(self, article_id: int, limit: int, offset: int) -> tuple[list[Comment], int]:
        """One page of visible top-level comments, oldest first, plus their total."""
        conditions = (
            _comments.c.article_id == article_id,
            _comments.c.status == "visible",
            _comments.c.parent_comment_id.is_(None),
        )
        query = (
            _comments.select()
            .where(*conditions)
            .order_by(_comments.c.created_at, _comments.c.id)
            .limit(limit)
            .offset(offset)
        )
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
            total = conn.execute(select(func.count()).select_from(_comments).where(*conditions)).scalar() or 0
        return [_row_to_comment(r) for r in rows], total

    def list_visible_replies(self, article_id: int) -> list[Comment]:
        """Every visible reply on an article, oldest first (threaded in memory)."""
        query = (
            _comments.select()
            .where(
                _comments.c.article_id == article_id,
                _comments.c.status == "visible",
                _comments.c.parent_comment_id.is_not(None),
            )
            .order_by(_comments.c.created_at, _comments.c.id)
        )
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_comment(r) for r in rows]

    def update_comment(self, comment_id: int, user_id: int, content: str) -> bool:
        """Edit a comment's text. Only matches when user_id owns the comment."""
        with self.engine.begin() as conn:
            result = conn.execute(
                _comments.update()
                .where((_comments.c.id == comment_id) & (_comments.c.user_id == user_id))
                .values(content=content, updated_at=now_iso())
            )
        return result.rowcount > 0

    def set_comment_status(self, comment_id: int, status: str) -> bool:
        with self.engine.begin() as conn:
            result = conn.execute(
                _comments.update().where(_comments.c.id == comment_id).values(status=status, updated_at=now_iso())
            )
        return result.rowcount > 0

    def delete_comment_thread(self, comment_ids: list[int]) -> int:
        """Delete a comment together with the reply ids the caller collected under it."""
        with self.engine.begin() as conn:
            result = conn.execute(_comments.delete().where(_comments.c.id.in_(comment_ids)))
        return result.rowcount

    def comment_parent_map(self, article_id: int) -> dict[int, Optional[int]]:
        """{comment_id: parent_comment_id} for every comment on one article, any status."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                select(_comments.c.id, _comments.c.parent_comment_id).where(_comments.c.article_id == article_id)
            ).fetchall()
        return {row.id: row.parent_comment_id for row in rows}

    # ------------------------------------------------------------------
    # Bookmarks and reading list
    # ------------------------------------------------------------------

    def add_saved(self, kind: str, user_id: int, article_id: int) -> None:
        """Save an article. Raises IntegrityError if it is already saved."""
        table = _SAVED_TABLES[kind]
        with self.engine.begin() as conn:
            conn.execute(table.insert().values(user_id=user_id, article_id=article_id, created_at=now_iso()))

    def remove_saved(self, kind: str, user_id: int, article_id: int) -> bool:
        table = _SAVED_TABLES[kind]
        with self.engine.begin() as conn:
            result = conn.execute(
                table.delete().where((table.c.user_id == user_id) & (table.c.article_id == article_id))
            )
        return result.rowcount > 0

    def list_saved(self, kind: str, user_id: int, limit: int = 10, offset: int = 0) -> tuple[list[SavedArticle], int]:
        """Newest-first saved articles for a user, joined with the article rows."""
        table = _SAVED_TABLES[kind]
        query = (
            select(_articles, table.c.created_at.label("saved_at"))
            .join(table, table.c.article_id == _articles.c.id)
            .where(table.c.user_id == user_id)
            .order_by(table.c.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        count_query = (
            select(func.count())
            .select_from(table.join(_articles, table.c.article_id == _articles.c.id))
            .where(table.c.user_id == user_id)
        )
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
            total = conn.execute(count_query).scalar() or 0
        saved = [SavedArticle(user_id=user_id, article=_row_to_article(r), created_at=r.saved_at) for r in rows]
        return saved, total

    def saved_article_ids(self, kind: str, user_id: int, article_ids: list[int]) -> set[int]:
        """Subset of article_ids the user has saved."""
        if not article_ids:
            return set()
        table = _SAVED_TABLES[kind]
        with self.engine.connect() as conn:
            rows = conn.execute(
                select(table.c.article_id).where((table.c.user_id == user_id) & (table.c.article_id.in_(article_ids)))
            ).fetchall()
        return {row.article_id for row in rows}

    # ------------------------------------------------------------------
    # Activity log
    # ------------------------------------------------------------------

    def log_activity(self, entry: ActivityLog) -> int:
        with self.engine.begin() as conn:
            result = conn.execute(
                _activity_logs.insert().values(
                    user_id=entry.user_id,
                    action_type=entry.action_type,
                    target_type=entry.target_type,
                    target_id=entry.target_id,
                    description=entry.description,
                    created_at=now_iso(),
                )
            )
            return result.inserted_primary_key[0]

    def recent_activity(self, limit: int = 5) -> list[ActivityLog]:
        query = (
            _activity_logs.select()
            .order_by(_activity_logs.c.created_at.desc(), _activity_logs.c.id.desc())
            .limit(limit)
        )
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_activity(r) for r in rows]

    def ping(self) -> None:
        """Round-trip a trivial query. Raises SQLAlchemyError if the database is unreachable."""
        with self.engine.connect() as conn:
            conn.execute(select(1))

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_category(row) -> Category:
    return Category(
        id=row.id,
        name=row.name,
        slug=row.slug,
        description=row.description,
        parent_category_id=row.parent_category_id,
        sort_order=row.sort_order or 0,
        article_count=getattr(row, "article_count", 0) or 0,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_article(row) -> Article:
    return Article(
        id=row.id,
        title=row.title,
        slug=row.slug,
        excerpt=row.excerpt,
        content=row.content,
        featured_image_url=row.featured_image_url,
        author_id=row.author_id,
        category_id=row.category_id,
        status=row.status,
        publish_date=row.publish_date,
        schedule_date=row.schedule_date,
        stick_to_front_page=bool(row.stick_to_front_page),
        read_time_minutes=row.read_time_minutes,
        view_count=row.view_count,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_revision(row) -> Revision:
    return Revision(
        id=row.id,
        article_id=row.article_id,
        user_id=row.user_id,
        title=row.title,
        content_snapshot=row.content_snapshot,
        created_at=row.created_at,
    )


def _row_to_comment(row) -> Comment:
    return Comment(
        id=row.id,
        article_id=row.article_id,
        user_id=row.user_id,
        parent_comment_id=row.parent_comment_id,
        content=row.content,
        status=row.status,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_activity(row) -> ActivityLog:
    return ActivityLog(
        id=row.id,
        user_id=row.user_id,
        action_type=row.action_type,
        target_type=row.target_type,
        target_id=row.target_id,
        description=row.description,
        created_at=row.created_at,
    )
