"""
API request and response models for Inkwell REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
content/models.py, which own the internal domain representation. Route
handlers map between the two with the *_response() mappers at the bottom.

Separation of concerns: domain dataclasses = domain truth; api/ models = API contract.

Security notes:
  UserResponse never carries password_hash or reset_token -- those fields do
  not exist on the model, so they cannot leak even if a handler passes the
  raw domain User through.

  Password policy (register, reset, change): at least 8 characters with a
  digit, an uppercase letter and one of !@#$%^&*. Enforced here so weak
  passwords are rejected with 422 before any service code runs.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from auth.models import User
from content.models import ActivityLog, Article, Category, Comment, Revision

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

_PASSWORD_RULES = (
    (re.compile(r"[0-9]"), "Password must contain at least one number"),
    (re.compile(r"[A-Z]"), "Password must contain at least one uppercase letter"),
    (re.compile(r"[!@#$%^&*]"), "Password must contain at least one special character (!@#$%^&*)"),
)


def check_password_policy(value: str) -> str:
    for pattern, message in _PASSWORD_RULES:
        if not pattern.search(value):
            raise ValueError(message)
    return value


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class RoleEnum(str, Enum):
    reader = "reader"
    author = "author"
    admin = "admin"


class ArticleStatusEnum(str, Enum):
    draft = "draft"
    published = "published"
    scheduled = "scheduled"


class ArticleActionEnum(str, Enum):
    move_to_parent = "move_to_parent"
    move_to_uncategorized = "move_to_uncategorized"
    delete = "delete"


class ArticleSortEnum(str, Enum):
    publish_date = "publish_date"
    view_count = "view_count"
    title = "title"


class SortOrderEnum(str, Enum):
    asc = "asc"
    desc = "desc"


# ---------------------------------------------------------------------------
# Shared envelopes
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)


class MessageResponse(BaseModel):
    message: str


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool
    page: int
    total_pages: int


# ---------------------------------------------------------------------------
# Auth -- requests
# ---------------------------------------------------------------------------


class _EmailModel(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(max_length=255, pattern=EMAIL_PATTERN)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()


class RegisterRequest(_EmailModel):
    name: str = Field(min_length=2, max_length=100)
    password: str = Field(min_length=8, max_length=128)

    @field_validator("password")
    @classmethod
    def password_policy(cls, value: str) -> str:
        return check_password_policy(value)


class LoginRequest(_EmailModel):
    password: str = Field(min_length=1, max_length=128)


class ForgotPasswordRequest(_EmailModel):
    pass


class RefreshRequest(BaseModel):
    refresh_token: str = Field(min_length=1, max_length=256)


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1, max_length=256)
    new_password: str = Field(min_length=8, max_length=128)

    @field_validator("new_password")
    @classmethod
    def password_policy(cls, value: str) -> str:
        return check_password_policy(value)


# ---------------------------------------------------------------------------
# Users -- requests and responses
# ---------------------------------------------------------------------------


class EmailNotifications(BaseModel):
    weekly_newsletter: Optional[bool] = None
    favorite_categories: Optional[bool] = None
    comment_replies: Optional[bool] = None


class Preferences(BaseModel):
    font_size: Optional[str] = Field(default=None, pattern=r"^(small|medium|large)$")
    theme: Optional[str] = Field(default=None, pattern=r"^(light|dark)$")
    simplified_view: Optional[bool] = None
    email_notifications: Optional[EmailNotifications] = None


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    avatar_url: Optional[str] = Field(default=None, max_length=2048)
    preferences: Optional[Preferences] = None


class PasswordChange(BaseModel):
    current_password: str = Field(min_length=1, max_length=128)
    new_password: str = Field(min_length=8, max_length=128)

    @field_validator("new_password")
    @classmethod
    def password_policy(cls, value: str) -> str:
        return check_password_policy(value)


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str
    avatar_url: Optional[str] = None
    email_verified: bool = False
    preferences: dict = Field(default_factory=dict)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class AuthResponse(BaseModel):
    """Register / login / Google sign-in result."""

    user: UserResponse
    access_token: str
    refresh_token: str
    token_type: str = "bearer"  # noqa: S105 # nosec B105 -- OAuth token type, not a password


class RefreshResponse(BaseModel):
    access_token: str
    # Present only when refresh-token rotation is enabled.
    refresh_token: Optional[str] = None
    token_type: str = "bearer"  # noqa: S105 # nosec B105


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


class RoleUpdate(BaseModel):
    role: RoleEnum


class AdminUserCreate(_EmailModel):
    name: str = Field(min_length=2, max_length=100)
    role: RoleEnum
    send_invitation: bool = True


class InviteResponse(BaseModel):
    user: UserResponse
    reset_link: str


class UserListResponse(BaseModel):
    users: list[UserResponse]
    pagination: Pagination


class DashboardMetrics(BaseModel):
    total_articles: int
    total_categories: int
    total_page_views: int
    total_users: int


class ActivityResponse(BaseModel):
    id: int
    user_id: int
    action_type: str
    target_type: str
    target_id: Optional[int] = None
    description: str
    created_at: str


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


class CategoryCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)
    slug: Optional[str] = Field(default=None, max_length=120, pattern=r"^[a-z0-9-]+$")
    description: Optional[str] = Field(default=None, max_length=1000)
    parent_category_id: Optional[int] = None
    sort_order: int = 0


class CategoryPatch(BaseModel):
    """Partial update. Handlers use model_dump(exclude_unset=True) so an
    explicit null parent (move to root) differs from an omitted one."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    slug: Optional[str] = Field(default=None, max_length=120, pattern=r"^[a-z0-9-]+$")
    description: Optional[str] = Field(default=None, max_length=1000)
    parent_category_id: Optional[int] = None
    sort_order: Optional[int] = None


class ReorderItem(BaseModel):
    id: int
    sort_order: int
    parent_category_id: Optional[int] = None


class ReorderRequest(BaseModel):
    updates: list[ReorderItem] = Field(min_length=1, max_length=500)


class CategoryResponse(BaseModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    parent_category_id: Optional[int] = None
    sort_order: int = 0
    article_count: int = 0
    created_at: str = ""
    updated_at: str = ""
    children: list[CategoryResponse] = Field(default_factory=list)


class CategorySummary(BaseModel):
    id: int
    name: str
    slug: str


class CategoryListResponse(BaseModel):
    categories: list[CategoryResponse]


class CategoryDetailResponse(BaseModel):
    category: CategoryResponse
    parent: Optional[CategorySummary] = None


# ---------------------------------------------------------------------------
# Articles
# ---------------------------------------------------------------------------


class ArticleCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=255)
    slug: Optional[str] = Field(default=None, max_length=300, pattern=r"^[a-z0-9-]+$")
    excerpt: Optional[str] = Field(default=None, max_length=500)
    content: str = Field(min_length=1)
    featured_image_url: Optional[str] = Field(default=None, max_length=2048)
    category_id: int
    status: ArticleStatusEnum = ArticleStatusEnum.draft
    publish_date: Optional[str] = None
    schedule_date: Optional[str] = None
    stick_to_front_page: bool = False


class ArticlePatch(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    slug: Optional[str] = Field(default=None, max_length=300, pattern=r"^[a-z0-9-]+$")
    excerpt: Optional[str] = Field(default=None, max_length=500)
    content: Optional[str] = Field(default=None, min_length=1)
    featured_image_url: Optional[str] = Field(default=None, max_length=2048)
    category_id: Optional[int] = None
    status: Optional[ArticleStatusEnum] = None
    publish_date: Optional[str] = None
    schedule_date: Optional[str] = None
    stick_to_front_page: Optional[bool] = None


class ArticleResponse(BaseModel):
    id: int
    title: str
    slug: str
    excerpt: Optional[str] = None
    content: str
    featured_image_url: Optional[str] = None
    author_id: int
    category_id: int
    status: str
    publish_date: Optional[str] = None
    schedule_date: Optional[str] = None
    stick_to_front_page: bool = False
    read_time_minutes: int = 1
    view_count: int = 0
    created_at: str = ""
    updated_at: str = ""
    is_bookmarked: bool = False


class ArticleListResponse(BaseModel):
    articles: list[ArticleResponse]
    pagination: Pagination


class ArticleDetailResponse(BaseModel):
    article: ArticleResponse
    category: Optional[CategorySummary] = None
    related_articles: list[ArticleResponse] = Field(default_factory=list)


class RevisionResponse(BaseModel):
    id: int
    article_id: int
    user_id: int
    title: str
    content_snapshot: str
    created_at: str


class RevisionListResponse(BaseModel):
    revisions: list[RevisionResponse]


class DashboardResponse(BaseModel):
    metrics: DashboardMetrics
    monthly_views: int
    recent_articles: list[ArticleResponse]
    recent_activity: list[ActivityResponse]


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


class CommentCreate(BaseModel):
    content: str = Field(min_length=1, max_length=2000)
    parent_comment_id: Optional[int] = None


class CommentEdit(BaseModel):
    content: str = Field(min_length=1, max_length=2000)


class CommentResponse(BaseModel):
    id: int
    article_id: int
    user_id: int
    parent_comment_id: Optional[int] = None
    content: str
    status: str
    created_at: str
    updated_at: str
    replies: list[CommentResponse] = Field(default_factory=list)


class CommentListResponse(BaseModel):
    comments: list[CommentResponse]
    pagination: Pagination


# ---------------------------------------------------------------------------
# Bookmarks and reading list
# ---------------------------------------------------------------------------


class SaveRequest(BaseModel):
    article_id: int


class SavedArticleResponse(BaseModel):
    article: ArticleResponse
    saved_at: str


class SavedListResponse(BaseModel):
    items: list[SavedArticleResponse]
    pagination: Pagination


# ---------------------------------------------------------------------------
# Domain -> transport mappers
# ---------------------------------------------------------------------------


def user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        avatar_url=user.avatar_url,
        email_verified=user.email_verified,
        preferences=user.preferences,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def category_response(category: Category) -> CategoryResponse:
    return CategoryResponse(
        id=category.id,
        name=category.name,
        slug=category.slug,
        description=category.description,
        parent_category_id=category.parent_category_id,
        sort_order=category.sort_order,
        article_count=category.article_count,
        created_at=category.created_at,
        updated_at=category.updated_at,
        children=[category_response(c) for c in category.children],
    )


def category_summary(category: Optional[Category]) -> Optional[CategorySummary]:
    if category is None:
        return None
    return CategorySummary(id=category.id, name=category.name, slug=category.slug)


def article_response(article: Article, is_bookmarked: bool = False) -> ArticleResponse:
    return ArticleResponse(
        id=article.id,
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
        view_count=article.view_count,
        created_at=article.created_at,
        updated_at=article.updated_at,
        is_bookmarked=is_bookmarked,
    )


def revision_response(revision: Revision) -> RevisionResponse:
    return RevisionResponse(
        id=revision.id,
        article_id=revision.article_id,
        user_id=revision.user_id,
        title=revision.title,
        content_snapshot=revision.content_snapshot,
        created_at=revision.created_at,
    )


def comment_response(comment: Comment) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        article_id=comment.article_id,
        user_id=comment.user_id,
        parent_comment_id=comment.parent_comment_id,
        content=comment.content,
        status=comment.status,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        replies=[comment_response(r) for r in comment.replies],
    )


def activity_response(entry: ActivityLog) -> ActivityResponse:
    return ActivityResponse(
        id=entry.id,
        user_id=entry.user_id,
        action_type=entry.action_type,
        target_type=entry.target_type,
        target_id=entry.target_id,
        description=entry.description,
        created_at=entry.created_at,
    )
