"""
api/routes/v1/articles.py -- Article endpoints.

Routes:
  GET    /api/v1/articles                         -- paginated listing (optional auth)
  GET    /api/v1/articles/{slug}                  -- read one article; counts a view
  POST   /api/v1/articles                         -- create (author/admin)
  PUT    /api/v1/articles/{article_id}            -- partial update with revision (author/admin)
  DELETE /api/v1/articles/{article_id}            -- delete (admin)
  GET    /api/v1/articles/{article_id}/revisions  -- revision history (author/admin)

Drafts stay private: readers and anonymous callers always get published
articles from the listing, whatever status they ask for.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from api.models import (
    ArticleCreate,
    ArticleDetailResponse,
    ArticleListResponse,
    ArticlePatch,
    ArticleResponse,
    ArticleSortEnum,
    ArticleStatusEnum,
    MessageResponse,
    RevisionListResponse,
    SortOrderEnum,
    article_response,
    category_summary,
    revision_response,
)
from auth.dependencies import require_admin, require_author, try_get_current_user
from auth.models import User
from content.articles import ArticleService
from core.text import pagination_meta

# Auth policy:
# - GET listing and GET by slug: optional auth (bookmark flags for signed-in readers)
# - POST, PUT, GET revisions: author or admin (require_author)
# - DELETE: admin only (require_admin)
router = APIRouter()

_EDITOR_ROLES = ("author", "admin")


@router.get("/articles", response_model=ArticleListResponse)
def list_articles(
    request: Request,
    limit: int = Query(default=10, ge=1, le=50),
    offset: int = Query(default=0, ge=0),
    category: Optional[str] = Query(default=None, max_length=120),
    status: ArticleStatusEnum = ArticleStatusEnum.published,
    search: Optional[str] = Query(default=None, max_length=200),
    sort: ArticleSortEnum = ArticleSortEnum.publish_date,
    order: SortOrderEnum = SortOrderEnum.desc,
    current_user: Optional[User] = Depends(try_get_current_user),
) -> ArticleListResponse:
    if current_user is None or current_user.role not in _EDITOR_ROLES:
        status = ArticleStatusEnum.published
    articles: ArticleService = request.app.state.article_service
    items, total, bookmarked = articles.list_articles(
        limit=limit,
        offset=offset,
        category_slug=category,
        status=status.value,
        search=search,
        sort=sort.value,
        order=order.value,
        user_id=current_user.id if current_user else None,
    )
    return ArticleListResponse(
        articles=[article_response(a, a.id in bookmarked) for a in items],
        pagination=pagination_meta(total, limit, offset),
    )


@router.get("/articles/{slug}", response_model=ArticleDetailResponse)
def get_article(
    request: Request,
    slug: str,
    current_user: Optional[User] = Depends(try_get_current_user),
) -> ArticleDetailResponse:
    articles: ArticleService = request.app.state.article_service
    detail = articles.get_article_by_slug(slug, user_id=current_user.id if current_user else None)
    return ArticleDetailResponse(
        article=article_response(detail.article, detail.is_bookmarked),
        category=category_summary(detail.category),
        related_articles=[article_response(a) for a in detail.related],
    )


@router.post("/articles", response_model=ArticleResponse, status_code=201)
def create_article(
    request: Request,
    body: ArticleCreate,
    current_user: User = Depends(require_author),
) -> ArticleResponse:
    articles: ArticleService = request.app.state.article_service
    created = articles.create_article(body.model_dump(mode="json"), author_id=current_user.id)
    return article_response(created)


@router.put("/articles/{article_id}", response_model=ArticleResponse)
def update_article(
    request: Request,
    article_id: int,
    body: ArticlePatch,
    current_user: User = Depends(require_author),
) -> ArticleResponse:
    """Partial update. The previous title and content are kept as a revision."""
    articles: ArticleService = request.app.state.article_service
    updated = articles.update_article(
        article_id,
        body.model_dump(mode="json", exclude_unset=True),
        user_id=current_user.id,
    )
    return article_response(updated)


@router.delete("/articles/{article_id}", response_model=MessageResponse)
def delete_article(
    request: Request,
    article_id: int,
    current_user: User = Depends(require_admin),
) -> MessageResponse:
    articles: ArticleService = request.app.state.article_service
    return MessageResponse(**articles.delete_article(article_id, user_id=current_user.id))


@router.get("/articles/{article_id}/revisions", response_model=RevisionListResponse)
def list_revisions(
    request: Request,
    article_id: int,
    current_user: User = Depends(require_author),
) -> RevisionListResponse:
    articles: ArticleService = request.app.state.article_service
    return RevisionListResponse(revisions=[revision_response(r) for r in articles.get_revisions(article_id)])
