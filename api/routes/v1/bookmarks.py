"""
api/routes/v1/bookmarks.py -- Bookmarks and reading list.

Routes (identical shape under both prefixes):
  GET    /api/v1/bookmarks                  /api/v1/reading-list
  POST   /api/v1/bookmarks                  /api/v1/reading-list
  DELETE /api/v1/bookmarks/{article_id}     /api/v1/reading-list/{article_id}

Both lists are private to their owner: the user id always comes from the
access token, never from the request.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from api.models import MessageResponse, SavedArticleResponse, SavedListResponse, SaveRequest, article_response
from auth.dependencies import get_current_user
from auth.models import User
from content.bookmarks import BOOKMARKS, READING_LIST, BookmarkService
from core.text import pagination_meta

# Auth policy: all routes require get_current_user.
router = APIRouter()


def _list(request: Request, kind: str, user: User, limit: int, offset: int) -> SavedListResponse:
    bookmarks: BookmarkService = request.app.state.bookmark_service
    items, total = bookmarks.list_saved(kind, user.id, limit=limit, offset=offset)
    return SavedListResponse(
        items=[
            SavedArticleResponse(article=article_response(s.article, kind == BOOKMARKS), saved_at=s.created_at)
            for s in items
        ],
        pagination=pagination_meta(total, limit, offset),
    )


# ---------------------------------------------------------------------------
# Bookmarks
# ---------------------------------------------------------------------------


@router.get("/bookmarks", response_model=SavedListResponse)
def list_bookmarks(
    request: Request,
    limit: int = Query(default=10, ge=1, le=50),
    offset: int = Query(default=0, ge=0),
    current_user: User = Depends(get_current_user),
) -> SavedListResponse:
    return _list(request, BOOKMARKS, current_user, limit, offset)


@router.post("/bookmarks", response_model=MessageResponse, status_code=201)
def add_bookmark(
    request: Request,
    body: SaveRequest,
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    bookmarks: BookmarkService = request.app.state.bookmark_service
    return MessageResponse(**bookmarks.add(BOOKMARKS, current_user.id, body.article_id))


@router.delete("/bookmarks/{article_id}", response_model=MessageResponse)
def remove_bookmark(
    request: Request,
    article_id: int,
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    bookmarks: BookmarkService = request.app.state.bookmark_service
    return MessageResponse(**bookmarks.remove(BOOKMARKS, current_user.id, article_id))


# ---------------------------------------------------------------------------
# Reading list
# ---------------------------------------------------------------------------


@router.get("/reading-list", response_model=SavedListResponse)
def list_reading_list(
    request: Request,
    limit: int = Query(default=10, ge=1, le=50),
    offset: int = Query(default=0, ge=0),
    current_user: User = Depends(get_current_user),
) -> SavedListResponse:
    return _list(request, READING_LIST, current_user, limit, offset)


@router.post("/reading-list", response_model=MessageResponse, status_code=201)
def add_to_reading_list(
    request: Request,
    body: SaveRequest,
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    bookmarks: BookmarkService = request.app.state.bookmark_service
    return MessageResponse(**bookmarks.add(READING_LIST, current_user.id, body.article_id))


@router.delete("/reading-list/{article_id}", response_model=MessageResponse)
def remove_from_reading_list(
    request: Request,
    article_id: int,
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    bookmarks: BookmarkService = request.app.state.bookmark_service
    return MessageResponse(**bookmarks.remove(READING_LIST, current_user.id, article_id))
