"""
api/routes/v1/comments.py -- Threaded comment endpoints.

Routes:
  GET    /api/v1/comments/articles/{article_id}/comments  -- threaded page (public)
  POST   /api/v1/comments/articles/{article_id}/comments  -- comment or reply (user)
  PUT    /api/v1/comments/{comment_id}                    -- edit own comment (user)
  DELETE /api/v1/comments/{comment_id}                    -- own comment, or any for admins
  POST   /api/v1/comments/{comment_id}/flag               -- flag for moderation (user)

IDOR guard: edit and delete pass the caller's id down to the service, which
answers 404 (not 403) for someone else's comment so ids cannot be probed.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from api.models import (
    CommentCreate,
    CommentEdit,
    CommentListResponse,
    CommentResponse,
    MessageResponse,
    comment_response,
)
from auth.dependencies import get_current_user
from auth.models import User
from content.comments import CommentService
from core.text import pagination_meta

# Auth policy: GET is public; every write requires get_current_user.
router = APIRouter()


@router.get("/comments/articles/{article_id}/comments", response_model=CommentListResponse)
def list_comments(
    request: Request,
    article_id: int,
    limit: int = Query(default=10, ge=1, le=50),
    offset: int = Query(default=0, ge=0),
) -> CommentListResponse:
    comments: CommentService = request.app.state.comment_service
    items, total = comments.get_article_comments(article_id, limit=limit, offset=offset)
    return CommentListResponse(
        comments=[comment_response(c) for c in items],
        pagination=pagination_meta(total, limit, offset),
    )


@router.post("/comments/articles/{article_id}/comments", response_model=CommentResponse, status_code=201)
def create_comment(
    request: Request,
    article_id: int,
    body: CommentCreate,
    current_user: User = Depends(get_current_user),
) -> CommentResponse:
    comments: CommentService = request.app.state.comment_service
    created = comments.create_comment(
        article_id,
        current_user.id,
        body.content,
        parent_comment_id=body.parent_comment_id,
    )
    return comment_response(created)


@router.put("/comments/{comment_id}", response_model=CommentResponse)
def update_comment(
    request: Request,
    comment_id: int,
    body: CommentEdit,
    current_user: User = Depends(get_current_user),
) -> CommentResponse:
    comments: CommentService = request.app.state.comment_service
    return comment_response(comments.update_comment(comment_id, current_user.id, body.content))


@router.delete("/comments/{comment_id}", response_model=MessageResponse)
def delete_comment(
    request: Request,
    comment_id: int,
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    comments: CommentService = request.app.state.comment_service
    result = comments.delete_comment(comment_id, current_user.id, is_admin=current_user.role == "admin")
    return MessageResponse(**result)


@router.post("/comments/{comment_id}/flag", response_model=MessageResponse)
def flag_comment(
    request: Request,
    comment_id: int,
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    comments: CommentService = request.app.state.comment_service
    return MessageResponse(**comments.flag_comment(comment_id))
