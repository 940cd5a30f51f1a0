"""
api/routes/v1/categories.py -- Category tree endpoints.

Routes:
  GET    /api/v1/categories                  -- forest (or flat list with include_children=false)
  GET    /api/v1/categories/{slug}           -- one category with parent and children
  POST   /api/v1/categories                  -- create (admin)
  PUT    /api/v1/categories/reorder          -- batch position/parent update (admin)
  PUT    /api/v1/categories/{category_id}    -- partial update (admin)
  DELETE /api/v1/categories/{category_id}?article_action=...  -- delete subtree (admin)

Route registration order: /categories/reorder is declared before
/categories/{category_id}, otherwise "reorder" would be matched as an id and
fail int validation with a 422.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from api.models import (
    ArticleActionEnum,
    CategoryCreate,
    CategoryDetailResponse,
    CategoryListResponse,
    CategoryPatch,
    CategoryResponse,
    MessageResponse,
    ReorderRequest,
    category_response,
    category_summary,
)
from auth.dependencies import require_admin
from auth.models import User
from content.categories import CategoryService
from content.models import CategoryUpdate

# Auth policy:
# - GET routes are public (navigation menus render for anonymous readers)
# - every write requires admin (require_admin)
router = APIRouter()


@router.get("/categories", response_model=CategoryListResponse)
def list_categories(request: Request, include_children: bool = True) -> CategoryListResponse:
    categories: CategoryService = request.app.state.category_service
    items = categories.list_categories(include_children=include_children)
    return CategoryListResponse(categories=[category_response(c) for c in items])


@router.get("/categories/{slug}", response_model=CategoryDetailResponse)
def get_category(request: Request, slug: str) -> CategoryDetailResponse:
    categories: CategoryService = request.app.state.category_service
    category, parent = categories.get_category_by_slug(slug)
    return CategoryDetailResponse(category=category_response(category), parent=category_summary(parent))


@router.post("/categories", response_model=CategoryResponse, status_code=201)
def create_category(
    request: Request,
    body: CategoryCreate,
    current_user: User = Depends(require_admin),
) -> CategoryResponse:
    categories: CategoryService = request.app.state.category_service
    created = categories.create_category(
        name=body.name,
        slug=body.slug,
        description=body.description,
        parent_category_id=body.parent_category_id,
        sort_order=body.sort_order,
        actor_id=current_user.id,
    )
    return category_response(created)


@router.put("/categories/reorder", response_model=MessageResponse)
def reorder_categories(
    request: Request,
    body: ReorderRequest,
    current_user: User = Depends(require_admin),
) -> MessageResponse:
    """Apply a drag-and-drop reorder. The whole batch applies or none of it does."""
    categories: CategoryService = request.app.state.category_service
    updates = [
        CategoryUpdate(id=u.id, sort_order=u.sort_order, parent_category_id=u.parent_category_id)
        for u in body.updates
    ]
    return MessageResponse(**categories.reorder_categories(updates))


@router.put("/categories/{category_id}", response_model=CategoryResponse)
def update_category(
    request: Request,
    category_id: int,
    body: CategoryPatch,
    current_user: User = Depends(require_admin),
) -> CategoryResponse:
    categories: CategoryService = request.app.state.category_service
    updated = categories.update_category(category_id, body.model_dump(exclude_unset=True), actor_id=current_user.id)
    return category_response(updated)


@router.delete("/categories/{category_id}", response_model=MessageResponse)
def delete_category(
    request: Request,
    category_id: int,
    article_action: ArticleActionEnum = ArticleActionEnum.move_to_parent,
    current_user: User = Depends(require_admin),
) -> MessageResponse:
    """Delete a category and its descendants; articles follow article_action."""
    categories: CategoryService = request.app.state.category_service
    result = categories.delete_category(category_id, article_action.value, actor_id=current_user.id)
    return MessageResponse(**result)
