"""API routes for the category tree.

Mutations are scoped to the authenticated user: the owner id comes from the
auth context, never from the request body.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, optional_auth, require_auth
from ..database import get_db
from ..repositories.category_repository import CategoryRepository
from ..services.category_service import CategoryService
from ..schemas.category import (
    CategoryCreate,
    CategoryMove,
    CategoryResponse,
    CategoryTreeNode,
    CategoryUpdate,
    DeleteResult,
    DescendantCount,
)

router = APIRouter(prefix="/api/categories", tags=["categories"])


def get_category_service(db: Session = Depends(get_db)) -> CategoryService:
    return CategoryService(CategoryRepository(db))


@router.get("/tree", response_model=List[CategoryTreeNode])
def get_category_tree(
    service: CategoryService = Depends(get_category_service),
    auth: Optional[AuthContext] = Depends(optional_auth),
):
    """Own private categories plus shared ones; anonymous callers get shared only."""
    return service.get_tree(auth.user_id if auth else None)


@router.post("", response_model=CategoryResponse, status_code=201)
def create_category(
    data: CategoryCreate,
    service: CategoryService = Depends(get_category_service),
    auth: AuthContext = Depends(require_auth),
):
    """Create a private category, appended after its siblings."""
    return service.create_node(
        data.name, data.description, data.parent_id, auth.user_id, metadata=data.metadata
    )


@router.put("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: str,
    data: CategoryUpdate,
    service: CategoryService = Depends(get_category_service),
    auth: AuthContext = Depends(require_auth),
):
    return service.rename_node(category_id, data.name, data.description, auth.user_id)


@router.put("/{category_id}/move", response_model=CategoryResponse)
def move_category(
    category_id: str,
    data: CategoryMove,
    service: CategoryService = Depends(get_category_service),
    auth: AuthContext = Depends(require_auth),
):
    """Drop a category before, after or inside another one (or at root level)."""
    return service.move_node(category_id, data.reference_id, data.position, auth.user_id)


@router.get("/{category_id}/descendants/count", response_model=DescendantCount)
def count_category_descendants(
    category_id: str,
    service: CategoryService = Depends(get_category_service),
    auth: AuthContext = Depends(require_auth),
):
    """Subtree size, shown in the delete confirmation prompt."""
    return DescendantCount(category_id=category_id, count=service.count_descendants(category_id, auth.user_id))


@router.delete("/{category_id}", response_model=DeleteResult)
def delete_category(
    category_id: str,
    service: CategoryService = Depends(get_category_service),
    auth: AuthContext = Depends(require_auth),
):
    """Delete a category and everything below it, atomically."""
    return service.delete_node(category_id, auth.user_id)
