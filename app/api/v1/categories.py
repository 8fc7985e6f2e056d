"""Category endpoints, including per-user favorites."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_identity, get_optional_identity, require_roles
from app.core.database import get_db
from app.models import Role
from app.schemas.auth import Identity, MessageResponse
from app.schemas.events import (
    CategoryCreate,
    CategoryOut,
    CategoryRef,
    FavoriteCategoriesResponse,
    FavoriteCategoriesUpdate,
    FavoriteCategoryOut,
)
from app.services import events as event_service

router = APIRouter()


@router.get("", response_model=list[CategoryOut])
def list_categories(
    db: Annotated[Session, Depends(get_db)],
    identity: Annotated[Identity | None, Depends(get_optional_identity)],
) -> list[CategoryOut]:
    """All categories. `is_favorite` reflects the caller's favorites when signed in."""
    return event_service.list_categories(db, identity)


@router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(
    body: CategoryCreate,
    _admin: Annotated[Identity, Depends(require_roles(Role.ADMIN))],
    db: Annotated[Session, Depends(get_db)],
) -> CategoryOut:
    category = event_service.create_category(db, body.name)
    return CategoryOut(id=category.id, name=category.name)


@router.get("/favorites/my", response_model=list[FavoriteCategoryOut])
def my_favorites(
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[Session, Depends(get_db)],
) -> list[FavoriteCategoryOut]:
    return event_service.list_favorite_categories(db, identity.id)


@router.put("/favorites", response_model=FavoriteCategoriesResponse)
def replace_favorites(
    body: FavoriteCategoriesUpdate,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[Session, Depends(get_db)],
) -> FavoriteCategoriesResponse:
    """Replace all of the caller's favorites. 400 if any category id is unknown."""
    categories = event_service.replace_favorite_categories(db, identity.id, body.category_ids)
    return FavoriteCategoriesResponse(
        message="Favorite categories updated",
        favorites=[CategoryRef.model_validate(c) for c in categories],
    )


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(
    category_id: str,
    db: Annotated[Session, Depends(get_db)],
    identity: Annotated[Identity | None, Depends(get_optional_identity)],
) -> CategoryOut:
    return event_service.get_category(db, category_id, identity)


@router.post("/{category_id}/favorite", response_model=MessageResponse)
def add_favorite(
    category_id: str,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    event_service.add_favorite_category(db, identity.id, category_id)
    return MessageResponse(message="Added to favorites")


@router.delete("/{category_id}/favorite", response_model=MessageResponse)
def remove_favorite(
    category_id: str,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    event_service.remove_favorite_category(db, identity.id, category_id)
    return MessageResponse(message="Removed from favorites")
