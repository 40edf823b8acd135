"""
Category routes.

Global categories are listed alongside the user's own but can never be
changed through these routes.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, sessionmaker

from ledger_api.dependencies import get_acting_user_id, get_session_factory
from ledger_api.responses import envelope
from ledger_api.schemas import (
    CategoryResponse,
    CreateCategoryRequest,
    UpdateCategoryRequest,
)
from ledger_kernel.db.engine import session_scope
from ledger_kernel.models.category import CategoryType
from ledger_kernel.services.category_service import CategoryService

router = APIRouter(prefix="/api/categories", tags=["Categories"])


@router.get("")
def list_categories(
    category_type: CategoryType | None = Query(default=None, alias="type"),
    user_id: UUID = Depends(get_acting_user_id),
    factory: sessionmaker[Session] = Depends(get_session_factory),
):
    with session_scope(factory) as session:
        categories = CategoryService(session).list_categories(user_id, category_type)
        data = [CategoryResponse.of(c) for c in categories]
    message = (
        f"{category_type.value} categories retrieved successfully"
        if category_type is not None
        else "Categories retrieved successfully"
    )
    return envelope(200, message, data)


@router.post("")
def create_category(
    body: CreateCategoryRequest,
    user_id: UUID = Depends(get_acting_user_id),
    factory: sessionmaker[Session] = Depends(get_session_factory),
):
    with session_scope(factory) as session:
        category = CategoryService(session).create_category(
            user_id, name=body.name, category_type=body.category_type
        )
        data = CategoryResponse.of(category)
    return envelope(201, "Category created successfully", data)


@router.get("/{category_id}")
def get_category(
    category_id: UUID,
    user_id: UUID = Depends(get_acting_user_id),
    factory: sessionmaker[Session] = Depends(get_session_factory),
):
    with session_scope(factory) as session:
        data = CategoryResponse.of(
            CategoryService(session).get_category(category_id, user_id)
        )
    return envelope(200, "Category retrieved successfully", data)


@router.put("/{category_id}")
def update_category(
    category_id: UUID,
    body: UpdateCategoryRequest,
    user_id: UUID = Depends(get_acting_user_id),
    factory: sessionmaker[Session] = Depends(get_session_factory),
):
    with session_scope(factory) as session:
        category = CategoryService(session).update_category(
            category_id, user_id, name=body.name
        )
        data = CategoryResponse.of(category)
    return envelope(200, "Category updated successfully", data)


@router.delete("/{category_id}")
def delete_category(
    category_id: UUID,
    user_id: UUID = Depends(get_acting_user_id),
    factory: sessionmaker[Session] = Depends(get_session_factory),
):
    with session_scope(factory) as session:
        CategoryService(session).delete_category(category_id, user_id)
    return envelope(200, "Category deleted successfully")
