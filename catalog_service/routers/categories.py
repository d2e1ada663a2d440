# catalog_service/routers/categories.py

"""
Category endpoints, including the two-step cascade delete.

DELETE /categories first answers with a warning describing what the delete
would touch; only a second call with `confirmed: true` removes the category
and pulls its id out of every group category, in a single transaction.
"""
import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import CatalogError, ErrorCode, duplicate_name, not_found
from ..models import Category, GroupCategory, GroupCategoryMember, Product
from ..schemas import (
    CategoryDeletionResult,
    CategoryDeletionWarning,
    CategoryListResponse,
    CategoryRef,
    CategoryResponse,
    DeletionWarnings,
)
from ..validators import validate_category
from .common import (
    commit_or_raise,
    contains,
    name_taken,
    page_params,
    paginate,
    require_id,
    require_object,
    sort_clause,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/categories", tags=["categories"])

ENTITY = "Category"

SORT_FIELDS = {
    "name": Category.name,
    "createdAt": Category.created_at,
    "updatedAt": Category.updated_at,
}


def _get_or_404(db, category_id, for_update=False):
    query = db.query(Category).filter(Category.id == category_id)
    if for_update:
        query = query.with_for_update()
    category = query.first()
    if not category:
        logger.warning(f"Category with ID: {category_id} not found.")
        raise not_found(ErrorCode.CATEGORY_NOT_FOUND, ENTITY, category_id)
    return category


def _duplicate(name):
    return duplicate_name(ErrorCode.CATEGORY_NAME_DUPLICATE, ENTITY, name)


def _referencing_groups(db, category_id):
    return (
        db.query(GroupCategory)
        .join(GroupCategoryMember, GroupCategoryMember.group_category_id == GroupCategory.id)
        .filter(GroupCategoryMember.category_id == category_id)
        .order_by(GroupCategory.name.asc())
        .all()
    )


def _labelled_products(db, category_name):
    # Products carry the category as a free-text label
    return (
        db.query(Product)
        .filter(func.lower(Product.category) == category_name.lower())
        .order_by(Product.name.asc())
        .all()
    )


@router.get("", summary="List categories with search, sorting and pagination")
def list_categories(
    db: Session = Depends(get_db),
    page: Optional[str] = Query(None, description="1-based page number."),
    limit: Optional[str] = Query(None, description="Page size, at most 100."),
    search: Optional[str] = Query(None, description="Case-insensitive substring of the name."),
    sort: str = Query("createdAt", description="name, createdAt or updatedAt."),
    order: str = Query("desc", description="asc or desc."),
):
    page, limit = page_params(page, limit)
    logger.info(
        f"Listing categories with page={page}, limit={limit}, search='{search}', sort={sort}, order={order}"
    )
    query = db.query(Category)
    if search:
        query = query.filter(contains(Category.name, search))
    query = query.order_by(*sort_clause(Category, SORT_FIELDS, sort, order))

    categories, pagination = paginate(query, page, limit)
    logger.info(f"Found {len(categories)} categories (page {page}/{pagination.pages}).")
    return CategoryListResponse(
        categories=[CategoryResponse.model_validate(c) for c in categories],
        pagination=pagination,
    ).to_wire()


@router.get("/{category_id}", summary="Retrieve a category by ID")
def get_category(category_id: str, db: Session = Depends(get_db)):
    logger.info(f"Fetching category with ID: {category_id}")
    category = _get_or_404(db, category_id)
    return CategoryResponse.model_validate(category).to_wire()


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a new category")
def create_category(payload: Any = Body(None), db: Session = Depends(get_db)):
    data = require_object(payload, ENTITY)
    validate_category(data)
    name = data["name"]
    logger.info(f"Creating category: {name}")

    if name_taken(db, Category, name):
        logger.warning(f"Category name '{name}' already exists.")
        raise _duplicate(name)

    category = Category(name=name)
    db.add(category)
    commit_or_raise(
        db,
        entity=ENTITY,
        failure_code=ErrorCode.CATEGORY_CREATE_FAILED,
        on_integrity_error=lambda: _duplicate(name),
    )
    logger.info(f"Category '{category.name}' (ID: {category.id}) created successfully.")
    return CategoryResponse.model_validate(category).to_wire()


@router.patch("", summary="Update an existing category")
def update_category(payload: Any = Body(None), db: Session = Depends(get_db)):
    data = require_object(payload, ENTITY)
    category_id = require_id(data, ENTITY)
    update = {key: value for key, value in data.items() if key == "name"}
    validate_category(update, partial=True)
    if not update:
        raise CatalogError(
            ErrorCode.GENERIC_VALIDATION_ERROR,
            "No updatable category fields supplied",
            {"entity": ENTITY},
        )
    logger.info(f"Updating category with ID: {category_id} with data: {update}")

    category = _get_or_404(db, category_id)
    name = update["name"]
    if name_taken(db, Category, name, exclude_id=category.id):
        logger.warning(f"Category name '{name}' already exists.")
        raise _duplicate(name)

    category.name = name
    commit_or_raise(
        db,
        entity=ENTITY,
        failure_code=ErrorCode.CATEGORY_UPDATE_FAILED,
        on_integrity_error=lambda: _duplicate(name),
    )
    logger.info(f"Category '{category.name}' (ID: {category_id}) updated successfully.")
    return CategoryResponse.model_validate(category).to_wire()


@router.delete("", summary="Delete a category, warning first and cascading on confirmation")
def delete_category(payload: Any = Body(None), db: Session = Depends(get_db)):
    data = require_object(payload, ENTITY)
    category_id = require_id(data, ENTITY)
    confirmed = data.get("confirmed", False)
    if confirmed is None:
        confirmed = False
    if not isinstance(confirmed, bool):
        raise CatalogError(
            ErrorCode.GENERIC_VALIDATION_ERROR,
            "'confirmed' must be a boolean",
            {"entity": ENTITY, "field": "confirmed", "value": confirmed},
        )
    logger.info(f"Deleting category with ID: {category_id} (confirmed={confirmed})")

    if not confirmed:
        return _deletion_warning(db, category_id)
    return _delete_with_cascade(db, category_id)


def _deletion_warning(db, category_id):
    """Describe what a confirmed delete would affect. Writes nothing."""
    category = _get_or_404(db, category_id)
    groups = _referencing_groups(db, category.id)
    products = _labelled_products(db, category.name)
    logger.info(
        f"Deletion of category '{category.name}' not confirmed: "
        f"{len(groups)} group categories and {len(products)} products affected."
    )
    return CategoryDeletionWarning(
        category=CategoryRef(id=category.id, name=category.name),
        warnings=DeletionWarnings(
            affected_group_categories=len(groups),
            group_category_names=[g.name for g in groups],
            affected_products=len(products),
            product_names=[p.name for p in products],
        ),
    ).to_wire()


def _delete_with_cascade(db, category_id):
    """Pull the category out of every group and delete it, as one transaction."""
    category = _get_or_404(db, category_id, for_update=True)
    deleted = CategoryResponse.model_validate(category)

    try:
        groups = _referencing_groups(db, category.id)
        modified = 0
        for group in groups:
            if group.remove_category(category.id):
                group.touch()
                modified += 1
        db.flush()
        logger.info(f"Removed category {category.id} from {modified} group categories.")

        db.delete(category)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Cascade delete of category {category_id} failed: {e}", exc_info=True)
        raise CatalogError(
            ErrorCode.CATEGORY_CASCADE_REMOVAL_FAILED,
            details={"entity": ENTITY, "id": category_id},
        ) from e

    logger.info(f"Category '{deleted.name}' (ID: {category_id}) deleted successfully.")
    return CategoryDeletionResult(
        message="Category deleted successfully",
        category=deleted,
        removed_from_group_categories=modified,
    ).to_wire()
