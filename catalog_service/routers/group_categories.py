# catalog_service/routers/group_categories.py

"""
Group category endpoints. A group category bundles an ordered list of
category IDs; assigning categories goes through the regular PATCH.
"""
import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import CatalogError, ErrorCode, duplicate_name, not_found
from ..models import Category, GroupCategory
from ..schemas import DeleteAcknowledgement, GroupCategoryListResponse, GroupCategoryResponse
from ..validators import validate_group_category
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

router = APIRouter(prefix="/group-categories", tags=["group-categories"])

ENTITY = "GroupCategory"
UPDATABLE_FIELDS = ("name", "categories")

SORT_FIELDS = {
    "name": GroupCategory.name,
    "createdAt": GroupCategory.created_at,
    "updatedAt": GroupCategory.updated_at,
}


def _get_or_404(db, group_id):
    group = db.query(GroupCategory).filter(GroupCategory.id == group_id).first()
    if not group:
        logger.warning(f"Group category with ID: {group_id} not found.")
        raise not_found(ErrorCode.GROUP_CATEGORY_NOT_FOUND, ENTITY, group_id)
    return group


def _unique_in_order(category_ids):
    seen = set()
    result = []
    for category_id in category_ids:
        if category_id not in seen:
            seen.add(category_id)
            result.append(category_id)
    return result


def _missing_categories(db, category_ids):
    if not category_ids:
        return []
    found = {
        row.id for row in db.query(Category.id).filter(Category.id.in_(category_ids)).all()
    }
    return [category_id for category_id in category_ids if category_id not in found]


def _check_categories_exist(db, category_ids):
    missing = _missing_categories(db, category_ids)
    if missing:
        logger.warning(f"Unknown category IDs in group category payload: {missing}")
        raise CatalogError(
            ErrorCode.RELATIONSHIP_VIOLATION,
            "Group category references categories that do not exist",
            {"entity": ENTITY, "field": "categories", "value": missing},
        )


def _integrity_error(db, name, category_ids, exclude_id=None):
    """Classify a failed commit: duplicate name, or a category deleted meanwhile."""

    def classify():
        if name is not None and name_taken(db, GroupCategory, name, exclude_id=exclude_id):
            return duplicate_name(ErrorCode.GROUP_CATEGORY_NAME_DUPLICATE, ENTITY, name)
        return CatalogError(
            ErrorCode.RELATIONSHIP_VIOLATION,
            "Group category references categories that no longer exist",
            {"entity": ENTITY, "field": "categories", "value": _missing_categories(db, category_ids)},
        )

    return classify


@router.get("", summary="List group categories with search, sorting and pagination")
def list_group_categories(
    db: Session = Depends(get_db),
    page: Optional[str] = Query(None, description="1-based page number."),
    limit: Optional[str] = Query(None, description="Page size, at most 100."),
    search: Optional[str] = Query(None, description="Case-insensitive substring of the name."),
    sort: str = Query("createdAt", description="name, createdAt or updatedAt."),
    order: str = Query("desc", description="asc or desc."),
):
    page, limit = page_params(page, limit)
    logger.info(
        f"Listing group categories with page={page}, limit={limit}, search='{search}', sort={sort}, order={order}"
    )
    query = db.query(GroupCategory)
    if search:
        query = query.filter(contains(GroupCategory.name, search))
    query = query.order_by(*sort_clause(GroupCategory, SORT_FIELDS, sort, order))

    groups, pagination = paginate(query, page, limit)
    logger.info(f"Found {len(groups)} group categories (page {page}/{pagination.pages}).")
    return GroupCategoryListResponse(
        group_categories=[GroupCategoryResponse.model_validate(g) for g in groups],
        pagination=pagination,
    ).to_wire()


@router.get("/{group_id}", summary="Retrieve a group category by ID")
def get_group_category(group_id: str, db: Session = Depends(get_db)):
    logger.info(f"Fetching group category with ID: {group_id}")
    return GroupCategoryResponse.model_validate(_get_or_404(db, group_id)).to_wire()


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a new group category")
def create_group_category(payload: Any = Body(None), db: Session = Depends(get_db)):
    data = require_object(payload, ENTITY)
    validate_group_category(data)
    name = data["name"]
    category_ids = _unique_in_order(data.get("categories", []))
    logger.info(f"Creating group category: {name} with {len(category_ids)} categories")

    if name_taken(db, GroupCategory, name):
        logger.warning(f"Group category name '{name}' already exists.")
        raise duplicate_name(ErrorCode.GROUP_CATEGORY_NAME_DUPLICATE, ENTITY, name)
    _check_categories_exist(db, category_ids)

    group = GroupCategory(name=name)
    group.assign_categories(category_ids)
    db.add(group)
    commit_or_raise(
        db,
        entity=ENTITY,
        failure_code=ErrorCode.GROUP_CATEGORY_CREATE_FAILED,
        on_integrity_error=_integrity_error(db, name, category_ids),
    )
    logger.info(f"Group category '{group.name}' (ID: {group.id}) created successfully.")
    return GroupCategoryResponse.model_validate(group).to_wire()


@router.patch("", summary="Update a group category or reassign its categories")
def update_group_category(payload: Any = Body(None), db: Session = Depends(get_db)):
    data = require_object(payload, ENTITY)
    group_id = require_id(data, ENTITY)
    update = {key: value for key, value in data.items() if key in UPDATABLE_FIELDS}
    validate_group_category(update, partial=True)
    if not update:
        raise CatalogError(
            ErrorCode.GENERIC_VALIDATION_ERROR,
            "No updatable group category fields supplied",
            {"entity": ENTITY},
        )
    logger.info(f"Updating group category with ID: {group_id} with data: {update}")

    group = _get_or_404(db, group_id)
    name = update.get("name")
    if name is not None and name_taken(db, GroupCategory, name, exclude_id=group.id):
        logger.warning(f"Group category name '{name}' already exists.")
        raise duplicate_name(ErrorCode.GROUP_CATEGORY_NAME_DUPLICATE, ENTITY, name)

    category_ids = None
    if "categories" in update:
        category_ids = _unique_in_order(update["categories"])
        _check_categories_exist(db, category_ids)

    if name is not None:
        group.name = name
    if category_ids is not None:
        group.assign_categories(category_ids)
    # Membership changes alone do not touch the group row itself
    group.touch()

    failure_code = (
        ErrorCode.GROUP_CATEGORY_CATEGORY_ASSIGNMENT_FAILED
        if category_ids is not None and name is None
        else ErrorCode.GROUP_CATEGORY_UPDATE_FAILED
    )
    commit_or_raise(
        db,
        entity=ENTITY,
        failure_code=failure_code,
        on_integrity_error=_integrity_error(db, name, category_ids or [], exclude_id=group_id),
    )
    logger.info(f"Group category '{group.name}' (ID: {group_id}) updated successfully.")
    return GroupCategoryResponse.model_validate(group).to_wire()


@router.delete("", summary="Delete a group category by ID")
def delete_group_category(payload: Any = Body(None), db: Session = Depends(get_db)):
    data = require_object(payload, ENTITY)
    group_id = require_id(data, ENTITY)
    logger.info(f"Attempting to delete group category with ID: {group_id}")

    group = _get_or_404(db, group_id)
    db.delete(group)
    commit_or_raise(
        db,
        entity=ENTITY,
        failure_code=ErrorCode.GROUP_CATEGORY_DELETE_FAILED,
        on_integrity_error=lambda: CatalogError(
            ErrorCode.GROUP_CATEGORY_DELETE_FAILED, details={"entity": ENTITY, "id": group_id}
        ),
    )
    logger.info(f"Group category (ID: {group_id}) deleted successfully.")
    return DeleteAcknowledgement(
        message="Group category deleted successfully", id=group_id
    ).to_wire()
