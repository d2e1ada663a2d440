# catalog_service/routers/products.py

"""
Product endpoints for the storefront listing and the admin back office.
"""
import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import CatalogError, ErrorCode, duplicate_name, not_found
from ..models import Product
from ..schemas import DeleteAcknowledgement, ProductListResponse, ProductResponse
from ..validators import validate_product
from .common import (
    commit_or_raise,
    contains,
    name_taken,
    page_params,
    paginate,
    parse_float,
    require_id,
    require_object,
    sort_clause,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["products"])

ENTITY = "Product"
UPDATABLE_FIELDS = ("name", "category", "price", "image")

SORT_FIELDS = {
    "name": Product.name,
    "category": Product.category,
    "price": Product.price,
    "createdAt": Product.created_at,
    "updatedAt": Product.updated_at,
}


def _get_or_404(db, product_id):
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        logger.warning(f"Product with ID: {product_id} not found.")
        raise not_found(ErrorCode.PRODUCT_NOT_FOUND, ENTITY, product_id)
    return product


def _duplicate(name):
    return duplicate_name(ErrorCode.PRODUCT_NAME_DUPLICATE, ENTITY, name)


@router.get("", summary="List products with filters, sorting and pagination")
def list_products(
    db: Session = Depends(get_db),
    search: Optional[str] = Query(None, description="Substring of the name or category label."),
    category: Optional[str] = Query(None, description="Category label, ignoring case."),
    min_price: Optional[str] = Query(None, alias="minPrice"),
    max_price: Optional[str] = Query(None, alias="maxPrice"),
    page: Optional[str] = Query(None, description="1-based page number."),
    limit: Optional[str] = Query(None, description="Page size, at most 100."),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
):
    """
    Retrieves a page of products.

    - `search` matches the name or the category label, case-insensitively.
    - `category` matches the whole label, ignoring case (the same rule the
      category deletion warning uses); `minPrice`/`maxPrice` are inclusive.
    """
    page, limit = page_params(page, limit)
    logger.info(
        f"Listing products with page={page}, limit={limit}, search='{search}', "
        f"category='{category}', sortBy={sort_by}, sortOrder={sort_order}"
    )
    query = db.query(Product)
    if search:
        query = query.filter(or_(contains(Product.name, search), contains(Product.category, search)))
    if category:
        query = query.filter(func.lower(Product.category) == category.strip().lower())
    low, high = parse_float(min_price), parse_float(max_price)
    if low is not None:
        query = query.filter(Product.price >= low)
    if high is not None:
        query = query.filter(Product.price <= high)
    query = query.order_by(*sort_clause(Product, SORT_FIELDS, sort_by, sort_order))

    products, pagination = paginate(query, page, limit)
    logger.info(f"Retrieved {len(products)} products (page {page}/{pagination.pages}).")
    return ProductListResponse(
        data=[ProductResponse.model_validate(p) for p in products],
        pagination=pagination,
    ).to_wire()


@router.get("/{product_id}", summary="Retrieve a product by ID")
def get_product(product_id: str, db: Session = Depends(get_db)):
    logger.info(f"Fetching product with ID: {product_id}")
    product = _get_or_404(db, product_id)
    logger.info(f"Product '{product.name}' (ID: {product_id}) retrieved.")
    return ProductResponse.model_validate(product).to_wire()


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a new product")
def create_product(payload: Any = Body(None), db: Session = Depends(get_db)):
    """
    Creates a new product.

    - Requires `name`, `category`, `price` and `image`.
    - Product names are unique regardless of case.
    """
    data = require_object(payload, ENTITY)
    validate_product(data)
    fields = {key: data[key] for key in UPDATABLE_FIELDS}
    logger.info(f"Creating product: {fields['name']}")

    if name_taken(db, Product, fields["name"]):
        logger.warning(f"Product name '{fields['name']}' already exists.")
        raise _duplicate(fields["name"])

    product = Product(**fields)
    db.add(product)
    commit_or_raise(
        db,
        entity=ENTITY,
        failure_code=ErrorCode.PRODUCT_CREATE_FAILED,
        on_integrity_error=lambda: _duplicate(fields["name"]),
    )
    logger.info(f"Product '{product.name}' (ID: {product.id}) created successfully.")
    return ProductResponse.model_validate(product).to_wire()


@router.patch("", summary="Update an existing product")
def update_product(payload: Any = Body(None), db: Session = Depends(get_db)):
    """
    Updates only the fields present in the body; the rest keep their values.
    """
    data = require_object(payload, ENTITY)
    product_id = require_id(data, ENTITY)
    update = {key: value for key, value in data.items() if key in UPDATABLE_FIELDS}
    validate_product(update, partial=True)
    if not update:
        raise CatalogError(
            ErrorCode.GENERIC_VALIDATION_ERROR,
            "No updatable product fields supplied",
            {"entity": ENTITY},
        )
    logger.info(f"Updating product with ID: {product_id} with data: {update}")

    product = _get_or_404(db, product_id)
    name = update.get("name")
    if name is not None and name_taken(db, Product, name, exclude_id=product.id):
        logger.warning(f"Product name '{name}' already exists.")
        raise _duplicate(name)

    for field, value in update.items():
        setattr(product, field, value)
    commit_or_raise(
        db,
        entity=ENTITY,
        failure_code=ErrorCode.PRODUCT_UPDATE_FAILED,
        on_integrity_error=lambda: _duplicate(name or product.name),
    )
    logger.info(f"Product '{product.name}' (ID: {product_id}) updated successfully.")
    return ProductResponse.model_validate(product).to_wire()


@router.delete("", summary="Delete a product by ID")
def delete_product(payload: Any = Body(None), db: Session = Depends(get_db)):
    data = require_object(payload, ENTITY)
    product_id = require_id(data, ENTITY)
    logger.info(f"Attempting to delete product with ID: {product_id}")

    product = _get_or_404(db, product_id)
    db.delete(product)
    commit_or_raise(
        db,
        entity=ENTITY,
        failure_code=ErrorCode.PRODUCT_DELETE_FAILED,
        on_integrity_error=lambda: CatalogError(
            ErrorCode.PRODUCT_DELETE_FAILED, details={"entity": ENTITY, "id": product_id}
        ),
    )
    logger.info(f"Product (ID: {product_id}) deleted successfully.")
    return DeleteAcknowledgement(message="Product deleted successfully", id=product_id).to_wire()
