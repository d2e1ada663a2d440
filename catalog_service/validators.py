# catalog_service/validators.py

"""
Business-rule validation for incoming Product, Category and GroupCategory
payloads.

Each validator takes the raw JSON object, raises `CatalogError` on the first
rule it finds broken and, on success, writes the trimmed strings back into
the payload. Rules are checked in a fixed order: presence, type, length or
range, character set, then list element types.

With `partial=True` only the fields present in the payload are checked,
which is how PATCH requests are validated.
"""
import re
from decimal import Decimal
from numbers import Real

from .errors import CatalogError, ErrorCode

NAME_PATTERN = re.compile(r"[A-Za-z0-9\s\-_]+")

PRODUCT_NAME_MAX = 200
PRODUCT_CATEGORY_MAX = 100
PRODUCT_IMAGE_MAX = 500
PRICE_MIN = 0.01
PRICE_MAX = 999999.99

CATEGORY_NAME_MIN = 2
CATEGORY_NAME_MAX = 50

GROUP_CATEGORY_NAME_MIN = 2
GROUP_CATEGORY_NAME_MAX = 100


def _fail(code, message, entity, field, value=None, include_value=False):
    details = {"entity": entity, "field": field}
    if include_value:
        details["value"] = value
    raise CatalogError(code, message, details)


def _check_text(
    data,
    field,
    entity,
    *,
    label,
    min_length,
    max_length,
    required_code,
    invalid_code,
    too_short_code=None,
    too_long_code=None,
    charset=False,
):
    """Presence, type, length and charset checks for one string field."""
    value = data.get(field)
    if value is None:
        _fail(required_code, f"{label} is required", entity, field)
    if not isinstance(value, str):
        _fail(invalid_code, f"{label} must be a string", entity, field, value, True)

    trimmed = value.strip()
    if not trimmed:
        _fail(required_code, f"{label} cannot be empty", entity, field)
    if len(trimmed) < min_length:
        _fail(
            too_short_code or invalid_code,
            f"{label} must be at least {min_length} characters",
            entity, field, trimmed, True,
        )
    if len(trimmed) > max_length:
        _fail(
            too_long_code or invalid_code,
            f"{label} must be at most {max_length} characters",
            entity, field, trimmed, True,
        )
    if charset and not NAME_PATTERN.fullmatch(trimmed):
        _fail(
            ErrorCode.NAME_CONTAINS_INVALID_CHARS,
            f"{label} can only contain letters, numbers, spaces, hyphens and underscores",
            entity, field, trimmed, True,
        )
    return trimmed


def _should_check(data, field, partial):
    return not partial or field in data


def validate_product(data, partial=False):
    """Validate a product payload in place."""
    entity = "Product"
    checked = {}

    if _should_check(data, "name", partial):
        checked["name"] = _check_text(
            data, "name", entity,
            label="Product name",
            min_length=1,
            max_length=PRODUCT_NAME_MAX,
            required_code=ErrorCode.PRODUCT_NAME_REQUIRED,
            invalid_code=ErrorCode.PRODUCT_INVALID_DATA,
        )

    if _should_check(data, "category", partial):
        checked["category"] = _check_text(
            data, "category", entity,
            label="Product category",
            min_length=1,
            max_length=PRODUCT_CATEGORY_MAX,
            required_code=ErrorCode.PRODUCT_CATEGORY_REQUIRED,
            invalid_code=ErrorCode.PRODUCT_INVALID_CATEGORY,
        )

    if _should_check(data, "price", partial):
        price = data.get("price")
        if price is None:
            _fail(ErrorCode.PRODUCT_INVALID_PRICE, "Product price is required", entity, "price")
        # bool is a subclass of int but never a price
        if isinstance(price, bool) or not isinstance(price, Real):
            _fail(ErrorCode.PRODUCT_INVALID_PRICE, "Product price must be a number",
                  entity, "price", price, True)
        if price != price or price < PRICE_MIN:
            _fail(ErrorCode.PRODUCT_INVALID_PRICE, "Product price must be at least 0.01",
                  entity, "price", price, True)
        if price > PRICE_MAX:
            _fail(ErrorCode.PRODUCT_INVALID_PRICE, "Product price cannot exceed 999,999.99",
                  entity, "price", price, True)
        # Stored as NUMERIC(10, 2); finer amounts would be rounded silently
        if Decimal(str(float(price))).as_tuple().exponent < -2:
            _fail(ErrorCode.PRODUCT_INVALID_PRICE, "Product price can have at most 2 decimal places",
                  entity, "price", price, True)

    if _should_check(data, "image", partial):
        checked["image"] = _check_text(
            data, "image", entity,
            label="Product image",
            min_length=1,
            max_length=PRODUCT_IMAGE_MAX,
            required_code=ErrorCode.PRODUCT_INVALID_IMAGE,
            invalid_code=ErrorCode.PRODUCT_INVALID_IMAGE,
        )

    data.update(checked)


def validate_category(data, partial=False):
    """Validate a category payload in place."""
    if _should_check(data, "name", partial):
        data["name"] = _check_text(
            data, "name", "Category",
            label="Category name",
            min_length=CATEGORY_NAME_MIN,
            max_length=CATEGORY_NAME_MAX,
            required_code=ErrorCode.CATEGORY_NAME_REQUIRED,
            invalid_code=ErrorCode.CATEGORY_INVALID_NAME,
            too_short_code=ErrorCode.CATEGORY_NAME_TOO_SHORT,
            too_long_code=ErrorCode.CATEGORY_NAME_TOO_LONG,
            charset=True,
        )


def validate_group_category(data, partial=False):
    """Validate a group category payload in place.

    `categories` is optional even on create; when given it must be a list of
    non-empty id strings. An empty list is allowed.
    """
    entity = "GroupCategory"
    checked = {}

    if _should_check(data, "name", partial):
        checked["name"] = _check_text(
            data, "name", entity,
            label="Group category name",
            min_length=GROUP_CATEGORY_NAME_MIN,
            max_length=GROUP_CATEGORY_NAME_MAX,
            required_code=ErrorCode.GROUP_CATEGORY_NAME_REQUIRED,
            invalid_code=ErrorCode.GROUP_CATEGORY_INVALID_NAME,
            too_short_code=ErrorCode.GROUP_CATEGORY_NAME_TOO_SHORT,
            too_long_code=ErrorCode.GROUP_CATEGORY_NAME_TOO_LONG,
            charset=True,
        )

    if "categories" in data:
        categories = data["categories"]
        if not isinstance(categories, list):
            _fail(ErrorCode.GROUP_CATEGORY_VALIDATION_ERROR,
                  "Group category categories must be a list of category IDs",
                  entity, "categories", categories, True)
        cleaned = []
        for index, category_id in enumerate(categories):
            if not isinstance(category_id, str) or not category_id.strip():
                _fail(ErrorCode.GROUP_CATEGORY_VALIDATION_ERROR,
                      f"Category ID at position {index} must be a non-empty string",
                      entity, "categories", category_id, True)
            cleaned.append(category_id.strip())
        checked["categories"] = cleaned

    data.update(checked)
