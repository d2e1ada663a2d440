# catalog_service/routers/common.py

"""
Helpers shared by the entity routers: request body checks, list query
parsing, pagination and storage error mapping.
"""
import logging
import math

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from .. import config
from ..errors import CatalogError, ErrorCode
from ..schemas import Pagination

logger = logging.getLogger(__name__)


def require_object(payload, entity):
    """The request body must be a JSON object."""
    if not isinstance(payload, dict):
        raise CatalogError(
            ErrorCode.API_INVALID_REQUEST,
            f"{entity} request body must be a JSON object",
            {"entity": entity},
        )
    return payload


def require_id(payload, entity):
    record_id = payload.get("_id")
    if not isinstance(record_id, str) or not record_id.strip():
        raise CatalogError(
            ErrorCode.GENERIC_VALIDATION_ERROR,
            f"{entity} ID is required",
            {"entity": entity, "field": "_id"},
        )
    return record_id.strip()


def parse_int(value, default):
    """Lenient integer parsing for query strings; bad input gives the default."""
    if value is None:
        return default
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def parse_float(value):
    if value is None or str(value).strip() == "":
        return None
    try:
        result = float(value)
    except ValueError:
        return None
    return result if math.isfinite(result) else None


def page_params(page, limit):
    """Clamp page to >= 1 and limit to [1, MAX_PAGE_SIZE]."""
    page = max(parse_int(page, 1), 1)
    limit = parse_int(limit, config.DEFAULT_PAGE_SIZE)
    limit = min(max(limit, 1), config.MAX_PAGE_SIZE)
    return page, limit


def like_pattern(term):
    """Case-insensitive substring pattern with LIKE wildcards escaped."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped.lower()}%"


def contains(column, term):
    return func.lower(column).like(like_pattern(term), escape="\\")


def sort_clause(model, sort_fields, sort, order, default="createdAt"):
    """Resolve a wire sort field and direction to ORDER BY clauses."""
    column = sort_fields.get(sort) or sort_fields[default]
    direction = column.asc() if (order or "").lower() == "asc" else column.desc()
    # Stable ordering across pages
    return [direction, model.id.asc()]


def paginate(query, page, limit):
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    pages = math.ceil(total / limit) if total else 0
    pagination = Pagination(
        page=page,
        limit=limit,
        total=total,
        pages=pages,
        has_next=page < pages,
        has_prev=page > 1,
    )
    return items, pagination


def name_taken(db, model, name, exclude_id=None):
    """Pre-write check for case-insensitive name uniqueness."""
    query = db.query(model.id).filter(func.lower(model.name) == name.lower())
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    return db.query(query.exists()).scalar()


def commit_or_raise(db, *, entity, failure_code, on_integrity_error):
    """
    Commit the session. Integrity errors are handed to `on_integrity_error`,
    which must return the CatalogError to raise; other storage errors become
    `failure_code` (or DATABASE_CONNECTION_FAILED when the database is down).
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Integrity error while saving {entity}: {e.orig}")
        raise on_integrity_error() from e
    except OperationalError as e:
        db.rollback()
        logger.error(f"Database unavailable while saving {entity}: {e}", exc_info=True)
        raise CatalogError(ErrorCode.DATABASE_CONNECTION_FAILED) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error saving {entity}: {e}", exc_info=True)
        raise CatalogError(failure_code, details={"entity": entity}) from e
