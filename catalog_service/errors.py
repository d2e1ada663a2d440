# catalog_service/errors.py

"""
Error taxonomy for the Catalog Service.

Every failure the service or its client reports is a `CatalogError` carrying
an `ErrorCode`. Each code maps to exactly one default message and one HTTP
status; callers may override the message but never the status.
"""
import enum
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


class ErrorCode(str, enum.Enum):
    # Generic
    GENERIC_VALIDATION_ERROR = "GENERIC_VALIDATION_ERROR"
    GENERIC_NOT_FOUND = "GENERIC_NOT_FOUND"
    GENERIC_UNAUTHORIZED = "GENERIC_UNAUTHORIZED"
    GENERIC_FORBIDDEN = "GENERIC_FORBIDDEN"
    GENERIC_INTERNAL_ERROR = "GENERIC_INTERNAL_ERROR"
    GENERIC_BAD_REQUEST = "GENERIC_BAD_REQUEST"
    GENERIC_CONFLICT = "GENERIC_CONFLICT"
    INVALID_ID_FORMAT = "INVALID_ID_FORMAT"
    ID_NOT_FOUND = "ID_NOT_FOUND"

    # Category
    CATEGORY_NOT_FOUND = "CATEGORY_NOT_FOUND"
    CATEGORY_ALREADY_EXISTS = "CATEGORY_ALREADY_EXISTS"
    CATEGORY_INVALID_NAME = "CATEGORY_INVALID_NAME"
    CATEGORY_CREATE_FAILED = "CATEGORY_CREATE_FAILED"
    CATEGORY_UPDATE_FAILED = "CATEGORY_UPDATE_FAILED"
    CATEGORY_DELETE_FAILED = "CATEGORY_DELETE_FAILED"
    CATEGORY_FETCH_FAILED = "CATEGORY_FETCH_FAILED"
    CATEGORY_VALIDATION_ERROR = "CATEGORY_VALIDATION_ERROR"
    CATEGORY_NAME_REQUIRED = "CATEGORY_NAME_REQUIRED"
    CATEGORY_NAME_TOO_SHORT = "CATEGORY_NAME_TOO_SHORT"
    CATEGORY_NAME_TOO_LONG = "CATEGORY_NAME_TOO_LONG"
    CATEGORY_NAME_DUPLICATE = "CATEGORY_NAME_DUPLICATE"
    CATEGORY_CASCADE_REMOVAL_FAILED = "CATEGORY_CASCADE_REMOVAL_FAILED"
    CATEGORY_DELETION_NOT_CONFIRMED = "CATEGORY_DELETION_NOT_CONFIRMED"

    # Group category
    GROUP_CATEGORY_NOT_FOUND = "GROUP_CATEGORY_NOT_FOUND"
    GROUP_CATEGORY_ALREADY_EXISTS = "GROUP_CATEGORY_ALREADY_EXISTS"
    GROUP_CATEGORY_INVALID_NAME = "GROUP_CATEGORY_INVALID_NAME"
    GROUP_CATEGORY_CREATE_FAILED = "GROUP_CATEGORY_CREATE_FAILED"
    GROUP_CATEGORY_UPDATE_FAILED = "GROUP_CATEGORY_UPDATE_FAILED"
    GROUP_CATEGORY_DELETE_FAILED = "GROUP_CATEGORY_DELETE_FAILED"
    GROUP_CATEGORY_FETCH_FAILED = "GROUP_CATEGORY_FETCH_FAILED"
    GROUP_CATEGORY_VALIDATION_ERROR = "GROUP_CATEGORY_VALIDATION_ERROR"
    GROUP_CATEGORY_CATEGORY_ASSIGNMENT_FAILED = "GROUP_CATEGORY_CATEGORY_ASSIGNMENT_FAILED"
    GROUP_CATEGORY_NAME_REQUIRED = "GROUP_CATEGORY_NAME_REQUIRED"
    GROUP_CATEGORY_NAME_TOO_SHORT = "GROUP_CATEGORY_NAME_TOO_SHORT"
    GROUP_CATEGORY_NAME_TOO_LONG = "GROUP_CATEGORY_NAME_TOO_LONG"
    GROUP_CATEGORY_NAME_DUPLICATE = "GROUP_CATEGORY_NAME_DUPLICATE"

    # Product
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    PRODUCT_ALREADY_EXISTS = "PRODUCT_ALREADY_EXISTS"
    PRODUCT_INVALID_DATA = "PRODUCT_INVALID_DATA"
    PRODUCT_CREATE_FAILED = "PRODUCT_CREATE_FAILED"
    PRODUCT_UPDATE_FAILED = "PRODUCT_UPDATE_FAILED"
    PRODUCT_DELETE_FAILED = "PRODUCT_DELETE_FAILED"
    PRODUCT_FETCH_FAILED = "PRODUCT_FETCH_FAILED"
    PRODUCT_VALIDATION_ERROR = "PRODUCT_VALIDATION_ERROR"
    PRODUCT_NAME_REQUIRED = "PRODUCT_NAME_REQUIRED"
    PRODUCT_NAME_DUPLICATE = "PRODUCT_NAME_DUPLICATE"
    PRODUCT_INVALID_PRICE = "PRODUCT_INVALID_PRICE"
    PRODUCT_INVALID_CATEGORY = "PRODUCT_INVALID_CATEGORY"
    PRODUCT_CATEGORY_REQUIRED = "PRODUCT_CATEGORY_REQUIRED"
    PRODUCT_INVALID_IMAGE = "PRODUCT_INVALID_IMAGE"

    # Relationship
    RELATIONSHIP_VIOLATION = "RELATIONSHIP_VIOLATION"

    # Validation (shared format rules)
    INVALID_NAME_FORMAT = "INVALID_NAME_FORMAT"
    NAME_CONTAINS_INVALID_CHARS = "NAME_CONTAINS_INVALID_CHARS"

    # Warning system
    WARNING_DISPLAY_FAILED = "WARNING_DISPLAY_FAILED"
    WARNING_MESSAGE_INVALID = "WARNING_MESSAGE_INVALID"

    # Database
    DATABASE_CONNECTION_FAILED = "DATABASE_CONNECTION_FAILED"
    DATABASE_QUERY_FAILED = "DATABASE_QUERY_FAILED"
    DATABASE_TRANSACTION_FAILED = "DATABASE_TRANSACTION_FAILED"
    DATABASE_DUPLICATE_KEY = "DATABASE_DUPLICATE_KEY"
    DATABASE_CONSTRAINT_VIOLATION = "DATABASE_CONSTRAINT_VIOLATION"

    # API / transport
    API_INVALID_REQUEST = "API_INVALID_REQUEST"
    API_RATE_LIMIT_EXCEEDED = "API_RATE_LIMIT_EXCEEDED"
    API_TIMEOUT = "API_TIMEOUT"
    API_SERVICE_UNAVAILABLE = "API_SERVICE_UNAVAILABLE"


# Namespace prefixes, longest first so GROUP_CATEGORY_* is not read as CATEGORY_*
NAMESPACES = (
    "GROUP_CATEGORY",
    "CATEGORY",
    "PRODUCT",
    "RELATIONSHIP",
    "WARNING",
    "DATABASE",
    "API",
    "GENERIC",
    "VALIDATION",
)

_VALIDATION_NAMESPACE_CODES = {
    ErrorCode.INVALID_NAME_FORMAT,
    ErrorCode.NAME_CONTAINS_INVALID_CHARS,
}
_GENERIC_NAMESPACE_CODES = {ErrorCode.INVALID_ID_FORMAT, ErrorCode.ID_NOT_FOUND}


# code -> (default message, HTTP status)
_DEFINITIONS: Dict[ErrorCode, tuple] = {
    ErrorCode.GENERIC_VALIDATION_ERROR: ("Validation error occurred", 400),
    ErrorCode.GENERIC_NOT_FOUND: ("Resource not found", 404),
    ErrorCode.GENERIC_UNAUTHORIZED: ("Unauthorized access", 401),
    ErrorCode.GENERIC_FORBIDDEN: ("Access forbidden", 403),
    ErrorCode.GENERIC_INTERNAL_ERROR: ("Internal server error", 500),
    ErrorCode.GENERIC_BAD_REQUEST: ("Bad request", 400),
    ErrorCode.GENERIC_CONFLICT: ("Resource conflict", 409),
    ErrorCode.INVALID_ID_FORMAT: ("Invalid ID format", 400),
    ErrorCode.ID_NOT_FOUND: ("ID not found", 404),

    ErrorCode.CATEGORY_NOT_FOUND: ("Category not found", 404),
    ErrorCode.CATEGORY_ALREADY_EXISTS: ("Category already exists", 409),
    ErrorCode.CATEGORY_INVALID_NAME: ("Invalid category name", 400),
    ErrorCode.CATEGORY_CREATE_FAILED: ("Failed to create category", 500),
    ErrorCode.CATEGORY_UPDATE_FAILED: ("Failed to update category", 500),
    ErrorCode.CATEGORY_DELETE_FAILED: ("Failed to delete category", 500),
    ErrorCode.CATEGORY_FETCH_FAILED: ("Failed to fetch categories", 500),
    ErrorCode.CATEGORY_VALIDATION_ERROR: ("Category validation error", 400),
    ErrorCode.CATEGORY_NAME_REQUIRED: ("Category name is required", 400),
    ErrorCode.CATEGORY_NAME_TOO_SHORT: ("Category name must be at least 2 characters", 400),
    ErrorCode.CATEGORY_NAME_TOO_LONG: ("Category name must be at most 50 characters", 400),
    ErrorCode.CATEGORY_NAME_DUPLICATE: ("Category name already exists", 409),
    ErrorCode.CATEGORY_CASCADE_REMOVAL_FAILED: (
        "Failed to remove category from group categories", 500),
    ErrorCode.CATEGORY_DELETION_NOT_CONFIRMED: ("Category deletion not confirmed", 400),

    ErrorCode.GROUP_CATEGORY_NOT_FOUND: ("Group category not found", 404),
    ErrorCode.GROUP_CATEGORY_ALREADY_EXISTS: ("Group category already exists", 409),
    ErrorCode.GROUP_CATEGORY_INVALID_NAME: ("Invalid group category name", 400),
    ErrorCode.GROUP_CATEGORY_CREATE_FAILED: ("Failed to create group category", 500),
    ErrorCode.GROUP_CATEGORY_UPDATE_FAILED: ("Failed to update group category", 500),
    ErrorCode.GROUP_CATEGORY_DELETE_FAILED: ("Failed to delete group category", 500),
    ErrorCode.GROUP_CATEGORY_FETCH_FAILED: ("Failed to fetch group categories", 500),
    ErrorCode.GROUP_CATEGORY_VALIDATION_ERROR: ("Group category validation error", 400),
    ErrorCode.GROUP_CATEGORY_CATEGORY_ASSIGNMENT_FAILED: (
        "Failed to assign categories to group", 500),
    ErrorCode.GROUP_CATEGORY_NAME_REQUIRED: ("Group category name is required", 400),
    ErrorCode.GROUP_CATEGORY_NAME_TOO_SHORT: (
        "Group category name must be at least 2 characters", 400),
    ErrorCode.GROUP_CATEGORY_NAME_TOO_LONG: (
        "Group category name must be at most 100 characters", 400),
    ErrorCode.GROUP_CATEGORY_NAME_DUPLICATE: ("Group category name already exists", 409),

    ErrorCode.PRODUCT_NOT_FOUND: ("Product not found", 404),
    ErrorCode.PRODUCT_ALREADY_EXISTS: ("Product already exists", 409),
    ErrorCode.PRODUCT_INVALID_DATA: ("Invalid product data", 400),
    ErrorCode.PRODUCT_CREATE_FAILED: ("Failed to create product", 500),
    ErrorCode.PRODUCT_UPDATE_FAILED: ("Failed to update product", 500),
    ErrorCode.PRODUCT_DELETE_FAILED: ("Failed to delete product", 500),
    ErrorCode.PRODUCT_FETCH_FAILED: ("Failed to fetch products", 500),
    ErrorCode.PRODUCT_VALIDATION_ERROR: ("Product validation error", 400),
    ErrorCode.PRODUCT_NAME_REQUIRED: ("Product name is required", 400),
    ErrorCode.PRODUCT_NAME_DUPLICATE: ("Product name already exists", 409),
    ErrorCode.PRODUCT_INVALID_PRICE: ("Invalid product price", 400),
    ErrorCode.PRODUCT_INVALID_CATEGORY: ("Invalid product category", 400),
    ErrorCode.PRODUCT_CATEGORY_REQUIRED: ("Product category is required", 400),
    ErrorCode.PRODUCT_INVALID_IMAGE: ("Invalid product image", 400),

    ErrorCode.RELATIONSHIP_VIOLATION: ("Relationship violation", 400),

    ErrorCode.INVALID_NAME_FORMAT: ("Invalid name format", 400),
    ErrorCode.NAME_CONTAINS_INVALID_CHARS: (
        "Name can only contain letters, numbers, spaces, hyphens and underscores", 400),

    ErrorCode.WARNING_DISPLAY_FAILED: ("Warning display failed", 500),
    ErrorCode.WARNING_MESSAGE_INVALID: ("Warning message invalid", 500),

    ErrorCode.DATABASE_CONNECTION_FAILED: ("Database connection failed", 500),
    ErrorCode.DATABASE_QUERY_FAILED: ("Database query failed", 500),
    ErrorCode.DATABASE_TRANSACTION_FAILED: ("Database transaction failed", 500),
    ErrorCode.DATABASE_DUPLICATE_KEY: ("Duplicate key error", 409),
    ErrorCode.DATABASE_CONSTRAINT_VIOLATION: ("Database constraint violation", 400),

    ErrorCode.API_INVALID_REQUEST: ("Invalid API request", 400),
    ErrorCode.API_RATE_LIMIT_EXCEEDED: ("Rate limit exceeded", 429),
    ErrorCode.API_TIMEOUT: ("API request timeout", 408),
    ErrorCode.API_SERVICE_UNAVAILABLE: ("Service unavailable", 503),
}

_missing = [code.value for code in ErrorCode if code not in _DEFINITIONS]
if _missing:
    raise RuntimeError(f"Error codes without a message/status definition: {_missing}")
del _missing


def code_to_status(code: ErrorCode) -> int:
    return _DEFINITIONS[ErrorCode(code)][1]


def code_to_message(code: ErrorCode) -> str:
    return _DEFINITIONS[ErrorCode(code)][0]


def namespace_of(code: ErrorCode) -> str:
    code = ErrorCode(code)
    if code in _VALIDATION_NAMESPACE_CODES:
        return "VALIDATION"
    if code in _GENERIC_NAMESPACE_CODES:
        return "GENERIC"
    for namespace in NAMESPACES:
        if code.value.startswith(namespace + "_"):
            return namespace
    raise ValueError(f"Error code {code.value} has no namespace")


def codes_for(namespace: str) -> List[ErrorCode]:
    """Return the sub-taxonomy of one namespace, e.g. codes_for("CATEGORY")."""
    return [code for code in ErrorCode if namespace_of(code) == namespace]


def parse_code(value: Any) -> Optional[ErrorCode]:
    """Resolve a code received over the wire; unknown values give None."""
    try:
        return ErrorCode(value)
    except ValueError:
        return None


class CatalogError(Exception):
    """A taxonomy error: code, message, HTTP status and optional details."""

    def __init__(
        self,
        code: ErrorCode,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.code = ErrorCode(code)
        self.message = message or code_to_message(self.code)
        self.status_code = code_to_status(self.code)
        self.details = details
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
            "timestamp": self.timestamp,
        }
        if self.details:
            error["details"] = self.details
        return {"success": False, "error": error}

    def __repr__(self):
        return f"<CatalogError(code={self.code.value}, status={self.status_code}, message='{self.message}')>"


# Shortcuts used by the request handlers

def not_found(code: ErrorCode, entity: str, record_id: Any) -> CatalogError:
    return CatalogError(
        code,
        f"{entity} with ID {record_id} not found",
        {"entity": entity, "id": record_id},
    )


def duplicate_name(code: ErrorCode, entity: str, name: str) -> CatalogError:
    return CatalogError(
        code,
        f'{entity} "{name}" already exists',
        {"entity": entity, "field": "name", "value": name},
    )
