# catalog_service/client.py

"""
Typed HTTP client for the Catalog Service API.

Every accessor either returns the parsed JSON payload or raises
`CatalogError`, whatever went wrong: a rejected payload, an error response
from the server, or no response at all (mapped to API_SERVICE_UNAVAILABLE).
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx

from . import config
from .errors import CatalogError, ErrorCode, parse_code
from .validators import validate_category, validate_group_category, validate_product

logger = logging.getLogger(__name__)

_STATUS_FALLBACK = {
    400: ErrorCode.GENERIC_VALIDATION_ERROR,
    404: ErrorCode.GENERIC_NOT_FOUND,
    409: ErrorCode.GENERIC_CONFLICT,
}

CATEGORIES_PATH = "/categories"
GROUP_CATEGORIES_PATH = "/group-categories"
PRODUCTS_PATH = "/products"


def _drop_none(params):
    return {key: value for key, value in params.items() if value is not None}


def _require_id(record_id, entity):
    if not record_id:
        raise CatalogError(
            ErrorCode.GENERIC_VALIDATION_ERROR,
            f"{entity} ID is required",
            {"entity": entity, "field": "_id"},
        )


class CatalogClient:
    """
    Client repository layer over the catalog HTTP API.

    Pass `http` to reuse an existing `httpx.Client` (for instance FastAPI's
    TestClient); otherwise one is created for `base_url` and closed by
    `close()`.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http: Optional[httpx.Client] = None,
    ):
        self._owns_http = http is None
        self._http = http or httpx.Client(
            base_url=base_url or config.CATALOG_API_URL,
            timeout=timeout if timeout is not None else config.CATALOG_API_TIMEOUT,
        )

    def close(self):
        if self._owns_http:
            self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    # --- transport ---

    def _request(self, method, path, entity, action, *, params=None, json=None):
        try:
            response = self._http.request(method, path, params=params, json=json)
        except httpx.TransportError as e:
            logger.error(f"Failed to {action} {entity}: {e}")
            raise CatalogError(
                ErrorCode.API_SERVICE_UNAVAILABLE,
                f"Failed to {action} {entity} - network error",
                {"entity": entity, "action": action, "reason": type(e).__name__},
            ) from e
        return self._handle_response(response, entity, action)

    @staticmethod
    def _handle_response(response, entity, action):
        if response.is_success:
            try:
                return response.json()
            except ValueError as e:
                logger.error(f"Non-JSON response to {action} {entity}: {response.text[:200]!r}")
                raise CatalogError(
                    ErrorCode.GENERIC_INTERNAL_ERROR,
                    f"Failed to {action} {entity} - response is not valid JSON",
                    {"entity": entity, "action": action, "statusCode": response.status_code},
                ) from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        error = body.get("error") if isinstance(body, dict) else None
        error = error if isinstance(error, dict) else {}

        server_details = error.get("details")
        details: Dict[str, Any] = dict(server_details) if isinstance(server_details, dict) else {}
        details.update({"entity": entity, "action": action, "statusCode": response.status_code})

        code = parse_code(error.get("code"))
        if code is not None:
            raise CatalogError(code, error.get("message"), details)

        if response.status_code in _STATUS_FALLBACK:
            code = _STATUS_FALLBACK[response.status_code]
        elif response.status_code == 503:
            code = ErrorCode.API_SERVICE_UNAVAILABLE
        else:
            code = ErrorCode.GENERIC_INTERNAL_ERROR
        raise CatalogError(code, f"Failed to {action} {entity} (status {response.status_code})", details)

    # --- categories ---

    def fetch_categories(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
        order: Optional[str] = None,
    ) -> Dict[str, Any]:
        params = _drop_none(
            {"page": page, "limit": limit, "search": search, "sort": sort, "order": order}
        )
        return self._request("GET", CATEGORIES_PATH, "Category", "fetch", params=params)

    def fetch_category_by_id(self, category_id: str) -> Dict[str, Any]:
        _require_id(category_id, "Category")
        return self._request("GET", f"{CATEGORIES_PATH}/{category_id}", "Category", "fetch")

    def create_category(self, name: str) -> Dict[str, Any]:
        payload = {"name": name}
        validate_category(payload)
        return self._request("POST", CATEGORIES_PATH, "Category", "create", json=payload)

    def update_category(self, category_id: str, name: str) -> Dict[str, Any]:
        _require_id(category_id, "Category")
        payload = {"name": name}
        validate_category(payload, partial=True)
        return self._request(
            "PATCH", CATEGORIES_PATH, "Category", "update", json={"_id": category_id, **payload}
        )

    def delete_category(self, category_id: str, confirmed: bool = False) -> Dict[str, Any]:
        """
        Without confirmation the server answers with the deletion warning
        (`warnings` lists the affected group categories and products) and
        nothing is deleted. Call again with `confirmed=True` to delete.
        """
        _require_id(category_id, "Category")
        return self._request(
            "DELETE",
            CATEGORIES_PATH,
            "Category",
            "delete",
            json={"_id": category_id, "confirmed": confirmed},
        )

    # --- group categories ---

    def fetch_group_categories(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
        order: Optional[str] = None,
    ) -> Dict[str, Any]:
        params = _drop_none(
            {"page": page, "limit": limit, "search": search, "sort": sort, "order": order}
        )
        return self._request("GET", GROUP_CATEGORIES_PATH, "GroupCategory", "fetch", params=params)

    def fetch_group_category_by_id(self, group_id: str) -> Dict[str, Any]:
        _require_id(group_id, "GroupCategory")
        return self._request("GET", f"{GROUP_CATEGORIES_PATH}/{group_id}", "GroupCategory", "fetch")

    def create_group_category(
        self, name: str, categories: Optional[Iterable[str]] = None
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"name": name, "categories": list(categories or [])}
        validate_group_category(payload)
        return self._request("POST", GROUP_CATEGORIES_PATH, "GroupCategory", "create", json=payload)

    def update_group_category(
        self,
        group_id: str,
        name: Optional[str] = None,
        categories: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        _require_id(group_id, "GroupCategory")
        payload: Dict[str, Any] = {}
        if name is not None:
            payload["name"] = name
        if categories is not None:
            payload["categories"] = list(categories)
        validate_group_category(payload, partial=True)
        return self._request(
            "PATCH",
            GROUP_CATEGORIES_PATH,
            "GroupCategory",
            "update",
            json={"_id": group_id, **payload},
        )

    def assign_categories(self, group_id: str, category_ids: List[str]) -> Dict[str, Any]:
        return self.update_group_category(group_id, categories=category_ids)

    def delete_group_category(self, group_id: str) -> Dict[str, Any]:
        _require_id(group_id, "GroupCategory")
        return self._request(
            "DELETE", GROUP_CATEGORIES_PATH, "GroupCategory", "delete", json={"_id": group_id}
        )

    # --- products ---

    def fetch_products(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        params = _drop_none(
            {
                "search": search,
                "category": category,
                "minPrice": min_price,
                "maxPrice": max_price,
                "sortBy": sort_by,
                "sortOrder": sort_order,
                "page": page,
                "limit": limit,
            }
        )
        return self._request("GET", PRODUCTS_PATH, "Product", "fetch", params=params)

    def fetch_product_by_id(self, product_id: str) -> Dict[str, Any]:
        _require_id(product_id, "Product")
        return self._request("GET", f"{PRODUCTS_PATH}/{product_id}", "Product", "fetch")

    def create_product(self, name: str, category: str, price: float, image: str) -> Dict[str, Any]:
        payload = {"name": name, "category": category, "price": price, "image": image}
        validate_product(payload)
        return self._request("POST", PRODUCTS_PATH, "Product", "create", json=payload)

    def update_product(self, product_id: str, **fields: Any) -> Dict[str, Any]:
        _require_id(product_id, "Product")
        validate_product(fields, partial=True)
        return self._request(
            "PATCH", PRODUCTS_PATH, "Product", "update", json={"_id": product_id, **fields}
        )

    def delete_product(self, product_id: str) -> Dict[str, Any]:
        _require_id(product_id, "Product")
        return self._request("DELETE", PRODUCTS_PATH, "Product", "delete", json={"_id": product_id})
