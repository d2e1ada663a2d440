# catalog_service/schemas.py

"""
Pydantic schemas for the Catalog Service API responses.

Incoming payloads are validated by `catalog_service.validators` so the
business rules and error codes live in one place; these models only shape
what goes back over the wire (`_id`, `createdAt`, `updatedAt`).
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CatalogSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    def to_wire(self):
        """JSON-ready dict using the public field names."""
        return self.model_dump(mode="json", by_alias=True)


class RecordResponse(CatalogSchema):
    id: str = Field(..., serialization_alias="_id", description="Server-generated identifier.")
    created_at: Optional[datetime] = Field(None, serialization_alias="createdAt")
    updated_at: Optional[datetime] = Field(None, serialization_alias="updatedAt")

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, value):
        # SQLite hands timestamps back without tzinfo
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class CategoryResponse(RecordResponse):
    name: str


class GroupCategoryResponse(RecordResponse):
    name: str
    categories: List[str] = Field(default_factory=list, description="Ordered category IDs.")


class ProductResponse(RecordResponse):
    name: str
    category: str = Field(..., description="Free-text category label.")
    price: float
    image: str


class Pagination(CatalogSchema):
    page: int
    limit: int
    total: int
    pages: int
    has_next: bool = Field(..., serialization_alias="hasNext")
    has_prev: bool = Field(..., serialization_alias="hasPrev")


class CategoryListResponse(CatalogSchema):
    categories: List[CategoryResponse]
    pagination: Pagination


class GroupCategoryListResponse(CatalogSchema):
    group_categories: List[GroupCategoryResponse] = Field(..., serialization_alias="groupCategories")
    pagination: Pagination


class ProductListResponse(CatalogSchema):
    data: List[ProductResponse]
    pagination: Pagination


class CategoryRef(CatalogSchema):
    id: str = Field(..., serialization_alias="_id")
    name: str


class DeletionWarnings(CatalogSchema):
    affected_group_categories: int = Field(..., serialization_alias="affectedGroupCategories")
    group_category_names: List[str] = Field(..., serialization_alias="groupCategoryNames")
    affected_products: int = Field(..., serialization_alias="affectedProducts")
    product_names: List[str] = Field(..., serialization_alias="productNames")


class CategoryDeletionWarning(CatalogSchema):
    """Dry-run answer of DELETE /categories when `confirmed` is not true."""

    category: CategoryRef
    warnings: DeletionWarnings
    requires_confirmation: bool = Field(True, serialization_alias="requiresConfirmation")


class CategoryDeletionResult(CatalogSchema):
    message: str
    category: CategoryResponse
    removed_from_group_categories: int = Field(..., serialization_alias="removedFromGroupCategories")


class DeleteAcknowledgement(CatalogSchema):
    success: bool = True
    message: str
    id: str = Field(..., serialization_alias="_id")
