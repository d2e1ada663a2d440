# catalog_service/models.py

"""
SQLAlchemy database models for the Catalog Service.
These classes define the structure of tables in the database.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Numeric, String, func
from sqlalchemy.orm import relationship

from .db import Base


def _new_id():
    return uuid.uuid4().hex


def _utcnow():
    return datetime.now(timezone.utc)


class TimestampMixin:
    # Server-managed timestamps; 'updated_at' is refreshed on every update.
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    def touch(self):
        self.updated_at = _utcnow()


class Product(TimestampMixin, Base):
    """
    A storefront product. `category` is a free-text label used for grouping
    and filtering; it is not a reference to the categories table.
    """

    __tablename__ = "products"

    id = Column(String(32), primary_key=True, default=_new_id)
    name = Column(String(200), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    image = Column(String(500), nullable=False)

    __table_args__ = (
        # Case-insensitive uniqueness of product names
        Index("uq_products_name_lower", func.lower(name), unique=True),
    )

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', category='{self.category}')>"


class Category(TimestampMixin, Base):
    __tablename__ = "categories"

    id = Column(String(32), primary_key=True, default=_new_id)
    name = Column(String(50), nullable=False)

    __table_args__ = (
        Index("uq_categories_name_lower", func.lower(name), unique=True),
    )

    def __repr__(self):
        return f"<Category(id={self.id}, name='{self.name}')>"


class GroupCategoryMember(Base):
    """Ordered membership of a category inside a group category."""

    __tablename__ = "group_category_members"

    group_category_id = Column(
        String(32),
        ForeignKey("group_categories.id", ondelete="CASCADE"),
        primary_key=True,
    )
    # Indexed for the reverse lookup "which groups contain this category"
    category_id = Column(
        String(32),
        ForeignKey("categories.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    position = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return (
            f"<GroupCategoryMember(group={self.group_category_id}, "
            f"category={self.category_id}, position={self.position})>"
        )


class GroupCategory(TimestampMixin, Base):
    """A named bundle of categories, kept in the order they were assigned."""

    __tablename__ = "group_categories"

    id = Column(String(32), primary_key=True, default=_new_id)
    name = Column(String(100), nullable=False)

    members = relationship(
        GroupCategoryMember,
        order_by=GroupCategoryMember.position,
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    __table_args__ = (
        Index("uq_group_categories_name_lower", func.lower(name), unique=True),
    )

    @property
    def categories(self):
        return [member.category_id for member in self.members]

    def assign_categories(self, category_ids):
        """Replace the membership list, keeping the given order.

        Rows for categories that stay in the group are reused so their primary
        keys are never deleted and re-inserted within one flush.
        """
        existing = {member.category_id: member for member in self.members}
        members = []
        for position, category_id in enumerate(category_ids):
            member = existing.pop(category_id, None)
            if member is None:
                member = GroupCategoryMember(category_id=category_id)
            member.position = position
            members.append(member)
        self.members = members

    def remove_category(self, category_id):
        """Drop one category from the list. Returns True if it was present."""
        for member in list(self.members):
            if member.category_id == category_id:
                self.members.remove(member)
                return True
        return False

    def __repr__(self):
        return f"<GroupCategory(id={self.id}, name='{self.name}', categories={len(self.members)})>"
