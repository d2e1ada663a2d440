from . import categories, group_categories, products

__all__ = ["categories", "group_categories", "products"]
