"""Catalog Service: products, categories and group categories over a JSON API."""

__version__ = "1.0.0"
