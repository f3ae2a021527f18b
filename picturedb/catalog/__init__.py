"""Catalog record storage."""

from .store import CatalogStore

__all__ = ["CatalogStore"]
