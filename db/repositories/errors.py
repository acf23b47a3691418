"""
Repository-layer exceptions for Catalog Store access.
"""

from __future__ import annotations


class CatalogStoreError(Exception):
    """Base exception for Catalog Store failures."""


class CatalogStoreUnavailableError(CatalogStoreError):
    """Raised when the Catalog Store cannot be read."""


class ReviewPersistenceError(CatalogStoreError):
    """Raised when inserting or re-reading a review fails."""


class ReviewNotFoundError(CatalogStoreError):
    """Raised when a review id does not resolve to a row joined with its product."""
