"""
Repository layer exports.
"""

from db.repositories.catalog_repository import CatalogRepository
from db.repositories.errors import (
    CatalogStoreError,
    CatalogStoreUnavailableError,
    ReviewNotFoundError,
    ReviewPersistenceError,
)

__all__ = [
    "CatalogRepository",
    "CatalogStoreError",
    "CatalogStoreUnavailableError",
    "ReviewNotFoundError",
    "ReviewPersistenceError",
]
