"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.product import Product
from db.models.review import Review

__all__ = [
    "Product",
    "Review",
]
