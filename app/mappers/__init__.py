"""
app/mappers package marker.
"""

from app.mappers.review_normalizer import (
    FieldRule,
    clamp_rating,
    normalize_catalog_products,
    normalize_marketplace_reviews,
    truncate_comment,
)

__all__ = [
    "FieldRule",
    "clamp_rating",
    "normalize_catalog_products",
    "normalize_marketplace_reviews",
    "truncate_comment",
]
