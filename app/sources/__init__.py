"""
app/sources package marker.
"""

from app.sources.base import PreconditionError, ReviewSourceStrategy
from app.sources.catalog_source import CatalogDerivedSource
from app.sources.marketplace_source import MarketplaceSource
from app.sources.synthetic_source import SyntheticReviewSource

__all__ = [
    "CatalogDerivedSource",
    "MarketplaceSource",
    "PreconditionError",
    "ReviewSourceStrategy",
    "SyntheticReviewSource",
]
