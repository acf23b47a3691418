"""
app/services package marker.
"""

from app.services.review_ingestion_service import (
    ReviewIngestionService,
    build_review_ingestion_service,
    get_review_ingestion_service,
)
from app.services.review_persistence import ReviewPersistenceGateway, UnresolvedProductError

__all__ = [
    "ReviewIngestionService",
    "ReviewPersistenceGateway",
    "UnresolvedProductError",
    "build_review_ingestion_service",
    "get_review_ingestion_service",
]
