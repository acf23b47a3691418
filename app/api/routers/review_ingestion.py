"""
app/api/routers/review_ingestion.py

Trigger endpoint for fetching reviews from external sources.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.schemas.review_ingestion import FetchReviewsResponse
from app.services.review_ingestion_service import (
    ReviewIngestionService,
    get_review_ingestion_service,
)
from db.repositories.catalog_repository import CatalogRepository
from db.repositories.errors import CatalogStoreError
from db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["review-ingestion"])


def get_catalog_store(db: Session = Depends(get_db)) -> CatalogRepository:
    return CatalogRepository(db)


@router.post("/fetch-reviews", response_model=FetchReviewsResponse)
def fetch_reviews(
    store: CatalogRepository = Depends(get_catalog_store),
    ingestion_service: ReviewIngestionService = Depends(get_review_ingestion_service),
) -> FetchReviewsResponse:
    """
    Populate the catalog with reviews from the first available external source.
    """

    try:
        result = ingestion_service.fetch_reviews(store=store)
    except CatalogStoreError as exc:
        logger.error("Review fetch failed: catalog store error=%s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "success": False,
                "message": "Server error while fetching reviews",
                "error": str(exc),
            },
        ) from exc

    return FetchReviewsResponse.from_result(result)
