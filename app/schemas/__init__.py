"""
app/schemas package marker.
"""

from app.schemas.review_ingestion import (
    CommittedReviewResponse,
    FetchReviewsResponse,
    SourceAttemptResponse,
)

__all__ = [
    "CommittedReviewResponse",
    "FetchReviewsResponse",
    "SourceAttemptResponse",
]
