"""
app/domain package marker.
"""

from app.domain.reviews import (
    CanonicalReviewDraft,
    CatalogProduct,
    CatalogStore,
    CommittedReview,
    FetchReviewsResult,
    ParseOutcome,
    SourceAttemptSummary,
    SourceFailure,
    SourceOutcome,
)

__all__ = [
    "CanonicalReviewDraft",
    "CatalogProduct",
    "CatalogStore",
    "CommittedReview",
    "FetchReviewsResult",
    "ParseOutcome",
    "SourceAttemptSummary",
    "SourceFailure",
    "SourceOutcome",
]
