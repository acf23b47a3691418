"""
app/schemas/review_ingestion.py

Response schemas for the review fetch trigger.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.domain.reviews import CommittedReview, FetchReviewsResult, SourceAttemptSummary


class CommittedReviewResponse(BaseModel):
    """
    One committed review joined with product display fields.
    """

    id: int
    product_id: int
    user_name: str
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = None
    created_at: datetime
    product_name: str
    product_image: str | None = None

    @classmethod
    def from_domain(cls, review: CommittedReview) -> CommittedReviewResponse:
        return cls(
            id=review.id,
            product_id=review.product_id,
            user_name=review.reviewer_name,
            rating=review.rating,
            comment=review.comment,
            created_at=review.created_at,
            product_name=review.product_name,
            product_image=review.product_image,
        )


class SourceAttemptResponse(BaseModel):
    source: str
    status: str
    drafts: int = Field(0, ge=0)
    failure_code: str | None = None
    message: str | None = None

    @classmethod
    def from_domain(cls, attempt: SourceAttemptSummary) -> SourceAttemptResponse:
        return cls(
            source=attempt.source,
            status=attempt.status,
            drafts=attempt.drafts,
            failure_code=attempt.failure_code,
            message=attempt.message,
        )


class FetchReviewsResponse(BaseModel):
    """
    API response model for one review fetch run.
    """

    success: bool
    message: str
    data: list[CommittedReviewResponse]
    source: str
    attempts: list[SourceAttemptResponse] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: FetchReviewsResult) -> FetchReviewsResponse:
        return cls(
            success=True,
            message=result.notice or f"Successfully fetched {len(result.reviews)} new reviews!",
            data=[CommittedReviewResponse.from_domain(review) for review in result.reviews],
            source=result.source,
            attempts=[SourceAttemptResponse.from_domain(attempt) for attempt in result.attempts],
        )
