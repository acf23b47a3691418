"""
app/domain/reviews.py

Domain models for external review ingestion.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Protocol

MIN_RATING = 1
MAX_RATING = 5
MAX_COMMENT_LENGTH = 500
MAX_REVIEWER_NAME_LENGTH = 255


@dataclass(frozen=True)
class CatalogProduct:
    """
    Read-only view of one product owned by the Catalog Store.
    """

    id: int
    name: str


@dataclass(frozen=True)
class CanonicalReviewDraft:
    """
    Normalized, pre-persistence review independent of its upstream source.

    `product_ref` is None until a strategy maps the draft onto a catalog product.
    """

    reviewer_name: str
    rating: int
    comment: str
    product_ref: int | None = None

    def __post_init__(self) -> None:
        if not self.reviewer_name:
            raise ValueError("reviewer_name must not be empty.")
        if len(self.reviewer_name) > MAX_REVIEWER_NAME_LENGTH:
            raise ValueError(f"reviewer_name exceeds {MAX_REVIEWER_NAME_LENGTH} characters.")
        if not MIN_RATING <= self.rating <= MAX_RATING:
            raise ValueError(f"rating must be within [{MIN_RATING}, {MAX_RATING}], got {self.rating}.")
        if len(self.comment) > MAX_COMMENT_LENGTH:
            raise ValueError(f"comment exceeds {MAX_COMMENT_LENGTH} characters.")

    def for_product(self, product_id: int) -> CanonicalReviewDraft:
        return replace(self, product_ref=product_id)


@dataclass(frozen=True)
class CommittedReview:
    """
    Review row as stored by the Catalog Store, joined with product display fields.
    """

    id: int
    product_id: int
    reviewer_name: str
    rating: int
    comment: str | None
    created_at: datetime
    product_name: str
    product_image: str | None = None


@dataclass(frozen=True)
class ParseOutcome:
    """
    Result of normalizing one raw upstream payload.

    An unrecognized payload yields zero drafts and `matched_path=None`.
    """

    drafts: list[CanonicalReviewDraft]
    matched_path: str | None = None
    skipped: int = 0

    @property
    def recognized(self) -> bool:
        return self.matched_path is not None


@dataclass(frozen=True)
class SourceFailure:
    """
    Typed failure cause reported by a source strategy.
    """

    code: str
    message: str
    detail: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SourceOutcome:
    """
    Explicit result of running one source strategy.
    """

    source: str
    label: str
    drafts: list[CanonicalReviewDraft] = field(default_factory=list)
    failure: SourceFailure | None = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None and bool(self.drafts)


@dataclass(frozen=True)
class SourceAttemptSummary:
    """
    One step of the fallback chain, kept for caller-side reporting.
    """

    source: str
    status: str
    drafts: int = 0
    failure_code: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class FetchReviewsResult:
    """
    End-of-run result for one pipeline invocation.

    `notice` explains a run that committed nothing.
    """

    source: str
    reviews: list[CommittedReview]
    attempts: list[SourceAttemptSummary] = field(default_factory=list)
    notice: str | None = None


class CatalogStore(Protocol):
    """
    Catalog Store contract consumed by the ingestion pipeline.
    """

    def list_products(self, *, limit: int, order_random: bool = False) -> list[CatalogProduct]:
        ...

    def insert_review(
        self,
        *,
        product_id: int,
        reviewer_name: str,
        rating: int,
        comment: str,
    ) -> int:
        ...

    def get_review_with_product(self, review_id: int) -> CommittedReview:
        ...
