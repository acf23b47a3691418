"""
app/services/review_persistence.py

Persistence Gateway from canonical drafts to committed catalog reviews.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from app.domain.reviews import CanonicalReviewDraft, CatalogStore, CommittedReview

logger = logging.getLogger(__name__)


class UnresolvedProductError(ValueError):
    """
    Raised when a draft reaches persistence without a catalog product id.
    """

    def __init__(self, positions: Sequence[int]) -> None:
        super().__init__(
            "Drafts without a resolved product_ref cannot be persisted: positions "
            + ", ".join(str(position) for position in positions)
        )
        self.positions = tuple(positions)


class ReviewPersistenceGateway:
    """
    Inserts drafts one at a time, in order, and re-reads each joined with
    product display fields.
    """

    def commit(
        self,
        drafts: Sequence[CanonicalReviewDraft],
        *,
        store: CatalogStore,
    ) -> list[CommittedReview]:
        unresolved = [index for index, draft in enumerate(drafts) if draft.product_ref is None]
        if unresolved:
            raise UnresolvedProductError(unresolved)

        committed: list[CommittedReview] = []
        for draft in drafts:
            review_id = store.insert_review(
                product_id=draft.product_ref,
                reviewer_name=draft.reviewer_name,
                rating=draft.rating,
                comment=draft.comment,
            )
            committed.append(store.get_review_with_product(review_id))

        logger.info("Committed fetched reviews count=%s", len(committed))
        return committed
