"""
Synthetic review generator, the terminal step of the fallback chain.
"""

from __future__ import annotations

import logging
import random

from app.domain.reviews import CanonicalReviewDraft, CatalogStore

logger = logging.getLogger(__name__)

PRODUCT_CANDIDATE_LIMIT = 50

_SYNTHETIC_TEMPLATES: tuple[tuple[str, str], ...] = (
    ("User_{n}", "New review fetched from external system!"),
    ("AutoFetch_{n}", "Automatically collected review - great product!"),
)


class SyntheticReviewSource:
    """
    Produces two drafts for randomly chosen existing products.

    Only a Catalog Store outage escapes; an empty catalog yields no drafts.
    """

    name = "mock"
    label = "Mock Data"

    def __init__(self, *, rng: random.Random) -> None:
        self._rng = rng

    def generate(self, store: CatalogStore) -> list[CanonicalReviewDraft]:
        products = store.list_products(limit=PRODUCT_CANDIDATE_LIMIT, order_random=True)
        if not products:
            logger.warning("Synthetic generator found no catalog products; no reviews generated.")
            return []

        return [
            CanonicalReviewDraft(
                reviewer_name=name_template.format(n=self._rng.randrange(100000, 1000000)),
                rating=self._rng.randint(1, 5),
                comment=comment,
                product_ref=self._rng.choice(products).id,
            )
            for name_template, comment in _SYNTHETIC_TEMPLATES
        ]
