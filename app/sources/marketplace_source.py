"""
Marketplace source: real reviews from a paid, rate-limited reviews API.
"""

from __future__ import annotations

import random
from dataclasses import replace

from app import failure_codes
from app.config import MARKETPLACE_SOURCE_NAME, MarketplaceSourceSettings
from app.connectors.marketplace_connector import MarketplaceReviewsConnector
from app.domain.reviews import CatalogStore, ParseOutcome
from app.mappers.review_normalizer import normalize_marketplace_reviews
from app.sources.base import PreconditionError, ReviewSourceStrategy

PRODUCT_CANDIDATE_LIMIT = 50


class MarketplaceSource(ReviewSourceStrategy):
    """
    Fetches reviews for one configured item and attaches them to a single
    randomly chosen catalog product.
    """

    name = MARKETPLACE_SOURCE_NAME
    label = "RapidAPI (Amazon)"

    def __init__(
        self,
        *,
        connector: MarketplaceReviewsConnector,
        settings: MarketplaceSourceSettings,
        rng: random.Random,
    ) -> None:
        self._connector = connector
        self._settings = settings
        self._rng = rng

    def _collect(self, store: CatalogStore) -> ParseOutcome:
        if not self._settings.api_key:
            raise PreconditionError(failure_codes.MISSING_CREDENTIALS, "MARKETPLACE_API_KEY is not configured.")

        products = store.list_products(limit=PRODUCT_CANDIDATE_LIMIT, order_random=True)
        if not products:
            raise PreconditionError(failure_codes.EMPTY_CATALOG, "No products in catalog to map reviews to.")
        target = self._rng.choice(products)

        payload = self._connector.fetch_payload()
        parsed = normalize_marketplace_reviews(
            payload,
            rng=self._rng,
            max_reviews=self._settings.max_reviews,
        )
        return replace(parsed, drafts=[draft.for_product(target.id) for draft in parsed.drafts])
