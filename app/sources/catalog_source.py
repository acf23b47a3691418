"""
Catalog-derived source: synthesizes reviews from a free product catalog's ratings.
"""

from __future__ import annotations

import random
from dataclasses import replace

from app import failure_codes
from app.config import CATALOG_SOURCE_NAME
from app.connectors.fake_store_connector import FakeStoreConnector
from app.domain.reviews import CatalogStore, ParseOutcome
from app.mappers.review_normalizer import normalize_catalog_products
from app.sources.base import PreconditionError, ReviewSourceStrategy


class CatalogDerivedSource(ReviewSourceStrategy):
    """
    Maps drafts cyclically across a random sample of catalog products.
    """

    name = CATALOG_SOURCE_NAME
    label = "FakeStore API"

    def __init__(
        self,
        *,
        connector: FakeStoreConnector,
        rng: random.Random,
        product_sample_size: int = 5,
    ) -> None:
        self._connector = connector
        self._rng = rng
        self._product_sample_size = max(1, product_sample_size)

    def _collect(self, store: CatalogStore) -> ParseOutcome:
        products = store.list_products(limit=self._product_sample_size, order_random=True)
        if not products:
            raise PreconditionError(failure_codes.EMPTY_CATALOG, "No products in catalog to map reviews to.")

        payload = self._connector.fetch_payload()
        parsed = normalize_catalog_products(payload, rng=self._rng)

        targets = self._rng.sample(products, len(products))
        drafts = [
            draft.for_product(targets[index % len(targets)].id)
            for index, draft in enumerate(parsed.drafts)
        ]
        return replace(parsed, drafts=drafts)
