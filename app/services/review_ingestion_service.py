"""
app/services/review_ingestion_service.py

Fallback orchestration for external review ingestion.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from enum import Enum
from functools import lru_cache

from app import failure_codes
from app.config import ReviewIngestionSettings, get_review_ingestion_settings
from app.connectors import FakeStoreConnector, MarketplaceReviewsConnector, RetryPolicy
from app.domain.reviews import (
    CanonicalReviewDraft,
    CatalogStore,
    FetchReviewsResult,
    SourceAttemptSummary,
    SourceFailure,
    SourceOutcome,
)
from app.logging_utils import log_event
from app.services.review_persistence import ReviewPersistenceGateway
from app.sources import (
    CatalogDerivedSource,
    MarketplaceSource,
    ReviewSourceStrategy,
    SyntheticReviewSource,
)

logger = logging.getLogger(__name__)

EMPTY_CATALOG_NOTICE = "The catalog has no products, so no reviews were added."


class FallbackState(str, Enum):
    NOT_STARTED = "not_started"
    TRYING_SOURCE = "trying_source"
    SUCCEEDED = "succeeded"
    EXHAUSTED_TO_SYNTHETIC = "exhausted_to_synthetic"


class ReviewIngestionService:
    """
    Tries enabled sources in priority order and falls back to synthetic data.

    Strategies whose name is missing from the settings, or disabled there,
    are never invoked.
    """

    def __init__(
        self,
        *,
        settings: ReviewIngestionSettings,
        strategies: Sequence[ReviewSourceStrategy],
        synthetic: SyntheticReviewSource,
        gateway: ReviewPersistenceGateway | None = None,
    ) -> None:
        self._settings = settings
        self._strategies = {strategy.name: strategy for strategy in strategies}
        self._synthetic = synthetic
        self._gateway = gateway or ReviewPersistenceGateway()

    def fetch_reviews(self, *, store: CatalogStore) -> FetchReviewsResult:
        """
        Run one pipeline invocation and persist the winning source's drafts.

        Raises CatalogStoreError when the store is unreachable during the
        synthetic step or persistence.
        """

        state = FallbackState.NOT_STARTED
        attempts: list[SourceAttemptSummary] = []
        drafts: list[CanonicalReviewDraft] = []
        label = self._synthetic.label
        notice: str | None = None

        for strategy in self._active_strategies():
            state = FallbackState.TRYING_SOURCE
            logger.info("Trying review source source=%s state=%s", strategy.name, state.value)
            outcome = self._run_strategy(strategy, store)

            if outcome.succeeded:
                state = FallbackState.SUCCEEDED
                drafts = outcome.drafts
                label = outcome.label
                attempts.append(
                    SourceAttemptSummary(source=strategy.name, status="succeeded", drafts=len(drafts))
                )
                break

            self._log_failure(outcome)
            attempts.append(
                SourceAttemptSummary(
                    source=strategy.name,
                    status="failed",
                    failure_code=outcome.failure.code if outcome.failure else None,
                    message=outcome.failure.message if outcome.failure else None,
                )
            )

        if state is not FallbackState.SUCCEEDED:
            state = FallbackState.EXHAUSTED_TO_SYNTHETIC
            logger.info("Falling back to synthetic reviews state=%s", state.value)
            drafts = self._synthetic.generate(store)
            if drafts:
                attempts.append(
                    SourceAttemptSummary(source=self._synthetic.name, status="succeeded", drafts=len(drafts))
                )
            else:
                notice = EMPTY_CATALOG_NOTICE
                attempts.append(
                    SourceAttemptSummary(
                        source=self._synthetic.name,
                        status="failed",
                        failure_code=failure_codes.EMPTY_CATALOG,
                        message=notice,
                    )
                )

        reviews = self._gateway.commit(drafts, store=store)
        logger.info(
            "Review fetch completed source=%s reviews=%s sources_tried=%s",
            label,
            len(reviews),
            len(attempts),
        )
        return FetchReviewsResult(source=label, reviews=reviews, attempts=attempts, notice=notice)

    def _active_strategies(self) -> list[ReviewSourceStrategy]:
        active: list[ReviewSourceStrategy] = []
        for config in self._settings.ordered_sources():
            strategy = self._strategies.get(config.name)
            if strategy is None:
                continue
            if not config.enabled:
                logger.debug("Skipping disabled review source source=%s", config.name)
                continue
            active.append(strategy)
        return active

    @staticmethod
    def _run_strategy(strategy: ReviewSourceStrategy, store: CatalogStore) -> SourceOutcome:
        try:
            return strategy.run(store)
        except Exception as exc:
            logger.exception(
                "Unhandled review source failure source=%s error=%s",
                strategy.name,
                exc,
            )
            return SourceOutcome(
                source=strategy.name,
                label=strategy.label,
                failure=SourceFailure(code=failure_codes.UNEXPECTED_ERROR, message=str(exc)),
            )

    @staticmethod
    def _log_failure(outcome: SourceOutcome) -> None:
        failure = outcome.failure
        code = failure.code if failure else failure_codes.NO_REVIEWS_IN_PAYLOAD
        if code in failure_codes.CONFIGURATION_FAILURES:
            level = logging.INFO
        elif code in failure_codes.TRANSIENT_FAILURES:
            level = logging.WARNING
        else:
            level = logging.ERROR
        log_event(
            logger,
            level,
            "review_source_failed",
            source=outcome.source,
            code=code,
            message=failure.message if failure else None,
            detail=failure.detail if failure else {},
        )


def build_review_ingestion_service(
    settings: ReviewIngestionSettings,
    *,
    rng: random.Random | None = None,
) -> ReviewIngestionService:
    """
    Wire connectors and strategies from one immutable settings value.
    """

    rng = rng or random.Random(settings.random_seed)
    policy = RetryPolicy.from_settings(settings.retry)
    strategies: list[ReviewSourceStrategy] = [
        CatalogDerivedSource(
            connector=FakeStoreConnector(settings=settings.catalog, retry_policy=policy),
            rng=rng,
            product_sample_size=settings.catalog.product_limit,
        ),
        MarketplaceSource(
            connector=MarketplaceReviewsConnector(settings=settings.marketplace, retry_policy=policy),
            settings=settings.marketplace,
            rng=rng,
        ),
    ]
    return ReviewIngestionService(
        settings=settings,
        strategies=strategies,
        synthetic=SyntheticReviewSource(rng=rng),
    )


@lru_cache(maxsize=1)
def get_review_ingestion_service() -> ReviewIngestionService:
    """
    Build and cache the review ingestion service.
    """

    return build_review_ingestion_service(get_review_ingestion_settings())
