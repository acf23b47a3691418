"""
tests/test_review_ingestion_service.py

End-to-end fallback orchestration tests over fake upstreams and an
in-memory Catalog Store.

Coverage
--------
- Source priority and enable flags
- Scenario A: catalog-derived reviews mapped across three products
- Scenario B: marketplace recovers after three 503 responses
- Scenario C: marketplace 401 falls straight through to synthetic data
- Scenario D: empty catalog falls through to synthetic data
- Unexpected strategy exceptions and persistence failures
"""

from __future__ import annotations

import random
from dataclasses import replace

import pytest

from app import failure_codes
from app.config import (
    CATALOG_SOURCE_NAME,
    MARKETPLACE_SOURCE_NAME,
    CatalogSourceSettings,
    MarketplaceSourceSettings,
    ReviewIngestionSettings,
    ReviewSourceConfig,
    RetrySettings,
)
from app.connectors import FakeStoreConnector, MarketplaceReviewsConnector, RetryPolicy
from app.domain.reviews import ParseOutcome
from app.services.review_ingestion_service import ReviewIngestionService
from app.sources import CatalogDerivedSource, MarketplaceSource, ReviewSourceStrategy, SyntheticReviewSource
from db.repositories.errors import CatalogStoreUnavailableError, ReviewPersistenceError


def _settings(*, catalog: bool, marketplace: bool, catalog_priority: int = 10, marketplace_priority: int = 20):
    return ReviewIngestionSettings(
        sources=(
            ReviewSourceConfig(name=CATALOG_SOURCE_NAME, enabled=catalog, priority=catalog_priority),
            ReviewSourceConfig(name=MARKETPLACE_SOURCE_NAME, enabled=marketplace, priority=marketplace_priority),
        ),
        retry=RetrySettings(max_retries=3, base_delay_ms=2000),
        catalog=CatalogSourceSettings(base_url="https://catalog.example.test/products"),
        marketplace=MarketplaceSourceSettings(api_key="test-key", host="reviews.example.test"),
    )


def _service(settings, *, catalog_session, marketplace_session, sleeper, rng=None) -> ReviewIngestionService:
    rng = rng or random.Random(42)
    policy = RetryPolicy.from_settings(settings.retry)
    return ReviewIngestionService(
        settings=settings,
        strategies=[
            CatalogDerivedSource(
                connector=FakeStoreConnector(
                    settings=settings.catalog,
                    retry_policy=policy,
                    session=catalog_session,
                    sleep=sleeper,
                ),
                rng=rng,
            ),
            MarketplaceSource(
                connector=MarketplaceReviewsConnector(
                    settings=settings.marketplace,
                    retry_policy=policy,
                    session=marketplace_session,
                    sleep=sleeper,
                ),
                settings=settings.marketplace,
                rng=rng,
            ),
        ],
        synthetic=SyntheticReviewSource(rng=rng),
    )


class ExplodingSource(ReviewSourceStrategy):
    name = CATALOG_SOURCE_NAME
    label = "Exploding"

    def _collect(self, store) -> ParseOutcome:
        raise KeyError("unexpected payload key")


# ---------------------------------------------------------------------------
# Priority and enable flags
# ---------------------------------------------------------------------------


class TestSourceSelection:
    @pytest.mark.parametrize("catalog_priority, marketplace_priority", [(10, 20), (20, 10), (5, 5)])
    def test_disabled_marketplace_is_never_invoked(
        self, catalog_priority, marketplace_priority, store, sleeper, http_session, make_response
    ) -> None:
        catalog_session = http_session([make_response(503)])
        marketplace_session = http_session([make_response(200, {})])
        settings = _settings(
            catalog=True,
            marketplace=False,
            catalog_priority=catalog_priority,
            marketplace_priority=marketplace_priority,
        )

        result = _service(
            settings,
            catalog_session=catalog_session,
            marketplace_session=marketplace_session,
            sleeper=sleeper,
        ).fetch_reviews(store=store)

        assert marketplace_session.calls == []
        assert len(catalog_session.calls) == 4
        assert result.source == "Mock Data"
        assert [attempt.source for attempt in result.attempts] == [CATALOG_SOURCE_NAME, "mock"]

    def test_all_sources_disabled_still_returns_reviews(self, store, sleeper, http_session, make_response) -> None:
        catalog_session = http_session([make_response(200, [])])
        marketplace_session = http_session([make_response(200, {})])

        result = _service(
            _settings(catalog=False, marketplace=False),
            catalog_session=catalog_session,
            marketplace_session=marketplace_session,
            sleeper=sleeper,
        ).fetch_reviews(store=store)

        assert result.source == "Mock Data"
        assert len(result.reviews) >= 1
        assert all(review.product_id in {1, 2, 3} for review in result.reviews)
        assert catalog_session.calls == []
        assert marketplace_session.calls == []

    def test_lower_priority_value_runs_first(
        self, store, sleeper, http_session, make_response, fake_store_body, marketplace_body
    ) -> None:
        catalog_session = http_session([make_response(200, fake_store_body([4]))])
        marketplace_session = http_session([make_response(200, marketplace_body(3))])

        result = _service(
            _settings(catalog=True, marketplace=True, catalog_priority=30, marketplace_priority=5),
            catalog_session=catalog_session,
            marketplace_session=marketplace_session,
            sleeper=sleeper,
        ).fetch_reviews(store=store)

        assert result.source == "RapidAPI (Amazon)"
        assert catalog_session.calls == []

    def test_failed_first_source_falls_to_next(
        self, store, sleeper, http_session, make_response, marketplace_body
    ) -> None:
        catalog_session = http_session([make_response(404, {"message": "not found"})])
        marketplace_session = http_session([make_response(200, marketplace_body(2))])

        result = _service(
            _settings(catalog=True, marketplace=True),
            catalog_session=catalog_session,
            marketplace_session=marketplace_session,
            sleeper=sleeper,
        ).fetch_reviews(store=store)

        assert result.source == "RapidAPI (Amazon)"
        assert len(result.reviews) == 2
        assert result.attempts[0].failure_code == failure_codes.UPSTREAM_REQUEST_FAILED
        assert result.attempts[1].status == "succeeded"


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


class TestScenarios:
    def test_scenario_a_catalog_derived_reviews(self, store, sleeper, http_session, make_response, fake_store_body) -> None:
        catalog_session = http_session([make_response(200, fake_store_body([5, 4, 3, 4.6, 2]))])

        result = _service(
            _settings(catalog=True, marketplace=False),
            catalog_session=catalog_session,
            marketplace_session=http_session([make_response(200, {})]),
            sleeper=sleeper,
        ).fetch_reviews(store=store)

        assert result.source == "FakeStore API"
        assert len(result.reviews) == 9
        product_ids = [review.product_id for review in result.reviews]
        assert set(product_ids) == {1, 2, 3}
        assert all(product_ids[index] == product_ids[index % 3] for index in range(9))
        assert [review.rating for review in result.reviews] == [5, 5, 4, 4, 3, 3, 5, 5, 2]
        assert [review.id for review in result.reviews] == list(range(1, 10))

    def test_scenario_b_marketplace_succeeds_on_fourth_attempt(
        self, store, sleeper, http_session, make_response, marketplace_body
    ) -> None:
        unavailable = make_response(503)
        marketplace_session = http_session(
            [unavailable, unavailable, unavailable, make_response(200, marketplace_body(5, long_comment_index=0))]
        )

        result = _service(
            _settings(catalog=False, marketplace=True),
            catalog_session=http_session([make_response(200, [])]),
            marketplace_session=marketplace_session,
            sleeper=sleeper,
        ).fetch_reviews(store=store)

        assert result.source == "RapidAPI (Amazon)"
        assert len(marketplace_session.calls) == 4
        assert sleeper.delays == [2.0, 4.0, 6.0]
        assert len(result.reviews) == 5
        assert len({review.product_id for review in result.reviews}) == 1
        assert len(result.reviews[0].comment) == 500

    def test_scenario_c_unauthorized_marketplace_falls_to_mock(
        self, store, sleeper, http_session, make_response
    ) -> None:
        marketplace_session = http_session([make_response(401, {"message": "You are not subscribed"})])

        result = _service(
            _settings(catalog=False, marketplace=True),
            catalog_session=http_session([make_response(200, [])]),
            marketplace_session=marketplace_session,
            sleeper=sleeper,
        ).fetch_reviews(store=store)

        assert len(marketplace_session.calls) == 1
        assert sleeper.delays == []
        assert result.source == "Mock Data"
        assert result.attempts[0].failure_code == failure_codes.UPSTREAM_REQUEST_FAILED
        assert len(result.reviews) == 2

    def test_scenario_d_empty_catalog_falls_to_mock(self, empty_store, sleeper, http_session, make_response) -> None:
        catalog_session = http_session([make_response(200, [])])

        result = _service(
            _settings(catalog=True, marketplace=False),
            catalog_session=catalog_session,
            marketplace_session=http_session([make_response(200, {})]),
            sleeper=sleeper,
        ).fetch_reviews(store=empty_store)

        assert result.source == "Mock Data"
        assert result.attempts[0].failure_code == failure_codes.EMPTY_CATALOG
        assert catalog_session.calls == []
        assert result.reviews == []
        assert result.notice == "The catalog has no products, so no reviews were added."
        assert result.attempts[-1].source == "mock"
        assert result.attempts[-1].failure_code == failure_codes.EMPTY_CATALOG


# ---------------------------------------------------------------------------
# Failure boundaries
# ---------------------------------------------------------------------------


class TestFailureBoundaries:
    def test_unexpected_strategy_exception_falls_through(self, store, rng) -> None:
        service = ReviewIngestionService(
            settings=_settings(catalog=True, marketplace=False),
            strategies=[ExplodingSource()],
            synthetic=SyntheticReviewSource(rng=rng),
        )

        result = service.fetch_reviews(store=store)

        assert result.source == "Mock Data"
        assert result.attempts[0].failure_code == failure_codes.UNEXPECTED_ERROR

    def test_extreme_upstream_fields_still_commit_from_marketplace(
        self, store, sleeper, http_session, make_response
    ) -> None:
        payload = {"data": {"reviews": [{"reviewer": {"name": "a" * 300}, "rating": 10**400, "comment": "ok"}]}}
        marketplace_session = http_session([make_response(200, payload)])

        result = _service(
            _settings(catalog=False, marketplace=True),
            catalog_session=http_session([make_response(200, [])]),
            marketplace_session=marketplace_session,
            sleeper=sleeper,
        ).fetch_reviews(store=store)

        assert result.source == "RapidAPI (Amazon)"
        assert result.reviews[0].rating == 5
        assert len(result.reviews[0].reviewer_name) == 255

    def test_persistence_failure_keeps_earlier_rows(self, products, store_factory, rng) -> None:
        store = store_factory(products, fail_insert_after=1)
        service = ReviewIngestionService(
            settings=_settings(catalog=False, marketplace=False),
            strategies=[],
            synthetic=SyntheticReviewSource(rng=rng),
        )

        with pytest.raises(ReviewPersistenceError):
            service.fetch_reviews(store=store)

        assert len(store.rows) == 1

    def test_store_outage_during_synthetic_step_surfaces(self, products, store_factory, rng) -> None:
        service = ReviewIngestionService(
            settings=_settings(catalog=False, marketplace=False),
            strategies=[],
            synthetic=SyntheticReviewSource(rng=rng),
        )

        with pytest.raises(CatalogStoreUnavailableError):
            service.fetch_reviews(store=store_factory(products, unavailable=True))

    def test_seeded_runs_are_reproducible(self, products, store_factory, sleeper, http_session, make_response, fake_store_body) -> None:
        settings = _settings(catalog=True, marketplace=False)
        results = []
        for _ in range(2):
            result = _service(
                settings,
                catalog_session=http_session([make_response(200, fake_store_body([5, 3]))]),
                marketplace_session=http_session([make_response(200, {})]),
                sleeper=sleeper,
                rng=random.Random(2024),
            ).fetch_reviews(store=store_factory(products))
            results.append([(r.product_id, r.reviewer_name, r.comment) for r in result.reviews])

        assert results[0] == results[1]

    def test_settings_are_not_mutated_by_a_run(self, store, sleeper, http_session, make_response) -> None:
        settings = _settings(catalog=False, marketplace=False)
        snapshot = replace(settings)

        _service(
            settings,
            catalog_session=http_session([make_response(200, [])]),
            marketplace_session=http_session([make_response(200, {})]),
            sleeper=sleeper,
        ).fetch_reviews(store=store)

        assert settings == snapshot
