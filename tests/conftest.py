"""
Shared fakes for review ingestion tests.

Nothing here touches the network or a real database.
"""

from __future__ import annotations

import json
import random
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import pytest
import requests

from app.domain.reviews import CatalogProduct, CommittedReview
from db.repositories.errors import CatalogStoreUnavailableError, ReviewPersistenceError

FIXED_CREATED_AT = datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc)


def build_response(status_code: int, payload: Any = None, *, text: str | None = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    body = text if text is not None else json.dumps(payload if payload is not None else {})
    response._content = body.encode("utf-8")
    response.headers["Content-Type"] = "application/json"
    response.url = "https://upstream.test/"
    return response


class FakeHTTPSession:
    """
    Stand-in for requests.Session replaying queued responses or exceptions.

    The last queued outcome repeats once the queue is drained.
    """

    def __init__(self, outcomes: list[requests.Response | Exception]) -> None:
        self._outcomes = list(outcomes)
        self.calls: list[dict[str, Any]] = []

    def request(self, **kwargs: Any) -> requests.Response:
        self.calls.append(kwargs)
        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class InMemoryCatalogStore:
    """
    Catalog Store fake with the same per-record commit semantics as the
    SQLAlchemy repository.
    """

    def __init__(
        self,
        products: list[CatalogProduct] | None = None,
        *,
        unavailable: bool = False,
        fail_insert_after: int | None = None,
    ) -> None:
        self.products = list(products or [])
        self.unavailable = unavailable
        self.fail_insert_after = fail_insert_after
        self.rows: dict[int, dict[str, Any]] = {}
        self.list_calls: list[dict[str, Any]] = []

    def list_products(self, *, limit: int, order_random: bool = False) -> list[CatalogProduct]:
        self.list_calls.append({"limit": limit, "order_random": order_random})
        if self.unavailable:
            raise CatalogStoreUnavailableError("connection refused")
        return self.products[:limit]

    def insert_review(self, *, product_id: int, reviewer_name: str, rating: int, comment: str) -> int:
        if self.fail_insert_after is not None and len(self.rows) >= self.fail_insert_after:
            raise ReviewPersistenceError("lost connection during insert")
        review_id = len(self.rows) + 1
        self.rows[review_id] = {
            "product_id": product_id,
            "user_name": reviewer_name,
            "rating": rating,
            "comment": comment,
        }
        return review_id

    def get_review_with_product(self, review_id: int) -> CommittedReview:
        row = self.rows[review_id]
        product = next(product for product in self.products if product.id == row["product_id"])
        return CommittedReview(
            id=review_id,
            product_id=product.id,
            reviewer_name=row["user_name"],
            rating=row["rating"],
            comment=row["comment"],
            created_at=FIXED_CREATED_AT,
            product_name=product.name,
            product_image=f"/images/{product.id}.png",
        )


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def marketplace_payload(count: int = 5, *, long_comment_index: int | None = None) -> dict[str, Any]:
    reviews = []
    for index in range(count):
        comment = "x" * 700 if index == long_comment_index else f"Review body {index}"
        reviews.append(
            {
                "review_author": f"Shopper {index}",
                "review_star_rating": str((index % 5) + 1),
                "review_comment": comment,
            }
        )
    return {"status": "OK", "data": {"asin": "B08N5WRWNW", "reviews": reviews}}


def fake_store_payload(rates: list[float]) -> list[dict[str, Any]]:
    return [
        {
            "id": index + 1,
            "title": f"Store Item {index + 1}",
            "price": 19.99,
            "rating": {"rate": rate, "count": 120},
        }
        for index, rate in enumerate(rates)
    ]


@pytest.fixture()
def products() -> list[CatalogProduct]:
    return [
        CatalogProduct(id=1, name="Wireless Mouse"),
        CatalogProduct(id=2, name="Mechanical Keyboard"),
        CatalogProduct(id=3, name="USB-C Hub"),
    ]


@pytest.fixture()
def store(products: list[CatalogProduct]) -> InMemoryCatalogStore:
    return InMemoryCatalogStore(products)


@pytest.fixture()
def empty_store() -> InMemoryCatalogStore:
    return InMemoryCatalogStore([])


@pytest.fixture()
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture()
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture()
def make_response() -> Callable[..., requests.Response]:
    return build_response


@pytest.fixture()
def http_session() -> type[FakeHTTPSession]:
    return FakeHTTPSession


@pytest.fixture()
def store_factory() -> type[InMemoryCatalogStore]:
    return InMemoryCatalogStore


@pytest.fixture()
def marketplace_body() -> Callable[..., dict[str, Any]]:
    return marketplace_payload


@pytest.fixture()
def fake_store_body() -> Callable[[list[float]], list[dict[str, Any]]]:
    return fake_store_payload
