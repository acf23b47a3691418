"""
app/mappers/review_normalizer.py

Normalizer adapters from raw upstream review payloads to canonical drafts.

Upstream payloads are untyped and their field names vary by provider and
response version. Each logical field is resolved through an ordered tuple of
named extraction rules; the first rule whose path yields a valid typed value
wins, otherwise the field falls back to an explicit default.
"""

from __future__ import annotations

import math
import random
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from app.domain.reviews import (
    MAX_COMMENT_LENGTH,
    MAX_RATING,
    MAX_REVIEWER_NAME_LENGTH,
    MIN_RATING,
    CanonicalReviewDraft,
    ParseOutcome,
)

T = TypeVar("T")

DEFAULT_RATING = 5
DEFAULT_COMMENT = "Great product!"
MAX_REVIEWS_PER_CATALOG_PRODUCT = 2

_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")


@dataclass(frozen=True)
class FieldRule:
    """
    One named extraction path into a nested payload.
    """

    name: str
    path: tuple[str, ...]

    def lookup(self, payload: Any) -> Any:
        current = payload
        for key in self.path:
            if not isinstance(current, dict) or key not in current:
                return None
            current = current[key]
        return current


REVIEW_LIST_RULES: tuple[FieldRule, ...] = (
    FieldRule("data.reviews", ("data", "reviews")),
    FieldRule("reviews", ("reviews",)),
    FieldRule("data.data.reviews", ("data", "data", "reviews")),
)

REVIEWER_NAME_RULES: tuple[FieldRule, ...] = (
    FieldRule("reviewer.name", ("reviewer", "name")),
    FieldRule("reviewer_name", ("reviewer_name",)),
    FieldRule("review_author", ("review_author",)),
    FieldRule("name", ("name",)),
)

REVIEW_RATING_RULES: tuple[FieldRule, ...] = (
    FieldRule("rating", ("rating",)),
    FieldRule("star_rating", ("star_rating",)),
    FieldRule("review_star_rating", ("review_star_rating",)),
    FieldRule("stars", ("stars",)),
)

REVIEW_COMMENT_RULES: tuple[FieldRule, ...] = (
    FieldRule("review_comment", ("review_comment",)),
    FieldRule("review_title", ("review_title",)),
    FieldRule("title", ("title",)),
    FieldRule("comment", ("comment",)),
)

PRODUCT_LIST_RULES: tuple[FieldRule, ...] = (
    FieldRule("products", ("products",)),
    FieldRule("data", ("data",)),
)

PRODUCT_RATING_RULES: tuple[FieldRule, ...] = (
    FieldRule("rating.rate", ("rating", "rate")),
    FieldRule("rating", ("rating",)),
    FieldRule("rate", ("rate",)),
)

PRODUCT_TITLE_RULES: tuple[FieldRule, ...] = (
    FieldRule("title", ("title",)),
    FieldRule("name", ("name",)),
)

RATING_BAND_COMMENTS: dict[int, tuple[str, ...]] = {
    5: (
        "Excellent product! Highly recommend {product}.",
        "Amazing quality! {product} exceeded my expectations.",
        "Perfect! Best purchase I've made.",
    ),
    4: (
        "Very good product. {product} is worth the price.",
        "Great quality, would buy again.",
        "Good value for money.",
    ),
    3: (
        "Decent product. {product} is okay but could be better.",
        "Average quality, nothing special.",
        "It's fine, but expected more.",
    ),
    2: (
        "Not impressed with {product}. Quality could be better.",
        "Disappointed with the product.",
        "Below expectations.",
    ),
    1: (
        "Poor quality. Would not recommend {product}.",
        "Very disappointed with this purchase.",
        "Not worth the money.",
    ),
}


def first_match(
    payload: Any,
    rules: Sequence[FieldRule],
    coerce: Callable[[Any], T | None],
) -> tuple[T | None, str | None]:
    """
    Return the first coerced value and the name of the rule that produced it.
    """

    for rule in rules:
        value = coerce(rule.lookup(payload))
        if value is not None:
            return value, rule.name
    return None, None


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def parse_number(value: Any) -> float | None:
    """
    Parse a numeric rating from a number or a string with a leading number.

    Values beyond float range come back as signed infinity; NaN is rejected.
    """

    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            number = math.inf if value > 0 else -math.inf
    elif isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if match is None:
            return None
        number = float(match.group(1))
    else:
        return None
    if math.isnan(number):
        return None
    return number


def clamp_rating(value: Any, default: int = DEFAULT_RATING) -> int:
    """
    Coerce any rating input into an integer within [1, 5].
    """

    number = parse_number(value)
    if number is None:
        return default
    if math.isinf(number):
        return MAX_RATING if number > 0 else MIN_RATING
    return max(MIN_RATING, min(MAX_RATING, round_half_up(number)))


def truncate_comment(comment: str) -> str:
    return comment[:MAX_COMMENT_LENGTH]


def truncate_reviewer_name(name: str) -> str:
    return name[:MAX_REVIEWER_NAME_LENGTH].rstrip()


def _non_empty_text(value: Any) -> str | None:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


def _list_value(value: Any) -> list[Any] | None:
    return value if isinstance(value, list) else None


def normalize_marketplace_reviews(
    payload: Any,
    *,
    rng: random.Random,
    max_reviews: int = 5,
) -> ParseOutcome:
    """
    Convert a marketplace reviews API response into unresolved drafts.

    Only the first `max_reviews` entries of the review list are used.
    """

    reviews, matched_path = first_match(payload, REVIEW_LIST_RULES, _list_value)
    if reviews is None:
        return ParseOutcome(drafts=[], matched_path=None)

    drafts: list[CanonicalReviewDraft] = []
    skipped = 0
    for review in reviews[: max(0, max_reviews)]:
        if not isinstance(review, dict):
            skipped += 1
            continue

        reviewer_name, _ = first_match(review, REVIEWER_NAME_RULES, _non_empty_text)
        rating_value, _ = first_match(review, REVIEW_RATING_RULES, parse_number)
        comment, _ = first_match(review, REVIEW_COMMENT_RULES, _non_empty_text)

        drafts.append(
            CanonicalReviewDraft(
                reviewer_name=(
                    truncate_reviewer_name(reviewer_name)
                    if reviewer_name
                    else f"Amazon User {rng.randrange(100000, 1000000)}"
                ),
                rating=clamp_rating(rating_value),
                comment=truncate_comment(comment or DEFAULT_COMMENT),
            )
        )

    return ParseOutcome(drafts=drafts, matched_path=matched_path, skipped=skipped)


def reviews_for_rating(rating: int) -> int:
    """
    Number of reviews synthesized for a product with the given rounded rating.
    """

    return min(MAX_REVIEWS_PER_CATALOG_PRODUCT, math.ceil(rating / 2.5))


def comment_for_rating(rating: int, product_title: str, *, rng: random.Random) -> str:
    templates = RATING_BAND_COMMENTS.get(rating, RATING_BAND_COMMENTS[3])
    return truncate_comment(rng.choice(templates).format(product=product_title))


def normalize_catalog_products(payload: Any, *, rng: random.Random) -> ParseOutcome:
    """
    Synthesize unresolved drafts from catalog products and their aggregate ratings.

    Products without a usable aggregate rating are skipped.
    """

    if isinstance(payload, list):
        products, matched_path = payload, "$"
    else:
        products, matched_path = first_match(payload, PRODUCT_LIST_RULES, _list_value)
    if products is None:
        return ParseOutcome(drafts=[], matched_path=None)

    drafts: list[CanonicalReviewDraft] = []
    skipped = 0
    for product in products:
        if not isinstance(product, dict):
            skipped += 1
            continue

        rate, _ = first_match(product, PRODUCT_RATING_RULES, parse_number)
        if rate is None:
            skipped += 1
            continue

        rating = clamp_rating(rate)
        title, _ = first_match(product, PRODUCT_TITLE_RULES, _non_empty_text)
        for _ in range(reviews_for_rating(rating)):
            drafts.append(
                CanonicalReviewDraft(
                    reviewer_name=f"FakeStore User {rng.randrange(1000)}",
                    rating=rating,
                    comment=comment_for_rating(rating, title or "this product", rng=rng),
                )
            )

    return ParseOutcome(drafts=drafts, matched_path=matched_path, skipped=skipped)
