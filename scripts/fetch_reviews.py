"""
Run one review fetch from the CLI.
"""

from __future__ import annotations

import argparse
import json
import logging
import random
from dataclasses import replace

from app.config import get_review_ingestion_settings
from app.services.review_ingestion_service import build_review_ingestion_service
from db.repositories.catalog_repository import CatalogRepository
from db.repositories.errors import CatalogStoreError
from db.session import session_scope


def main() -> int:
    parser = argparse.ArgumentParser(description="Fetch reviews from external sources into the catalog.")
    parser.add_argument(
        "--seed",
        dest="seed",
        type=int,
        default=None,
        help="Optional random seed; overrides REVIEW_RANDOM_SEED.",
    )
    parser.add_argument(
        "--mock-only",
        dest="mock_only",
        action="store_true",
        help="Disable every networked source and use synthetic reviews.",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    settings = get_review_ingestion_settings()
    if args.mock_only:
        settings = replace(
            settings,
            sources=tuple(replace(config, enabled=False) for config in settings.sources),
        )
    seed = args.seed if args.seed is not None else settings.random_seed
    service = build_review_ingestion_service(settings, rng=random.Random(seed))

    try:
        with session_scope() as db:
            result = service.fetch_reviews(store=CatalogRepository(db))
    except CatalogStoreError as exc:
        print(json.dumps({"success": False, "message": "Server error while fetching reviews", "error": str(exc)}))
        return 1

    payload = {
        "success": True,
        "source": result.source,
        "notice": result.notice,
        "reviews": [
            {
                "id": review.id,
                "product_id": review.product_id,
                "product_name": review.product_name,
                "user_name": review.reviewer_name,
                "rating": review.rating,
            }
            for review in result.reviews
        ],
        "attempts": [
            {"source": attempt.source, "status": attempt.status, "failure_code": attempt.failure_code}
            for attempt in result.attempts
        ],
    }
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
