"""
app/connectors/marketplace_connector.py

RapidAPI marketplace product reviews connector.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

import requests

from app.config import MarketplaceSourceSettings
from app.connectors.base import BaseConnector, RetryPolicy


class MarketplaceReviewsConnector(BaseConnector):
    """
    Fetches the top reviews for one marketplace item (ASIN).
    """

    def __init__(
        self,
        *,
        settings: MarketplaceSourceSettings,
        retry_policy: RetryPolicy,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(
            source="marketplace",
            retry_policy=retry_policy,
            timeout_seconds=settings.timeout_seconds,
            session=session,
            sleep=sleep,
        )
        self._settings = settings

    @property
    def url(self) -> str:
        return f"https://{self._settings.host}/product-reviews"

    def fetch_payload(self) -> Any:
        if not self._settings.api_key:
            raise ValueError("Marketplace API key is not configured.")

        return self._request_json(
            method="GET",
            url=self.url,
            params={
                "asin": self._settings.item_id,
                "country": self._settings.country,
                "sort_by": "TOP_REVIEWS",
                "star_rating": "ALL",
                "verified_purchases_only": "false",
                "images_or_videos_only": "false",
                "current_format_only": "false",
                "page": "1",
            },
            headers={
                "x-rapidapi-key": self._settings.api_key,
                "x-rapidapi-host": self._settings.host,
            },
        )
