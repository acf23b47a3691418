"""
app/connectors/fake_store_connector.py

FakeStore product catalog connector.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

import requests

from app.config import CatalogSourceSettings
from app.connectors.base import BaseConnector, RetryPolicy


class FakeStoreConnector(BaseConnector):
    """
    Fetches a page of products, with aggregate ratings, from the FakeStore API.
    """

    def __init__(
        self,
        *,
        settings: CatalogSourceSettings,
        retry_policy: RetryPolicy,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(
            source="fake_store",
            retry_policy=retry_policy,
            timeout_seconds=settings.timeout_seconds,
            session=session,
            sleep=sleep,
        )
        self._settings = settings

    def fetch_payload(self) -> Any:
        return self._request_json(
            method="GET",
            url=self._settings.base_url,
            params={"limit": self._settings.product_limit},
        )
