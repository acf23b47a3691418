"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache

from db.config import load_env_files

CATALOG_SOURCE_NAME = "catalog"
MARKETPLACE_SOURCE_NAME = "marketplace"


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_optional_int_env(name: str) -> int | None:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None or not raw_value.strip():
        return None
    try:
        return int(raw_value)
    except ValueError:
        return None


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class RetrySettings:
    """
    Bounded linear-backoff policy for upstream review requests.
    """

    max_retries: int = 3
    base_delay_ms: int = 2000

    @property
    def base_delay_seconds(self) -> float:
        return self.base_delay_ms / 1000.0


@dataclass(frozen=True)
class ReviewSourceConfig:
    """
    One entry of the ordered source list.

    Lower priority values are tried first.
    """

    name: str
    enabled: bool
    priority: int


@dataclass(frozen=True)
class CatalogSourceSettings:
    """
    Free product catalog (FakeStore) connector settings.
    """

    base_url: str = "https://fakestoreapi.com/products"
    product_limit: int = 5
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class MarketplaceSourceSettings:
    """
    Paid marketplace reviews API (RapidAPI) connector settings.
    """

    api_key: str | None = None
    host: str = "real-time-amazon-data.p.rapidapi.com"
    item_id: str = "B08N5WRWNW"
    country: str = "US"
    max_reviews: int = 5
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class ReviewIngestionSettings:
    """
    Immutable process-wide configuration for the review ingestion pipeline.
    """

    sources: tuple[ReviewSourceConfig, ...] = (
        ReviewSourceConfig(name=CATALOG_SOURCE_NAME, enabled=True, priority=10),
        ReviewSourceConfig(name=MARKETPLACE_SOURCE_NAME, enabled=False, priority=20),
    )
    retry: RetrySettings = field(default_factory=RetrySettings)
    catalog: CatalogSourceSettings = field(default_factory=CatalogSourceSettings)
    marketplace: MarketplaceSourceSettings = field(default_factory=MarketplaceSourceSettings)
    random_seed: int | None = None

    def ordered_sources(self) -> list[ReviewSourceConfig]:
        """
        Return configured sources sorted by priority, declaration order breaking ties.
        """

        indexed = list(enumerate(self.sources))
        indexed.sort(key=lambda pair: (pair[1].priority, pair[0]))
        return [config for _, config in indexed]

    def is_enabled(self, name: str) -> bool:
        return any(config.name == name and config.enabled for config in self.sources)


@lru_cache(maxsize=1)
def get_review_ingestion_settings() -> ReviewIngestionSettings:
    """
    Return cached review ingestion settings from environment variables.
    """

    sources = (
        ReviewSourceConfig(
            name=CATALOG_SOURCE_NAME,
            enabled=_get_bool_env("CATALOG_SOURCE_ENABLED", True),
            priority=_get_int_env("CATALOG_SOURCE_PRIORITY", 10),
        ),
        ReviewSourceConfig(
            name=MARKETPLACE_SOURCE_NAME,
            enabled=_get_bool_env("MARKETPLACE_SOURCE_ENABLED", False),
            priority=_get_int_env("MARKETPLACE_SOURCE_PRIORITY", 20),
        ),
    )
    return ReviewIngestionSettings(
        sources=sources,
        retry=RetrySettings(
            max_retries=max(0, _get_int_env("REVIEW_FETCH_MAX_RETRIES", 3)),
            base_delay_ms=max(0, _get_int_env("REVIEW_FETCH_BASE_DELAY_MS", 2000)),
        ),
        catalog=CatalogSourceSettings(
            base_url=_get_str_env("CATALOG_SOURCE_URL", "https://fakestoreapi.com/products"),
            product_limit=max(1, _get_int_env("CATALOG_SOURCE_PRODUCT_LIMIT", 5)),
            timeout_seconds=max(1.0, _get_float_env("CATALOG_SOURCE_TIMEOUT_SECONDS", 10.0)),
        ),
        marketplace=MarketplaceSourceSettings(
            api_key=_get_optional_str_env("MARKETPLACE_API_KEY"),
            host=_get_str_env("MARKETPLACE_HOST", "real-time-amazon-data.p.rapidapi.com"),
            item_id=_get_str_env("MARKETPLACE_ITEM_ID", "B08N5WRWNW"),
            country=_get_str_env("MARKETPLACE_COUNTRY", "US"),
            max_reviews=max(1, _get_int_env("MARKETPLACE_MAX_REVIEWS", 5)),
            timeout_seconds=max(1.0, _get_float_env("MARKETPLACE_TIMEOUT_SECONDS", 30.0)),
        ),
        random_seed=_get_optional_int_env("REVIEW_RANDOM_SEED"),
    )
