"""
app/connectors package marker.
"""

from app.connectors.base import (
    AttemptRecord,
    BaseConnector,
    ConnectorRequestError,
    NetworkError,
    RetryExecutor,
    RetryPolicy,
    UpstreamError,
)
from app.connectors.fake_store_connector import FakeStoreConnector
from app.connectors.marketplace_connector import MarketplaceReviewsConnector

__all__ = [
    "AttemptRecord",
    "BaseConnector",
    "ConnectorRequestError",
    "FakeStoreConnector",
    "MarketplaceReviewsConnector",
    "NetworkError",
    "RetryExecutor",
    "RetryPolicy",
    "UpstreamError",
]
