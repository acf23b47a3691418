"""
Base source strategy: retrieval plus normalization for one upstream origin.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import asdict

from app import failure_codes
from app.connectors.base import ConnectorRequestError, UpstreamError
from app.domain.reviews import CatalogStore, ParseOutcome, SourceFailure, SourceOutcome
from db.repositories.errors import CatalogStoreError

logger = logging.getLogger(__name__)


class PreconditionError(RuntimeError):
    """
    Raised when a source cannot run against the current catalog or configuration.
    """

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


class ReviewSourceStrategy(ABC):
    """
    One Source Strategy in the fallback chain.

    `run` never raises for expected failures; it reports them as a
    `SourceOutcome` carrying a typed `SourceFailure`.
    """

    name: str
    label: str

    def run(self, store: CatalogStore) -> SourceOutcome:
        try:
            parsed = self._collect(store)
        except PreconditionError as exc:
            return self._failed(exc.code, str(exc))
        except ConnectorRequestError as exc:
            return self._failed(
                failure_codes.UPSTREAM_RETRIES_EXHAUSTED if exc.exhausted else failure_codes.UPSTREAM_REQUEST_FAILED,
                str(exc),
                {
                    "status": exc.status_code if isinstance(exc, UpstreamError) else None,
                    "body_excerpt": exc.body_excerpt if isinstance(exc, UpstreamError) else "",
                    "retryable": exc.retryable,
                    "attempts": [asdict(record) for record in exc.attempts],
                },
            )
        except CatalogStoreError as exc:
            return self._failed(failure_codes.CATALOG_UNAVAILABLE, str(exc))

        if not parsed.drafts:
            return self._failed(
                failure_codes.NO_REVIEWS_IN_PAYLOAD,
                f"{self.label} returned no usable reviews.",
                {"recognized": parsed.recognized, "matched_path": parsed.matched_path, "skipped": parsed.skipped},
            )

        logger.info(
            "Source produced drafts source=%s drafts=%s matched_path=%s skipped=%s",
            self.name,
            len(parsed.drafts),
            parsed.matched_path,
            parsed.skipped,
        )
        return SourceOutcome(source=self.name, label=self.label, drafts=list(parsed.drafts))

    @abstractmethod
    def _collect(self, store: CatalogStore) -> ParseOutcome:
        """
        Retrieve and normalize upstream data into drafts with resolved product refs.
        """

    def _failed(self, code: str, message: str, detail: dict | None = None) -> SourceOutcome:
        return SourceOutcome(
            source=self.name,
            label=self.label,
            failure=SourceFailure(code=code, message=message, detail=detail or {}),
        )
