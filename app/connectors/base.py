"""
app/connectors/base.py

Base connector abstraction and shared HTTP retry mechanics.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import requests

from app.config import RetrySettings
from app.logging_utils import excerpt, log_event

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


@dataclass(frozen=True)
class AttemptRecord:
    """
    Diagnostic record for one upstream attempt.
    """

    attempt: int
    status_code: int | None
    duration_ms: float
    error: str | None = None
    delay_before_next_ms: int | None = None


class ConnectorRequestError(RuntimeError):
    """
    Raised when a connector cannot fetch data from its upstream.
    """

    retryable = False

    def __init__(self, message: str, *, source: str) -> None:
        super().__init__(message)
        self.source = source
        self.attempts: list[AttemptRecord] = []
        self.exhausted = False


class NetworkError(ConnectorRequestError):
    """
    Connection failure or socket timeout talking to an upstream.
    """

    retryable = True


class UpstreamError(ConnectorRequestError):
    """
    Upstream answered with a non-2xx status.
    """

    def __init__(
        self,
        message: str,
        *,
        source: str,
        status_code: int,
        body_excerpt: str = "",
    ) -> None:
        super().__init__(message, source=source)
        self.status_code = status_code
        self.body_excerpt = body_excerpt
        self.retryable = status_code in RETRYABLE_STATUS_CODES


@dataclass(frozen=True)
class RetryPolicy:
    """
    Linear backoff: the wait before retry n (0-based) is base_delay * (n + 1).
    """

    max_retries: int = 3
    base_delay_seconds: float = 2.0

    @classmethod
    def from_settings(cls, settings: RetrySettings) -> RetryPolicy:
        return cls(
            max_retries=max(0, settings.max_retries),
            base_delay_seconds=max(0.0, settings.base_delay_seconds),
        )

    def delay_for(self, attempt: int) -> float:
        return self.base_delay_seconds * (attempt + 1)


class RetryPhase(str, Enum):
    IDLE = "idle"
    ATTEMPTING = "attempting"
    BACKING_OFF = "backing_off"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


@dataclass
class RetryState:
    """
    Mutable state scoped to one RetryExecutor.execute call.
    """

    attempt: int = 0
    phase: RetryPhase = RetryPhase.IDLE
    last_error: ConnectorRequestError | None = None
    next_delay: float = 0.0
    history: list[AttemptRecord] = field(default_factory=list)


class RetryExecutor:
    """
    Execute one zero-argument HTTP operation with bounded linear backoff.

    Retryable failures are the statuses in RETRYABLE_STATUS_CODES plus
    connection errors and timeouts. Anything else propagates immediately.
    """

    def __init__(
        self,
        *,
        source: str,
        policy: RetryPolicy,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.source = source
        self.policy = policy
        self._sleep = sleep
        self._clock = clock

    def execute(self, operation: Callable[[], requests.Response]) -> requests.Response:
        state = RetryState()

        while True:
            state.phase = RetryPhase.ATTEMPTING
            started = self._clock()
            try:
                response = operation()
                error = self._classify_response(response)
                status_code: int | None = response.status_code
            except (requests.Timeout, requests.ConnectionError) as exc:
                error = NetworkError(f"{self.source}: {exc.__class__.__name__}: {exc}", source=self.source)
                error.__cause__ = exc
                status_code = None
            except requests.RequestException as exc:
                error = ConnectorRequestError(f"{self.source}: request failed: {exc}", source=self.source)
                error.__cause__ = exc
                status_code = None
            duration_ms = round((self._clock() - started) * 1000.0, 2)

            if error is None:
                state.phase = RetryPhase.SUCCEEDED
                self._record(state, status_code, duration_ms, None, None)
                return response

            state.last_error = error
            can_retry = error.retryable and state.attempt < self.policy.max_retries
            delay = self.policy.delay_for(state.attempt) if can_retry else None
            self._record(
                state,
                status_code,
                duration_ms,
                str(error),
                int(round(delay * 1000)) if delay is not None else None,
            )

            if not can_retry:
                state.phase = RetryPhase.EXHAUSTED
                error.attempts = list(state.history)
                error.exhausted = error.retryable
                log_event(
                    logger,
                    logging.ERROR,
                    "upstream_request_failed",
                    source=self.source,
                    attempts=len(state.history),
                    retryable=error.retryable,
                    status=status_code,
                    error=str(error),
                )
                raise error

            state.phase = RetryPhase.BACKING_OFF
            state.next_delay = delay
            self._sleep(delay)
            state.attempt += 1

    def _classify_response(self, response: requests.Response) -> UpstreamError | None:
        if 200 <= response.status_code < 300:
            return None
        return UpstreamError(
            f"{self.source}: HTTP {response.status_code} {response.reason or ''}".rstrip(),
            source=self.source,
            status_code=response.status_code,
            body_excerpt=excerpt(response.text),
        )

    def _record(
        self,
        state: RetryState,
        status_code: int | None,
        duration_ms: float,
        error: str | None,
        delay_ms: int | None,
    ) -> None:
        record = AttemptRecord(
            attempt=state.attempt,
            status_code=status_code,
            duration_ms=duration_ms,
            error=error,
            delay_before_next_ms=delay_ms,
        )
        state.history.append(record)
        log_event(
            logger,
            logging.INFO if error is None else logging.WARNING,
            "upstream_attempt",
            source=self.source,
            attempt=record.attempt,
            max_retries=self.policy.max_retries,
            status=status_code,
            duration_ms=duration_ms,
            wait_ms=delay_ms,
            error=error,
        )


class BaseConnector(ABC):
    """
    Connector interface for fetching one raw upstream payload.
    """

    source: str

    def __init__(
        self,
        *,
        source: str,
        retry_policy: RetryPolicy,
        timeout_seconds: float,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.source = source
        self._session = session or requests.Session()
        self._timeout_seconds = timeout_seconds
        self._executor = RetryExecutor(source=source, policy=retry_policy, sleep=sleep)

    @abstractmethod
    def fetch_payload(self) -> Any:
        """
        Fetch the raw upstream payload.
        """

    def _request_json(
        self,
        *,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Execute an HTTP request through the retry executor and return parsed JSON.

        A body that is not JSON is returned as None so adapters report it as an
        unrecognized payload.
        """

        response = self._executor.execute(
            lambda: self._session.request(
                method=method,
                url=url,
                params=params,
                headers=headers,
                timeout=self._timeout_seconds,
            )
        )
        try:
            return response.json()
        except ValueError:
            logger.warning(
                "Connector response was not valid JSON source=%s url=%s body=%s",
                self.source,
                url,
                excerpt(response.text),
            )
            return None
