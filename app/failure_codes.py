"""Shared failure code constants for review source outcomes."""

MISSING_CREDENTIALS = "missing_credentials"
EMPTY_CATALOG = "empty_catalog"
CATALOG_UNAVAILABLE = "catalog_unavailable"
UPSTREAM_REQUEST_FAILED = "upstream_request_failed"
UPSTREAM_RETRIES_EXHAUSTED = "upstream_retries_exhausted"
NO_REVIEWS_IN_PAYLOAD = "no_reviews_in_payload"
UNEXPECTED_ERROR = "unexpected_error"

# Failures that come from upstream availability rather than local setup.
TRANSIENT_FAILURES = [
    UPSTREAM_RETRIES_EXHAUSTED,
    CATALOG_UNAVAILABLE,
]

CONFIGURATION_FAILURES = [
    MISSING_CREDENTIALS,
    EMPTY_CATALOG,
]
