"""
Retry Module - Black Box Interface

Purpose: Retry narrowly allow-listed flaky reads
Interface: retry_on_transient(), get_retry_policy(), RetryPolicy
Hidden: Attempt counting, fixed backoff

Not a blanket policy: unlisted operation kinds get exactly one attempt.
"""

from .retry import (
    DEFAULT_BACKOFF,
    DEFAULT_MAX_ATTEMPTS,
    EDGE_GATEWAY_READ,
    NO_RETRY,
    TRANSIENT_READ_POLICIES,
    RetryPolicy,
    get_retry_policy,
    is_server_error,
    retry_on_transient,
)

__all__ = [
    "RetryPolicy",
    "retry_on_transient",
    "get_retry_policy",
    "is_server_error",
    "NO_RETRY",
    "EDGE_GATEWAY_READ",
    "TRANSIENT_READ_POLICIES",
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_BACKOFF",
]
