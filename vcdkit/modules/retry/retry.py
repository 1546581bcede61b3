"""
Transient-retry executor.

Some read paths on the server fail intermittently and succeed when simply
asked again. Retrying is an explicit, per-operation-kind decision: only kinds
with a registered policy are retried, and only for the error class that
policy names. Everything else surfaces on its first occurrence.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional, TypeVar

from vcdkit.modules.errors import TransportError

logger = logging.getLogger("vcdkit.retry")

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 4
DEFAULT_BACKOFF = 0.2  # seconds


def never_transient(error: BaseException) -> bool:
    return False


def is_server_error(error: BaseException) -> bool:
    """Transport failures with a 5xx status."""
    return isinstance(error, TransportError) and error.is_server_error


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration for one operation kind."""

    name: str
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    backoff: float = DEFAULT_BACKOFF
    is_transient: Callable[[BaseException], bool] = never_transient

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.backoff < 0:
            raise ValueError("backoff must not be negative")


NO_RETRY = RetryPolicy(name="none", max_attempts=1, backoff=0.0)

# Edge gateway reads are known to fail spuriously with a server error and
# succeed on a later attempt.
EDGE_GATEWAY_READ = RetryPolicy(name="edgeGateway", is_transient=is_server_error)

TRANSIENT_READ_POLICIES: Dict[str, RetryPolicy] = {
    EDGE_GATEWAY_READ.name: EDGE_GATEWAY_READ,
}


def get_retry_policy(
    kind: str, policies: Optional[Dict[str, RetryPolicy]] = None
) -> RetryPolicy:
    """Policy registered for an operation kind, or NO_RETRY."""
    table = TRANSIENT_READ_POLICIES if policies is None else policies
    return table.get(kind, NO_RETRY)


async def retry_on_transient(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy = NO_RETRY,
) -> T:
    """
    Run an idempotent operation, retrying allow-listed failures.

    Args:
        operation: Zero-argument coroutine function
        policy: Retry policy of the operation kind

    Returns:
        Result of the first successful attempt

    Raises:
        The first non-transient error, or the last transient error once
        policy.max_attempts attempts have been made
    """
    attempt = 1
    while True:
        try:
            return await operation()
        except Exception as e:
            if not policy.is_transient(e):
                raise
            if attempt >= policy.max_attempts:
                logger.debug(
                    f"{policy.name}: attempt {attempt}/{policy.max_attempts} failed, giving up: {e}"
                )
                raise
            logger.debug(
                f"{policy.name}: attempt {attempt}/{policy.max_attempts} failed with a "
                f"transient error, retrying in {policy.backoff}s: {e}"
            )
            attempt += 1
            await asyncio.sleep(policy.backoff)
