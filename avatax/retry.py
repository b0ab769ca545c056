"""
Bounded, immediate retry of transient transport failures.
"""
from __future__ import annotations

import enum
import errno
import http.client
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

import requests
from urllib3.exceptions import ProtocolError

from avatax.log import AvataxLog

logger = logging.getLogger(__name__)

# Failure kinds a fresh attempt is expected to clear: timeouts, reset or
# refused connections, truncated bodies and malformed HTTP framing. Invalid
# outgoing header values are not here: they fail the same way every time.
TRANSIENT_ERRORS = (
    requests.exceptions.Timeout,
    requests.exceptions.ConnectionError,
    requests.exceptions.ChunkedEncodingError,
    TimeoutError,
    ConnectionResetError,
    ConnectionRefusedError,
    EOFError,
    http.client.HTTPException,
    ProtocolError,
)


def is_transient(exc: BaseException) -> bool:
    """Return True when *exc* is on the retry allow-list."""
    if isinstance(exc, requests.exceptions.SSLError):
        return False
    if isinstance(exc, TRANSIENT_ERRORS):
        return True
    return isinstance(exc, OSError) and exc.errno == errno.EINVAL


class Outcome(enum.Enum):
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class RetryResult:
    """Tagged result of :func:`execute_with_retry`."""

    outcome: Outcome
    attempts: int
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is Outcome.SUCCEEDED

    @property
    def exhausted(self) -> bool:
        return self.outcome is Outcome.EXHAUSTED


def execute_with_retry(
    operation: Callable[[], Any],
    max_attempts: int,
    *,
    label: str,
    log: AvataxLog,
) -> RetryResult:
    """
    Run *operation* until it succeeds or the attempt budget runs out.

    Transient failures are retried immediately; anything else propagates
    from the attempt that raised it. A budget below one still makes a
    single attempt.

    Args:
        operation:    Zero-argument callable performing one round trip.
        max_attempts: Total attempts allowed, including the first.
        label:        Context logged alongside the last error on exhaustion.
        log:          Logging collaborator.

    Returns:
        RetryResult tagged ``SUCCEEDED`` with the operation's value, or
        ``EXHAUSTED`` with the last transient error.
    """
    budget = max(max_attempts, 1)
    attempt = 0
    while True:
        attempt += 1
        try:
            value = operation()
        except Exception as exc:
            if not is_transient(exc):
                raise
            if attempt < budget:
                logger.debug(
                    "Transient failure on attempt %d/%d, retrying: %r",
                    attempt, budget, exc,
                )
                continue
            log.error(exc, label)
            return RetryResult(Outcome.EXHAUSTED, attempts=attempt, error=exc)
        return RetryResult(Outcome.SUCCEEDED, attempts=attempt, value=value)
