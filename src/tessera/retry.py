"""Minimal caller-side async retry.

The client itself never retries: each call sends one request and returns one
result or one error. Wrap calls with :func:`retry_async` when bounded retries
are wanted.

Example:
    ```python
    response = await retry_async(
        lambda: client.ask(Model.gpt41_mini(), "Hello"),
        policy=RetryPolicy(max_attempts=3),
    )
    ```
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
import random
import time
from typing import TYPE_CHECKING, TypeVar

import httpx

from tessera._http import RETRYABLE_STATUS_CODES
from tessera.errors import APIError, _walk_exception_chain
from tessera.openai.errors import ErrorKind, OpenAIError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry policy with exponential backoff and optional jitter."""

    # Defaults are intentionally conservative: retries should help without
    # surprising tail-latency.
    max_attempts: int = 2
    initial_delay_s: float = 0.5
    backoff_multiplier: float = 2.0
    max_delay_s: float = 5.0
    jitter: bool = True  # "full jitter" when enabled
    max_elapsed_s: float | None = 15.0

    def __post_init__(self) -> None:
        """Validate invariants to keep retry behavior predictable."""
        if self.max_attempts < 1:
            raise ValueError("RetryPolicy.max_attempts must be >= 1")
        if self.initial_delay_s < 0:
            raise ValueError("RetryPolicy.initial_delay_s must be >= 0")
        if self.backoff_multiplier <= 0:
            raise ValueError("RetryPolicy.backoff_multiplier must be > 0")
        if self.max_delay_s < 0:
            raise ValueError("RetryPolicy.max_delay_s must be >= 0")
        if self.max_elapsed_s is not None and self.max_elapsed_s < 0:
            raise ValueError("RetryPolicy.max_elapsed_s must be >= 0 or None")


def _transport_cause(exc: BaseException) -> APIError | None:
    if isinstance(exc, OpenAIError):
        cause = exc.cause if exc.kind is ErrorKind.REQUEST_ERROR else None
        return cause if isinstance(cause, APIError) else None
    return exc if isinstance(exc, APIError) else None


def _retry_after_from_error(exc: BaseException) -> float | None:
    api_error = _transport_cause(exc)
    if api_error is not None:
        v = api_error.retry_after_s
        if isinstance(v, (int, float)) and v >= 0:
            return float(v)
    return None


def _is_transient_network_error(exc: BaseException) -> bool:
    for e in _walk_exception_chain(exc):
        if isinstance(e, (TimeoutError, httpx.TimeoutException, httpx.TransportError)):
            return True
    return False


def should_retry(exc: BaseException) -> bool:
    """Return True when a failed call is worth retrying.

    Contract:
    - Cancellation is never retried.
    - Only ``request_error`` failures are retried, and only when the wrapped
      APIError is marked retryable or carries a known retryable status code.
    - Other error kinds (empty response, decode failures) are final.
    - A bare transport exception is retried when it is a timeout or
      connection failure.
    """
    if isinstance(exc, asyncio.CancelledError):
        return False

    if isinstance(exc, OpenAIError) and exc.kind is not ErrorKind.REQUEST_ERROR:
        return False

    api_error = _transport_cause(exc)
    if api_error is not None:
        return (api_error.retryable is True) or (
            isinstance(api_error.status_code, int)
            and api_error.status_code in RETRYABLE_STATUS_CODES
        )

    return _is_transient_network_error(exc)


def _compute_backoff_delay(policy: RetryPolicy, *, retry_index: int) -> float:
    # retry_index starts at 1 for the first retry sleep.
    base = policy.initial_delay_s * (
        policy.backoff_multiplier ** max(0, retry_index - 1)
    )
    base = min(policy.max_delay_s, base)
    if base <= 0:
        return 0.0
    if not policy.jitter:
        return base
    # Full jitter: random in [0, base] to avoid thundering herd.
    return random.random() * base  # noqa: S311


async def retry_async(
    factory: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy,
    should_retry: Callable[[BaseException], bool] = should_retry,
) -> T:
    """Run an async factory with bounded retries."""
    start = time.monotonic()

    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await factory()
        except Exception as exc:
            if not should_retry(exc) or attempt >= policy.max_attempts:
                raise

            retry_after = _retry_after_from_error(exc)
            delay = _compute_backoff_delay(policy, retry_index=attempt)
            if retry_after is not None:
                delay = max(delay, retry_after)

            if policy.max_elapsed_s is not None:
                remaining = policy.max_elapsed_s - (time.monotonic() - start)
                if remaining <= 0:
                    raise
                delay = min(delay, remaining)

            log.debug("Attempt %d failed (%s); retrying in %.2fs", attempt, exc, delay)
            if delay > 0:
                await asyncio.sleep(delay)

    raise RuntimeError("retry_async exhausted without a result")  # pragma: no cover
