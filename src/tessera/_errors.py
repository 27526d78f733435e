"""Transport-side error helpers.

The REST collaborator maps every failure into APIError here so retry metadata
is attached in one place, without brittle substring matching downstream.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from tessera._http import RETRYABLE_STATUS_CODES
from tessera.errors import APIError, RateLimitError, _walk_exception_chain


def extract_status_code(exc: BaseException) -> int | None:
    """Walk the exception chain to find an HTTP status code."""
    for e in _walk_exception_chain(exc):
        for attr in ("status_code", "status"):
            value = getattr(e, attr, None)
            if isinstance(value, int) and 100 <= value <= 599:
                return value
        response = getattr(e, "response", None)
        value = getattr(response, "status_code", None)
        if isinstance(value, int) and 100 <= value <= 599:
            return value
    return None


def parse_retry_after(headers: Any) -> float | None:
    """Return the ``Retry-After`` header in seconds, if present and numeric."""
    if headers is None:
        return None
    raw: Any = None
    try:
        raw = headers.get("Retry-After")
    except AttributeError:
        return None
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        seconds = float(raw)
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


def extract_retry_after_s(exc: BaseException) -> float | None:
    """Walk the exception chain to find a retry-after delay in seconds."""
    for e in _walk_exception_chain(exc):
        value = getattr(e, "retry_after_s", None)
        if isinstance(value, (int, float)) and value >= 0:
            return float(value)
        response = getattr(e, "response", None)
        seconds = parse_retry_after(getattr(response, "headers", None))
        if seconds is not None:
            return seconds
    return None


def auth_hint(status_code: int | None) -> str | None:
    """Return a credentials hint for authentication failures."""
    if status_code in {401, 403}:
        return "Check credentials/permissions (try setting OPENAI_API_KEY or Config.api_key)."
    return None


def error_for_status(
    status_code: int,
    message: str,
    *,
    headers: Any = None,
    context: str | None = None,
) -> APIError:
    """Build the APIError for a non-2xx response."""
    err_cls: type[APIError] = RateLimitError if status_code == 429 else APIError
    retry_after_s = parse_retry_after(headers)
    prefix = f"{context} request failed" if context else "Request failed"
    return err_cls(
        f"{prefix} (status={status_code}): {message}",
        hint=auth_hint(status_code),
        retryable=status_code in RETRYABLE_STATUS_CODES or retry_after_s is not None,
        status_code=status_code,
        retry_after_s=retry_after_s,
        phase="response",
        context=context,
    )


def wrap_transport_error(
    exc: BaseException,
    *,
    phase: str,
    context: str | None = None,
    message: str | None = None,
    hint: str | None = None,
) -> APIError:
    """Map httpx and other transport exceptions into APIError."""
    if isinstance(exc, asyncio.CancelledError):
        raise exc

    # Already wrapped: fill in missing context only.
    if isinstance(exc, APIError):
        if exc.phase is None:
            exc.phase = phase
        if exc.context is None:
            exc.context = context
        if hint is not None and exc.hint is None:
            exc.hint = hint
        return exc

    status_code = extract_status_code(exc)
    retry_after_s = extract_retry_after_s(exc)

    retryable = retry_after_s is not None
    if isinstance(status_code, int) and status_code in RETRYABLE_STATUS_CODES:
        retryable = True
    else:
        for e in _walk_exception_chain(exc):
            if isinstance(e, (httpx.TimeoutException, httpx.TransportError)):
                retryable = True
                break

    msg = message or (f"{context} {phase} failed" if context else f"{phase} failed")
    status_note = f" (status={status_code})" if isinstance(status_code, int) else ""
    cause = str(exc) or type(exc).__name__
    err_cls: type[APIError] = RateLimitError if status_code == 429 else APIError
    return err_cls(
        f"{msg}{status_note}: {cause}",
        hint=hint if hint is not None else auth_hint(status_code),
        retryable=retryable,
        status_code=status_code,
        retry_after_s=retry_after_s,
        phase=phase,
        context=context,
    )
