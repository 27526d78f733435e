"""Error taxonomy, localized messages and transport error mapping."""

from __future__ import annotations

import asyncio
import copy
import pickle

import httpx
import pytest

from tessera import messages
from tessera._errors import (
    error_for_status,
    extract_retry_after_s,
    parse_retry_after,
    wrap_transport_error,
)
from tessera.errors import APIError, RateLimitError, TesseraError
from tessera.openai.errors import ErrorKind, OpenAIError

pytestmark = pytest.mark.unit


# =============================================================================
# OpenAIError
# =============================================================================


@pytest.mark.parametrize(
    ("error", "message"),
    [
        (OpenAIError.empty_response(), "OpenAI returned an empty response"),
        (
            OpenAIError.content_filter_applied(),
            "Content was filtered by OpenAI's safety system",
        ),
        (OpenAIError.max_length_exceeded(), "Response exceeded maximum length limit"),
        (
            OpenAIError.unexpected_message_role(),
            "Received unexpected message role in response",
        ),
    ],
)
def test_plain_kinds_have_fixed_messages(error: OpenAIError, message: str) -> None:
    assert error.cause is None
    assert error.user_friendly_message == message
    assert str(error) == message


def test_wrapping_kinds_embed_the_cause() -> None:
    cause = APIError("OpenAI request failed (status=500): boom", status_code=500)

    err = OpenAIError.request_error(cause)

    assert err.kind is ErrorKind.REQUEST_ERROR
    assert err.cause is cause
    assert err.status_code == 500
    assert str(err) == "Network request failed: OpenAI request failed (status=500): boom"


def test_request_error_carries_cause_hint() -> None:
    cause = APIError("denied", status_code=401, hint="Check OPENAI_API_KEY")

    assert OpenAIError.request_error(cause).hint == "Check OPENAI_API_KEY"


@pytest.mark.parametrize(
    "kind", [ErrorKind.REQUEST_ERROR, ErrorKind.JSON_SCHEMA_DECODING_ERROR]
)
def test_wrapping_kinds_require_a_cause(kind: ErrorKind) -> None:
    with pytest.raises(ValueError, match="requires a cause"):
        OpenAIError(kind)


def test_status_code_is_none_without_transport_cause() -> None:
    err = OpenAIError.json_schema_decoding_error(ValueError("bad json"))

    assert err.status_code is None
    assert isinstance(err, TesseraError)


def test_messages_follow_language_switch_after_raise() -> None:
    err = OpenAIError.empty_response()
    messages.register_catalog(
        "fr",
        {
            "openai.error.empty_response": "OpenAI a renvoyé une réponse vide",
            "openai.error.request_error": "Échec de la requête réseau : {cause}",
        },
    )

    messages.set_language("fr")

    assert str(err) == "OpenAI a renvoyé une réponse vide"
    assert (
        str(OpenAIError.request_error(APIError("timeout")))
        == "Échec de la requête réseau : timeout"
    )
    # Kinds without a catalog entry fall back to English.
    assert str(OpenAIError.max_length_exceeded()) == (
        "Response exceeded maximum length limit"
    )


def test_bad_catalog_entry_falls_back_to_default() -> None:
    messages.register_catalog("xx", {"openai.error.request_error": "{missing}"})
    messages.set_language("xx")

    assert str(OpenAIError.request_error(APIError("boom"))) == (
        "Network request failed: boom"
    )


@pytest.mark.parametrize(
    "error",
    [
        OpenAIError.empty_response(),
        OpenAIError.content_filter_applied(),
        OpenAIError.request_error(
            APIError("denied", status_code=401, hint="Check OPENAI_API_KEY")
        ),
    ],
)
def test_errors_survive_copy_and_pickle(error: OpenAIError) -> None:
    for clone in (copy.copy(error), pickle.loads(pickle.dumps(error))):
        assert type(clone) is OpenAIError
        assert clone.kind is error.kind
        assert clone.hint == error.hint
        assert clone.status_code == error.status_code
        assert str(clone) == str(error)


def test_repr_names_kind() -> None:
    assert repr(OpenAIError.empty_response()) == (
        "OpenAIError(kind='empty_response', cause=None)"
    )


# =============================================================================
# Transport error mapping
# =============================================================================


def test_error_for_status_builds_response_error() -> None:
    err = error_for_status(500, "Server exploded", context="OpenAI")

    assert type(err) is APIError
    assert err.status_code == 500
    assert err.retryable is True
    assert err.phase == "response"
    assert str(err) == "OpenAI request failed (status=500): Server exploded"


def test_error_for_status_rate_limit_reads_retry_after() -> None:
    err = error_for_status(
        429, "Slow down", headers=httpx.Headers({"Retry-After": "2"})
    )

    assert isinstance(err, RateLimitError)
    assert err.retry_after_s == 2.0
    assert err.retryable is True


def test_error_for_status_client_errors_are_final() -> None:
    err = error_for_status(400, "Invalid model")

    assert err.retryable is False
    assert err.hint is None


@pytest.mark.parametrize("status", [401, 403])
def test_error_for_status_auth_failures_get_hint(status: int) -> None:
    err = error_for_status(status, "Incorrect API key provided")

    assert err.hint is not None
    assert "OPENAI_API_KEY" in err.hint


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("3", 3.0), ("0.5", 0.5), ("", None), ("soon", None), ("-1", None)],
)
def test_parse_retry_after(raw: str, expected: float | None) -> None:
    assert parse_retry_after(httpx.Headers({"Retry-After": raw})) == expected


def test_parse_retry_after_without_headers() -> None:
    assert parse_retry_after(None) is None


def test_wrap_transport_error_marks_connect_errors_retryable() -> None:
    err = wrap_transport_error(
        httpx.ConnectError("connection refused"), phase="request", context="OpenAI"
    )

    assert err.retryable is True
    assert err.phase == "request"
    assert err.status_code is None
    assert str(err) == "OpenAI request failed: connection refused"


def test_wrap_transport_error_marks_timeouts_retryable() -> None:
    err = wrap_transport_error(httpx.ReadTimeout("read timed out"), phase="request")

    assert err.retryable is True


def test_wrap_transport_error_other_exceptions_are_final() -> None:
    err = wrap_transport_error(ValueError(""), phase="plugin")

    assert err.retryable is False
    assert str(err) == "plugin failed: ValueError"


def test_wrap_transport_error_enriches_existing_api_error() -> None:
    original = APIError("boom")

    err = wrap_transport_error(original, phase="request", context="OpenAI")

    assert err is original
    assert err.phase == "request"
    assert err.context == "OpenAI"


def test_wrap_transport_error_reraises_cancellation() -> None:
    with pytest.raises(asyncio.CancelledError):
        wrap_transport_error(asyncio.CancelledError(), phase="request")


def test_extract_retry_after_walks_the_chain() -> None:
    inner = APIError("limited", retry_after_s=4)
    try:
        try:
            raise inner
        except APIError as e:
            raise RuntimeError("outer") from e
    except RuntimeError as outer:
        assert extract_retry_after_s(outer) == 4.0
