"""Generic async REST collaborator.

Owns the HTTP mechanics (headers, JSON bodies, status handling) and a chain of
response plugins that may rewrite raw body bytes before anything is decoded.
Every failure leaves this module as an ``APIError``.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
import logging
import time
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

import httpx
from pydantic import BaseModel, ValidationError

from tessera._errors import error_for_status, wrap_transport_error
from tessera.errors import APIError

if TYPE_CHECKING:
    from types import TracebackType

log = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

#: Turns a non-2xx response body into a human-readable message; may raise.
ErrorBodyToMessage = Callable[[bytes], str]


def decode_model(
    model: type[ModelT], data: bytes | str, *, context: str | None = None
) -> ModelT:
    """Validate a JSON body into ``model``, raising APIError on failure."""
    try:
        return model.model_validate_json(data)
    except ValidationError as e:
        prefix = f"{context} " if context else ""
        raise APIError(
            f"{prefix}response could not be decoded as {model.__name__}: {e}",
            retryable=False,
            phase="decode",
            context=context,
        ) from e


@runtime_checkable
class ResponsePlugin(Protocol):
    """Transformation applied to every fetched body before decoding."""

    def apply(self, response: httpx.Response, data: bytes) -> bytes:
        """Return the (possibly rewritten) body bytes."""
        ...


class RESTClient:
    """Minimal JSON-over-HTTP client with ordered response plugins.

    Holds only configuration fixed at construction plus one shared
    ``httpx.AsyncClient``, so a single instance can serve concurrent calls.
    """

    def __init__(
        self,
        base_url: str,
        *,
        base_headers: Mapping[str, str] | None = None,
        response_plugins: Sequence[ResponsePlugin] = (),
        error_body_to_message: ErrorBodyToMessage | None = None,
        base_error_context: str | None = None,
        timeout_s: float = 60.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        ``timeout_s`` is applied to every request, including on an injected
        ``http_client``. An injected client is not closed by ``aclose``.
        """
        self.base_url = httpx.URL(base_url if base_url.endswith("/") else base_url + "/")
        self.base_headers: dict[str, str] = dict(base_headers or {})
        self.response_plugins: tuple[ResponsePlugin, ...] = tuple(response_plugins)
        self.error_body_to_message = error_body_to_message
        self.base_error_context = base_error_context
        self.timeout = httpx.Timeout(timeout_s)
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=self.timeout)

    async def fetch(self, method: str, path: str, *, json_body: Any = None) -> bytes:
        """Send one request and return the plugin-processed body of a 2xx response."""
        url = self.base_url.join(path.lstrip("/"))
        started = time.monotonic()
        try:
            response = await self._client.request(
                method,
                url,
                headers=self.base_headers,
                json=json_body,
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise wrap_transport_error(
                e, phase="request", context=self.base_error_context
            ) from e

        log.debug(
            "%s %s -> %d in %.3fs",
            method,
            url.path,
            response.status_code,
            time.monotonic() - started,
        )

        data = self._apply_plugins(response, response.content)

        if not response.is_success:
            message = self._error_message(response.status_code, data)
            log.warning(
                "%s %s returned %d: %s", method, url.path, response.status_code, message
            )
            raise error_for_status(
                response.status_code,
                message,
                headers=response.headers,
                context=self.base_error_context,
            )
        return data

    async def fetch_and_decode(
        self,
        method: str,
        path: str,
        model: type[ModelT],
        *,
        json_body: Any = None,
    ) -> ModelT:
        """Fetch and validate the body into the pydantic ``model``."""
        data = await self.fetch(method, path, json_body=json_body)
        return decode_model(model, data, context=self.base_error_context)

    def _apply_plugins(self, response: httpx.Response, data: bytes) -> bytes:
        for plugin in self.response_plugins:
            try:
                data = plugin.apply(response, data)
            except Exception as e:
                raise wrap_transport_error(
                    e,
                    phase="plugin",
                    context=self.base_error_context,
                    message=f"Response plugin {type(plugin).__name__} failed",
                ) from e
        return data

    def _error_message(self, status_code: int, data: bytes) -> str:
        if self.error_body_to_message is not None:
            try:
                return self.error_body_to_message(data)
            except Exception as exc:
                log.debug("Error body did not parse: %s", exc)
        reason = httpx.codes.get_reason_phrase(status_code)
        return f"HTTP {status_code} {reason}".rstrip()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> RESTClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
