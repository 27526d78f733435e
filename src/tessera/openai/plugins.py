"""Response plugins installed on the OpenAI REST client."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

log = logging.getLogger(__name__)

_NUL = "\x00"


class UnicodeCleanupPlugin:
    """Strip NUL characters from response bodies.

    The API occasionally substitutes NUL bytes for multi-byte characters in
    non-English text, which breaks JSON decoding. Dropping them loses the
    original character but keeps the rest of the payload usable.

    Clean bodies, and bodies that are not valid UTF-8, are returned as-is.
    """

    def apply(self, response: httpx.Response, data: bytes) -> bytes:
        # NUL only ever encodes as a single 0x00 byte in UTF-8.
        if b"\x00" not in data:
            return data
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            return data

        removed = text.count(_NUL)
        log.debug(
            "Removed %d NUL characters from %d response body",
            removed,
            response.status_code,
        )
        return text.replace(_NUL, "").encode("utf-8")
