"""Test helpers (small, reusable doubles).

Keep this file tiny and purpose-built: it exists so test modules share one
scripted transport instead of growing bespoke fakes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from typing import Any

import httpx

API_KEY = "sk-test"


@dataclass
class ScriptedTransport:
    """httpx handler that records requests and replays scripted results.

    Script items are ``httpx.Response`` objects or exceptions to raise. An
    exhausted script answers 200 with ``{}``.
    """

    script: list[httpx.Response | Exception] = field(default_factory=list)
    requests: list[httpx.Request] = field(default_factory=list)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.script:
            return httpx.Response(200, json={})
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last_request.content)


def message_item(text: str, *, item_id: str = "msg_1") -> dict[str, Any]:
    return {
        "id": item_id,
        "type": "message",
        "role": "assistant",
        "content": [{"type": "output_text", "text": text}],
    }


def reasoning_item(item_id: str = "rs_1") -> dict[str, Any]:
    return {"id": item_id, "type": "reasoning", "content": None}


def response_body(
    *items: dict[str, Any], response_id: str = "resp_123"
) -> dict[str, Any]:
    """Build a Responses API body with the given output items."""
    return {
        "id": response_id,
        "object": "response",
        "usage": {"input_tokens": 12, "output_tokens": 30, "total_tokens": 42},
        "output": list(items),
    }
