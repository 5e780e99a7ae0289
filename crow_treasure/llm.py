"""Relay client — HTTP connection to the chat-completion relay.

The generator depends on a relay callable matching the protocol:

    async def __call__(self, payload: dict) -> dict: ...

`payload` is an OpenAI-style chat-completion request body; the return value
is the decoded response envelope. The relay itself (see crow_treasure.relay)
only adds credentials and forwards the body to the model provider.

Production code constructs an HttpRelay from settings and hands it to the
TreasureGenerator. Tests use StubRelay (defined in the test helpers) instead.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import httpx

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol — every relay implementation must match this signature
# ---------------------------------------------------------------------------

class Relay(Protocol):
    async def __call__(self, payload: dict[str, Any]) -> dict[str, Any]: ...


# ---------------------------------------------------------------------------
# HttpRelay — posts to a real relay endpoint
# ---------------------------------------------------------------------------

class HttpRelay:
    """Async HTTP client for the chat-completion relay.

    Request:  POST {relay_url}  {"model", "stream", "temperature", "messages"}
    Response: {"choices": [{"message": {"content": "..."}}]}

    Args:
        relay_url: Full URL of the relay endpoint.
        api_key:   Bearer token, or empty string if the relay holds the key.
        timeout:   HTTP timeout in seconds. None waits indefinitely.
    """

    def __init__(
        self,
        relay_url: str,
        api_key: str = "",
        timeout: float | None = None,
    ) -> None:
        self._url = relay_url
        self._api_key = api_key
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def __call__(self, payload: dict[str, Any]) -> dict[str, Any]:
        logger.debug("relay call url=%s messages=%d", self._url, len(payload.get("messages", [])))

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(self._url, json=payload, headers=self._headers())
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise LLMError(f"Cannot connect to relay at {self._url}") from e
        except httpx.HTTPStatusError as e:
            raise LLMError(
                f"Relay returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
                body=e.response.text,
            ) from e
        except httpx.TimeoutException as e:
            raise LLMError(f"Relay timed out after {self._timeout}s") from e
        except httpx.TransportError as e:
            raise LLMError(f"Relay transport error: {e}") from e

        try:
            data = resp.json()
        except json.JSONDecodeError as e:
            raise LLMError("Relay returned a non-JSON body", status_code=resp.status_code) from e
        logger.debug("relay response status=%s", resp.status_code)
        return data


def message_content(envelope: Any) -> str:
    """Return choices[0].message.content, or raise LLMError if it is missing."""
    try:
        content = envelope["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise LLMError("Unexpected response format from relay") from e
    if not isinstance(content, str) or not content:
        raise LLMError("Empty content from relay")
    return content


# ---------------------------------------------------------------------------
# LLMError — raised for all connection and protocol failures
# ---------------------------------------------------------------------------

class LLMError(RuntimeError):
    """Raised when the relay cannot be reached or returns an unusable answer."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        text = super().__str__()
        if self.body:
            text = f"{text}: {self.body}"
        return text
