"""Tests for crow_treasure.llm — HttpRelay and message_content."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from crow_treasure.llm import HttpRelay, LLMError, message_content

PAYLOAD = {
    "model": "deepseek-chat",
    "stream": False,
    "temperature": 0.8,
    "messages": [{"role": "system", "content": "s"}, {"role": "user", "content": "u"}],
}


def _mock_response(body: dict | None, status: int = 200, text: str = "") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.text = text or json.dumps(body)
    if body is None:
        resp.json.side_effect = json.JSONDecodeError("Expecting value", text, 0)
    else:
        resp.json.return_value = body
    resp.raise_for_status = MagicMock(
        side_effect=None if status < 400 else httpx.HTTPStatusError(
            "", request=MagicMock(), response=resp
        )
    )
    return resp


# ---------------------------------------------------------------------------
# HttpRelay
# ---------------------------------------------------------------------------

class TestHttpRelay:
    @pytest.fixture
    def relay(self) -> HttpRelay:
        return HttpRelay(relay_url="http://localhost:13015/api/deepseek")

    async def test_happy_path_returns_envelope(self, relay: HttpRelay) -> None:
        body = {"choices": [{"message": {"content": "{}"}}]}
        mock_post = AsyncMock(return_value=_mock_response(body))
        with patch("httpx.AsyncClient.post", mock_post):
            result = await relay(PAYLOAD)
        assert result == body

    async def test_posts_payload_to_url(self, relay: HttpRelay) -> None:
        mock_post = AsyncMock(return_value=_mock_response({"choices": []}))
        with patch("httpx.AsyncClient.post", mock_post):
            await relay(PAYLOAD)
        assert mock_post.call_args[0][0] == "http://localhost:13015/api/deepseek"
        assert mock_post.call_args.kwargs["json"] == PAYLOAD

    async def test_bearer_token_sent_when_api_key_set(self) -> None:
        relay = HttpRelay(relay_url="http://relay", api_key="secret")
        mock_post = AsyncMock(return_value=_mock_response({"choices": []}))
        with patch("httpx.AsyncClient.post", mock_post):
            await relay(PAYLOAD)
        assert mock_post.call_args.kwargs["headers"].get("Authorization") == "Bearer secret"

    async def test_no_auth_header_when_no_api_key(self, relay: HttpRelay) -> None:
        mock_post = AsyncMock(return_value=_mock_response({"choices": []}))
        with patch("httpx.AsyncClient.post", mock_post):
            await relay(PAYLOAD)
        assert "Authorization" not in mock_post.call_args.kwargs["headers"]

    async def test_http_error_keeps_status_and_body(self, relay: HttpRelay) -> None:
        bad = _mock_response({"error": "Missing DEEPSEEK_API_KEY"}, status=500)
        mock_post = AsyncMock(return_value=bad)
        with patch("httpx.AsyncClient.post", mock_post):
            with pytest.raises(LLMError, match="HTTP 500") as exc_info:
                await relay(PAYLOAD)
        assert exc_info.value.status_code == 500
        assert "Missing DEEPSEEK_API_KEY" in exc_info.value.body
        assert "Missing DEEPSEEK_API_KEY" in str(exc_info.value)

    async def test_connect_error_raises_llm_error(self, relay: HttpRelay) -> None:
        mock_post = AsyncMock(side_effect=httpx.ConnectError("refused"))
        with patch("httpx.AsyncClient.post", mock_post):
            with pytest.raises(LLMError, match="Cannot connect"):
                await relay(PAYLOAD)

    async def test_timeout_raises_llm_error(self) -> None:
        relay = HttpRelay(relay_url="http://relay", timeout=5)
        mock_post = AsyncMock(side_effect=httpx.ReadTimeout("slow"))
        with patch("httpx.AsyncClient.post", mock_post):
            with pytest.raises(LLMError, match="timed out after 5s"):
                await relay(PAYLOAD)

    async def test_other_transport_error_raises_llm_error(self, relay: HttpRelay) -> None:
        mock_post = AsyncMock(side_effect=httpx.ReadError("reset"))
        with patch("httpx.AsyncClient.post", mock_post):
            with pytest.raises(LLMError, match="transport error"):
                await relay(PAYLOAD)

    async def test_non_json_body_raises_llm_error(self, relay: HttpRelay) -> None:
        mock_post = AsyncMock(return_value=_mock_response(None, text="<html>oops</html>"))
        with patch("httpx.AsyncClient.post", mock_post):
            with pytest.raises(LLMError, match="non-JSON"):
                await relay(PAYLOAD)


# ---------------------------------------------------------------------------
# message_content
# ---------------------------------------------------------------------------

class TestMessageContent:
    def test_returns_first_choice_content(self) -> None:
        env = {"choices": [{"message": {"content": "first"}}, {"message": {"content": "second"}}]}
        assert message_content(env) == "first"

    @pytest.mark.parametrize("env", [
        {},
        {"choices": []},
        {"choices": [{}]},
        {"choices": [{"message": {}}]},
        {"error": "quota"},
        None,
        "text",
    ])
    def test_malformed_envelope(self, env) -> None:
        with pytest.raises(LLMError, match="Unexpected response format"):
            message_content(env)

    @pytest.mark.parametrize("content", ["", None])
    def test_empty_content(self, content) -> None:
        with pytest.raises(LLMError, match="Empty content"):
            message_content({"choices": [{"message": {"content": content}}]})
