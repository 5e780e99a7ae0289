import json
from pathlib import Path
from typing import Any, Callable

import pytest

from crow_treasure.storage import TreasureStore

GEM_RESPONSE = {
    "name": "潮汐之钥",
    "type": "GEM",
    "description": "潮水退去之后，留下的总是最亮的那一颗。",
    "crowCommentary": "月亮牵动潮汐，也牵动你。",
    "colorTheme": "#1e3a8a",
}


def envelope(content: str) -> dict:
    """OpenAI-style chat completion envelope around *content*."""
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class StubRelay:
    """Deterministic relay stand-in for tests.

    Each call pops the next queued item: a dict is returned as the response
    envelope, an exception instance is raised. Every payload is recorded.
    """

    def __init__(self, responses: list[Any]) -> None:
        self._queue = list(responses)
        self.calls: list[dict] = []

    async def __call__(self, payload: dict) -> dict:
        self.calls.append(payload)
        if not self._queue:
            raise AssertionError(f"StubRelay: unexpected call, no responses queued: {payload}")
        item = self._queue.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


@pytest.fixture
def make_relay() -> Callable[..., StubRelay]:
    return lambda *responses: StubRelay(list(responses))


@pytest.fixture
def gem_envelope() -> dict:
    return envelope(json.dumps(GEM_RESPONSE, ensure_ascii=False))


@pytest.fixture
def make_envelope() -> Callable[[str], dict]:
    return envelope


@pytest.fixture
def store(tmp_path: Path) -> TreasureStore:
    return TreasureStore(tmp_path / "data")
