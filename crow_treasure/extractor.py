"""Pull a JSON object out of a model's text completion.

Models are asked for bare JSON but often wrap it in a markdown fence or
surround it with chatter. Extraction runs a short list of strategies in
order and stops at the first one that yields a value:

    1. strip a leading ```/```json fence and a trailing ``` fence
    2. parse the cleaned text directly
    3. parse the greedy span from the first "{" to the last "}"
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Callable

_LEADING_FENCE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"```$")
_BRACE_SPAN = re.compile(r"\{[\s\S]*\}")


class ExtractionError(ValueError):
    """Raised when the text contains nothing that looks like a JSON object."""


@dataclass(frozen=True)
class Outcome:
    ok: bool
    value: Any = None
    error: Exception | None = None


Strategy = Callable[[str], Outcome]


def strip_fences(text: str) -> str:
    cleaned = text.strip()
    cleaned = _LEADING_FENCE.sub("", cleaned)
    cleaned = _TRAILING_FENCE.sub("", cleaned)
    return cleaned.strip()


def parse_direct(text: str) -> Outcome:
    try:
        return Outcome(ok=True, value=json.loads(text))
    except json.JSONDecodeError as e:
        return Outcome(ok=False, error=e)


def parse_brace_span(text: str) -> Outcome:
    match = _BRACE_SPAN.search(text)
    if not match:
        return Outcome(ok=False, error=ExtractionError("no structured data found"))
    return parse_direct(match.group(0))


STRATEGIES: tuple[Strategy, ...] = (parse_direct, parse_brace_span)


def extract_json(text: str) -> Any:
    """Return the first JSON value the strategies can recover from *text*.

    Raises ExtractionError if no brace span exists, or the JSONDecodeError of
    the last strategy if the span itself does not parse.
    """
    cleaned = strip_fences(text)
    outcome = Outcome(ok=False, error=ExtractionError("no structured data found"))
    for strategy in STRATEGIES:
        outcome = strategy(cleaned)
        if outcome.ok:
            return outcome.value
    assert outcome.error is not None
    raise outcome.error
