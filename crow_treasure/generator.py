"""Treasure generation — thought in, validated TreasureDraft out.

Flow:
  1. Build the chat-completion payload (system instruction + user prompt).
  2. Send it through the relay.
  3. Pull the message content out of the response envelope.
  4. Extract the JSON object from the content and validate its fields.
  5. Coerce an unknown ``type`` to the default.
  6. Compose the draft from the caller's thought/emotion and the model fields.

Any failure along the way is logged and replaced by a fixed fallback draft,
so ``generate`` always returns something the caller can show.
"""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from crow_treasure.extractor import ExtractionError, extract_json
from crow_treasure.llm import LLMError, Relay, message_content
from crow_treasure.models import TreasureDraft, TreasureResponse, TreasureType, validate_type
from crow_treasure.prompts import build_payload

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "deepseek-chat"
DEFAULT_TEMPERATURE = 0.8

FALLBACK_NAME = "迷雾中的灰烬"
FALLBACK_DESCRIPTION = "迷雾遮蔽了宝藏的真容，但你的思绪已被乌鸦以此羽毛铭记。"
FALLBACK_COMMENTARY = "迷雾太重，看不清来路，也看不清归途。"
FALLBACK_COLOR = "#94a3b8"


def fallback_draft(thought: str, emotion: str | None = None) -> TreasureDraft:
    return TreasureDraft(
        content=thought,
        emotion=emotion,
        name=FALLBACK_NAME,
        type=TreasureType.FEATHER,
        description=FALLBACK_DESCRIPTION,
        crow_commentary=FALLBACK_COMMENTARY,
        color=FALLBACK_COLOR,
    )


class TreasureGenerator:
    """Turns a thought into a TreasureDraft via the relay.

    Args:
        relay:       Callable matching crow_treasure.llm.Relay.
        model:       Model identifier sent with every request.
        temperature: Sampling temperature sent with every request.
    """

    def __init__(
        self,
        relay: Relay,
        model: str = DEFAULT_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> None:
        self._relay = relay
        self._model = model
        self._temperature = temperature

    async def generate(self, thought: str, emotion: str | None = None) -> TreasureDraft:
        """Never raises; returns the fallback draft when anything goes wrong."""
        try:
            return await self._generate(thought, emotion)
        except LLMError as e:
            logger.error("Treasure generation failed (relay): %s", e)
        except ExtractionError as e:
            logger.error("Treasure generation failed (no JSON): %s", e)
        except json.JSONDecodeError as e:
            logger.error("Treasure generation failed (bad JSON): %s", e)
        except ValidationError as e:
            logger.error("Treasure generation failed (invalid fields): %s", e)
        except Exception:
            logger.exception("Treasure generation failed (unexpected)")
        return fallback_draft(thought, emotion)

    async def _generate(self, thought: str, emotion: str | None) -> TreasureDraft:
        payload = build_payload(
            thought, emotion, model=self._model, temperature=self._temperature
        )
        envelope = await self._relay(payload)
        content = message_content(envelope)

        data = TreasureResponse.model_validate(extract_json(content))
        checked = validate_type(data.type)
        if checked.coerced:
            logger.info("Unknown treasure type %r coerced to %s", checked.raw, checked.type.value)

        return TreasureDraft(
            content=thought,
            emotion=emotion,
            name=data.name,
            type=checked.type,
            description=data.description,
            crow_commentary=data.crowCommentary,
            color=data.colorTheme,
        )
