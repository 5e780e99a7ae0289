"""Core domain models.

The generator, store and session all operate on these types.
Pydantic is used for validation and serialisation at every data boundary
(the relay response and the on-disk collection).
"""

from __future__ import annotations

import time
import uuid
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TreasureType(str, Enum):
    COIN = "COIN"
    GEM = "GEM"
    SWORD = "SWORD"
    SCROLL = "SCROLL"
    FEATHER = "FEATHER"
    KEY = "KEY"
    POTION = "POTION"
    ARTIFACT = "ARTIFACT"


DEFAULT_TYPE = TreasureType.ARTIFACT

# Selectable emotions, in display order.
EMOTIONS: tuple[str, ...] = ("平静", "快乐", "悲伤", "愤怒", "焦虑", "期待", "迷茫", "感激")


class TypeValidation(BaseModel):
    """Outcome of checking a raw ``type`` value against TreasureType.

    ``coerced`` is True when ``raw`` was not a member and ``type`` fell back
    to the default.
    """

    model_config = ConfigDict(frozen=True)

    type: TreasureType
    coerced: bool
    raw: Any = None


def validate_type(raw: object) -> TypeValidation:
    if isinstance(raw, str):
        try:
            return TypeValidation(type=TreasureType(raw), coerced=False, raw=raw)
        except ValueError:
            pass
    return TypeValidation(type=DEFAULT_TYPE, coerced=True, raw=raw)


class TreasureResponse(BaseModel):
    """The structured object a model returns, before validation of ``type``."""

    name: str
    type: Any = None  # checked by validate_type, not here
    description: str
    crowCommentary: str
    colorTheme: str


class TreasureDraft(BaseModel):
    """A generated treasure that has not been given an identity yet."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    content: str
    emotion: str | None = None
    name: str
    type: TreasureType
    description: str
    crow_commentary: str = Field(alias="crowCommentary")
    color: str

    def stamp(self) -> Treasure:
        """Attach a fresh id and creation time."""
        return Treasure(
            id=uuid.uuid4().hex,
            created_at=int(time.time() * 1000),
            **self.model_dump(include=set(TreasureDraft.model_fields)),
        )


class Treasure(TreasureDraft):
    """A collected treasure. Immutable once created."""

    id: str
    created_at: int = Field(alias="createdAt")  # ms since epoch
