"""View state machine — which screen is showing and what it is focused on.

Screens:

    HOME ──record_thought──▶ INPUT ──submit──▶ (generating) ──▶ REVEAL
      │                        ▲                                  │
      │                        └──record_thought (empty chest)    │ close/delete
      └──open_chest──▶ CHEST ──draw──▶ (drawing, fixed delay) ──▶ RETRIEVED
                         ▲                                          │
                         └────────────── close/delete ──────────────┘

A trigger called from a screen that does not accept it is a no-op and
returns a falsy value. Generation and drawing each have an in-flight flag;
while a flag is set the competing triggers are refused. The draw delay cannot
be cut short: leaving the chest is refused until the draw completes.
"""

from __future__ import annotations

import asyncio
import logging
import random
from enum import Enum

from crow_treasure.generator import TreasureGenerator
from crow_treasure.models import EMOTIONS, Treasure
from crow_treasure.storage import TreasureStore

logger = logging.getLogger(__name__)

DEFAULT_DRAW_DELAY = 3.0  # seconds


class Screen(str, Enum):
    HOME = "HOME"
    INPUT = "INPUT"
    REVEAL = "REVEAL"
    CHEST = "CHEST"
    RETRIEVED = "RETRIEVED"


class Session:
    """One interactive session over a store.

    Args:
        store:      The process-wide TreasureStore.
        generator:  Produces drafts from thoughts; must never raise.
        draw_delay: Suspense pause before a draw resolves, in seconds.
        rng:        Random source for draws. Defaults to the random module.
    """

    def __init__(
        self,
        store: TreasureStore,
        generator: TreasureGenerator,
        draw_delay: float = DEFAULT_DRAW_DELAY,
        rng: random.Random | None = None,
    ) -> None:
        self._store = store
        self._generator = generator
        self._draw_delay = draw_delay
        self._rng = rng or random.Random()
        self._draw_task: asyncio.Task[Treasure] | None = None

        self.screen = Screen.HOME
        self.input_text = ""
        self.emotion: str | None = None
        self.is_generating = False
        self.is_drawing = False
        self.current: Treasure | None = None

    @property
    def treasures(self) -> list[Treasure]:
        return self._store.treasures

    def _go(self, screen: Screen) -> None:
        logger.debug("screen %s -> %s", self.screen.value, screen.value)
        self.screen = screen
        if screen not in (Screen.REVEAL, Screen.RETRIEVED):
            self.current = None

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def record_thought(self) -> bool:
        if self.screen is Screen.HOME:
            self._go(Screen.INPUT)
            return True
        if self.screen is Screen.CHEST and not self.is_drawing and not self.treasures:
            self._go(Screen.INPUT)
            return True
        return False

    def open_chest(self) -> bool:
        if self.screen is not Screen.HOME:
            return False
        self._go(Screen.CHEST)
        return True

    def back(self) -> bool:
        if self.screen is Screen.INPUT and not self.is_generating:
            self._go(Screen.HOME)
            return True
        if self.screen is Screen.CHEST and not self.is_drawing:
            self._go(Screen.HOME)
            return True
        if self.screen in (Screen.REVEAL, Screen.RETRIEVED):
            return self.close()
        return False

    def close(self) -> bool:
        if self.screen is Screen.REVEAL:
            self._go(Screen.HOME)
            return True
        if self.screen is Screen.RETRIEVED:
            self._go(Screen.CHEST)
            return True
        return False

    def delete_current(self) -> bool:
        """Remove the focused treasure from the store and leave the card.

        Asking the user for confirmation is the caller's job.
        """
        if self.screen not in (Screen.REVEAL, Screen.RETRIEVED) or self.current is None:
            return False
        self._store.remove(self.current.id)
        self._go(Screen.HOME if self.screen is Screen.REVEAL else Screen.CHEST)
        return True

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def set_input(self, text: str) -> bool:
        if self.screen is not Screen.INPUT or self.is_generating:
            return False
        self.input_text = text
        return True

    def select_emotion(self, emotion: str | None) -> bool:
        """Select an emotion; selecting the current one again clears it."""
        if emotion is not None and emotion not in EMOTIONS:
            raise ValueError(f"Unknown emotion {emotion!r}; expected one of {EMOTIONS}")
        if self.screen is not Screen.INPUT or self.is_generating:
            return False
        self.emotion = None if emotion == self.emotion else emotion
        return True

    async def submit(self) -> Treasure | None:
        """Generate a treasure from the current input and reveal it."""
        if self.screen is not Screen.INPUT or self.is_generating:
            return None
        if not self.input_text.strip():
            return None

        self.is_generating = True
        try:
            draft = await self._generator.generate(self.input_text, self.emotion)
        finally:
            self.is_generating = False

        treasure = draft.stamp()
        self._store.insert(treasure)
        self.input_text = ""
        self.emotion = None
        self._go(Screen.REVEAL)
        self.current = treasure
        return treasure

    # ------------------------------------------------------------------
    # Draw
    # ------------------------------------------------------------------

    def start_draw(self) -> asyncio.Task[Treasure] | None:
        """Schedule a draw and return its task, or None if refused.

        Must be called from inside a running event loop.
        """
        if self.screen is not Screen.CHEST or self.is_drawing or not self.treasures:
            return None
        self.is_drawing = True
        self._draw_task = asyncio.get_running_loop().create_task(self._finish_draw())
        return self._draw_task

    async def draw(self) -> Treasure | None:
        """Draw and wait for the result. The draw itself is shielded from cancellation."""
        task = self.start_draw()
        if task is None:
            return None
        return await asyncio.shield(task)

    async def _finish_draw(self) -> Treasure:
        try:
            await asyncio.sleep(self._draw_delay)
            picked = self._rng.choice(self.treasures)
        finally:
            self.is_drawing = False
            self._draw_task = None
        self._go(Screen.RETRIEVED)
        self.current = picked
        return picked
