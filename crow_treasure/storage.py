"""JSON file storage for the treasure collection.

The whole collection lives in a single JSON file (the storage slot) under a
configurable base directory. There is no database: the store keeps the
collection in memory and rewrites the entire file after every mutation.

Directory layout:

    {base}/
      crows_treasures_data.json   ← list of Treasure objects, newest first
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from crow_treasure.models import Treasure

logger = logging.getLogger(__name__)

STORAGE_KEY = "crows_treasures_data"


class TreasureStore:
    """In-memory collection with write-through to the storage slot.

    Construct one per process and pass it to whoever needs it. The collection
    is loaded on construction; ``insert`` and ``remove`` persist immediately.
    """

    def __init__(self, base_path: Path, key: str = STORAGE_KEY) -> None:
        self._base = base_path
        self._base.mkdir(parents=True, exist_ok=True)
        self._path = base_path / f"{key}.json"
        self._treasures: list[Treasure] = self.load()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _read_json(self) -> Any:
        return json.loads(self._path.read_text(encoding="utf-8"))

    def _write_json(self, data: Any) -> None:
        self._path.write_text(
            json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8"
        )

    # ------------------------------------------------------------------
    # Load / persist
    # ------------------------------------------------------------------

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[Treasure]:
        """Read the slot. Missing or unreadable data yields an empty list.

        Entries that fail validation, and later entries repeating an id, are
        skipped; the rest are kept.
        """
        if not self._path.exists():
            return []
        try:
            raw = self._read_json()
            if not isinstance(raw, list):
                raise ValueError(f"expected a JSON array, got {type(raw).__name__}")
        except (OSError, ValueError) as e:
            logger.warning("Failed to parse treasures from %s, starting empty: %s", self._path, e)
            return []

        treasures: list[Treasure] = []
        seen: set[str] = set()
        for i, entry in enumerate(raw):
            try:
                treasure = Treasure.model_validate(entry)
            except ValidationError as e:
                logger.warning("Skipping invalid treasure #%d in %s: %s", i, self._path, e)
                continue
            if treasure.id in seen:
                logger.warning("Skipping duplicate treasure id=%s in %s", treasure.id, self._path)
                continue
            seen.add(treasure.id)
            treasures.append(treasure)
        return treasures

    def persist(self) -> None:
        self._write_json([t.model_dump(mode="json", by_alias=True) for t in self._treasures])

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def insert(self, treasure: Treasure) -> None:
        """Prepend (newest first) and persist."""
        if self.get(treasure.id) is not None:
            raise ValueError(f"Treasure id {treasure.id!r} already stored")
        self._treasures.insert(0, treasure)
        logger.info("treasure stored id=%s type=%s", treasure.id, treasure.type.value)
        self.persist()

    def remove(self, treasure_id: str) -> bool:
        """Drop the treasure with this id and persist. Returns False if absent."""
        before = len(self._treasures)
        self._treasures = [t for t in self._treasures if t.id != treasure_id]
        removed = len(self._treasures) != before
        if removed:
            logger.info("treasure removed id=%s", treasure_id)
        self.persist()
        return removed

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def treasures(self) -> list[Treasure]:
        return list(self._treasures)

    def get(self, treasure_id: str) -> Treasure | None:
        for t in self._treasures:
            if t.id == treasure_id:
                return t
        return None

    def __len__(self) -> int:
        return len(self._treasures)
