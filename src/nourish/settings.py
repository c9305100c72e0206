"""Per-meal window and repeat settings over a key-value store.

Records::

    window:<meal>  →  {"start": "08:00", "end": "10:00"}
    repeat:<meal>  →  true | false

Absent keys fall back to the defaults (breakfast 08:00–10:00, lunch
12:00–14:00, dinner 19:00–21:00, no repeat). A corrupt record is logged
and treated as absent; it is overwritten on the next save.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Optional

from nourish.errors import InvalidWindow
from nourish.meals import DEFAULT_WINDOWS, MealKind, MealSettings, TimeWindow
from nourish.storage.kv import KeyValueStore

logger = logging.getLogger(__name__)


def window_key(meal: MealKind) -> str:
    return f"window:{meal.value}"


def repeat_key(meal: MealKind) -> str:
    return f"repeat:{meal.value}"


class MealSettingsRepository:
    """Explicit load/save of :class:`MealSettings`."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    async def load(self) -> MealSettings:
        settings = MealSettings()
        for meal in MealKind:
            settings.windows[meal] = await self.load_window(meal)
            settings.repeat[meal] = await self.load_repeat(meal)
        return settings

    async def load_window(self, meal: MealKind) -> TimeWindow:
        raw = await self._load_json(window_key(meal))
        if raw is None:
            return DEFAULT_WINDOWS[meal]
        try:
            return TimeWindow.from_dict(raw)
        except (InvalidWindow, KeyError, TypeError) as exc:
            logger.warning("Ignoring stored window for %s: %s", meal.value, exc)
            return DEFAULT_WINDOWS[meal]

    async def load_repeat(self, meal: MealKind) -> bool:
        raw = await self._load_json(repeat_key(meal))
        if raw is None:
            return False
        if not isinstance(raw, bool):
            logger.warning("Ignoring stored repeat flag for %s: %r", meal.value, raw)
            return False
        return raw

    async def save_window(self, meal: MealKind, window: TimeWindow) -> None:
        await self.store.set(window_key(meal), json.dumps(window.to_dict()))
        logger.debug("Saved %s window %s", meal.value, window)

    async def save_repeat(self, meal: MealKind, enabled: bool) -> None:
        await self.store.set(repeat_key(meal), json.dumps(bool(enabled)))
        logger.debug("Saved %s repeat=%s", meal.value, enabled)

    async def _load_json(self, key: str) -> Optional[Any]:
        text = await self.store.get(key)
        if text is None:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            logger.warning("Corrupt settings record %s: %s", key, exc)
            return None
