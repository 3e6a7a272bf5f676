from __future__ import annotations

import json
import logging
from typing import Optional

from ..config import SETTINGS_KEY, STATS_KEY
from ..errors import SaveValidationError
from ..persistence.codec import parse_json, validate
from ..persistence.store import KeyValueStore
from ..state.models import GameSettings, Statistics

log = logging.getLogger(__name__)


def _dump(data: dict) -> bytes:
    return json.dumps(data, sort_keys=True).encode("utf-8")


class SettingsRepository:
    """Load and save player preferences under their own store key.

    Stored values are merged over GameSettings defaults, so a record written
    by an older build that lacks newer options still loads.
    """

    def __init__(self, store: KeyValueStore, key: str = SETTINGS_KEY) -> None:
        self.store = store
        self.key = key
        self._settings = GameSettings()

    @property
    def settings(self) -> GameSettings:
        return self._settings

    def load(self) -> GameSettings:
        try:
            raw = self.store.get(self.key)
            if raw is None:
                log.info("No settings found, using defaults")
                self._settings = GameSettings()
                return self._settings
            data = parse_json(raw)
            validate(data, "settings")
            self._settings = GameSettings.from_dict(data)
            log.info("Settings loaded from %r", self.key)
        except Exception as exc:  # store failures and bad records both fall back to defaults
            log.error("Failed to load settings; using defaults: %s", exc)
            self._settings = GameSettings()
        return self._settings

    def save(self, settings: Optional[GameSettings] = None) -> bool:
        """Persist ``settings`` (or the current ones). Returns False on store failure."""
        merged = GameSettings.from_dict((settings or self._settings).to_dict())
        try:
            self.store.set(self.key, _dump(merged.to_dict()))
        except Exception as exc:
            log.error("Failed to save settings: %s", exc)
            return False
        self._settings = merged
        log.info("Settings saved to %r", self.key)
        return True

    def update(self, **changes) -> bool:
        """Apply wire-named changes (e.g. ``difficulty="hard"``) and save."""
        data = self._settings.to_dict()
        data.update(changes)
        return self.save(GameSettings.from_dict(data))


class StatisticsRepository:
    """Lifetime counters, accumulated across runs."""

    def __init__(self, store: KeyValueStore, key: str = STATS_KEY) -> None:
        self.store = store
        self.key = key
        self._stats = Statistics()

    @property
    def statistics(self) -> Statistics:
        return self._stats

    def load(self) -> Statistics:
        try:
            raw = self.store.get(self.key)
            if raw is None:
                log.info("No statistics found, using defaults")
                self._stats = Statistics()
                return self._stats
            data = parse_json(raw)
            if not isinstance(data, dict):
                raise SaveValidationError("Statistics record must be an object")
            self._stats = Statistics.from_dict(data)
        except Exception as exc:  # store failures and bad records both fall back to defaults
            log.error("Error loading statistics: %s", exc)
            self._stats = Statistics()
        return self._stats

    def record(self, **deltas: float) -> bool:
        """Add ``deltas`` (attribute names, e.g. ``deaths=1``) to the stored counters and persist.

        Stored counters are re-read first; the deltas are added on top.
        """
        stats = self.load()
        stats.add(deltas)
        try:
            self.store.set(self.key, _dump(stats.to_dict()))
        except Exception as exc:
            log.error("Error saving statistics: %s", exc)
            return False
        return True
