from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional

from ..config import SAVE_KEY, SETTINGS_KEY, STATS_KEY, SessionDefaults
from ..errors import LifecycleError, SaveValidationError
from ..persistence.codec import SaveRecord, decode_record, encode_record
from ..persistence.store import KeyValueStore
from ..state.context import GameContext
from ..state.models import AudioSettings, MetaProgress, RunState

logger = logging.getLogger(__name__)


class LifecycleState(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    RUNNING = "running"
    SUSPENDED = "suspended"


class LoadStatus(Enum):
    LOADED = "loaded"
    NO_SAVE = "no_prior_save"
    LOAD_FAILED = "load_failed"


class LifecycleEvent(Enum):
    LOADED = "loaded"
    SAVED = "saved"
    SUSPENDED = "suspended"
    RESUMED = "resumed"
    RUN_RESET = "run_reset"


@dataclass
class SaveResult:
    success: bool
    message: str
    code: str = "OK"  # OK | IO_ERROR | ENCODE_ERROR
    timestamp: Optional[int] = None


@dataclass(frozen=True)
class SaveSummary:
    credits: float
    highest_sector: int
    unlocked_ships: int
    last_played: Optional[datetime]


def _now_ms() -> int:
    return int(time.time() * 1000)


class SessionLifecycleManager:
    """Owns the run and meta-progression partitions and their persistence.

    Lifecycle: UNINITIALIZED -> INITIALIZED -> RUNNING <-> SUSPENDED.

    - initialize(defaults) seeds state; everything else requires it
    - load_from_store() merges a stored record into meta/audio, then RUNNING
    - on_suspend() saves and pauses; on_resume() only un-pauses

    Store and parse failures are logged and reported through return values;
    live state is never left half-updated.
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        key: str = SAVE_KEY,
        *,
        clock: Callable[[], int] = _now_ms,
        diagnostics: Optional[logging.Logger] = None,
    ) -> None:
        self.store = store
        self.key = key
        self._clock = clock
        self._log = diagnostics or logger
        self._state = LifecycleState.UNINITIALIZED
        self._defaults: Optional[SessionDefaults] = None
        self._context: Optional[GameContext] = None
        self._listeners: List[Callable[[LifecycleEvent, "SessionLifecycleManager"], None]] = []

    # Accessors

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def context(self) -> GameContext:
        return self._require_initialized()

    @property
    def run(self) -> RunState:
        return self.context.run

    @property
    def meta(self) -> MetaProgress:
        return self.context.meta

    @property
    def audio(self) -> AudioSettings:
        return self.context.audio

    @property
    def is_running(self) -> bool:
        return self._state is LifecycleState.RUNNING

    def add_listener(self, listener: Callable[[LifecycleEvent, "SessionLifecycleManager"], None]) -> None:
        """Subscribe to lifecycle events (load, save, suspend, resume, run reset)."""
        self._listeners.append(listener)

    def _emit(self, event: LifecycleEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, self)
            except Exception as ex:  # listeners must not break the lifecycle
                self._log.exception("Listener errored on %s: %s", event, ex)

    # Lifecycle

    def initialize(self, defaults: Optional[SessionDefaults] = None) -> GameContext:
        """Seed run, meta and audio state from ``defaults``.

        Calling it again re-seeds everything and returns to INITIALIZED.
        """
        self._defaults = defaults or SessionDefaults()
        self._context = GameContext(
            run=self._defaults.fresh_run(),
            meta=self._defaults.fresh_meta(),
            audio=self._defaults.fresh_audio(),
        )
        self._state = LifecycleState.INITIALIZED
        logger.info("Session initialized (credits=%s)", self._context.meta.credits)
        return self._context

    def _require_initialized(self) -> GameContext:
        if self._context is None:
            raise LifecycleError("SessionLifecycleManager.initialize() must be called first")
        return self._context

    def _session_defaults(self) -> SessionDefaults:
        if self._defaults is None:
            raise LifecycleError("SessionLifecycleManager.initialize() must be called first")
        return self._defaults

    def _resolve(self, store: Optional[KeyValueStore], key: Optional[str]):
        self._require_initialized()
        store = store if store is not None else self.store
        if store is None:
            raise LifecycleError("No store bound and none given")
        return store, key or self.key

    def _mark_started(self) -> None:
        if self._state is LifecycleState.INITIALIZED:
            self._state = LifecycleState.RUNNING
            logger.debug("Lifecycle -> %s", self._state.value)

    def _reset_persistent(self) -> None:
        context, defaults = self._require_initialized(), self._session_defaults()
        context.meta = defaults.fresh_meta()
        context.audio = defaults.fresh_audio()

    # Persistence

    def load_from_store(self, store: Optional[KeyValueStore] = None, key: Optional[str] = None) -> LoadStatus:
        """Read the save record and merge it into meta progress and audio settings.

        Only fields present in the record replace in-memory values. The run
        state is never touched. Returns LOADED, NO_SAVE or LOAD_FAILED.

        A record that fails to parse or validate resets meta and audio to the
        initialize-time defaults. A store that raises on ``get`` is treated
        like an absent key: in-memory state is kept as it is, and the status
        is LOAD_FAILED so the caller can tell the read did not happen.
        """
        store, key = self._resolve(store, key)
        try:
            raw = store.get(key)
        except Exception as exc:  # host stores may raise anything
            self._log.error("Failed to read save %r; keeping current state: %s", key, exc)
            self._mark_started()
            return LoadStatus.LOAD_FAILED

        if raw is None:
            self._log.info("No saved game found under %r, using default state", key)
            self._mark_started()
            return LoadStatus.NO_SAVE

        try:
            record = decode_record(raw)
            meta = self.meta.copy()
            audio = self.audio.copy()
            if record.meta_progress is not None:
                meta.merge(record.meta_progress)
            if record.audio_settings is not None:
                audio.merge(record.audio_settings)
            # copy() re-validates the merged values before they go live
            meta, audio = meta.copy(), audio.copy()
        except SaveValidationError as exc:
            self._log.error("Failed to load save %r: %s", key, exc)
            self._reset_persistent()
            self._mark_started()
            return LoadStatus.LOAD_FAILED

        context = self._require_initialized()
        context.meta = meta
        context.audio = audio
        logger.info("Game state loaded from %r (credits=%s)", key, meta.credits)
        self._mark_started()
        self._emit(LifecycleEvent.LOADED)
        return LoadStatus.LOADED

    def save_to_store(self, store: Optional[KeyValueStore] = None, key: Optional[str] = None) -> SaveResult:
        """Write meta progress, audio settings and a timestamp under ``key``.

        Overwrites any previous record. Failures are logged and returned;
        in-memory state is left as it was.
        """
        store, key = self._resolve(store, key)
        timestamp = self._clock()
        try:
            payload = encode_record(SaveRecord.capture(self.meta, self.audio, timestamp))
        except (TypeError, ValueError) as exc:
            self._log.error("Failed to encode save %r: %s", key, exc)
            return SaveResult(success=False, message="Failed to save game.", code="ENCODE_ERROR")
        try:
            store.set(key, payload)
        except Exception as exc:  # host stores may raise anything
            self._log.error("Failed to save game state to %r: %s", key, exc)
            return SaveResult(success=False, message="Failed to save game.", code="IO_ERROR")

        logger.info("Game state saved to %r", key)
        self._emit(LifecycleEvent.SAVED)
        return SaveResult(success=True, message="Game saved.", code="OK", timestamp=timestamp)

    def reset_run(self, defaults: Optional[RunState] = None) -> RunState:
        """Replace the current run wholesale. Meta progress is not touched."""
        context = self._require_initialized()
        context.run = defaults.copy() if defaults is not None else self._session_defaults().fresh_run()
        logger.info("Game run state reset")
        self._emit(LifecycleEvent.RUN_RESET)
        return self.context.run

    # Suspend / resume

    def on_suspend(self) -> SaveResult:
        """Save once and pause. Safe to call repeatedly; each call is one save attempt."""
        self._require_initialized()
        result = self.save_to_store()
        if self._state is LifecycleState.RUNNING:
            self._state = LifecycleState.SUSPENDED
            logger.info("Game auto-paused")
            self._emit(LifecycleEvent.SUSPENDED)
        return result

    def on_resume(self) -> bool:
        """Leave SUSPENDED. Returns True when the driver should resume ticking."""
        self._require_initialized()
        if self._state is not LifecycleState.SUSPENDED:
            return False
        self._state = LifecycleState.RUNNING
        logger.info("Game resumed")
        self._emit(LifecycleEvent.RESUMED)
        return True

    def on_teardown(self) -> SaveResult:
        """Final save before the process goes away."""
        return self.save_to_store()

    # Save slot management

    def has_save(self, store: Optional[KeyValueStore] = None, key: Optional[str] = None) -> bool:
        store, key = self._resolve(store, key)
        try:
            return store.get(key) is not None
        except Exception as exc:
            self._log.error("Failed to check save %r: %s", key, exc)
            return False

    def delete_save(self, store: Optional[KeyValueStore] = None, key: Optional[str] = None) -> bool:
        """Remove the stored record and reset meta progress to defaults."""
        store, key = self._resolve(store, key)
        try:
            store.delete(key)
        except Exception as exc:
            self._log.error("Error deleting save data %r: %s", key, exc)
            return False
        self.context.meta = self._session_defaults().fresh_meta()
        logger.info("Save data deleted")
        return True

    def reset_all(self, store: Optional[KeyValueStore] = None) -> bool:
        """Remove save, settings and statistics and reset every partition."""
        store, key = self._resolve(store, None)
        try:
            for k in (key, SETTINGS_KEY, STATS_KEY):
                store.delete(k)
        except Exception as exc:
            self._log.error("Error resetting data: %s", exc)
            return False
        self._reset_persistent()
        self.reset_run()
        logger.info("All data reset")
        return True

    def save_summary(self, store: Optional[KeyValueStore] = None, key: Optional[str] = None) -> Optional[SaveSummary]:
        """Summarize the stored record for display, or None if absent or unreadable."""
        store, key = self._resolve(store, key)
        try:
            raw = store.get(key)
        except Exception as exc:
            self._log.error("Error reading save %r for summary: %s", key, exc)
            return None
        if raw is None:
            return None
        try:
            record = decode_record(raw)
            meta = MetaProgress.from_dict(record.meta_progress or {})
        except SaveValidationError as exc:
            self._log.error("Error getting save summary for %r: %s", key, exc)
            return None
        last_played = None
        if record.last_played_timestamp is not None:
            last_played = datetime.fromtimestamp(record.last_played_timestamp / 1000, tz=timezone.utc)
        return SaveSummary(
            credits=meta.credits,
            highest_sector=meta.highest_sector,
            unlocked_ships=len(meta.unlocked_ships),
            last_played=last_played,
        )
