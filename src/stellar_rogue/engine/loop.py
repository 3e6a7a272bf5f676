from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import List, Optional

from ..config import SessionDefaults
from ..session.lifecycle import LoadStatus, SessionLifecycleManager
from ..systems.state_machine import StateMachine

logger = logging.getLogger(__name__)


@dataclass
class LoopConfig:
    """Configuration for the headless driver loop.

    Attributes:
        tick_rate: Target updates per second for the loop. If 0 or None, updates as fast as possible.
        max_steps: If provided and > 0, the loop will automatically stop after this many updates.
    """

    tick_rate: float = 60.0
    max_steps: Optional[int] = None


class GameLoop:
    """Drives state machines once per tick and forwards lifecycle signals.

    The loop owns no game state. It loads through the session manager before
    the first tick, pauses ticking while suspended and saves on stop.
    """

    def __init__(
        self,
        session: SessionLifecycleManager,
        config: Optional[LoopConfig] = None,
        defaults: Optional[SessionDefaults] = None,
    ) -> None:
        self.session = session
        self.config = config or LoopConfig()
        self.defaults = defaults
        self._machines: List[StateMachine] = []
        self._running: bool = False
        self._paused: bool = False
        self._step: int = 0
        self._last_time: Optional[float] = None
        self.load_status: Optional[LoadStatus] = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def step(self) -> int:
        return self._step

    def register(self, machine: StateMachine) -> StateMachine:
        self._machines.append(machine)
        return machine

    def unregister(self, machine: StateMachine) -> None:
        if machine in self._machines:
            self._machines.remove(machine)

    def start(self) -> LoadStatus:
        """Initialize the session, load the save and begin ticking.

        Safe to call multiple times; subsequent calls return the first load status.
        """
        if self._running and self.load_status is not None:
            logger.debug("GameLoop.start() called while already running")
            return self.load_status
        self.session.initialize(self.defaults)
        self.load_status = self.session.load_from_store()
        self._running = True
        self._paused = False
        self._step = 0
        self._last_time = time.perf_counter()
        logger.info(
            "GameLoop started (load=%s, tick_rate=%s, max_steps=%s)",
            self.load_status.value,
            self.config.tick_rate,
            self.config.max_steps,
        )
        return self.load_status

    def stop(self) -> None:
        """Stop the loop and write a final save."""
        if not self._running:
            return
        self._running = False
        self.session.on_teardown()
        logger.info("GameLoop stopped at step=%s", self._step)

    def suspend(self) -> None:
        """Visibility lost: save and stop ticking."""
        self.session.on_suspend()
        self._paused = True

    def resume(self) -> None:
        """Visibility regained: resume ticking."""
        if self.session.on_resume():
            self._paused = False
            self._last_time = time.perf_counter()

    def update(self, dt: float) -> None:
        """Perform a single tick.

        Args:
            dt: Time since the previous tick, in the unit the state handlers expect.
        """
        if not self._running or self._paused:
            logger.debug("update() called while not running or paused; ignored")
            return
        self._step += 1
        for machine in list(self._machines):
            machine.update(dt)

        if self.config.max_steps and self._step >= self.config.max_steps:
            self.stop()

    def run(self) -> None:
        """Run a blocking loop until stopped or max_steps reached.

        This is a headless loop suitable for CLI mode. It throttles to tick_rate if configured.
        """
        self.start()
        target_dt = 0.0
        if self.config.tick_rate and self.config.tick_rate > 0:
            target_dt = 1.0 / float(self.config.tick_rate)

        while self._running:
            now = time.perf_counter()
            dt = 0.0 if self._last_time is None else now - self._last_time
            self._last_time = now

            self.update(dt)

            if target_dt > 0:
                remaining = target_dt - (time.perf_counter() - now)
                if remaining > 0:
                    time.sleep(remaining)

        logger.info("Loop complete (steps=%d)", self._step)
