from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

from ..errors import InvalidTransition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class State:
    """A named behavior bundle.

    All three handlers are optional. States carry no data of their own; any
    mutable data lives on the machine's context and is reached through the
    handler closures.
    """

    on_enter: Optional[Callable[[], Any]] = None
    on_exit: Optional[Callable[[], Any]] = None
    on_update: Optional[Callable[[float], Any]] = None

    def __post_init__(self) -> None:
        for attr in ("on_enter", "on_exit", "on_update"):
            handler = getattr(self, attr)
            if handler is not None and not callable(handler):
                raise TypeError(f"State.{attr} must be callable or None, got {type(handler).__name__}")


class StateMachine:
    """Drives one subject (an entity or a scene-level system) through named states.

    - add_state(name, state): register or overwrite a state
    - set_state(name): exit the active state, enter the named one
    - update(delta): advance time-in-state and run the active update handler

    Transitions to unknown names are reported on the diagnostic logger and
    ignored so a bad name never breaks the frame loop.
    """

    def __init__(self, context: Any = None, *, diagnostics: Optional[logging.Logger] = None) -> None:
        self.context = context
        self._states: Dict[Hashable, State] = {}
        self._current: Optional[Hashable] = None
        self._previous: Optional[Hashable] = None
        self._state_time: float = 0.0
        self._log = diagnostics or logger

    def add_state(self, name: Hashable, state: State) -> None:
        if not isinstance(state, State):
            raise TypeError(f"Expected a State for {name!r}, got {type(state).__name__}")
        self._states[name] = state

    def has_state(self, name: Hashable) -> bool:
        return name in self._states

    @property
    def states(self) -> Tuple[Hashable, ...]:
        return tuple(self._states)

    def set_state(self, name: Hashable) -> bool:
        """Transition to ``name``.

        Returns False (and logs a warning) when ``name`` is not registered;
        the machine then keeps its current state and time. Calling with the
        active name performs a full exit/enter cycle.
        """
        target = self._states.get(name)
        if target is None:
            self._log.warning(
                "State %r does not exist; staying in %r",
                name,
                self._current,
                exc_info=InvalidTransition(name, self._current),
            )
            return False

        if self._current is not None:
            active = self._states.get(self._current)
            if active is not None and active.on_exit is not None:
                active.on_exit()

        self._previous = self._current
        self._current = name
        self._state_time = 0.0
        logger.debug("Transition %r -> %r", self._previous, name)

        if target.on_enter is not None:
            target.on_enter()
        return True

    def update(self, delta: float) -> None:
        if self._current is None:
            return
        if delta < 0:
            self._log.warning("Negative delta %s ignored in state %r", delta, self._current)
            return
        self._state_time += delta
        active = self._states.get(self._current)
        if active is not None and active.on_update is not None:
            active.on_update(delta)

    def get_state(self) -> Optional[Hashable]:
        return self._current

    def get_state_time(self) -> float:
        return self._state_time

    @property
    def previous_state(self) -> Optional[Hashable]:
        return self._previous
