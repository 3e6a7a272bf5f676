from __future__ import annotations

from typing import Iterable, List


class StellarRogueError(Exception):
    """Base exception for the runtime core."""


class InvalidTransition(StellarRogueError):
    """A state machine was asked to enter a state that was never registered.

    StateMachine.set_state does not raise it. It is attached to the warning
    record (``exc_info``) so log handlers can tell these apart.
    """

    def __init__(self, target, current=None) -> None:
        self.target = target
        self.current = current
        super().__init__(f"Unknown state {target!r} (current: {current!r})")


class LifecycleError(StellarRogueError):
    """Raised when the session manager is used before initialize()."""


class StoreError(StellarRogueError):
    """Base exception for key-value store failures."""


class StoreReadError(StoreError):
    """Raised when a store cannot read a key."""


class StoreWriteError(StoreError):
    """Raised when a store cannot write a key."""


class SaveValidationError(StellarRogueError):
    """Raised when a stored record fails to parse or validate."""

    def __init__(self, message: str, errors: Iterable[str] = ()) -> None:
        self.errors: List[str] = list(errors)
        if self.errors:
            message = f"{message}: " + "; ".join(self.errors)
        super().__init__(message)
