"""Stellar Rogue runtime core: state machines and session lifecycle."""

__version__ = "1.0.2"

from .config import SessionDefaults, load_defaults
from .session.lifecycle import LifecycleState, LoadStatus, SessionLifecycleManager
from .systems.state_machine import State, StateMachine

__all__ = [
    "__version__",
    "LifecycleState",
    "LoadStatus",
    "SessionDefaults",
    "SessionLifecycleManager",
    "State",
    "StateMachine",
    "load_defaults",
]
