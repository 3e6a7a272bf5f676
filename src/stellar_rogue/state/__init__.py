"""Game state models (run, meta progression, settings) and the owning context."""
from .context import GameContext
from .models import (
    STARTER_SHIP,
    AudioSettings,
    GameSettings,
    MetaProgress,
    RunState,
    Statistics,
)

__all__ = [
    "STARTER_SHIP",
    "AudioSettings",
    "GameContext",
    "GameSettings",
    "MetaProgress",
    "RunState",
    "Statistics",
]
