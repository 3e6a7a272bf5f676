"""Session lifecycle: run/meta ownership, persistence and suspend/resume."""
from .lifecycle import (
    LifecycleEvent,
    LifecycleState,
    LoadStatus,
    SaveResult,
    SaveSummary,
    SessionLifecycleManager,
)
from .preferences import SettingsRepository, StatisticsRepository

__all__ = [
    "LifecycleEvent",
    "LifecycleState",
    "LoadStatus",
    "SaveResult",
    "SaveSummary",
    "SessionLifecycleManager",
    "SettingsRepository",
    "StatisticsRepository",
]
