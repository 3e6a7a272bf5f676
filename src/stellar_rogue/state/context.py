from __future__ import annotations

from dataclasses import dataclass, field

from .models import AudioSettings, MetaProgress, RunState


@dataclass
class GameContext:
    """Live game state shared by the lifecycle manager and the scene code.

    Created explicitly and handed to whoever needs it; there is no
    process-wide instance.
    """

    run: RunState = field(default_factory=RunState)
    meta: MetaProgress = field(default_factory=MetaProgress)
    audio: AudioSettings = field(default_factory=AudioSettings)
