from __future__ import annotations

import logging
from dataclasses import dataclass, field
from importlib.resources import files as resource_files
from typing import Optional

import yaml

from .state.models import AudioSettings, MetaProgress, RunState

logger = logging.getLogger(__name__)

SAVE_KEY = "stellar_rogue_save"
SETTINGS_KEY = "stellar_rogue_settings"
STATS_KEY = "stellar_rogue_statistics"


@dataclass
class SessionDefaults:
    """Starting values for a fresh profile.

    The session manager keeps its own copies; mutating the live state never
    changes these.
    """

    run: RunState = field(default_factory=RunState)
    meta: MetaProgress = field(default_factory=MetaProgress)
    audio: AudioSettings = field(default_factory=AudioSettings)

    def fresh_run(self) -> RunState:
        return self.run.copy()

    def fresh_meta(self) -> MetaProgress:
        return self.meta.copy()

    def fresh_audio(self) -> AudioSettings:
        return self.audio.copy()


def load_defaults(path: Optional[str] = None) -> SessionDefaults:
    """Load session defaults from YAML.

    If path is None, loads the embedded default resource at
    stellar_rogue/data/defaults.yaml.
    """
    if path is None:
        data = resource_files("stellar_rogue.data").joinpath("defaults.yaml").read_text(encoding="utf-8")
        logger.debug("Loaded embedded session defaults resource")
    else:
        with open(path, "r", encoding="utf-8") as f:
            data = f.read()
        logger.debug("Loaded session defaults from path: %s", path)

    raw = yaml.safe_load(data) or {}
    defaults = SessionDefaults(
        run=RunState.from_dict(raw.get("run") or {}),
        meta=MetaProgress.from_dict(raw.get("meta") or {}),
        audio=AudioSettings.from_dict(raw.get("audio") or {}),
    )
    logger.info(
        "Session defaults: credits=%s highest_sector=%s ship=%s",
        defaults.meta.credits,
        defaults.meta.highest_sector,
        defaults.run.ship_type,
    )
    return defaults
