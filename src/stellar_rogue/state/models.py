from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Mapping, Set

from ..errors import SaveValidationError

STARTER_SHIP = "fighter"
DIFFICULTIES = ("easy", "normal", "hard")


@dataclass
class RunState:
    """Ephemeral state of the current playthrough. Discarded when a run ends."""

    sector: int = 1
    score: int = 0
    ship_type: str = STARTER_SHIP
    upgrades: List[str] = field(default_factory=list)
    penalties: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not isinstance(self.sector, int) or self.sector < 1:
            raise SaveValidationError("RunState.sector must be an integer >= 1")
        if not isinstance(self.score, int) or self.score < 0:
            raise SaveValidationError("RunState.score must be an integer >= 0")
        if not self.ship_type or not isinstance(self.ship_type, str):
            raise SaveValidationError("RunState.ship_type must be a non-empty string")

    def add_upgrade(self, upgrade_id: str) -> None:
        self.upgrades.append(upgrade_id)

    def add_penalty(self, penalty_id: str) -> None:
        self.penalties.append(penalty_id)

    def copy(self) -> "RunState":
        return RunState(
            sector=self.sector,
            score=self.score,
            ship_type=self.ship_type,
            upgrades=list(self.upgrades),
            penalties=list(self.penalties),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sector": self.sector,
            "score": self.score,
            "shipType": self.ship_type,
            "upgrades": list(self.upgrades),
            "penalties": list(self.penalties),
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "RunState":
        return RunState(
            sector=int(data.get("sector", 1)),
            score=int(data.get("score", 0)),
            ship_type=str(data.get("shipType", STARTER_SHIP)),
            upgrades=list(data.get("upgrades", [])),
            penalties=list(data.get("penalties", [])),
        )


@dataclass
class MetaProgress:
    """Durable progress carried across runs and sessions.

    Wire keys this build does not know (achievements written by a newer
    build, say) are kept in ``extra`` and written back unchanged.
    """

    _KNOWN = ("credits", "highestSector", "unlockedShips", "permanentUpgrades")

    credits: int = 0
    highest_sector: int = 1
    unlocked_ships: Set[str] = field(default_factory=lambda: {STARTER_SHIP})
    permanent_upgrades: Set[str] = field(default_factory=set)
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.credits, (int, float)) or self.credits < 0:
            raise SaveValidationError("MetaProgress.credits must be a number >= 0")
        if not isinstance(self.highest_sector, int) or self.highest_sector < 1:
            raise SaveValidationError("MetaProgress.highest_sector must be an integer >= 1")
        self.unlocked_ships = set(self.unlocked_ships)
        self.unlocked_ships.add(STARTER_SHIP)
        self.permanent_upgrades = set(self.permanent_upgrades)
        self.extra = dict(self.extra)

    def record_sector(self, sector: int) -> int:
        """Raise highest_sector to ``sector`` if it is higher. Never lowers it."""
        if sector > self.highest_sector:
            self.highest_sector = sector
        return self.highest_sector

    def merge(self, data: Mapping[str, Any]) -> None:
        """Overlay the wire fields present in ``data``; absent fields are kept."""
        if "credits" in data:
            self.credits = data["credits"]
        if "highestSector" in data:
            self.record_sector(int(data["highestSector"]))
        if "unlockedShips" in data:
            self.unlocked_ships = set(data["unlockedShips"]) | {STARTER_SHIP}
        if "permanentUpgrades" in data:
            self.permanent_upgrades = set(data["permanentUpgrades"])
        for key, value in data.items():
            if key not in self._KNOWN:
                self.extra[key] = copy.deepcopy(value)

    def copy(self) -> "MetaProgress":
        return MetaProgress(
            credits=self.credits,
            highest_sector=self.highest_sector,
            unlocked_ships=set(self.unlocked_ships),
            permanent_upgrades=set(self.permanent_upgrades),
            extra=copy.deepcopy(self.extra),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = copy.deepcopy(self.extra)
        data.update(
            {
                "credits": self.credits,
                "highestSector": self.highest_sector,
                "unlockedShips": sorted(self.unlocked_ships),
                "permanentUpgrades": sorted(self.permanent_upgrades),
            }
        )
        return data

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "MetaProgress":
        meta = MetaProgress()
        meta.merge(data)
        # copy() re-runs field validation on the merged values
        return meta.copy()


@dataclass
class AudioSettings:
    # Audio is switched off for this game; these are carried as data only.
    music: bool = False
    sfx: bool = False
    volume: float = 0.0  # 0..1

    def __post_init__(self) -> None:
        if not isinstance(self.music, bool) or not isinstance(self.sfx, bool):
            raise SaveValidationError("AudioSettings.music and sfx must be booleans")
        if not isinstance(self.volume, (int, float)) or not 0.0 <= self.volume <= 1.0:
            raise SaveValidationError("AudioSettings.volume must be between 0 and 1")

    def merge(self, data: Mapping[str, Any]) -> None:
        for f in fields(self):
            if f.name in data:
                setattr(self, f.name, data[f.name])

    def copy(self) -> "AudioSettings":
        return AudioSettings(music=self.music, sfx=self.sfx, volume=self.volume)

    def to_dict(self) -> Dict[str, Any]:
        return {"music": self.music, "sfx": self.sfx, "volume": self.volume}

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "AudioSettings":
        audio = AudioSettings()
        audio.merge(data)
        return audio.copy()


@dataclass
class GameSettings:
    """Player preferences stored under their own key."""

    sound_volume: float = 0.0
    music_volume: float = 0.0
    particle_effects: bool = True
    screen_shake: bool = True
    difficulty: str = "normal"

    _WIRE = {
        "sound_volume": "soundVolume",
        "music_volume": "musicVolume",
        "particle_effects": "particleEffects",
        "screen_shake": "screenShake",
        "difficulty": "difficulty",
    }

    def to_dict(self) -> Dict[str, Any]:
        return {wire: getattr(self, attr) for attr, wire in self._WIRE.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GameSettings":
        """Merge ``data`` over the defaults, clamping volumes and rejecting unknown difficulties."""
        gs = cls()
        for attr, wire in cls._WIRE.items():
            if wire in data:
                setattr(gs, attr, data[wire])
        gs.sound_volume = _clamp(gs.sound_volume, 0.0, 1.0)
        gs.music_volume = _clamp(gs.music_volume, 0.0, 1.0)
        gs.particle_effects = bool(gs.particle_effects)
        gs.screen_shake = bool(gs.screen_shake)
        if gs.difficulty not in DIFFICULTIES:
            gs.difficulty = cls.difficulty
        return gs


@dataclass
class Statistics:
    total_runs: int = 0
    total_play_time: float = 0
    highest_score: int = 0
    enemies_defeated: int = 0
    bosses_defeated: int = 0
    upgrades_collected: int = 0
    items_used: int = 0
    deaths: int = 0

    _WIRE = {
        "total_runs": "totalRuns",
        "total_play_time": "totalPlayTime",
        "highest_score": "highestScore",
        "enemies_defeated": "enemiesDefeated",
        "bosses_defeated": "bossesDefeated",
        "upgrades_collected": "upgradesCollected",
        "items_used": "itemsUsed",
        "deaths": "deaths",
    }

    def add(self, deltas: Mapping[str, float]) -> None:
        for name, value in deltas.items():
            if name not in self._WIRE:
                raise ValueError(f"Unknown statistic: {name}")
            if name == "highest_score":
                self.highest_score = max(self.highest_score, value)
            else:
                setattr(self, name, getattr(self, name) + value)

    def to_dict(self) -> Dict[str, Any]:
        return {wire: getattr(self, attr) for attr, wire in self._WIRE.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Statistics":
        stats = cls()
        for attr, wire in cls._WIRE.items():
            value = data.get(wire)
            # bool is an int subclass; stored flags are not counters
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                setattr(stats, attr, value)
        return stats


def _clamp(val: Any, lo: float, hi: float) -> float:
    try:
        return max(lo, min(hi, float(val)))
    except (TypeError, ValueError):
        return lo
