from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from importlib.resources import files as resource_files
from typing import Any, Dict, Optional

from jsonschema import Draft202012Validator

from ..errors import SaveValidationError
from ..state.models import AudioSettings, MetaProgress

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def load_schema(name: str) -> Dict[str, Any]:
    """Load a packaged JSON schema from stellar_rogue/data/schemas."""
    text = resource_files("stellar_rogue.data").joinpath("schemas").joinpath(f"{name}.schema.json").read_text(encoding="utf-8")
    logger.debug("Loaded schema %s", name)
    return json.loads(text)


def validate(data: Any, schema_name: str) -> None:
    """Validate ``data`` against a packaged schema.

    Raises:
        SaveValidationError listing every violation, in document order.
    """
    validator = Draft202012Validator(load_schema(schema_name))
    errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    if errors:
        messages = [f"{'/'.join(str(p) for p in err.path) or '<root>'}: {err.message}" for err in errors]
        raise SaveValidationError(f"{schema_name} failed validation", messages)


def parse_json(raw: bytes | str) -> Any:
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SaveValidationError(f"Invalid JSON: {e}") from e


@dataclass
class SaveRecord:
    """What gets stored under the save key.

    Each section is optional on read: a record written by an older or newer
    build may leave one out, and the loader only overlays what is present.
    No schema version is stored.
    """

    meta_progress: Optional[Dict[str, Any]] = None
    audio_settings: Optional[Dict[str, Any]] = None
    last_played_timestamp: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def capture(cls, meta: MetaProgress, audio: AudioSettings, timestamp_ms: int) -> "SaveRecord":
        return cls(
            meta_progress=meta.to_dict(),
            audio_settings=audio.to_dict(),
            last_played_timestamp=int(timestamp_ms),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        if self.meta_progress is not None:
            data["metaProgress"] = self.meta_progress
        if self.audio_settings is not None:
            data["audioSettings"] = self.audio_settings
        if self.last_played_timestamp is not None:
            data["lastPlayedTimestamp"] = self.last_played_timestamp
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "SaveRecord":
        known = {"metaProgress", "audioSettings", "lastPlayedTimestamp"}
        return SaveRecord(
            meta_progress=data.get("metaProgress"),
            audio_settings=data.get("audioSettings"),
            last_played_timestamp=data.get("lastPlayedTimestamp"),
            extra={k: v for k, v in data.items() if k not in known},
        )


def encode_record(record: SaveRecord) -> bytes:
    """Encode a SaveRecord to compact UTF-8 JSON."""
    return json.dumps(record.to_dict(), ensure_ascii=False, sort_keys=True).encode("utf-8")


def decode_record(raw: bytes | str) -> SaveRecord:
    """Decode stored bytes into a SaveRecord.

    Both the meta progress and the audio sections are checked against the
    schema; a bad shape in either rejects the whole record.
    """
    data = parse_json(raw)
    validate(data, "save_record")
    return SaveRecord.from_dict(data)
