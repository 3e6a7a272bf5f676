from __future__ import annotations

import logging
import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from platformdirs import PlatformDirs

from ..errors import StoreReadError, StoreWriteError

logger = logging.getLogger(__name__)

APP_NAME = "StellarRogue"
SAVE_DIR_ENV = "STELLAR_ROGUE_SAVE_DIR"

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueStore(ABC):
    """Durable key-value persistence supplied by the host environment.

    Writes are atomic per key: a reader sees either the previous value or the
    new one, never a partial write.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Return the stored bytes, or None if the key is absent."""

    @abstractmethod
    def set(self, key: str, data: bytes) -> None:
        """Store ``data`` under ``key``, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``. Removing an absent key is not an error."""

    def contains(self, key: str) -> bool:
        return self.get(key) is not None


class InMemoryStore(KeyValueStore):
    """Test/deterministic store that holds data in memory only."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None) -> None:
        self._data: Dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def set(self, key: str, data: bytes) -> None:
        self._data[key] = bytes(data)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return sorted(self._data)


def default_store_root() -> Path:
    """Return the directory used by FileStore when none is given.

    STELLAR_ROGUE_SAVE_DIR wins; otherwise the platform user data dir.
    """
    override = os.getenv(SAVE_DIR_ENV)
    if override:
        return Path(override)
    d = PlatformDirs(appname=APP_NAME, appauthor=False)
    return Path(d.user_data_dir) / "saves"


class FileStore(KeyValueStore):
    """Filesystem-backed store: one file per key under ``root``.

    Writes go to a temporary file in the same directory which then replaces
    the target, so a crash mid-write leaves the previous value intact.
    """

    SUFFIX = ".json"

    def __init__(self, root: Optional[Path] = None) -> None:
        self.root = Path(root) if root is not None else default_store_root()

    def path_for(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid store key: {key!r}")
        return self.root / f"{key}{self.SUFFIX}"

    def _checked_path(self, key: str, error: type) -> Path:
        try:
            return self.path_for(key)
        except ValueError as exc:
            raise error(str(exc)) from exc

    def get(self, key: str) -> Optional[bytes]:
        path = self._checked_path(key, StoreReadError)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StoreReadError(f"Failed to read {path}: {exc}") from exc

    def set(self, key: str, data: bytes) -> None:
        path = self._checked_path(key, StoreWriteError)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=path.name, dir=self.root)
        except OSError as exc:
            raise StoreWriteError(f"Failed to prepare {path}: {exc}") from exc
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
            logger.debug("Wrote %d bytes to %s", len(data), path)
        except OSError as exc:
            raise StoreWriteError(f"Failed to write {path}: {exc}") from exc
        finally:
            if os.path.exists(tmp_name):
                try:
                    os.remove(tmp_name)
                except OSError:
                    logger.debug("Could not remove temp file %s", tmp_name, exc_info=True)

    def delete(self, key: str) -> None:
        path = self._checked_path(key, StoreWriteError)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise StoreWriteError(f"Failed to delete {path}: {exc}") from exc
