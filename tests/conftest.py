import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from stellar_rogue.errors import StoreReadError, StoreWriteError  # noqa: E402
from stellar_rogue.persistence.store import InMemoryStore  # noqa: E402


class FlakyStore(InMemoryStore):
    """In-memory store whose reads and writes can be switched to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_reads = False
        self.fail_writes = False
        self.writes = 0

    def get(self, key):
        if self.fail_reads:
            raise StoreReadError("storage unavailable")
        return super().get(key)

    def set(self, key, data):
        self.writes += 1
        if self.fail_writes:
            raise StoreWriteError("quota exceeded")
        super().set(key, data)


@pytest.fixture()
def store() -> FlakyStore:
    return FlakyStore()
