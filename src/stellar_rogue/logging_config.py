import logging
import os
import sys
from typing import Optional, TextIO, Union

LOG_LEVEL_ENV = "STELLAR_ROGUE_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s: %(message)s"


class _ConsoleHandler(logging.StreamHandler):
    """Marker type so repeated configure_logging() calls replace only our handler."""


def resolve_level(level: Union[int, str, None], fallback: int = logging.WARNING) -> int:
    """Turn ``level`` (an int, a name such as "debug", or None) into a logging level.

    Unknown names resolve to ``fallback``.
    """
    if level is None:
        return fallback
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    return value if isinstance(value, int) else fallback


def configure_logging(
    level: Union[int, str, None] = None,
    stream: Optional[TextIO] = None,
) -> logging.Handler:
    """Send log records to ``stream`` (stderr by default) at ``level``.

    STELLAR_ROGUE_LOG_LEVEL, when set, overrides ``level``. Calling this again
    swaps the handler installed last time; handlers added by anyone else
    (pytest's caplog, a host application) are left alone.
    """
    resolved = resolve_level(level)
    resolved = resolve_level(os.getenv(LOG_LEVEL_ENV) or None, fallback=resolved)

    root = logging.getLogger()
    for existing in [h for h in root.handlers if isinstance(h, _ConsoleHandler)]:
        root.removeHandler(existing)
        existing.close()

    handler = _ConsoleHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
    root.addHandler(handler)
    root.setLevel(resolved)
    return handler
