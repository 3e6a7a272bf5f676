import io
import logging
from pathlib import Path

import pytest

from stellar_rogue.config import SessionDefaults, load_defaults
from stellar_rogue.logging_config import configure_logging, resolve_level


def test_embedded_defaults_match_builtin():
    defaults = load_defaults()
    assert defaults.meta == SessionDefaults().meta
    assert defaults.run.ship_type == "fighter"
    assert defaults.audio.volume == 0


def test_override_file(tmp_path: Path):
    path = tmp_path / "defaults.yaml"
    path.write_text("meta:\n  credits: 250\n  unlockedShips: [scout]\nrun:\n  shipType: scout\n", encoding="utf-8")
    defaults = load_defaults(str(path))
    assert defaults.meta.credits == 250
    assert defaults.meta.unlocked_ships == {"fighter", "scout"}
    assert defaults.run.ship_type == "scout"
    assert defaults.audio.music is False


def test_fresh_copies_are_independent():
    defaults = SessionDefaults()
    run = defaults.fresh_run()
    run.add_upgrade("laser")
    assert defaults.run.upgrades == []


@pytest.fixture()
def root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
    root.setLevel(level)


@pytest.mark.parametrize(
    "given, expected",
    [(None, logging.WARNING), (logging.DEBUG, logging.DEBUG), ("info", logging.INFO), ("loud", logging.WARNING)],
)
def test_resolve_level(given, expected):
    assert resolve_level(given) == expected


def test_configure_logging_env_overrides_level(monkeypatch, root_logger):
    monkeypatch.setenv("STELLAR_ROGUE_LOG_LEVEL", "debug")
    stream = io.StringIO()
    configure_logging(logging.WARNING, stream=stream)
    assert root_logger.level == logging.DEBUG
    logging.getLogger("stellar_rogue.test").debug("hello %s", "there")
    assert "DEBUG" in stream.getvalue()
    assert "stellar_rogue.test: hello there" in stream.getvalue()


def test_configure_logging_replaces_its_own_handler(monkeypatch, root_logger):
    monkeypatch.delenv("STELLAR_ROGUE_LOG_LEVEL", raising=False)
    first = configure_logging("info", stream=io.StringIO())
    before = len(root_logger.handlers)
    second = configure_logging("error", stream=io.StringIO())
    assert first not in root_logger.handlers
    assert second in root_logger.handlers
    assert len(root_logger.handlers) == before
    assert root_logger.level == logging.ERROR
