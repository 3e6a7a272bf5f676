import pytest

from stellar_rogue.errors import SaveValidationError
from stellar_rogue.state.models import (
    AudioSettings,
    GameSettings,
    MetaProgress,
    RunState,
    Statistics,
)


def test_run_state_validation_and_order():
    with pytest.raises(SaveValidationError):
        RunState(sector=0)
    with pytest.raises(SaveValidationError):
        RunState(score=-1)
    run = RunState()
    for upgrade in ["laser", "shield", "laser"]:
        run.add_upgrade(upgrade)
    assert run.upgrades == ["laser", "shield", "laser"]
    assert RunState.from_dict(run.to_dict()) == run


def test_meta_always_has_starter_ship():
    meta = MetaProgress(unlocked_ships=set())
    assert meta.unlocked_ships == {"fighter"}
    meta.merge({"unlockedShips": []})
    assert meta.unlocked_ships == {"fighter"}


def test_meta_record_sector_is_monotonic():
    meta = MetaProgress()
    assert meta.record_sector(5) == 5
    assert meta.record_sector(2) == 5


def test_meta_rejects_negative_credits():
    with pytest.raises(SaveValidationError):
        MetaProgress(credits=-1)
    with pytest.raises(SaveValidationError):
        MetaProgress.from_dict({"credits": -5})


def test_meta_keeps_unknown_wire_keys():
    meta = MetaProgress.from_dict({"credits": 5, "achievements": {"first_blood": True}})
    assert meta.extra == {"achievements": {"first_blood": True}}

    clone = meta.copy()
    clone.extra["achievements"]["ace"] = True
    assert meta.extra == {"achievements": {"first_blood": True}}

    data = meta.to_dict()
    assert data["achievements"] == {"first_blood": True}
    assert data["credits"] == 5
    # known fields always win over a stray extra entry
    meta.extra["credits"] = 999
    assert meta.to_dict()["credits"] == 5


def test_audio_bounds():
    with pytest.raises(SaveValidationError):
        AudioSettings(volume=1.5)
    with pytest.raises(SaveValidationError):
        AudioSettings(music="yes")


def test_game_settings_merge_and_clamp():
    gs = GameSettings.from_dict({"soundVolume": 3, "difficulty": "nightmare", "screenShake": False})
    assert gs.sound_volume == 1.0
    assert gs.difficulty == "normal"
    assert gs.screen_shake is False
    assert gs.particle_effects is True


def test_statistics_add():
    stats = Statistics.from_dict({"deaths": 2, "totalRuns": True, "highestScore": 50})
    assert stats.total_runs == 0
    stats.add({"deaths": 1, "highest_score": 40})
    assert stats.deaths == 3
    assert stats.highest_score == 50
    with pytest.raises(ValueError):
        stats.add({"kills": 1})
