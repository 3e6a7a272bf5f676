import logging
from enum import Enum

import pytest

from stellar_rogue.errors import InvalidTransition
from stellar_rogue.systems.state_machine import State, StateMachine


class Recorder:
    def __init__(self):
        self.calls = []

    def state(self, name, with_update=True):
        return State(
            on_enter=lambda: self.calls.append(("enter", name)),
            on_exit=lambda: self.calls.append(("exit", name)),
            on_update=(lambda d: self.calls.append(("update", name, d))) if with_update else None,
        )


def make_machine():
    rec = Recorder()
    sm = StateMachine(context=object())
    sm.add_state("idle", rec.state("idle"))
    sm.add_state("firing", rec.state("firing"))
    return sm, rec


def test_idle_then_firing_scenario():
    sm, _ = make_machine()
    assert sm.set_state("idle") is True
    for _ in range(3):
        sm.update(16)
    assert sm.get_state_time() == 48
    sm.set_state("firing")
    assert sm.get_state() == "firing"
    assert sm.get_state_time() == 0


def test_state_time_resets_and_grows_for_every_transition():
    sm, _ = make_machine()
    for name in ["idle", "firing", "idle", "idle", "firing"]:
        sm.set_state(name)
        assert sm.get_state() == name
        assert sm.get_state_time() == 0
        last = 0
        for delta in (0.5, 1.25, 3):
            sm.update(delta)
            assert sm.get_state_time() > last
            last = sm.get_state_time()


def test_exit_then_enter_order_and_previous_state():
    sm, rec = make_machine()
    sm.set_state("idle")
    assert sm.previous_state is None
    sm.set_state("firing")
    assert rec.calls == [("enter", "idle"), ("exit", "idle"), ("enter", "firing")]
    assert sm.previous_state == "idle"


def test_self_transition_runs_full_cycle():
    sm, rec = make_machine()
    sm.set_state("idle")
    sm.update(10)
    rec.calls.clear()

    assert sm.set_state("idle") is True
    assert rec.calls == [("exit", "idle"), ("enter", "idle")]
    assert sm.get_state_time() == 0
    assert sm.previous_state == "idle"


def test_unknown_state_is_ignored_with_one_warning(caplog):
    sm, rec = make_machine()
    sm.set_state("idle")
    sm.update(7)
    rec.calls.clear()

    with caplog.at_level(logging.WARNING):
        assert sm.set_state("warping") is False

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "warping" in warnings[0].getMessage()
    err = warnings[0].exc_info[1]
    assert isinstance(err, InvalidTransition)
    assert (err.target, err.current) == ("warping", "idle")
    assert sm.get_state() == "idle"
    assert sm.get_state_time() == 7
    assert rec.calls == []


def test_unknown_state_before_any_state():
    sm = StateMachine()
    assert sm.set_state("idle") is False
    assert sm.get_state() is None
    sm.update(5)
    assert sm.get_state_time() == 0


def test_injected_diagnostic_logger(caplog):
    sink = logging.getLogger("tests.diagnostics")
    sm = StateMachine(diagnostics=sink)
    with caplog.at_level(logging.WARNING, logger="tests.diagnostics"):
        sm.set_state("missing")
    assert [r.name for r in caplog.records] == ["tests.diagnostics"]


def test_update_passes_delta_and_handlers_are_optional():
    sm, rec = make_machine()
    sm.add_state("drift", State())
    sm.set_state("idle")
    sm.update(0.25)
    assert rec.calls[-1] == ("update", "idle", 0.25)

    sm.set_state("drift")
    sm.update(1)
    assert sm.get_state_time() == 1


def test_transition_from_update_takes_effect_immediately():
    calls = []
    sm = StateMachine()

    def patrol_update(delta):
        calls.append(("patrol", delta))
        if sm.get_state_time() >= 2:
            sm.set_state("attack")

    sm.add_state("patrol", State(on_update=patrol_update))
    sm.add_state("attack", State(on_update=lambda d: calls.append(("attack", d))))
    sm.set_state("patrol")
    sm.update(1)
    sm.update(1)
    assert sm.get_state() == "attack"
    assert sm.get_state_time() == 0
    sm.update(1)
    assert calls == [("patrol", 1), ("patrol", 1), ("attack", 1)]
    assert sm.get_state_time() == 1


def test_reregistering_active_state_does_not_reenter():
    sm, rec = make_machine()
    sm.set_state("idle")
    rec.calls.clear()
    replacement = Recorder()
    sm.add_state("idle", replacement.state("idle"))
    assert rec.calls == [] and replacement.calls == []
    sm.update(1)
    assert replacement.calls == [("update", "idle", 1)]


def test_negative_delta_is_rejected(caplog):
    sm, _ = make_machine()
    sm.set_state("idle")
    sm.update(3)
    with caplog.at_level(logging.WARNING):
        sm.update(-1)
    assert sm.get_state_time() == 3
    assert any("Negative delta" in r.getMessage() for r in caplog.records)


def test_enum_names_and_context():
    class Phase(Enum):
        CHARGE = "charge"
        FIRE = "fire"

    owner = {"shots": 0}

    def fire():
        owner["shots"] += 1

    sm = StateMachine(owner)
    sm.add_state(Phase.CHARGE, State())
    sm.add_state(Phase.FIRE, State(on_enter=fire))
    sm.set_state(Phase.FIRE)
    assert sm.context is owner
    assert owner["shots"] == 1
    assert sm.states == (Phase.CHARGE, Phase.FIRE)
    assert sm.has_state(Phase.CHARGE)
    assert not sm.has_state("charge")


def test_registration_is_validated():
    sm = StateMachine()
    with pytest.raises(TypeError):
        State(on_enter="not callable")
    with pytest.raises(TypeError):
        sm.add_state("idle", {"on_enter": lambda: None})
