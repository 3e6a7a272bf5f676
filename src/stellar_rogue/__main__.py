from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from . import __version__
from .config import load_defaults
from .engine.loop import GameLoop, LoopConfig
from .logging_config import configure_logging
from .persistence.store import FileStore
from .session.lifecycle import SessionLifecycleManager
from .session.preferences import StatisticsRepository
from .systems.state_machine import State, StateMachine

FIRE_INTERVAL = 0.5
SCORE_PER_VOLLEY = 10


def _verbosity_level(verbosity: int) -> int:
    if verbosity == 1:
        return logging.INFO
    if verbosity >= 2:
        return logging.DEBUG
    return logging.WARNING


def build_ship_machine(session: SessionLifecycleManager) -> StateMachine:
    """A player ship that alternates between idling and firing volleys."""
    machine = StateMachine(session)

    def idle_update(delta: float) -> None:
        if machine.get_state_time() >= FIRE_INTERVAL:
            machine.set_state("firing")

    def firing_enter() -> None:
        session.run.score += SCORE_PER_VOLLEY

    def firing_update(delta: float) -> None:
        if machine.get_state_time() >= FIRE_INTERVAL:
            machine.set_state("idle")

    machine.add_state("idle", State(on_update=idle_update))
    machine.add_state("firing", State(on_enter=firing_enter, on_update=firing_update))
    return machine


def _summary(session: SessionLifecycleManager) -> int:
    summary = session.save_summary()
    if summary is None:
        print("No save found.")
        return 1
    print(
        json.dumps(
            {
                "credits": summary.credits,
                "highestSector": summary.highest_sector,
                "unlockedShips": summary.unlocked_ships,
                "lastPlayed": summary.last_played.isoformat() if summary.last_played else None,
            },
            indent=2,
            sort_keys=True,
        )
    )
    return 0


def _simulate(session: SessionLifecycleManager, args: argparse.Namespace) -> int:
    loop = GameLoop(session, LoopConfig(tick_rate=0, max_steps=args.steps), defaults=load_defaults(args.defaults))
    loop.start()
    machine = loop.register(build_ship_machine(session))
    machine.set_state("idle")
    while loop.running:
        loop.update(args.dt)
    # stop() already saved once; bank the run and save the result
    session.meta.credits += session.run.score // 10
    session.meta.record_sector(session.run.sector)
    session.save_to_store()
    StatisticsRepository(session.store).record(total_runs=1, highest_score=session.run.score)
    print(f"Run finished: score={session.run.score} credits={session.meta.credits}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="stellar-rogue",
        description="Stellar Rogue - save inspection and headless simulation",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--save-dir", type=Path, default=None, help="Directory holding save files")
    parser.add_argument("--defaults", default=None, help="YAML file overriding the session defaults")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity (-v, -vv)")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("summary", help="Print the stored save summary")
    sub.add_parser("delete", help="Delete the stored save")
    sim = sub.add_parser("simulate", help="Run a headless session and save the result")
    sim.add_argument("--steps", type=int, default=120, help="Number of ticks to run")
    sim.add_argument("--dt", type=float, default=1 / 60, help="Seconds per tick")

    args = parser.parse_args(argv)
    configure_logging(_verbosity_level(args.verbose))

    session = SessionLifecycleManager(FileStore(args.save_dir))
    if args.command == "simulate":
        return _simulate(session, args)

    session.initialize(load_defaults(args.defaults))
    if args.command == "summary":
        return _summary(session)
    if args.command == "delete":
        if session.delete_save():
            print("Save data deleted.")
            return 0
        return 1
    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
