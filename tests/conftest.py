import os
import sys
from typing import List, Tuple

import pytest

from uci_client import ReportingLevel, UciEngine

FAKE_ENGINE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "fake_engine.py")


class RecordingSink:
    """Event sink that records every notification for assertions."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, tuple]] = []

    def names(self) -> List[str]:
        return [name for name, _ in self.events]

    def of(self, name: str) -> List[tuple]:
        return [args for event, args in self.events if event == name]

    def engine_ready(self) -> None:
        self.events.append(("engine_ready", ()))

    def best_move_calculated(self, move: str, ponder: str) -> None:
        self.events.append(("best_move_calculated", (move, ponder)))

    def candidate_moves_calculated(self, candidates) -> None:
        self.events.append(("candidate_moves_calculated", (list(candidates),)))

    def info_received(self, line: str) -> None:
        self.events.append(("info_received", (line,)))

    def error_occurred(self, message: str) -> None:
        self.events.append(("error_occurred", (message,)))

    def initialization_failed(self, reason: str) -> None:
        self.events.append(("initialization_failed", (reason,)))


@pytest.fixture()
def fake_engine_script() -> str:
    return FAKE_ENGINE


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def offline_engine(sink) -> UciEngine:
    return UciEngine(sink=sink, reporting_level=ReportingLevel.QUIET)


@pytest.fixture()
def make_engine(sink):
    engines = []

    def factory(*flags: str) -> UciEngine:
        engine = UciEngine(
            sys.executable,
            engine_args=[FAKE_ENGINE, *flags],
            sink=sink,
            reporting_level=ReportingLevel.QUIET,
        )
        engines.append(engine)
        return engine

    yield factory
    for engine in engines:
        engine.stop()
