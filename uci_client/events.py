"""Event sink protocol and the queue that carries events off reader threads."""

import queue
from typing import List, Protocol, Tuple

from .candidates import CandidateMove
from .utils import ReportingLevel, debug_text, info_text

EVENT_NAMES = (
    "engine_ready",
    "best_move_calculated",
    "candidate_moves_calculated",
    "info_received",
    "error_occurred",
    "initialization_failed",
)


class EngineEventSink(Protocol):
    """Protocol describing the notifications emitted by :class:`UciEngine`."""

    def engine_ready(self) -> None:
        ...

    def best_move_calculated(self, move: str, ponder: str) -> None:
        ...

    def candidate_moves_calculated(self, candidates: List[CandidateMove]) -> None:
        ...

    def info_received(self, line: str) -> None:
        ...

    def error_occurred(self, message: str) -> None:
        ...

    def initialization_failed(self, reason: str) -> None:
        ...


class EventQueue:
    """Thread-safe hand-off of events from reader threads to the caller's thread."""

    def __init__(self) -> None:
        self._queue: "queue.Queue[Tuple[str, tuple]]" = queue.Queue()

    def post(self, name: str, *args) -> None:
        if name not in EVENT_NAMES:
            raise ValueError(f"Unknown engine event: {name}")
        self._queue.put((name, args))

    def pending(self) -> int:
        return self._queue.qsize()

    def drain(self, sink: EngineEventSink) -> int:
        dispatched = 0
        while True:
            try:
                name, args = self._queue.get_nowait()
            except queue.Empty:
                return dispatched
            getattr(sink, name)(*args)
            dispatched += 1

    def clear(self) -> None:
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                return


class ConsoleEventSink:
    """Sink that reports events on the console, used when no sink is supplied."""

    def __init__(self, reporting_level: ReportingLevel = ReportingLevel.BASIC) -> None:
        self.reporting_level = reporting_level

    def _log(self, message: str, level: ReportingLevel = ReportingLevel.BASIC) -> None:
        if self.reporting_level >= level:
            print(info_text(message))

    def engine_ready(self) -> None:
        self._log("Engine ready for configuration")

    def best_move_calculated(self, move: str, ponder: str) -> None:
        suffix = f" (ponder {ponder})" if ponder else ""
        self._log(f"Best move: {move}{suffix}")

    def candidate_moves_calculated(self, candidates: List[CandidateMove]) -> None:
        for candidate in candidates:
            self._log(
                f"Candidate {candidate.multipv}: {candidate.move} "
                f"{candidate.score_type.value} {candidate.score} (depth {candidate.depth})"
            )

    def info_received(self, line: str) -> None:
        self._log(line, ReportingLevel.VERBOSE)

    def error_occurred(self, message: str) -> None:
        if self.reporting_level > ReportingLevel.QUIET:
            print(debug_text(message))

    def initialization_failed(self, reason: str) -> None:
        if self.reporting_level > ReportingLevel.QUIET:
            print(debug_text(f"Initialization failed: {reason}"))
