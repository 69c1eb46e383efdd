"""Qt adapter: re-emits engine events as PySide6 signals."""

from typing import List, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from .candidates import CandidateMove


class QtEventSink(QObject):
    """Event sink exposing each engine notification as a Qt signal.

    Candidate lists are emitted as plain dicts (see ``CandidateMove.as_dict``)
    so slots in QML or other bindings can consume them directly.
    """

    engineReady = Signal()
    bestMoveCalculated = Signal(str, str)
    candidateMovesCalculated = Signal(list)
    infoReceived = Signal(str)
    errorOccurred = Signal(str)
    initializationFailed = Signal(str)

    def engine_ready(self) -> None:
        self.engineReady.emit()

    def best_move_calculated(self, move: str, ponder: str) -> None:
        self.bestMoveCalculated.emit(move, ponder)

    def candidate_moves_calculated(self, candidates: List[CandidateMove]) -> None:
        self.candidateMovesCalculated.emit([candidate.as_dict() for candidate in candidates])

    def info_received(self, line: str) -> None:
        self.infoReceived.emit(line)

    def error_occurred(self, message: str) -> None:
        self.errorOccurred.emit(message)

    def initialization_failed(self, reason: str) -> None:
        self.initializationFailed.emit(reason)


def attach_event_pump(engine, parent: Optional[QObject] = None, interval_ms: int = 50) -> QTimer:
    """Drain ``engine``'s queued events from the Qt event loop every ``interval_ms``."""
    timer = QTimer(parent)
    timer.setInterval(interval_ms)
    timer.timeout.connect(engine.process_events)
    timer.start()
    return timer
