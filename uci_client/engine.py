import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Union

from .candidates import CandidateAggregator
from .errors import (
    EngineCommunicationError,
    EngineError,
    EngineNotRunningError,
)
from .events import ConsoleEventSink, EngineEventSink, EventQueue
from .process import STOP_TIMEOUT_S, EngineProcess
from .protocol import (
    CMD_IS_READY,
    CMD_STOP,
    CMD_UCI,
    CMD_UCI_NEW_GAME,
    OPT_MULTI_PV,
    OPT_SKILL_LEVEL,
    RESP_BEST_MOVE,
    RESP_INFO,
    RESP_READY_OK,
    RESP_UCI_OK,
    MoveToken,
    build_go,
    build_go_with_search_moves,
    build_position_fen,
    build_position_startpos,
    build_set_option,
    parse_best_move,
    parse_ponder_move,
)
from .readers import start_reader
from .utils import ReportingLevel, debug_text, info_text, received_text, sending_text

DEFAULT_THINK_TIME_MS = 1000
DEFAULT_TIMEOUT_MS = 5000
POLL_INTERVAL_S = 0.05
READER_JOIN_TIMEOUT_S = 1.0
MULTIPV_RANGE = (1, 500)
SKILL_LEVEL_RANGE = (0, 20)
READY_TIMEOUT_MESSAGE = "Engine readiness check timed out"


@dataclass
class EngineState:
    """Synchronization flags set by the response parser."""

    initialized: bool = False
    ready: bool = False

    def reset(self) -> None:
        self.initialized = False
        self.ready = False


@dataclass
class EngineSettings:
    default_think_time_ms: int = DEFAULT_THINK_TIME_MS
    print_output: bool = True
    multipv: int = 1


def _clamp(value: int, bounds) -> int:
    low, high = bounds
    return max(low, min(high, int(value)))


class UciEngine:
    """
    Drives an external UCI engine process.

    Commands are written synchronously from the caller's thread. Two daemon
    threads drain the engine's stdout and stderr; parsed results are queued
    and handed to ``sink`` on the caller's thread by :meth:`process_events`,
    which the blocking waits call while they poll.
    """

    def __init__(
        self,
        engine_path: Optional[str] = None,
        *,
        engine_args: Sequence[str] = (),
        workdir: Optional[str] = None,
        sink: Optional[EngineEventSink] = None,
        reporting_level: ReportingLevel = ReportingLevel.BASIC,
        settings: Optional[EngineSettings] = None,
    ) -> None:
        self.process = EngineProcess(engine_path, engine_args, workdir=workdir)
        self.reporting_level = reporting_level
        self.sink: EngineEventSink = sink or ConsoleEventSink(reporting_level)
        self.state = EngineState()
        self.settings = settings or EngineSettings()
        self.candidates = CandidateAggregator()

        self._events = EventQueue()
        self._stopping = threading.Event()
        self._readers: List[threading.Thread] = []

    def __enter__(self) -> "UciEngine":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    @property
    def engine_path(self) -> Optional[str]:
        return self.process.path

    @engine_path.setter
    def engine_path(self, path: Optional[str]) -> None:
        self.process.path = path

    @property
    def running(self) -> bool:
        return self.process.running

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _log(self, message: str, level: ReportingLevel = ReportingLevel.BASIC) -> None:
        if self.reporting_level >= level:
            print(info_text(message))

    def _log_debug(self, message: str) -> None:
        if self.reporting_level > ReportingLevel.QUIET:
            print(debug_text(message))

    def _post(self, name: str, *args) -> None:
        self._events.post(name, *args)

    def _emit_now(self, name: str, *args) -> None:
        # Flush anything the readers queued first so the sink sees events in order.
        self.process_events()
        getattr(self.sink, name)(*args)

    def _report_error(self, message: str) -> None:
        self._log_debug(message)
        self._emit_now("error_occurred", message)

    def _post_reader_error(self, message: str) -> None:
        self._log_debug(message)
        self._post("error_occurred", message)

    def process_events(self) -> int:
        """Dispatch queued engine events to the sink; returns how many ran."""
        return self._events.drain(self.sink)

    # ------------------------------------------------------------------
    # Process lifecycle
    # ------------------------------------------------------------------

    def start(self) -> bool:
        try:
            self.process.start()
        except EngineError as exc:
            self._report_error(str(exc))
            return False

        self.state.reset()
        self.candidates.clear()
        self._stopping.clear()
        self._readers = [
            start_reader(
                "stdout",
                self.process.stdout,
                self.handle_line,
                self._post_reader_error,
                self._stopping,
            ),
            start_reader(
                "stderr",
                self.process.stderr,
                self._handle_stderr_line,
                self._post_reader_error,
                self._stopping,
                keep_blank=True,
            ),
        ]
        self._log(f"Engine process started -> {self.engine_path} (pid {self.process.pid})")
        return True

    def stop(self) -> None:
        if not self.process.started:
            return

        self._stopping.set()
        graceful = False
        try:
            graceful = self.process.stop(STOP_TIMEOUT_S)
        except OSError as exc:
            self._report_error(f"Error stopping engine: {exc}")
        finally:
            for thread in self._readers:
                thread.join(timeout=READER_JOIN_TIMEOUT_S)
            self._readers = []
            self.state.reset()
            self.candidates.clear()
            # Results from the old process must not reach the sink after a restart.
            self._events.clear()

        if graceful:
            self._log("Engine stopped gracefully")
        else:
            self._log_debug("Engine process was forcefully terminated")

    # ------------------------------------------------------------------
    # Response parsing (runs on the stdout reader thread)
    # ------------------------------------------------------------------

    def handle_line(self, line: str) -> None:
        line = line.strip()
        if not line:
            return
        if self.settings.print_output and self.reporting_level >= ReportingLevel.VERBOSE:
            print(received_text(line))

        if line == RESP_UCI_OK:
            self.state.initialized = True
            self._post("engine_ready")
        elif line == RESP_READY_OK:
            self.state.ready = True
        elif line.startswith(RESP_BEST_MOVE):
            self._handle_best_move(line)
        elif line.startswith(RESP_INFO):
            self.candidates.update(line)
            if self.settings.print_output:
                self._post("info_received", line)

    def _handle_best_move(self, line: str) -> None:
        move = parse_best_move(line)
        if move:
            ponder = parse_ponder_move(line)
            self._post("best_move_calculated", move, ponder or "")
            if len(self.candidates) > 0:
                self._post("candidate_moves_calculated", self.candidates.candidates())
        self.candidates.clear()

    def _handle_stderr_line(self, line: str) -> None:
        self._log_debug(f"STDERR: {line}")
        self._post("error_occurred", line)

    # ------------------------------------------------------------------
    # Blocking synchronization
    # ------------------------------------------------------------------

    def _join_stdout_reader(self) -> None:
        # The child is gone; let the reader finish the lines it already buffered.
        if self._readers:
            self._readers[0].join(timeout=READER_JOIN_TIMEOUT_S)

    def _wait_for(self, predicate: Callable[[], bool], timeout_ms: int) -> bool:
        deadline = time.monotonic() + max(0, timeout_ms) / 1000.0
        while True:
            self.process_events()
            if predicate():
                return True
            remaining = deadline - time.monotonic()
            if remaining <= 0 or not self.process.running:
                if not self.process.running:
                    self._join_stdout_reader()
                self.process_events()
                return predicate()
            time.sleep(min(POLL_INTERVAL_S, remaining))

    def wait_for_ready(self, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> bool:
        """Send ``isready`` and block until ``readyok`` or the timeout."""
        self.state.ready = False
        if not self.send_command(CMD_IS_READY):
            return False
        if self._wait_for(lambda: self.state.ready, timeout_ms):
            return True

        self._log_debug(READY_TIMEOUT_MESSAGE)
        self._emit_now("error_occurred", READY_TIMEOUT_MESSAGE)
        return False

    def initialize(self, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> bool:
        """Start the engine if needed and complete the ``uci`` handshake.

        On timeout ``initialization_failed`` is emitted and the process is left
        running; call :meth:`stop` before retrying from a clean state.
        """
        if not self.process.running:
            if self.process.started:
                # The previous child exited on its own; release it first.
                self.stop()
            if not self.start():
                return False

        if not self.send_command(CMD_UCI):
            return False

        if self._wait_for(lambda: self.state.initialized, timeout_ms):
            self._log("Engine initialized successfully")
            return True

        self._log_debug("Engine initialization timed out")
        self._emit_now("initialization_failed", "Engine initialization timed out")
        return False

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def send_command(self, command: str) -> bool:
        if not self.process.running:
            self._report_error("Engine not running")
            return False
        if self.reporting_level >= ReportingLevel.VERBOSE:
            print(sending_text(command))
        try:
            self.process.send(command)
        except EngineNotRunningError:
            self._report_error("Engine not running")
            return False
        except EngineCommunicationError as exc:
            self._report_error(str(exc))
            return False
        return True

    def new_game(self) -> bool:
        return self.send_command(CMD_UCI_NEW_GAME)

    def set_position(self, fen: str, moves: Optional[Iterable[MoveToken]] = None) -> bool:
        return self.send_command(build_position_fen(fen, moves))

    def set_start_position(self, moves: Optional[Iterable[MoveToken]] = None) -> bool:
        return self.send_command(build_position_startpos(moves))

    def _think_time(self, think_time_ms: Optional[int]) -> int:
        if think_time_ms is not None and think_time_ms >= 1:
            return think_time_ms
        return self.settings.default_think_time_ms

    def get_best_move(self, think_time_ms: Optional[int] = None, depth: Optional[int] = None) -> bool:
        """Start a bounded search; the result arrives as ``best_move_calculated``."""
        return self.send_command(build_go(self._think_time(think_time_ms), depth))

    def get_best_move_with_search_moves(
        self,
        think_time_ms: Optional[int] = None,
        depth: Optional[int] = None,
        search_moves: Optional[Iterable[MoveToken]] = None,
    ) -> bool:
        """Search only ``search_moves``, e.g. to score specific book moves."""
        command = build_go_with_search_moves(self._think_time(think_time_ms), depth, search_moves)
        return self.send_command(command)

    def start_infinite_analysis(self) -> bool:
        return self.send_command(build_go())

    def stop_search(self) -> bool:
        return self.send_command(CMD_STOP)

    def set_option(self, name: str, value: Union[str, int, bool]) -> bool:
        return self.send_command(build_set_option(name, value))

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_print_output(self, print_output: bool) -> None:
        self.settings.print_output = bool(print_output)

    def set_default_think_time_ms(self, think_time_ms: int) -> None:
        if think_time_ms < 1:
            return
        self.settings.default_think_time_ms = int(think_time_ms)

    def set_skill_level(self, level: int) -> bool:
        level = _clamp(level, SKILL_LEVEL_RANGE)
        return self.set_option(OPT_SKILL_LEVEL, level)

    def set_multipv(self, count: int) -> bool:
        count = _clamp(count, MULTIPV_RANGE)
        self.settings.multipv = count
        return self.set_option(OPT_MULTI_PV, count)
