# MAIN
import argparse
import sys
import time
from typing import List, Optional

import chess

from .candidates import CandidateMove, ScoreType
from .engine import DEFAULT_TIMEOUT_MS, POLL_INTERVAL_S, UciEngine
from .events import ConsoleEventSink
from .protocol import build_go
from .utils import ReportingLevel, info_text

DEPTH_SEARCH_TIMEOUT_MS = 60_000


class AnalysisSink(ConsoleEventSink):
    """Console sink that also keeps the outcome of the last search."""

    def __init__(self, reporting_level: ReportingLevel) -> None:
        super().__init__(reporting_level)
        self.best_move: Optional[str] = None
        self.ponder: str = ""
        self.candidates: List[CandidateMove] = []

    def best_move_calculated(self, move: str, ponder: str) -> None:
        self.best_move = move
        self.ponder = ponder

    def candidate_moves_calculated(self, candidates: List[CandidateMove]) -> None:
        self.candidates = list(candidates)


def describe_move(fen: Optional[str], moves: List[str], move_uci: str) -> str:
    # Display only; an unparsable position just falls back to the raw move.
    try:
        board = chess.Board(fen) if fen else chess.Board()
        for played in moves:
            board.push_uci(played)
        return f"{board.san(chess.Move.from_uci(move_uci))} ({move_uci})"
    except ValueError:
        return move_uci


def format_candidate(candidate: CandidateMove) -> str:
    if candidate.score_type is ScoreType.MATE:
        score = f"mate {candidate.score}"
    else:
        score = f"{candidate.score / 100:+.2f}"
    depth = candidate.depth if candidate.depth is not None else "?"
    return f"{candidate.multipv}. {candidate.move} {score} (depth {depth})"


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="uci_client",
        description="Run a single analysis with an external UCI engine",
    )
    parser.add_argument("engine", help="Path to the UCI engine executable")
    parser.add_argument("--fen", help="Analyse this FEN instead of the starting position")
    parser.add_argument("--moves", nargs="*", default=[], help="Moves played from the position")
    parser.add_argument("--movetime", type=int, default=None, help="Think time in milliseconds")
    parser.add_argument("--depth", type=int, default=None, help="Depth limit")
    parser.add_argument("--multipv", type=int, default=1, help="Number of candidate lines")
    parser.add_argument("--skill", type=int, default=None, help="Skill Level option (0-20)")
    parser.add_argument(
        "--search-moves",
        nargs="*",
        default=None,
        help="Restrict the search to these moves",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=DEFAULT_TIMEOUT_MS,
        help="Handshake/readiness timeout and result grace period in milliseconds",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--quiet", action="store_true", help="Only print the result")
    verbosity.add_argument("--verbose", action="store_true", help="Echo all engine traffic")
    return parser.parse_args(argv)


def wait_for_best_move(engine: UciEngine, sink: AnalysisSink, timeout_ms: int) -> bool:
    deadline = time.monotonic() + timeout_ms / 1000.0
    while sink.best_move is None:
        engine.process_events()
        if sink.best_move is not None:
            break
        if time.monotonic() >= deadline or not engine.running:
            engine.process_events()
            break
        time.sleep(POLL_INTERVAL_S)
    return sink.best_move is not None


def run_analysis(args) -> int:
    if args.quiet:
        reporting_level = ReportingLevel.QUIET
    elif args.verbose:
        reporting_level = ReportingLevel.VERBOSE
    else:
        reporting_level = ReportingLevel.BASIC

    sink = AnalysisSink(reporting_level)
    engine = UciEngine(args.engine, sink=sink, reporting_level=reporting_level)
    engine.set_print_output(args.verbose)
    if args.movetime is not None:
        engine.set_default_think_time_ms(args.movetime)

    with engine:
        if not engine.initialize(args.timeout):
            return 1
        if args.skill is not None:
            engine.set_skill_level(args.skill)
        engine.set_multipv(args.multipv)
        engine.new_game()
        if not engine.wait_for_ready(args.timeout):
            print(info_text("Engine did not answer isready"), file=sys.stderr)
            return 1

        if args.fen:
            engine.set_position(args.fen, args.moves)
        else:
            engine.set_start_position(args.moves)

        if args.search_moves:
            engine.get_best_move_with_search_moves(args.movetime, args.depth, args.search_moves)
        elif args.movetime is None and args.depth is not None:
            engine.send_command(build_go(depth=args.depth))
        else:
            engine.get_best_move(args.movetime, args.depth)

        if args.movetime is None and args.depth is not None:
            budget_ms = DEPTH_SEARCH_TIMEOUT_MS
        else:
            budget_ms = engine.settings.default_think_time_ms + args.timeout
        found = wait_for_best_move(engine, sink, budget_ms)

        if not found:
            engine.stop_search()
            found = wait_for_best_move(engine, sink, args.timeout)
        if not found:
            print(info_text("No best move received"), file=sys.stderr)
            return 1

    print(f"bestmove {describe_move(args.fen, args.moves, sink.best_move)}")
    if sink.ponder:
        print(f"ponder {sink.ponder}")
    for candidate in sink.candidates:
        print(format_candidate(candidate))
    return 0


def main(argv=None) -> int:
    args = parse_args(argv)
    return run_analysis(args)


if __name__ == "__main__":
    sys.exit(main())
