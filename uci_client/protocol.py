"""UCI command builders and response parsers.

Every builder is a pure function of its arguments so command strings can be
checked without a running engine. Move tokens may be plain strings or
``chess.Move`` objects; neither FENs nor moves are validated.
"""

from typing import Iterable, Optional, Union

import chess

# Commands to the engine
CMD_UCI = "uci"
CMD_IS_READY = "isready"
CMD_UCI_NEW_GAME = "ucinewgame"
CMD_POSITION = "position"
CMD_POSITION_STARTPOS = "position startpos"
CMD_POSITION_FEN = "position fen"
CMD_GO = "go"
CMD_STOP = "stop"
CMD_QUIT = "quit"
CMD_SET_OPTION = "setoption"

# Responses from the engine
RESP_UCI_OK = "uciok"
RESP_READY_OK = "readyok"
RESP_BEST_MOVE = "bestmove"
RESP_INFO = "info"
RESP_OPTION = "option"

# Common options
OPT_SKILL_LEVEL = "Skill Level"
OPT_THREADS = "Threads"
OPT_HASH = "Hash"
OPT_PONDER = "Ponder"
OPT_MULTI_PV = "MultiPV"

# Go parameters
GO_INFINITE = "infinite"
GO_MOVE_TIME = "movetime"
GO_DEPTH = "depth"
GO_SEARCH_MOVES = "searchmoves"

PONDER_MARKER = "ponder"

MoveToken = Union[str, chess.Move]


def _move_token(move: MoveToken) -> str:
    if isinstance(move, chess.Move):
        return move.uci()
    return str(move)


def _append_moves(command: str, keyword: str, moves: Optional[Iterable[MoveToken]]) -> str:
    tokens = [_move_token(move) for move in moves] if moves else []
    if not tokens:
        return command
    return f"{command} {keyword} {' '.join(tokens)}"


def build_position_fen(fen: str, moves: Optional[Iterable[MoveToken]] = None) -> str:
    return _append_moves(f"{CMD_POSITION_FEN} {fen}", "moves", moves)


def build_position_startpos(moves: Optional[Iterable[MoveToken]] = None) -> str:
    return _append_moves(CMD_POSITION_STARTPOS, "moves", moves)


def build_go(movetime_ms: Optional[int] = None, depth: Optional[int] = None) -> str:
    """Construct a ``go`` command; with no positive limit the search is infinite."""
    parts = [CMD_GO]
    has_movetime = movetime_ms is not None and movetime_ms > 0
    has_depth = depth is not None and depth > 0
    if has_movetime:
        parts.append(f"{GO_MOVE_TIME} {int(movetime_ms)}")
    if has_depth:
        parts.append(f"{GO_DEPTH} {int(depth)}")
    if not has_movetime and not has_depth:
        parts.append(GO_INFINITE)
    return " ".join(parts)


def build_go_with_search_moves(
    movetime_ms: Optional[int] = None,
    depth: Optional[int] = None,
    search_moves: Optional[Iterable[MoveToken]] = None,
) -> str:
    """Construct a ``go`` command restricted to ``search_moves``."""
    return _append_moves(build_go(movetime_ms, depth), GO_SEARCH_MOVES, search_moves)


def build_set_option(name: str, value: Union[str, int, bool]) -> str:
    if isinstance(value, bool):
        value = "true" if value else "false"
    return f"{CMD_SET_OPTION} name {name} value {value}"


def parse_best_move(line: str) -> Optional[str]:
    """``"bestmove e2e4 ponder e7e5"`` -> ``"e2e4"``."""
    if not line or not line.startswith(RESP_BEST_MOVE):
        return None
    parts = line.split()
    return parts[1] if len(parts) > 1 else None


def parse_ponder_move(line: str) -> Optional[str]:
    """``"bestmove e2e4 ponder e7e5"`` -> ``"e7e5"``."""
    if not line or not line.startswith(RESP_BEST_MOVE):
        return None
    parts = line.split()
    if len(parts) > 3 and parts[2] == PONDER_MARKER:
        return parts[3]
    return None
