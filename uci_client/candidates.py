"""Aggregation of MultiPV ``info`` lines into ranked candidate moves."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional


class ScoreType(str, Enum):
    CENTIPAWN = "cp"
    MATE = "mate"


@dataclass(frozen=True)
class CandidateMove:
    """One ranked line of analysis as last reported by the engine.

    ``score`` is passed through raw: centipawns for ``ScoreType.CENTIPAWN``,
    signed moves-to-mate for ``ScoreType.MATE``.
    """

    move: str
    multipv: int
    depth: Optional[int]
    score_type: ScoreType
    score: int

    def as_dict(self) -> Dict[str, object]:
        return {
            "move": self.move,
            "multipv": self.multipv,
            "depth": self.depth,
            "score_type": self.score_type.value,
            "score": self.score,
        }


def _to_int(token: str) -> Optional[int]:
    try:
        return int(token)
    except ValueError:
        return None


def parse_info_line(line: str) -> Optional[CandidateMove]:
    """Extract a candidate from ``line`` if it carries a rank, a score and a PV.

    Example: ``"info depth 15 multipv 2 score mate 3 pv f3g5 h6g5"``.
    Lines missing any of the three are expected mid-search and return None.
    """
    parts = line.split()
    multipv: Optional[int] = None
    depth: Optional[int] = None
    score_type: Optional[ScoreType] = None
    score: Optional[int] = None
    pv_move: Optional[str] = None

    for index, token in enumerate(parts):
        has_next = index + 1 < len(parts)
        if token == "multipv" and has_next:
            multipv = _to_int(parts[index + 1])
        elif token == "depth" and has_next:
            depth = _to_int(parts[index + 1])
        elif token == "score" and index + 2 < len(parts):
            kind = parts[index + 1]
            if kind in (ScoreType.CENTIPAWN.value, ScoreType.MATE.value):
                value = _to_int(parts[index + 2])
                if value is not None:
                    score_type = ScoreType(kind)
                    score = value
        elif token == "pv" and has_next:
            # Only the first move of the principal variation is kept.
            pv_move = parts[index + 1]
            break

    if multipv is None or multipv < 1 or pv_move is None or score_type is None:
        return None
    return CandidateMove(
        move=pv_move,
        multipv=multipv,
        depth=depth,
        score_type=score_type,
        score=score,
    )


class CandidateAggregator:
    """Collects the latest candidate per rank for the search in progress."""

    def __init__(self) -> None:
        self._candidates: Dict[int, CandidateMove] = {}

    def __len__(self) -> int:
        return len(self._candidates)

    def update(self, line: str) -> bool:
        candidate = parse_info_line(line)
        if candidate is None:
            return False
        # Depth increases per rank within a search, so the newest report wins.
        self._candidates[candidate.multipv] = candidate
        return True

    def get(self, rank: int) -> Optional[CandidateMove]:
        return self._candidates.get(rank)

    def candidates(self) -> List[CandidateMove]:
        return [self._candidates[rank] for rank in sorted(self._candidates)]

    def clear(self) -> None:
        self._candidates.clear()
