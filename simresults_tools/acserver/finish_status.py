"""Finish-status heuristic.

acServer never logs that a driver finished or quit. A driver who leaves
the race without disconnecting keeps showing up in the leaderboard with
a cumulative TOTAL, so completion is inferred from lack of progress.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ..models import FinishStatus

DEFAULT_STUCK_WINDOW = 3


@dataclass(frozen=True)
class FinishEvidence:
    lap_counts: Tuple[int, ...]  # lap counter of each leaderboard line, in file order
    last_total: Optional[float] = None  # TOTAL printed on the last of those lines
    has_total: bool = False  # any TOTAL printed for this participant at all


def is_stuck(lap_counts: Tuple[int, ...], window: int = DEFAULT_STUCK_WINDOW) -> bool:
    """True when the last `window` progress markers all show the same lap count."""
    if window < 1 or len(lap_counts) < window:
        return False
    return len(set(lap_counts[-window:])) == 1


def resolve_finish_status(
    evidence: FinishEvidence,
    window: int = DEFAULT_STUCK_WINDOW,
) -> Tuple[FinishStatus, float]:
    """
    Classify a participant and return (finish_status, total_time).

    - no TOTAL anywhere                  -> DNF, 0
    - last `window` markers unchanged    -> DNF, 0 (the TOTAL is stale)
    - TOTAL on the last marker           -> NORMAL, that TOTAL
    - TOTAL seen earlier but not at end  -> DNF, 0
    """
    if not evidence.has_total:
        return FinishStatus.DNF, 0.0
    if is_stuck(evidence.lap_counts, window):
        return FinishStatus.DNF, 0.0
    if evidence.last_total is not None:
        return FinishStatus.NORMAL, evidence.last_total
    return FinishStatus.DNF, 0.0
