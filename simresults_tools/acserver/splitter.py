"""Split an acServer log into session fragments.

A fragment starts at every NextSession line and runs up to the next one.
Lines before the first NextSession form the preamble. Fragments without a
single lap or leaderboard line are the server idling between sessions and
are dropped here, after the server context has seen them.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterator, List, Optional, Tuple

from ..utils.common import normalize_line_endings
from . import grammar
from .context import ServerContext, ServerSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fragment:
    lines: Tuple[str, ...]
    first_line: int  # 1-based line number in the normalized text
    is_session: bool
    context: Optional[ServerSnapshot] = None


def split_fragments(text: str) -> Iterator[Fragment]:
    """Yield the preamble (if any) and then one fragment per session header."""
    buf: List[str] = []
    start = 1
    in_session = False
    for number, raw in enumerate(normalize_line_endings(text).split("\n"), start=1):
        line = raw.strip()
        if grammar.SESSION_START_RX.match(line):
            if buf or in_session:
                yield Fragment(lines=tuple(buf), first_line=start, is_session=in_session)
            buf = []
            start = number
            in_session = True
        buf.append(line)
    if buf and (in_session or any(buf)):
        yield Fragment(lines=tuple(buf), first_line=start, is_session=in_session)


def has_session_evidence(lines: Tuple[str, ...]) -> bool:
    return any(grammar.LAP_RX.match(line) or grammar.SUMMARY_RX.match(line) for line in lines)


def session_fragments(text: str, context: Optional[ServerContext] = None) -> Iterator[Fragment]:
    """
    Lazily yield the session fragments worth parsing, in file order.

    Each yielded fragment carries a snapshot of the server context: server
    metadata as it stood when the fragment started, and the connect
    registry as it stands when the fragment ends.
    """
    context = context if context is not None else ServerContext()
    for fragment in split_fragments(text):
        before = context.snapshot()
        context.absorb(fragment.lines)
        if not fragment.is_session:
            continue
        if not has_session_evidence(fragment.lines):
            logger.debug("Dropping session at line %d: no laps or leaderboard", fragment.first_line)
            continue
        snapshot = replace(before, connections=context.snapshot().connections)
        yield replace(fragment, context=snapshot)
