"""
session_block.py
Turn one acServer session fragment into a Session.

Per fragment, in order:
1. header (name, type, time/lap limits)
2. allowed car list (fragment's own CARS: block, else the carried one)
3. participants seeded from LAP/leaderboard lines, enriched from connect records
4. laps, minus discarded/refused ones
5. chat
6. finish status and total time
7. ordering and positions

Malformed records are skipped and logged; only a missing header drops the
whole fragment.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ..config import Settings
from ..models import (
    Chat,
    FinishStatus,
    Game,
    Participant,
    Server,
    Session,
    SessionType,
    Track,
    Vehicle,
)
from ..utils.common import parse_lap_time_to_seconds, parse_optional_time
from . import grammar
from .context import ServerSnapshot, scan_allowed_vehicles
from .finish_status import resolve_finish_status
from .participants import LapRecord, ParticipantBuilder, SummaryOccurrence, find_finish_block
from .splitter import Fragment

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------------------
# Header
# ------------------------------------------------------------------------------

@dataclass(frozen=True)
class SessionHeader:
    type: SessionType
    name: str
    max_minutes: int = 0
    max_laps: int = 0


def _to_int(value: Optional[str]) -> int:
    try:
        return max(0, int(value)) if value else 0
    except ValueError:
        return 0


def parse_session_type(token: Optional[str]) -> SessionType:
    if not token:
        return SessionType.UNKNOWN
    return grammar.SESSION_TYPES.get(token.strip().lower(), SessionType.UNKNOWN)


def parse_header(lines: Sequence[str]) -> Optional[SessionHeader]:
    """Read the header fields that follow NextSession. None when neither name nor type is present."""
    name: Optional[str] = None
    type_token: Optional[str] = None
    minutes: Optional[str] = None
    laps: Optional[str] = None

    for line in lines:
        if name is None:
            m = grammar.SESSION_NAME_RX.match(line)
            if m:
                name = m.group("name").strip()
                continue
        if type_token is None:
            m = grammar.SESSION_TYPE_RX.match(line)
            if m:
                type_token = m.group("type")
                continue
        if minutes is None:
            m = grammar.SESSION_TIME_RX.search(line)
            if m and line.startswith(("TIME=", "LAPS=")):
                minutes = m.group("minutes")
        if laps is None:
            m = grammar.SESSION_LAPS_RX.search(line)
            if m and line.startswith(("TIME=", "LAPS=")):
                laps = m.group("laps")
        if grammar.LAP_RX.match(line) or grammar.SUMMARY_RX.match(line):
            break

    if name is None and type_token is None:
        return None

    session_type = parse_session_type(type_token)
    if type_token and session_type is SessionType.UNKNOWN:
        logger.debug("Unknown session type %r", type_token)
    return SessionHeader(
        type=session_type,
        name=name or "",
        max_minutes=_to_int(minutes),
        max_laps=_to_int(laps),
    )


# ------------------------------------------------------------------------------
# Body scan
# ------------------------------------------------------------------------------

@dataclass
class _BodyScan:
    builders: Dict[str, ParticipantBuilder]
    chats: List[Chat]
    block_ranks: List[Dict[str, Optional[int]]]  # per leaderboard block: name -> rank
    first_lap_block: Optional[int]  # blocks printed before the first LAP line


def _builder(builders: Dict[str, ParticipantBuilder], name: str, context: ServerSnapshot) -> ParticipantBuilder:
    builder = builders.get(name)
    if builder is None:
        builder = ParticipantBuilder(name=name, connect=context.connections.get(name))
        builders[name] = builder
    return builder


def _scan_body(lines: Sequence[str], context: ServerSnapshot) -> _BodyScan:
    builders: Dict[str, ParticipantBuilder] = {}
    chats: List[Chat] = []
    block_ranks: List[Dict[str, Optional[int]]] = []
    first_lap_block: Optional[int] = None
    in_block = False

    for line in lines:
        m = grammar.SUMMARY_RX.match(line)
        if m:
            if not in_block:
                block_ranks.append({})
                in_block = True
            block = len(block_ranks) - 1
            name = m.group("name").strip()
            rank = int(m.group("rank")) if m.group("rank") else None
            block_ranks[block][name] = rank
            _builder(builders, name, context).occurrences.append(
                SummaryOccurrence(
                    block=block,
                    rank=rank,
                    laps=int(m.group("laps")),
                    total=parse_optional_time(m.group("total")),
                )
            )
            continue
        in_block = False

        m = grammar.LAP_RX.match(line)
        if m:
            if first_lap_block is None:
                first_lap_block = len(block_ranks)
            try:
                seconds = parse_lap_time_to_seconds(m.group("time"))
            except ValueError:
                logger.debug("Skipping lap with unparsable time: %r", line)
                continue
            marker = m.group("marker")
            if marker:
                logger.debug("Excluding %s lap: %r", marker.lower(), line)
            _builder(builders, m.group("name").strip(), context).lap_records.append(
                LapRecord(time=seconds, next_block=len(block_ranks), kept=marker is None)
            )
            continue

        m = grammar.CHAT_RX.match(line)
        if m:
            chats.append(Chat(message=m.group("message")))

    return _BodyScan(
        builders=builders,
        chats=chats,
        block_ranks=block_ranks,
        first_lap_block=first_lap_block,
    )


# ------------------------------------------------------------------------------
# Ordering
# ------------------------------------------------------------------------------

def _laps_then_time(entry: Tuple[ParticipantBuilder, FinishStatus, float]):
    builder, _, total = entry
    return (-builder.number_of_laps, total if total > 0 else float("inf"))


def order_participants(
    resolved: List[Tuple[ParticipantBuilder, FinishStatus, float]],
    session_type: SessionType,
    final_ranks: Dict[str, Optional[int]],
) -> List[Tuple[ParticipantBuilder, FinishStatus, float]]:
    """
    Races follow the ranks of the last leaderboard; everyone else (and any
    racer missing from that leaderboard) goes by laps, then total time.
    Python's sort is stable, so full ties keep first-appearance order.
    """
    if session_type is SessionType.RACE and final_ranks:
        ranked = [e for e in resolved if final_ranks.get(e[0].name) is not None]
        unranked = [e for e in resolved if final_ranks.get(e[0].name) is None]
        ranked.sort(key=lambda e: final_ranks[e[0].name])
        unranked.sort(key=_laps_then_time)
        return ranked + unranked
    return sorted(resolved, key=_laps_then_time)


# ------------------------------------------------------------------------------
# Assembly
# ------------------------------------------------------------------------------

def parse_session_block(fragment: Fragment, settings: Optional[Settings] = None) -> Optional[Session]:
    """Parse one session fragment. None when the header is unusable or no participant was found."""
    settings = settings or Settings()
    context = fragment.context or ServerSnapshot()

    header = parse_header(fragment.lines)
    if header is None:
        logger.warning("Skipping session at line %d: unparsable header", fragment.first_line)
        return None

    cars = scan_allowed_vehicles(fragment.lines)
    allowed = tuple(Vehicle(name=c) for c in (cars if cars is not None else context.allowed_vehicles))

    scan = _scan_body(fragment.lines, context)
    if not scan.builders:
        logger.debug("Skipping session at line %d: no participants", fragment.first_line)
        return None

    if header.type is SessionType.RACE and scan.first_lap_block:
        grid = scan.block_ranks[scan.first_lap_block - 1]
        for name, rank in grid.items():
            scan.builders[name].grid_position = rank

    finish_block = find_finish_block(scan.builders.values())
    resolved = []
    for builder in scan.builders.values():
        status, total = resolve_finish_status(builder.finish_evidence(finish_block), settings.stuck_window)
        resolved.append((builder, status, total))

    final_ranks = scan.block_ranks[-1] if scan.block_ranks else {}
    ordered = order_participants(resolved, header.type, final_ranks)
    participants: List[Participant] = [
        builder.build(position=position, finish_status=status, total_time=total)
        for position, (builder, status, total) in enumerate(ordered, start=1)
    ]

    return Session(
        type=header.type,
        name=header.name,
        max_laps=header.max_laps,
        max_minutes=header.max_minutes,
        lasted_laps=participants[0].number_of_laps,
        date_string=context.date_string,
        allowed_vehicles=allowed,
        participants=tuple(participants),
        chats=tuple(scan.chats),
        server=Server(name=context.server_name, dedicated=True),
        game=Game(name=grammar.GAME_NAME),
        track=Track(venue=context.track_venue, course=context.track_course),
    )
