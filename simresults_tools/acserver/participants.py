"""
participants.py
Participant and lap reconstruction for acServer logs.

- ConnectScanner: turns both connect-record forms into ConnectRecord values
- ParticipantBuilder: mutable, parser-internal participant under construction
- ParticipantBuilder.build_laps: numbers kept laps, derives elapsed time and lap positions
- finish evidence: progress markers cut at the participant's chequered crossing
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from ..models import Driver, FinishStatus, Lap, Participant, Vehicle
from ..utils.common import sum_seconds
from . import grammar
from .finish_status import FinishEvidence

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------------------
# Connect records
# ------------------------------------------------------------------------------

@dataclass(frozen=True)
class ConnectRecord:
    name: str
    vehicle: Optional[str] = None
    team: str = ""
    driver_id: Optional[str] = None


@dataclass
class _PendingConnect:
    name: Optional[str] = None
    vehicle: Optional[str] = None
    team: str = ""
    driver_id: Optional[str] = None
    accepted: bool = False


class ConnectScanner:
    """Line-fed state machine for connect records.

    A record opens on NEW PICKUP CONNECTION. In the primary form the driver
    name is the first line after the optional VERSION line; in the
    alternate form it arrives on the DRIVER: line after acceptance. A
    record is committed once it is accepted and named.
    """

    def __init__(self) -> None:
        self._pending: Optional[_PendingConnect] = None

    def feed(self, line: str) -> Optional[ConnectRecord]:
        if grammar.CONNECT_START_RX.match(line):
            if self._pending is not None:
                logger.debug("Dropping incomplete connect record %r", self._pending)
            self._pending = _PendingConnect()
            return None

        pending = self._pending
        if pending is None:
            return None

        if grammar.CONNECT_REJECTED_RX.match(line):
            self._pending = None
            return None
        if grammar.CONNECT_VERSION_RX.match(line) or grammar.SLOT_FOUND_RX.match(line):
            return None

        m = grammar.REQUESTED_CAR_RX.match(line)
        if m:
            pending.vehicle = m.group("car")
            return None

        m = grammar.SLOT_LOOKUP_RX.match(line)
        if m:
            pending.driver_id = m.group("guid")
            pending.vehicle = m.group("car")
            return None

        m = grammar.DRIVER_ACCEPTED_RX.match(line)
        if m:
            pending.accepted = True
            token = m.group("car").strip()
            if token and not token.isdigit():
                if pending.vehicle is None and grammar.CAR_ENTRY_RX.match(token):
                    pending.vehicle = token
                elif pending.name is None and pending.driver_id is None:
                    # slot printed as the driver name
                    pending.name = token
            return self._commit()

        m = grammar.DRIVER_INFO_RX.match(line)
        if m:
            pending.name = m.group("name")
            pending.team = m.group("team").strip()
            return self._commit()

        # primary form: the name is the first free-text line of the record
        if pending.name is None and not pending.accepted and pending.vehicle is None and line:
            pending.name = line
        return None

    def _commit(self) -> Optional[ConnectRecord]:
        pending = self._pending
        if pending is None or not pending.accepted or not pending.name:
            return None
        self._pending = None
        return ConnectRecord(
            name=pending.name,
            vehicle=pending.vehicle,
            team=pending.team,
            driver_id=pending.driver_id,
        )


def scan_connect_records(lines: Iterable[str]) -> List[ConnectRecord]:
    scanner = ConnectScanner()
    records = []
    for line in lines:
        record = scanner.feed(line)
        if record is not None:
            records.append(record)
    return records


# ------------------------------------------------------------------------------
# Lap and summary evidence
# ------------------------------------------------------------------------------

@dataclass(frozen=True)
class LapRecord:
    """One LAP line. next_block is the index of the first leaderboard block after it."""
    time: float
    next_block: int
    kept: bool = True


@dataclass(frozen=True)
class SummaryOccurrence:
    """One leaderboard line for a participant."""
    block: int
    rank: Optional[int]
    laps: int
    total: Optional[float]


@dataclass
class ParticipantBuilder:
    name: str
    connect: Optional[ConnectRecord] = None
    lap_records: List[LapRecord] = field(default_factory=list)
    occurrences: List[SummaryOccurrence] = field(default_factory=list)
    grid_position: Optional[int] = None

    @property
    def kept_lap_records(self) -> List[LapRecord]:
        return [r for r in self.lap_records if r.kept]

    @property
    def number_of_laps(self) -> int:
        return len(self.kept_lap_records)

    def rank_in_block(self, first_block: int) -> Optional[int]:
        """Rank of the first occurrence in a block at or after first_block."""
        for occurrence in self.occurrences:
            if occurrence.block >= first_block:
                return occurrence.rank
        return None

    def build_laps(self) -> Tuple[Lap, ...]:
        laps: List[Lap] = []
        times: List[float] = []
        for number, record in enumerate(self.kept_lap_records, start=1):
            laps.append(
                Lap(
                    number=number,
                    time=record.time,
                    elapsed_seconds=sum_seconds(times),
                    position=self.rank_in_block(record.next_block) if number > 1 else None,
                    participant_key=self.name,
                    driver_index=0,
                )
            )
            times.append(record.time)
        return tuple(laps)

    def finish_evidence(self, finish_block: Optional[int]) -> FinishEvidence:
        """Collect progress markers up to this participant's chequered crossing.

        finish_block is the first block in which any participant reached the
        session's highest lap counter. From there on, the first occurrence
        whose lap counter went up is the participant taking the flag; later
        markers are post-session noise.
        """
        evidence: List[SummaryOccurrence] = []
        previous_laps: Optional[int] = None
        for occurrence in self.occurrences:
            evidence.append(occurrence)
            crossed = previous_laps is None or occurrence.laps > previous_laps
            if finish_block is not None and occurrence.block >= finish_block and crossed and occurrence.laps > 0:
                break
            previous_laps = occurrence.laps

        return FinishEvidence(
            lap_counts=tuple(o.laps for o in evidence),
            last_total=evidence[-1].total if evidence else None,
            has_total=any(o.total is not None for o in self.occurrences),
        )

    def build(
        self,
        *,
        position: Optional[int],
        finish_status: FinishStatus,
        total_time: float,
    ) -> Participant:
        connect = self.connect or ConnectRecord(name=self.name)
        team = connect.team or ""
        driver = Driver(name=self.name, driver_id=connect.driver_id, team=team or None)
        return Participant(
            key=self.name,
            drivers=(driver,),
            vehicle=Vehicle(name=connect.vehicle) if connect.vehicle else None,
            laps=self.build_laps(),
            total_time=total_time,
            position=position,
            grid_position=self.grid_position,
            finish_status=finish_status,
            team=team,
        )


def find_finish_block(builders: Iterable[ParticipantBuilder]) -> Optional[int]:
    """First leaderboard block in which the session's highest lap counter shows up."""
    occurrences = [o for b in builders for o in b.occurrences]
    if not occurrences:
        return None
    top = max(o.laps for o in occurrences)
    if top <= 0:
        return None
    return min(o.block for o in occurrences if o.laps == top)

