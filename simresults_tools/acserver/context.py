"""Server state carried from one session fragment to the next.

acServer prints its banner, start date, server name, track and car list
once, before the first session, and drivers stay connected across
sessions. ServerContext absorbs every fragment in file order, including
the ones later dropped for lack of data, so each session sees what the
server knew at that point.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Tuple

from . import grammar
from .participants import ConnectRecord, ConnectScanner


@dataclass(frozen=True)
class ServerSnapshot:
    date_string: Optional[str] = None
    server_name: Optional[str] = None
    track_venue: Optional[str] = None
    track_course: Optional[str] = None
    allowed_vehicles: Tuple[str, ...] = ()
    connections: Mapping[str, ConnectRecord] = field(default_factory=lambda: MappingProxyType({}))


def scan_allowed_vehicles(lines: Iterable[str]) -> Optional[List[str]]:
    """Return the car slugs of the last CARS: block in lines, or None if there is none.

    A block ends at the first line that is not a car slug.
    """
    found: Optional[List[str]] = None
    current: Optional[List[str]] = None
    for line in lines:
        if grammar.CARS_HEADER_RX.match(line):
            current = []
            found = current
            continue
        if current is None:
            continue
        if line and grammar.CAR_ENTRY_RX.match(line):
            if line not in current:
                current.append(line)
        else:
            current = None
    return found


class ServerContext:
    def __init__(self) -> None:
        self.date_string: Optional[str] = None
        self.server_name: Optional[str] = None
        self.track_venue: Optional[str] = None
        self.track_course: Optional[str] = None
        self.allowed_vehicles: Tuple[str, ...] = ()
        self.connections: dict = {}
        self._connects = ConnectScanner()

    def absorb(self, lines: Iterable[str]) -> None:
        lines = list(lines)
        for line in lines:
            record = self._connects.feed(line)
            if record is not None:
                self.connections[record.name] = record
                continue

            m = grammar.DATE_RX.match(line)
            if m:
                self.date_string = m.group("date")
                continue
            m = grammar.SERVER_NAME_RX.match(line)
            if m:
                self.server_name = m.group("name").strip()
                continue
            m = grammar.TRACK_RX.match(line)
            if m:
                self.track_venue = m.group("venue").strip() or None
                continue
            m = grammar.TRACK_CONFIG_RX.match(line)
            if m:
                self.track_course = m.group("course").strip() or None

        cars = scan_allowed_vehicles(lines)
        if cars is not None:
            self.allowed_vehicles = tuple(cars)

    def snapshot(self) -> ServerSnapshot:
        return ServerSnapshot(
            date_string=self.date_string,
            server_name=self.server_name,
            track_venue=self.track_venue,
            track_course=self.track_course,
            allowed_vehicles=self.allowed_vehicles,
            connections=MappingProxyType(dict(self.connections)),
        )
