"""
models.py
Domain model for parsed simulator sessions.

Entities:
- Game, Server, Track, Vehicle, Driver
- Lap, Participant, Chat
- Session (one practice/qualify/race/warmup segment)

Design:
- Pydantic v2 models, frozen once built; sequences are tuples.
- Equality is structural, so parsing the same log twice compares equal.
- Laps refer back to their participant and driver by key/index instead of
  holding the objects; Session resolves those references.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# ------------------------------------------------------------------------------
# Enums
# ------------------------------------------------------------------------------

class SessionType(str, Enum):
    PRACTICE = "practice"
    QUALIFY = "qualify"
    RACE = "race"
    WARMUP = "warmup"
    UNKNOWN = "unknown"


class FinishStatus(str, Enum):
    NORMAL = "normal"
    DNF = "dnf"
    DNS = "dns"
    DQ = "dq"


# ------------------------------------------------------------------------------
# Nested Entities
# ------------------------------------------------------------------------------

class Game(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str


class Server(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    dedicated: bool = False


class Track(BaseModel):
    model_config = ConfigDict(frozen=True)

    venue: Optional[str] = None
    course: Optional[str] = None  # layout, e.g. "gp" or "national"
    event: Optional[str] = None

    @property
    def friendly_name(self) -> str:
        return " ".join(p for p in (self.venue, self.course, self.event) if p)


class Vehicle(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str  # as emitted by the server, e.g. "tatuusfa1*"


class Driver(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    driver_id: Optional[str] = None  # platform account id (Steam GUID)
    team: Optional[str] = None


class Chat(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


# ------------------------------------------------------------------------------
# Core Entities
# ------------------------------------------------------------------------------

class Lap(BaseModel):
    model_config = ConfigDict(frozen=True)

    number: int = Field(ge=1)
    time: float
    elapsed_seconds: float = 0.0
    position: Optional[int] = None  # never set for lap 1
    participant_key: str
    driver_index: int = 0


class Participant(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    drivers: Tuple[Driver, ...]
    vehicle: Optional[Vehicle] = None
    laps: Tuple[Lap, ...] = ()
    total_time: float = 0.0
    position: Optional[int] = None
    grid_position: Optional[int] = None
    finish_status: FinishStatus = FinishStatus.NORMAL
    team: str = ""

    @property
    def driver(self) -> Driver:
        return self.drivers[0]

    @property
    def number_of_laps(self) -> int:
        return len(self.laps)

    def get_lap(self, number: int) -> Optional[Lap]:
        """Return lap by its 1-based number, or None."""
        if 1 <= number <= len(self.laps):
            return self.laps[number - 1]
        return None

    @property
    def best_lap(self) -> Optional[Lap]:
        if not self.laps:
            return None
        return min(self.laps, key=lambda lap: (lap.time, lap.number))


class Session(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: SessionType = SessionType.UNKNOWN
    name: str = ""
    max_laps: int = 0
    max_minutes: int = 0
    lasted_laps: int = 0
    date_string: Optional[str] = None  # kept as printed by the server
    allowed_vehicles: Tuple[Vehicle, ...] = ()
    participants: Tuple[Participant, ...] = ()
    chats: Tuple[Chat, ...] = ()
    server: Server = Field(default_factory=Server)
    game: Game
    track: Track = Field(default_factory=Track)

    def get_participant(self, name: str) -> Optional[Participant]:
        """Find the participant driven by name (any of its drivers)."""
        for participant in self.participants:
            if any(d.name == name for d in participant.drivers):
                return participant
        return None

    def lap_participant(self, lap: Lap) -> Participant:
        for participant in self.participants:
            if participant.key == lap.participant_key:
                return participant
        raise KeyError(lap.participant_key)

    def lap_driver(self, lap: Lap) -> Driver:
        return self.lap_participant(lap).drivers[lap.driver_index]

    @property
    def best_lap(self) -> Optional[Lap]:
        laps = [lap for p in self.participants for lap in p.laps]
        if not laps:
            return None
        return min(laps, key=lambda lap: lap.time)


__all__ = [
    "SessionType",
    "FinishStatus",
    "Game",
    "Server",
    "Track",
    "Vehicle",
    "Driver",
    "Chat",
    "Lap",
    "Participant",
    "Session",
]
