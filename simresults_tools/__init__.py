"""
simresults_tools
Public package entry point for the simresults-tools library.

Exposes:
- create / create_from_path (reader facade)
- Reader, AcServerReader
- CannotReadData, SessionIndexError
- the domain models
- __version__
"""


from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _pkg_version

try:
    __version__ = _pkg_version("simresults-tools")
except PackageNotFoundError:  # not installed (local usage)
    __version__ = "0.0.0"

from .base import Reader
from .acserver import AcServerReader
from .config import Settings
from .exceptions import CannotReadData, SessionIndexError, SimResultsError
from .models import (
    Chat,
    Driver,
    FinishStatus,
    Game,
    Lap,
    Participant,
    Server,
    Session,
    SessionType,
    Track,
    Vehicle,
)
from .reader import READERS, create, create_from_path

__all__ = [
    "__version__",
    "create",
    "create_from_path",
    "READERS",
    "Reader",
    "AcServerReader",
    "Settings",
    "SimResultsError",
    "CannotReadData",
    "SessionIndexError",
    "Chat",
    "Driver",
    "FinishStatus",
    "Game",
    "Lap",
    "Participant",
    "Server",
    "Session",
    "SessionType",
    "Track",
    "Vehicle",
]
