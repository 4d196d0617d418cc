"""Errors surfaced to callers of the readers.

Only two conditions ever reach a caller: no reader understands the data,
or a session lookup is out of range. Malformed records inside a log are
skipped where they are found.
"""

from __future__ import annotations


class SimResultsError(Exception):
    """Base class for simresults-tools errors."""


class CannotReadData(SimResultsError):
    """Raised when no registered reader accepts the supplied data."""


class SessionIndexError(SimResultsError, IndexError):
    """Raised when a requested session number has no parsed session."""
    def __init__(self, number: int, count: int):
        super().__init__(f"Session {number} does not exist ({count} session(s) parsed)")
        self.number = number
        self.count = count
