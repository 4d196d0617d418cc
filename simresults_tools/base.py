"""
base.py
Common behaviour of all log readers.

A reader is bound to one blob of log text. Subclasses provide two things:
- matches(data): cheap structural check for their dialect
- read_sessions(): generator of parsed sessions in file order

get_sessions() runs the generator once and keeps the result.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import ClassVar, Iterator, List, Optional, Tuple, Union

from .config import Settings
from .exceptions import CannotReadData, SessionIndexError
from .models import Session
from .utils.common import decode_text, normalize_line_endings

logger = logging.getLogger(__name__)


class Reader(ABC):
    name: ClassVar[str] = "reader"

    def __init__(self, data: Union[str, bytes], settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        text = decode_text(data, self.settings.encodings)
        if not self.matches(text):
            raise CannotReadData(f"{type(self).__name__} cannot read the supplied data")
        self.data = normalize_line_endings(text)
        self._sessions: Optional[Tuple[Session, ...]] = None

    @classmethod
    @abstractmethod
    def matches(cls, data: str) -> bool:
        """Return True if this reader understands data."""

    @abstractmethod
    def read_sessions(self) -> Iterator[Session]:
        """Yield the sessions found in self.data, in file order."""

    def get_sessions(self) -> List[Session]:
        if self._sessions is None:
            self._sessions = tuple(self.read_sessions())
            logger.info("%s reader found %d session(s)", self.name, len(self._sessions))
        return list(self._sessions)

    def get_session(self, number: Optional[int] = None) -> Session:
        """
        Return a session by its 1-based number in file order.

        Without a number the last (most recent) session is returned.

        Raises
        ------
        SessionIndexError
            If there is no session with that number.
        """
        sessions = self.get_sessions()
        count = len(sessions)
        if number is None:
            number = count
        if not 1 <= number <= count:
            raise SessionIndexError(number, count)
        return sessions[number - 1]
