"""Reader for the Assetto Corsa dedicated server plain-text log."""
from __future__ import annotations

import logging
from typing import Iterator

from ..base import Reader
from ..models import Session
from . import matcher
from .context import ServerContext
from .session_block import parse_session_block
from .splitter import session_fragments

logger = logging.getLogger(__name__)


class AcServerReader(Reader):
    name = "acserver"

    @classmethod
    def matches(cls, data: str) -> bool:
        return matcher.matches(data)

    def read_sessions(self) -> Iterator[Session]:
        for fragment in session_fragments(self.data, ServerContext()):
            session = parse_session_block(fragment, self.settings)
            if session is None:
                continue
            logger.debug(
                "Parsed %s session %r at line %d with %d participant(s)",
                session.type.value, session.name, fragment.first_line, len(session.participants),
            )
            yield session
