"""Format matcher for acServer logs: a cheap structural check, never a parse."""
from __future__ import annotations

from . import grammar


def matches(text: str) -> bool:
    """True when the banner or at least one leaderboard line is present."""
    if not isinstance(text, str) or not text:
        return False
    if grammar.BANNER_RX.search(text):
        return True
    return any(grammar.SUMMARY_RX.match(line.strip()) for line in text.splitlines())
