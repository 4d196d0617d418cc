"""
common.py
Shared helpers for the log readers:
- Lap/total time parsing (acServer "m:ss:mmm" and clock "mm:ss.ffff" notations)
- Line-ending detection and normalization
- Byte decoding without corrupting multi-byte characters
"""

from __future__ import annotations

import logging
import re
from decimal import Decimal
from typing import Iterable, Optional, Union

logger = logging.getLogger(__name__)

# ------------------------------------------------------------------------------
# Time Helpers
# ------------------------------------------------------------------------------

# acServer prints minutes unpadded and milliseconds after a colon: 11:14:296
_SERVER_TIME_RX = re.compile(r"^(?P<minutes>\d+):(?P<seconds>[0-5]?\d):(?P<millis>\d{1,3})$")

# Clock notation with a decimal fraction: 01:41.9000, 1:02:03.456, 61.861
_CLOCK_TIME_RX = re.compile(
    r"""
    ^
    (?:(?P<hours>\d+):(?=\d+:))?
    (?:(?P<minutes>\d+):)?
    (?P<seconds>\d{1,2}(?:\.\d+)?|\d+\.\d+)
    $
    """,
    re.VERBOSE,
)

# Best/total value acServer prints when no time was ever set (999999999 ms).
NO_TIME_SENTINEL = 999999.999


def parse_lap_time_to_seconds(value: Union[str, int, float, None]) -> float:
    """
    Parse a lap or total time into seconds (float).

    Accepted forms:
    - "m:ss:mmm"       -> acServer notation, e.g. "1:41:900" or "11:14:296"
    - "[h:]mm:ss.fff"  -> clock notation, e.g. "01:41.9000" or "1:02:03.456"
    - "ss.fff"         -> e.g. "61.861"

    Decimal arithmetic is used so "11:14:296" yields exactly 674.296.

    Raises
    ------
    ValueError
        If the value is empty or in neither notation.
    """
    if value is None:
        raise ValueError("Lap time cannot be None")
    if isinstance(value, (int, float)):
        return float(value)

    s = value.strip()
    if not s:
        raise ValueError("Lap time cannot be empty")

    m = _SERVER_TIME_RX.match(s)
    if m:
        millis = (
            int(m.group("minutes")) * 60000
            + int(m.group("seconds")) * 1000
            + int(m.group("millis"))
        )
        return float(Decimal(millis) / 1000)

    m = _CLOCK_TIME_RX.match(s)
    if m:
        total = Decimal(m.group("seconds"))
        if m.group("minutes") is not None:
            total += Decimal(int(m.group("minutes")) * 60)
        if m.group("hours") is not None:
            total += Decimal(int(m.group("hours")) * 3600)
        return float(total)

    raise ValueError(f"Unrecognized lap time format: {value!r}")


def parse_optional_time(value: Optional[str]) -> Optional[float]:
    """Like parse_lap_time_to_seconds, but None for blanks, zero, sentinel or garbage."""
    if value is None or not value.strip():
        return None
    try:
        seconds = parse_lap_time_to_seconds(value)
    except ValueError:
        logger.debug("Ignoring unparsable time value %r", value)
        return None
    if seconds <= 0 or seconds >= NO_TIME_SENTINEL:
        return None
    return seconds


def sum_seconds(values: Iterable[float]) -> float:
    """Sum lap times without accumulating binary float error (101.9 + 192.48 == 294.38)."""
    total = Decimal(0)
    for v in values:
        total += Decimal(repr(v))
    return float(total)


# ------------------------------------------------------------------------------
# Text Normalization
# ------------------------------------------------------------------------------

def detect_line_ending(text: str) -> str:
    """Return the dominant line ending of text: "\\r\\n", "\\r" or "\\n"."""
    crlf = text.count("\r\n")
    cr = text.count("\r") - crlf
    lf = text.count("\n") - crlf
    if crlf and crlf >= cr and crlf >= lf:
        return "\r\n"
    if cr > lf:
        return "\r"
    return "\n"


def normalize_line_endings(text: str) -> str:
    """Convert Windows and old Mac line endings to "\\n"."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def decode_text(raw: Union[bytes, bytearray, str], encodings: Iterable[str] = ("utf-8-sig", "cp1252", "latin-1")) -> str:
    """
    Decode raw log bytes with the first encoding that accepts them.

    Strings pass through (minus a leading BOM). The last resort is
    latin-1 with replacement, which maps every byte and never raises.
    """
    if isinstance(raw, str):
        return raw.lstrip("\ufeff")

    data = bytes(raw)
    for encoding in encodings:
        try:
            text = data.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            continue
        logger.debug("Decoded %d bytes as %s", len(data), encoding)
        return text.lstrip("\ufeff")

    logger.warning("No configured encoding accepted the data; decoding as latin-1")
    return data.decode("latin-1", errors="replace")
