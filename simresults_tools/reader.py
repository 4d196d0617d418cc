"""
reader.py
Reader facade: pick the reader for a blob of log text.

READERS is the fixed, ordered table of supported dialects. The first
reader whose matches() accepts the data wins.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple, Type, Union

from .acserver import AcServerReader
from .base import Reader
from .config import Settings
from .exceptions import CannotReadData
from .utils.common import decode_text

logger = logging.getLogger(__name__)

READERS: Tuple[Type[Reader], ...] = (
    AcServerReader,
)


def create(data: Union[str, bytes], settings: Optional[Settings] = None) -> Reader:
    """
    Return a reader bound to data.

    Raises
    ------
    CannotReadData
        If no registered reader accepts the data.
    """
    settings = settings or Settings()
    text = decode_text(data, settings.encodings)
    for reader_cls in READERS:
        if reader_cls.matches(text):
            logger.info("Using the %s reader", reader_cls.name)
            return reader_cls(text, settings=settings)
    raise CannotReadData("No reader found for the supplied data")


def create_from_path(path: Union[str, Path], settings: Optional[Settings] = None) -> Reader:
    """Read the file at path as bytes and hand it to create()."""
    raw = Path(path).read_bytes()
    return create(raw, settings=settings)
