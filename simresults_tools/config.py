# simresults_tools/config.py
import os
from typing import Tuple

from pydantic import BaseModel, Field


def _env_encodings() -> Tuple[str, ...]:
    raw = os.getenv("SIMRESULTS_ENCODINGS", "utf-8-sig,cp1252,latin-1")
    return tuple(e.strip() for e in raw.split(",") if e.strip())


class Settings(BaseModel):
    encodings: Tuple[str, ...] = Field(default_factory=_env_encodings)
    # raw env string, coerced and range-checked by pydantic
    stuck_window: int = Field(
        default_factory=lambda: os.getenv("SIMRESULTS_STUCK_WINDOW", "3"),
        ge=1,
        validate_default=True,
    )
