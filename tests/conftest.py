from pathlib import Path

import pytest

from simresults_tools import create_from_path

LOGS_DIR = Path(__file__).parent / "logs" / "acserver"


@pytest.fixture
def log_path():
    def _path(name: str) -> Path:
        return LOGS_DIR / name
    return _path


@pytest.fixture
def read_log():
    """Return a reader for one of the bundled acServer logs."""
    def _read(name: str, settings=None):
        return create_from_path(LOGS_DIR / name, settings=settings)
    return _read


@pytest.fixture(scope="session")
def output_reader():
    # multi-session log shared by several modules; readers are memoized
    return create_from_path(LOGS_DIR / "output.txt")
