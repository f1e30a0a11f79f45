import logging
from pathlib import Path

import pytest

from tests.infrastructure.documents import BROKEN_DOCUMENT, SAMPLE_DOCUMENT
from tests.infrastructure.file_utils import write


@pytest.fixture
def sample_doc(tmp_path: Path) -> Path:
    """Well-formed document with two loops, written to tmp_path/doc.txt."""
    return write(tmp_path / "doc.txt", SAMPLE_DOCUMENT)


@pytest.fixture
def broken_doc(tmp_path: Path) -> Path:
    return write(tmp_path / "broken.txt", BROKEN_DOCUMENT)


@pytest.fixture(autouse=True)
def _isolated_cli_logging(monkeypatch):
    # handlers bind the current sys.stderr, which capture replaces per test
    monkeypatch.delenv("SMARTSCRIPT_DEBUG", raising=False)
    yield
    log = logging.getLogger("smartscript")
    for handler in list(log.handlers):
        log.removeHandler(handler)
    log.setLevel(logging.NOTSET)
