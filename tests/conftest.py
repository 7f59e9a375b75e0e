from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT = TESTS_DIR.parent
for extra in (TESTS_DIR, ROOT):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from helpers import make_sequence  # noqa: E402

import api.session as session_store  # noqa: E402
from tet_practice_cbt.models.question_model import Question  # noqa: E402


@pytest.fixture
def abc_sequence() -> list[Question]:
    """Three questions whose correct options are A, B and C."""

    return make_sequence("A", "B", "C")


@pytest.fixture
def recorder():
    """Collects whatever a sink receives."""

    class Recorder(list):
        def __call__(self, payload) -> None:
            self.append(payload)

    return Recorder()


@pytest.fixture(autouse=True)
def _clear_reports() -> Iterator[None]:
    session_store._reports.clear()
    yield
    session_store._reports.clear()
