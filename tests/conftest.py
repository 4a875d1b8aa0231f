from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from arbor_session.store import SessionStore  # noqa: E402


@pytest.fixture
def store() -> SessionStore:
    return SessionStore()
