"""Pytest configuration for test suite.

Ensures the project root is on ``sys.path`` so ``import writeback_lru``
resolves to the local sources regardless of the working directory pytest
chooses, and provides recording backends for cache tests.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, List, Tuple

import pytest


def _ensure_project_root_on_syspath() -> None:
    project_root = Path(__file__).resolve().parents[1]
    project_root_str = str(project_root)
    if project_root_str not in sys.path:
        # Prepend to prefer local sources over site-packages
        sys.path.insert(0, project_root_str)


_ensure_project_root_on_syspath()

from writeback_lru.backends.recording import RecordingBackend  # noqa: E402


@pytest.fixture
def backend() -> RecordingBackend:
    """Backend that echoes unknown indices as their own item and logs calls."""
    return RecordingBackend(echo=True)


@pytest.fixture
def drain() -> Callable[[RecordingBackend], List[Tuple]]:
    """Return a helper that pops logged backend calls as compact tuples.

    Loads become ``("load", index)`` and write-backs
    ``("write_back", index, dirty)``.
    """

    def _drain(rec: RecordingBackend) -> List[Tuple]:
        out: List[Tuple] = []
        for call in rec.calls:
            if call["op"] == "load":
                out.append(("load", call["index"]))
            else:
                out.append(("write_back", call["index"], call["dirty"]))
        rec.calls.clear()
        return out

    return _drain
