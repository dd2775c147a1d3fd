"""Pytest configuration.

The project does not require installation as an editable package for
development. When `pytest` runs without the repository root on `sys.path`,
imports like `import ob_core` break; this file makes the root importable.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def restore_root_logging():
    """Undo handler changes made by `setup_logging` / `setup_run_logging`."""
    root = logging.getLogger()
    saved = list(root.handlers)
    level = root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        if h not in saved:
            h.close()
    for h in saved:
        root.addHandler(h)
    root.setLevel(level)
