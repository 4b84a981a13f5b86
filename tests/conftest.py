"""Pytest configuration for Rooster tests.

Ensures the in-repo `src` directory is on `sys.path` so the package can be
imported without an editable install (`pip install -e .`).
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

TOKEN_VARS = ("PYLON_API_TOKEN", "PYLON_TOKEN", "PYLON_API_KEY")


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Keep real credentials and stray config/.env files out of every test."""
    for var in (*TOKEN_VARS, "ROOSTER_QUIET"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def _fresh_logger(monkeypatch):
    """Each test gets a logger bound to its own captured stdout."""
    import rooster.logging

    monkeypatch.setattr(rooster.logging, "_GLOBAL", None)
