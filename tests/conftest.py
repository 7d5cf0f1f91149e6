# tests/conftest.py
"""Pytest configuration and shared fixtures for tgrapher tests."""
from __future__ import annotations

import sys
from pathlib import Path

import pandas as pd
import pytest


def pytest_configure() -> None:
    # Ensure tgrapher package is importable when running tests from repo root.
    repo_root = Path(__file__).resolve().parents[1]
    src_dir = repo_root / "src"
    if src_dir.exists() and str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))


@pytest.fixture
def sample_df() -> pd.DataFrame:
    """Six entries with x/y, errors and two auxiliary columns to gate on."""
    return pd.DataFrame({
        "energy": [1.0, 2.0, 3.0, 4.0, 5.0, 6.0],
        "tof": [10.0, 20.0, 30.0, 40.0, 50.0, 60.0],
        "denergy": [0.1, 0.2, 0.3, 0.4, 0.5, 0.6],
        "dtof": [1.0, 1.0, 2.0, 2.0, 3.0, 3.0],
        "location": [0, 1, 2, 0, 1, 2],
        "qdc": [100.0, 250.0, 400.0, 550.0, 700.0, 850.0],
    })


@pytest.fixture
def sample_csv(tmp_path: Path, sample_df: pd.DataFrame) -> Path:
    path = tmp_path / "run042.csv"
    sample_df.to_csv(path, index=False)
    return path


@pytest.fixture(autouse=True)
def _restore_tgrapher_logger():
    """cli.main() configures the tgrapher logger; undo it after each test."""
    import logging

    logger = logging.getLogger("tgrapher")
    saved_handlers = logger.handlers[:]
    saved_level = logger.level
    yield
    logger.handlers = saved_handlers
    logger.setLevel(saved_level)
