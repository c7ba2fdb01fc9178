# tests/formats/conftest.py
"""Pytest configuration and shared fixtures for format tests."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest


def pytest_configure() -> None:
    # Ensure dashformats package is importable when running tests from repo root.
    repo_root = Path(__file__).resolve().parents[2]
    src_dir = repo_root / "src"
    if src_dir.exists() and str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))


@pytest.fixture
def plugin():
    from dashformats.formats.format_spec import StaticPlugin

    return StaticPlugin(id="errors", params={"values": ["web", "sms", "email"]})


@pytest.fixture
def channel_rows():
    """Three channels over two days; 'web' appears on both days."""
    return [
        {"timestamp": "2017-01-01T00:00:00Z", "channel": "web", "count": 5},
        {"timestamp": "2017-01-01T00:00:00Z", "channel": "sms", "count": 7},
        {"timestamp": "2017-01-02T00:00:00Z", "channel": "web", "count": 3},
        {"timestamp": "2017-01-02T00:00:00Z", "channel": "email", "count": 1},
    ]
