"""Pytest configuration and fixtures for buildprep tests.

This module ensures the buildprep package is importable during tests
without requiring installation.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

# Add src directory to path for development testing
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


@pytest.fixture
def write_auth_file(tmp_path: Path):
    """Write an auth file with the given scope -> token entries."""

    def _write(auths: dict[str, str]) -> Path:
        path = tmp_path / "auth.json"
        content = {"auths": {scope: {"auth": token} for scope, token in auths.items()}}
        path.write_text(json.dumps(content), encoding="utf-8")
        return path

    return _write
