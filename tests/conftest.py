"""Shared fixtures for the download registry tests."""

from collections.abc import Generator
from pathlib import Path

import pytest

from download_registry.storage.registry import DownloadRegistry

from .helpers import DB_NAME


@pytest.fixture
def registry(tmp_path: Path) -> Generator[DownloadRegistry]:
    """Create an open registry in a temporary directory."""
    registry = DownloadRegistry(DB_NAME, base_dir=tmp_path)
    yield registry
    registry.close()
