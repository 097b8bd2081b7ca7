"""Shared test fixtures for the label scan test suite."""

from pathlib import Path

import pytest


@pytest.fixture
def full_label_text() -> str:
    """OCR text of a label carrying all three fields."""
    return "#U: 24\nI: 10234\nPRM-123456-789012"


@pytest.fixture
def partial_label_text() -> str:
    """OCR text of a label where only the barcode is legible."""
    return "smudged\nP123456789012\n"


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
