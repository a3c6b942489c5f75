"""Shared test fixtures for sheetops."""

from __future__ import annotations

from pathlib import Path

import pytest

from sheetops.client import SheetEditor
from sheetops.transport import LocalFileTransport, SheetInfo, SpreadsheetMetadata

GOLDEN_DIR = Path(__file__).parent / "golden"


@pytest.fixture
def golden_dir() -> Path:
    return GOLDEN_DIR


@pytest.fixture
def local_transport() -> LocalFileTransport:
    """Create a transport that reads metadata from golden files."""
    return LocalFileTransport(GOLDEN_DIR)


@pytest.fixture
def editor(local_transport: LocalFileTransport) -> SheetEditor:
    return SheetEditor(local_transport)


def make_metadata(
    *sheets: tuple[int, str], spreadsheet_id: str = "test-spreadsheet-id"
) -> SpreadsheetMetadata:
    """Build metadata from (sheet_id, title) pairs in API order."""
    return SpreadsheetMetadata(
        spreadsheet_id=spreadsheet_id,
        title="Test",
        sheets=tuple(
            SheetInfo(
                sheet_id=sheet_id,
                title=title,
                index=position,
                row_count=1000,
                column_count=26,
            )
            for position, (sheet_id, title) in enumerate(sheets)
        ),
        raw={},
    )
