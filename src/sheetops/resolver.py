"""Resolve sheet-qualified A1 ranges against spreadsheet metadata.

Resolution works on one already-fetched SpreadsheetMetadata snapshot, so a
command needs a single metadata round trip for both the sheet name lookup
and the first-sheet fallback. Nothing is cached beyond that snapshot.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from sheetops.exceptions import NotFoundError
from sheetops.utils import parse_cell_range, unquote_sheet_name

if TYPE_CHECKING:
    from sheetops.transport import SpreadsheetMetadata
    from sheetops.types import GridRange


def resolve_sheet_id(
    metadata: SpreadsheetMetadata, sheet_name: str | None = None
) -> int:
    """Return the sheet ID for ``sheet_name``.

    With no name the first sheet in API order is used. A name must match
    a sheet title exactly; there is no fuzzy or case-insensitive match.
    """
    if sheet_name is None:
        if not metadata.sheets:
            raise NotFoundError(metadata.spreadsheet_id)
        first = metadata.sheets[0]
        logger.debug("No sheet given, using first sheet '{}' ({})", first.title, first.sheet_id)
        return first.sheet_id

    for sheet in metadata.sheets:
        if sheet.title == sheet_name:
            logger.debug("Resolved sheet '{}' to {}", sheet_name, sheet.sheet_id)
            return sheet.sheet_id

    raise NotFoundError(metadata.spreadsheet_id, sheet_name)


def split_sheet_prefix(range_str: str) -> tuple[str | None, str]:
    """Split "Sheet1!A1:B2" into ("Sheet1", "A1:B2").

    Splits on the first "!". Quoted names ('My Sheet') are unquoted.
    """
    if "!" not in range_str:
        return None, range_str
    sheet_name, cell_range = range_str.split("!", 1)
    return unquote_sheet_name(sheet_name), cell_range


def parse_range(
    metadata: SpreadsheetMetadata, spreadsheet_id: str, range_str: str
) -> tuple[int, GridRange]:
    """Resolve a range string to (sheet_id, GridRange).

    Args:
        metadata: Metadata fetched once for this command
        spreadsheet_id: The spreadsheet the range belongs to
        range_str: "Sheet1!A1:D10" or "A1:D10"

    Returns:
        The numeric sheet ID and the bounded, end-exclusive GridRange

    Raises:
        NotFoundError: the sheet name is unknown or the spreadsheet is empty
        FormatError: the cell range is not two A1 endpoints
    """
    if metadata.spreadsheet_id != spreadsheet_id:
        logger.warning(
            "Metadata is for '{}' but range targets '{}'",
            metadata.spreadsheet_id,
            spreadsheet_id,
        )

    sheet_name, cell_range = split_sheet_prefix(range_str)
    sheet_id = resolve_sheet_id(metadata, sheet_name)
    grid_range = parse_cell_range(cell_range, sheet_id)
    return sheet_id, grid_range
