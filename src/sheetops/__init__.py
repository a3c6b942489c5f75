"""sheetops - Structural edits for Google Sheets.

Resolves "Sheet1!A1:D10" style addresses to zero-based grid ranges and
compiles editing verbs (merge, sort, format, insert/delete rows, ...) into
Sheets API batchUpdate requests.
"""

__version__ = "0.1.0"

from sheetops.client import EditResult, SheetEditor
from sheetops.exceptions import (
    FormatError,
    NotFoundError,
    SheetOpsError,
    ValidationError,
)
from sheetops.resolver import parse_range, resolve_sheet_id
from sheetops.transport import (
    APIError,
    AuthenticationError,
    GoogleSheetsTransport,
    LocalFileTransport,
    SpreadsheetNotFoundError,
    Transport,
    TransportError,
)
from sheetops.types import CellRef, ColorRGB, FieldMask, GridRange, OutputFormat
from sheetops.utils import (
    column_index_to_letter,
    letter_to_column_index,
    parse_cell_range,
    parse_cell_ref,
    parse_hex_color,
    parse_values,
)

__all__ = [
    "APIError",
    "AuthenticationError",
    "CellRef",
    "ColorRGB",
    "EditResult",
    "FieldMask",
    "FormatError",
    "GoogleSheetsTransport",
    "GridRange",
    "LocalFileTransport",
    "NotFoundError",
    "OutputFormat",
    "SheetEditor",
    "SheetOpsError",
    "SpreadsheetNotFoundError",
    "Transport",
    "TransportError",
    "ValidationError",
    "__version__",
    "column_index_to_letter",
    "letter_to_column_index",
    "parse_cell_range",
    "parse_cell_ref",
    "parse_hex_color",
    "parse_range",
    "parse_values",
    "resolve_sheet_id",
]
