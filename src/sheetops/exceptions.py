"""Custom exceptions for sheetops address resolution and request building."""

from __future__ import annotations


class SheetOpsError(Exception):
    """Base exception for errors detected before any mutating call."""

    pass


class FormatError(SheetOpsError, ValueError):
    """Raised when user input does not parse.

    Covers cell references, ranges, hex colors and JSON values.
    """

    def __init__(self, value: str, reason: str) -> None:
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {reason}: {value!r}")


class NotFoundError(SheetOpsError):
    """Raised when a sheet cannot be resolved from spreadsheet metadata."""

    def __init__(self, spreadsheet_id: str, sheet_name: str | None = None) -> None:
        self.spreadsheet_id = spreadsheet_id
        self.sheet_name = sheet_name
        if sheet_name is None:
            message = f"Spreadsheet '{spreadsheet_id}' has no sheets"
        else:
            message = (
                f"Sheet '{sheet_name}' not found in spreadsheet '{spreadsheet_id}'"
            )
        super().__init__(message)


class ValidationError(SheetOpsError, ValueError):
    """Raised when option values are well-formed but not acceptable.

    Examples: an empty delete span, a format call with nothing to format,
    a write with no values.
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(message)
