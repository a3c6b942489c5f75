"""
Parsing helpers for sheetops.

Provides column letter conversion, A1 cell and range parsing, value matrix
parsing and hex color parsing. Everything here is pure: no metadata lookups.
"""

from __future__ import annotations

import json
import re
from typing import Any

from sheetops.exceptions import FormatError
from sheetops.types import CellRef, ColorRGB, GridRange

_HEX_DIGITS = re.compile(r"^[0-9A-Fa-f]{6}$")


def column_index_to_letter(index: int) -> str:
    """Convert a zero-based column index to A1 notation letter(s).

    Examples:
        0 -> A, 1 -> B, 25 -> Z, 26 -> AA, 27 -> AB, 702 -> AAA
    """
    if index < 0:
        raise FormatError(str(index), "column index")
    result = ""
    while True:
        result = chr(ord("A") + (index % 26)) + result
        index = index // 26 - 1
        if index < 0:
            break
    return result


def letter_to_column_index(letter: str) -> int:
    """Convert A1 notation letter(s) to a zero-based column index.

    The letters form a bijective base-26 numeral (A=1 ... Z=26, AA=27);
    the index is that value minus one. Case-insensitive, no length limit.

    Examples:
        A -> 0, B -> 1, Z -> 25, AA -> 26, AB -> 27, AAA -> 702
    """
    if not letter or not letter.isascii():
        raise FormatError(letter, "column letters")
    result = 0
    for char in letter.upper():
        if not "A" <= char <= "Z":
            raise FormatError(letter, "column letters")
        result = result * 26 + (ord(char) - ord("A") + 1)
    return result - 1


def parse_cell_ref(ref: str) -> CellRef:
    """Parse a single A1 token into a zero-based CellRef.

    Letters and digits are collected into separate buffers regardless of
    where they appear, so "1A" parses the same as "A1".

    Examples:
        A1 -> (0, 0), Z10 -> (25, 9), b3 -> (1, 2)
    """
    if not ref.isascii():
        raise FormatError(ref, "cell reference")
    letters: list[str] = []
    digits: list[str] = []
    for char in ref.upper():
        if "A" <= char <= "Z":
            letters.append(char)
        elif "0" <= char <= "9":
            digits.append(char)
        else:
            raise FormatError(ref, "cell reference")

    if not letters or not digits:
        raise FormatError(ref, "cell reference")

    row = int("".join(digits))
    if row < 1:
        raise FormatError(ref, "cell reference")

    return CellRef(col=letter_to_column_index("".join(letters)), row=row - 1)


def parse_cell_range(cell_range: str, sheet_id: int = 0) -> GridRange:
    """Convert an "A1:D10" style range into a GridRange.

    Both endpoints are required. The end endpoint is inclusive in A1
    notation and becomes the exclusive bound of the GridRange.
    """
    parts = cell_range.split(":")
    if len(parts) != 2:
        raise FormatError(cell_range, "range (expected two cells like A1:D10)")

    start = parse_cell_ref(parts[0])
    end = parse_cell_ref(parts[1])

    return GridRange(
        sheet_id=sheet_id,
        start_row=start.row,
        end_row=end.row + 1,
        start_col=start.col,
        end_col=end.col + 1,
    )


def parse_values(values_text: str | None, values_json: str | None) -> list[list[Any]]:
    """Parse command line values into a row-major matrix.

    JSON input wins when both are given and keeps its scalar types.
    Delimited input separates rows with ";" and cells with ",", each cell
    trimmed and kept as a string. Neither given: empty list, not an error.

    Examples:
        ("a,b;c,d", None) -> [["a", "b"], ["c", "d"]]
        (None, '[[1, "x"]]') -> [[1, "x"]]
    """
    if values_json:
        try:
            parsed = json.loads(values_json)
        except json.JSONDecodeError as e:
            raise FormatError(values_json, f"JSON values ({e.msg})") from e
        if not isinstance(parsed, list) or not all(
            isinstance(row, list) for row in parsed
        ):
            raise FormatError(values_json, "JSON values (expected array of arrays)")
        return parsed

    if values_text:
        return [
            [cell.strip() for cell in row.split(",")] for row in values_text.split(";")
        ]

    return []


def parse_hex_color(hex_color: str) -> ColorRGB:
    """Convert "#RRGGBB" into a ColorRGB with channels in [0, 1].

    Examples:
        #FF0000 -> (1.0, 0.0, 0.0)
    """
    if len(hex_color) != 7 or not hex_color.startswith("#"):
        raise FormatError(hex_color, "hex color (expected #RRGGBB)")
    digits = hex_color[1:]
    if not _HEX_DIGITS.match(digits):
        raise FormatError(hex_color, "hex color (expected #RRGGBB)")

    return ColorRGB(
        red=int(digits[0:2], 16) / 255.0,
        green=int(digits[2:4], 16) / 255.0,
        blue=int(digits[4:6], 16) / 255.0,
    )


def unquote_sheet_name(name: str) -> str:
    """Strip A1 quoting from a sheet name: 'My Sheet' -> My Sheet."""
    if len(name) >= 2 and name.startswith("'") and name.endswith("'"):
        return name[1:-1].replace("''", "'")
    return name


def quote_sheet_name(name: str) -> str:
    """Quote a sheet name for A1 use when it is not a plain identifier."""
    if re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", name):
        return name
    return "'" + name.replace("'", "''") + "'"


def grid_range_to_a1(api_range: dict[str, Any], sheet_title: str | None = None) -> str:
    """Render an API GridRange dict back to A1 notation.

    The API omits zero indexes and leaves an end index out when the range
    is unbounded on that axis, so this gives "A1:B2", "A:C", "2:5", or an
    empty string for a whole sheet. With ``sheet_title`` the result is
    sheet-qualified ("Data!A1:B2", or just "Data" for a whole sheet).
    """
    start_row = api_range.get("startRowIndex", 0)
    start_col = api_range.get("startColumnIndex", 0)
    end_row = api_range.get("endRowIndex")
    end_col = api_range.get("endColumnIndex")

    if end_row is None and end_col is None:
        cells = ""
    elif end_row is None:
        cells = f"{column_index_to_letter(start_col)}:{column_index_to_letter(end_col - 1)}"
    elif end_col is None:
        cells = f"{start_row + 1}:{end_row}"
    else:
        cells = (
            f"{column_index_to_letter(start_col)}{start_row + 1}:"
            f"{column_index_to_letter(end_col - 1)}{end_row}"
        )

    if sheet_title is None:
        return cells
    prefix = quote_sheet_name(sheet_title)
    return f"{prefix}!{cells}" if cells else prefix
