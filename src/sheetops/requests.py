"""Build Google Sheets batchUpdate requests for editing verbs.

Every builder returns exactly one request dict and validates its options
first, so a bad option never produces a partial request. Partial-update
verbs carry a "fields" mask naming only what the caller set.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from sheetops.exceptions import ValidationError
from sheetops.types import (
    ColorRGB,
    ConditionRule,
    Dimension,
    FieldMask,
    GridRange,
    HorizontalAlignment,
    MergeType,
    WrapStrategy,
)


def _dimension_range(
    sheet_id: int, dimension: Dimension, start: int, end: int
) -> dict[str, Any]:
    return {
        "sheetId": sheet_id,
        "dimension": dimension.value,
        "startIndex": start,
        "endIndex": end,
    }


# -- rows and columns --------------------------------------------------------


def check_insert_span(at: int, count: int) -> None:
    """Reject a negative insert position or an empty count."""
    if at < 0:
        raise ValidationError("at", f"--at must be >= 0, got {at}")
    if count < 1:
        raise ValidationError("count", f"--count must be >= 1, got {count}")


def insert_dimension(
    sheet_id: int, dimension: Dimension, at: int, count: int = 1
) -> dict[str, Any]:
    """Insert ``count`` rows or columns starting at zero-based index ``at``.

    New rows/columns inherit formatting from the one before them, except
    when inserting at index 0 where there is nothing before.
    """
    check_insert_span(at, count)
    return {
        "insertDimension": {
            "range": _dimension_range(sheet_id, dimension, at, at + count),
            "inheritFromBefore": at > 0,
        }
    }


def check_dimension_span(start: int, end: int) -> None:
    """Reject empty or negative [start, end) spans."""
    if start < 0:
        raise ValidationError("from", f"--from must be >= 0, got {start}")
    if end <= start:
        raise ValidationError(
            "to", f"--to ({end}) must be greater than --from ({start})"
        )


def delete_dimension(
    sheet_id: int, dimension: Dimension, start: int, end: int
) -> dict[str, Any]:
    """Delete rows or columns in the zero-based span [start, end)."""
    check_dimension_span(start, end)
    return {
        "deleteDimension": {
            "range": _dimension_range(sheet_id, dimension, start, end),
        }
    }


def check_pixel_size(size: int) -> None:
    if size <= 0:
        raise ValidationError("size", f"size must be positive, got {size}")


def _pixel_size_request(
    sheet_id: int, dimension: Dimension, index: int, size: int, name: str
) -> dict[str, Any]:
    if index < 0:
        raise ValidationError(name, f"{name} index must be >= 0, got {index}")
    check_pixel_size(size)

    mask = FieldMask()
    mask.add("pixelSize", size)
    return {
        "updateDimensionProperties": {
            "range": _dimension_range(sheet_id, dimension, index, index + 1),
            "properties": {"pixelSize": size},
            "fields": str(mask),
        }
    }


def set_column_width(sheet_id: int, column_index: int, width: int) -> dict[str, Any]:
    """Resize one column to ``width`` pixels."""
    return _pixel_size_request(sheet_id, Dimension.COLUMNS, column_index, width, "column")


def set_row_height(sheet_id: int, row_index: int, height: int) -> dict[str, Any]:
    """Resize one row to ``height`` pixels."""
    return _pixel_size_request(sheet_id, Dimension.ROWS, row_index, height, "row")


def check_freeze_counts(rows: int | None, columns: int | None) -> None:
    """Require at least one non-negative frozen count."""
    if rows is None and columns is None:
        raise ValidationError("rows", "at least one of --rows or --cols is required")
    if rows is not None and rows < 0:
        raise ValidationError("rows", f"--rows must be >= 0, got {rows}")
    if columns is not None and columns < 0:
        raise ValidationError("cols", f"--cols must be >= 0, got {columns}")


def freeze_panes(
    sheet_id: int, rows: int | None = None, columns: int | None = None
) -> dict[str, Any]:
    """Set frozen row and/or column counts.

    Only the counts that were given appear in the mask. Zero unfreezes and
    is sent explicitly.
    """
    check_freeze_counts(rows, columns)

    grid_properties: dict[str, Any] = {}
    mask = FieldMask()
    if rows is not None:
        grid_properties["frozenRowCount"] = rows
        mask.add("gridProperties.frozenRowCount", rows)
    if columns is not None:
        grid_properties["frozenColumnCount"] = columns
        mask.add("gridProperties.frozenColumnCount", columns)

    return {
        "updateSheetProperties": {
            "properties": {"sheetId": sheet_id, "gridProperties": grid_properties},
            "fields": str(mask),
        }
    }


# -- ranges ------------------------------------------------------------------


def merge_cells(grid_range: GridRange, merge_type: MergeType = MergeType.ALL) -> dict[str, Any]:
    return {
        "mergeCells": {
            "range": grid_range.to_api(),
            "mergeType": merge_type.value,
        }
    }


def unmerge_cells(grid_range: GridRange) -> dict[str, Any]:
    return {"unmergeCells": {"range": grid_range.to_api()}}


def sort_range(
    grid_range: GridRange,
    column_index: int,
    ascending: bool = True,
    has_header: bool = False,
) -> dict[str, Any]:
    """Sort a range by one column.

    ``column_index`` is the absolute zero-based sheet column. With
    ``has_header`` the first row of the range is left in place.
    """
    if has_header:
        grid_range = replace(grid_range, start_row=grid_range.start_row + 1)
    if grid_range.row_count < 1:
        raise ValidationError("range", "range has no rows to sort below the header")
    if not grid_range.start_col <= column_index < grid_range.end_col:
        raise ValidationError("column", "sort column must be inside the range")

    return {
        "sortRange": {
            "range": grid_range.to_api(),
            "sortSpecs": [
                {
                    "dimensionIndex": column_index,
                    "sortOrder": "ASCENDING" if ascending else "DESCENDING",
                }
            ],
        }
    }


def cell_format(
    *,
    bold: bool | None = None,
    italic: bool | None = None,
    font_size: int | None = None,
    text_color: ColorRGB | None = None,
    background_color: ColorRGB | None = None,
    horizontal_alignment: HorizontalAlignment | None = None,
    wrap_strategy: WrapStrategy | None = None,
) -> tuple[dict[str, Any], FieldMask]:
    """Build a CellFormat and the mask of attributes that were set.

    ``None`` means "leave as is". ``False`` is an explicit clear and is
    kept in the format so it reaches the backend.
    """
    text_format: dict[str, Any] = {}
    fmt: dict[str, Any] = {}
    mask = FieldMask()

    if bold is not None:
        text_format["bold"] = bold
        mask.add("textFormat.bold", bold)
    if italic is not None:
        text_format["italic"] = italic
        mask.add("textFormat.italic", italic)
    if font_size is not None:
        if font_size <= 0:
            raise ValidationError("font_size", f"--font-size must be positive, got {font_size}")
        text_format["fontSize"] = font_size
        mask.add("textFormat.fontSize")
    if text_color is not None:
        text_format["foregroundColor"] = text_color.to_api()
        mask.add("textFormat.foregroundColor")
    if background_color is not None:
        fmt["backgroundColor"] = background_color.to_api()
        mask.add("backgroundColor")
    if horizontal_alignment is not None:
        fmt["horizontalAlignment"] = horizontal_alignment.value
        mask.add("horizontalAlignment")
    if wrap_strategy is not None:
        fmt["wrapStrategy"] = wrap_strategy.value
        mask.add("wrapStrategy")

    if not mask:
        raise ValidationError(
            "format",
            "at least one format option is required "
            "(--bold, --italic, --font-size, --color, --bg-color, ...)",
        )

    if text_format:
        fmt["textFormat"] = text_format
    return fmt, mask


def repeat_cell(
    grid_range: GridRange, fmt: dict[str, Any], mask: FieldMask
) -> dict[str, Any]:
    """Apply ``fmt`` to every cell in the range, touching only ``mask``."""
    if not mask:
        raise ValidationError("format", "field mask is empty")
    full_mask = mask.prefixed("userEnteredFormat")
    return {
        "repeatCell": {
            "range": grid_range.to_api(),
            "cell": {"userEnteredFormat": fmt},
            "fields": str(full_mask),
        }
    }


def boolean_rule(
    rule: ConditionRule,
    value: str | None = None,
    *,
    bold: bool | None = None,
    text_color: ColorRGB | None = None,
    background_color: ColorRGB | None = None,
) -> dict[str, Any]:
    """Build the BooleanRule (condition plus format) for a conditional format."""
    if rule.needs_value and not value:
        raise ValidationError("value", f"--value is required for rule '{rule.value}'")

    fmt: dict[str, Any] = {}
    if bold is not None:
        fmt.setdefault("textFormat", {})["bold"] = bold
    if text_color is not None:
        fmt.setdefault("textFormat", {})["foregroundColor"] = text_color.to_api()
    if background_color is not None:
        fmt["backgroundColor"] = background_color.to_api()
    if not fmt:
        raise ValidationError(
            "format", "at least one of --bold, --color or --bg-color is required"
        )

    condition: dict[str, Any] = {"type": rule.condition_type}
    if rule.needs_value:
        condition["values"] = [{"userEnteredValue": value}]

    return {"condition": condition, "format": fmt}


def add_conditional_format(
    grid_range: GridRange, rule: dict[str, Any], index: int = 0
) -> dict[str, Any]:
    """Add a boolean conditional format rule over one range."""
    return {
        "addConditionalFormatRule": {
            "rule": {
                "ranges": [grid_range.to_api()],
                "booleanRule": rule,
            },
            "index": index,
        }
    }


def check_rule_index(index: int) -> None:
    if index < 0:
        raise ValidationError("index", f"--index must be >= 0, got {index}")


def delete_conditional_format(sheet_id: int, index: int) -> dict[str, Any]:
    check_rule_index(index)
    return {"deleteConditionalFormatRule": {"sheetId": sheet_id, "index": index}}


# -- whole sheets ------------------------------------------------------------


def find_replace(
    find: str,
    replacement: str,
    sheet_id: int | None = None,
    *,
    match_case: bool = False,
    match_entire_cell: bool = False,
    search_by_regex: bool = False,
    include_formulas: bool = False,
) -> dict[str, Any]:
    """Find and replace across all sheets, or one sheet when given."""
    if not find:
        raise ValidationError("find", "--find must not be empty")

    body: dict[str, Any] = {
        "find": find,
        "replacement": replacement,
        "matchCase": match_case,
        "matchEntireCell": match_entire_cell,
        "searchByRegex": search_by_regex,
        "includeFormulas": include_formulas,
    }
    if sheet_id is None:
        body["allSheets"] = True
    else:
        body["sheetId"] = sheet_id
    return {"findReplace": body}


def add_sheet(
    title: str, rows: int | None = None, columns: int | None = None
) -> dict[str, Any]:
    if not title:
        raise ValidationError("name", "--name must not be empty")

    properties: dict[str, Any] = {"title": title}
    grid_properties: dict[str, int] = {}
    if rows is not None:
        if rows < 1:
            raise ValidationError("rows", f"--rows must be >= 1, got {rows}")
        grid_properties["rowCount"] = rows
    if columns is not None:
        if columns < 1:
            raise ValidationError("cols", f"--cols must be >= 1, got {columns}")
        grid_properties["columnCount"] = columns
    if grid_properties:
        properties["gridProperties"] = grid_properties
    return {"addSheet": {"properties": properties}}


def delete_sheet(sheet_id: int) -> dict[str, Any]:
    return {"deleteSheet": {"sheetId": sheet_id}}
