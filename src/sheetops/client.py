"""SheetEditor - Main API for sheetops.

Each public method is one command: validate options, fetch metadata at most
once, resolve coordinates, build the requests, then dispatch a single batch.
Anything that can be rejected locally is rejected before the batch is sent.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from sheetops import requests as build
from sheetops.exceptions import ValidationError
from sheetops.resolver import parse_range, resolve_sheet_id, split_sheet_prefix
from sheetops.transport import (
    APIError,
    SpreadsheetMetadata,
    Transport,
    TransportError,
)
from sheetops.types import (
    ColorRGB,
    ConditionRule,
    Dimension,
    GridRange,
    HorizontalAlignment,
    MergeType,
    OutputFormat,
    WrapStrategy,
)
from sheetops.utils import grid_range_to_a1, letter_to_column_index, parse_cell_range


@dataclass
class EditResult:
    """Result of one editing command."""

    status: str
    spreadsheet_id: str
    requests: list[dict[str, Any]] = field(default_factory=list)
    details: dict[str, Any] = field(default_factory=dict)
    response: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"status": self.status, "spreadsheet": self.spreadsheet_id}
        result.update(self.details)
        if self.requests:
            result["requests"] = len(self.requests)
        return result


@contextmanager
def _transport_errors(action: str) -> Iterator[None]:
    """Prefix transport failures with the operation that hit them."""
    try:
        yield
    except APIError as e:
        raise APIError(f"failed to {action}: {e}", status_code=e.status_code) from e
    except TransportError as e:
        raise type(e)(f"failed to {action}: {e}") from e


class SheetEditor:
    """Compile editing verbs into Sheets batchUpdate calls.

    Example:
        >>> from sheetops.transport import GoogleSheetsTransport
        >>> transport = GoogleSheetsTransport(access_token="ya29...")
        >>> editor = SheetEditor(transport)
        >>> await editor.merge("1BxiMVs0XRA5nFMdKvBdBZjgmUUqptlbs74OgvE2upms", "Sheet1!A1:B2")
    """

    def __init__(self, transport: Transport) -> None:
        """Initialize the editor.

        Args:
            transport: Transport implementation used for metadata and writes
        """
        self._transport = transport

    # -- plumbing ------------------------------------------------------------

    async def _metadata(self, spreadsheet_id: str, action: str) -> SpreadsheetMetadata:
        with _transport_errors(action):
            return await self._transport.get_metadata(spreadsheet_id)

    async def _resolve_range(
        self, spreadsheet_id: str, range_str: str, action: str
    ) -> GridRange:
        # Reject malformed cell ranges before spending a round trip.
        parse_cell_range(split_sheet_prefix(range_str)[1])
        metadata = await self._metadata(spreadsheet_id, action)
        _, grid_range = parse_range(metadata, spreadsheet_id, range_str)
        return grid_range

    async def _resolve_sheet(
        self, spreadsheet_id: str, sheet_name: str | None, action: str
    ) -> int:
        metadata = await self._metadata(spreadsheet_id, action)
        return resolve_sheet_id(metadata, sheet_name)

    async def _apply(
        self,
        spreadsheet_id: str,
        requests: list[dict[str, Any]],
        action: str,
        status: str,
        **details: Any,
    ) -> EditResult:
        logger.info(
            "Sending {} request(s) to {} ({})", len(requests), spreadsheet_id, action
        )
        with _transport_errors(action):
            response = await self._transport.batch_update(spreadsheet_id, requests)
        return EditResult(
            status=status,
            spreadsheet_id=spreadsheet_id,
            requests=requests,
            details=details,
            response=response,
        )

    # -- read-only -----------------------------------------------------------

    async def info(self, spreadsheet_id: str) -> dict[str, Any]:
        """Spreadsheet properties plus its sheets."""
        metadata = await self._metadata(spreadsheet_id, "get spreadsheet")
        props = metadata.raw.get("properties", {})
        sheets = _sheets_summary(metadata)
        return {
            "id": metadata.spreadsheet_id,
            "title": metadata.title,
            "locale": props.get("locale", ""),
            "timezone": props.get("timeZone", ""),
            "sheets": sheets,
            "sheet_count": len(sheets),
            "url": metadata.raw.get("spreadsheetUrl", ""),
        }

    async def list_sheets(self, spreadsheet_id: str) -> dict[str, Any]:
        metadata = await self._metadata(spreadsheet_id, "get spreadsheet")
        sheets = _sheets_summary(metadata)
        return {"sheets": sheets, "count": len(sheets)}

    async def list_conditional_formats(
        self, spreadsheet_id: str, sheet: str | None = None
    ) -> dict[str, Any]:
        """Conditional format rules of one sheet, in priority order."""
        metadata = await self._metadata(spreadsheet_id, "list conditional formats")
        sheet_id = resolve_sheet_id(metadata, sheet)
        title = next(s.title for s in metadata.sheets if s.sheet_id == sheet_id)
        raw_sheet = next(
            (
                s
                for s in metadata.raw.get("sheets", [])
                if s.get("properties", {}).get("sheetId", 0) == sheet_id
            ),
            {},
        )
        rules = [
            _rule_summary(index, rule, title)
            for index, rule in enumerate(raw_sheet.get("conditionalFormats", []))
        ]
        return {"sheet_id": sheet_id, "sheet": title, "rules": rules, "count": len(rules)}

    # -- spreadsheets --------------------------------------------------------

    async def create(
        self, title: str, sheet_names: list[str] | None = None
    ) -> dict[str, Any]:
        """Create a spreadsheet, optionally with named sheets in order."""
        if not title:
            raise ValidationError("title", "--title must not be empty")
        body: dict[str, Any] = {"properties": {"title": title}}
        if sheet_names:
            if len(set(sheet_names)) != len(sheet_names):
                raise ValidationError("sheet_names", "--sheet-names must be unique")
            body["sheets"] = [
                {"properties": {"title": name, "index": index}}
                for index, name in enumerate(sheet_names)
            ]

        logger.info("Creating spreadsheet '{}'", title)
        with _transport_errors("create spreadsheet"):
            created = await self._transport.create_spreadsheet(body)
        titles = [
            sheet.get("properties", {}).get("title", "")
            for sheet in created.get("sheets", [])
        ]
        return {
            "status": "created",
            "id": created.get("spreadsheetId", ""),
            "title": created.get("properties", {}).get("title", title),
            "sheets": titles,
            "sheet_count": len(titles),
            "url": created.get("spreadsheetUrl", ""),
        }

    # -- values --------------------------------------------------------------

    async def read(
        self,
        spreadsheet_id: str,
        range_a1: str,
        output_format: OutputFormat = OutputFormat.JSON,
        headers: bool = True,
    ) -> dict[str, Any]:
        """Read values from ``range_a1``.

        JSON output maps each row to an object keyed by the first row when
        ``headers`` is set and there is at least one row below it. CSV
        output ignores ``headers`` and returns every row.
        """
        with _transport_errors("read range"):
            resp = await self._transport.get_values(spreadsheet_id, range_a1)
        read_range = resp.get("range", range_a1)
        values: list[list[Any]] = resp.get("values") or []

        if not values:
            return {"range": read_range, "data": [], "rows": 0}

        if output_format is OutputFormat.CSV:
            return {"range": read_range, "csv": _to_csv(values), "rows": len(values)}

        if headers and len(values) > 1:
            header_row = [str(cell) for cell in values[0]]
            data = [dict(zip(header_row, row)) for row in values[1:]]
            return {
                "range": read_range,
                "headers": header_row,
                "data": data,
                "rows": len(data),
            }

        return {"range": read_range, "data": values, "rows": len(values)}

    async def write(
        self, spreadsheet_id: str, range_a1: str, values: list[list[Any]]
    ) -> dict[str, Any]:
        """Overwrite values starting at ``range_a1``."""
        _require_values(values)
        with _transport_errors("write values"):
            resp = await self._transport.update_values(spreadsheet_id, range_a1, values)
        return {
            "status": "written",
            "spreadsheet": resp.get("spreadsheetId", spreadsheet_id),
            "range": resp.get("updatedRange", range_a1),
            "rows_updated": resp.get("updatedRows", 0),
            "cells_updated": resp.get("updatedCells", 0),
        }

    async def append(
        self, spreadsheet_id: str, range_a1: str, values: list[list[Any]]
    ) -> dict[str, Any]:
        """Append rows after the last row of the table in ``range_a1``."""
        _require_values(values)
        with _transport_errors("append values"):
            resp = await self._transport.append_values(spreadsheet_id, range_a1, values)
        updates = resp.get("updates")
        if updates is None:
            raise TransportError("failed to append values: unexpected empty response from API")
        return {
            "status": "appended",
            "spreadsheet": resp.get("spreadsheetId", spreadsheet_id),
            "range": updates.get("updatedRange", range_a1),
            "rows_appended": updates.get("updatedRows", 0),
            "cells_updated": updates.get("updatedCells", 0),
        }

    async def clear(self, spreadsheet_id: str, range_a1: str) -> dict[str, Any]:
        with _transport_errors("clear values"):
            resp = await self._transport.clear_values(spreadsheet_id, range_a1)
        return {
            "status": "cleared",
            "spreadsheet": resp.get("spreadsheetId", spreadsheet_id),
            "range": resp.get("clearedRange", range_a1),
        }

    # -- range verbs ---------------------------------------------------------

    async def merge(
        self,
        spreadsheet_id: str,
        range_str: str,
        merge_type: MergeType = MergeType.ALL,
    ) -> EditResult:
        grid_range = await self._resolve_range(spreadsheet_id, range_str, "merge cells")
        request = build.merge_cells(grid_range, merge_type)
        return await self._apply(
            spreadsheet_id,
            [request],
            "merge cells",
            "merged",
            range=range_str,
            merge_type=merge_type.value,
        )

    async def unmerge(self, spreadsheet_id: str, range_str: str) -> EditResult:
        grid_range = await self._resolve_range(spreadsheet_id, range_str, "unmerge cells")
        request = build.unmerge_cells(grid_range)
        return await self._apply(
            spreadsheet_id, [request], "unmerge cells", "unmerged", range=range_str
        )

    async def sort(
        self,
        spreadsheet_id: str,
        range_str: str,
        column: str,
        *,
        descending: bool = False,
        has_header: bool = False,
    ) -> EditResult:
        """Sort ``range_str`` by the column with letters ``column``."""
        column_index = letter_to_column_index(column)
        grid_range = await self._resolve_range(spreadsheet_id, range_str, "sort range")
        request = build.sort_range(
            grid_range, column_index, ascending=not descending, has_header=has_header
        )
        return await self._apply(
            spreadsheet_id,
            [request],
            "sort range",
            "sorted",
            range=range_str,
            column=column.upper(),
            order="descending" if descending else "ascending",
        )

    async def format(
        self,
        spreadsheet_id: str,
        range_str: str,
        *,
        bold: bool | None = None,
        italic: bool | None = None,
        font_size: int | None = None,
        text_color: ColorRGB | None = None,
        background_color: ColorRGB | None = None,
        horizontal_alignment: HorizontalAlignment | None = None,
        wrap_strategy: WrapStrategy | None = None,
    ) -> EditResult:
        fmt, mask = build.cell_format(
            bold=bold,
            italic=italic,
            font_size=font_size,
            text_color=text_color,
            background_color=background_color,
            horizontal_alignment=horizontal_alignment,
            wrap_strategy=wrap_strategy,
        )
        grid_range = await self._resolve_range(spreadsheet_id, range_str, "format cells")
        request = build.repeat_cell(grid_range, fmt, mask)
        details: dict[str, Any] = {"range": range_str, "fields": list(mask.paths)}
        if mask.forced:
            details["cleared"] = list(mask.forced)
        return await self._apply(
            spreadsheet_id, [request], "format cells", "formatted", **details
        )

    async def add_conditional_format(
        self,
        spreadsheet_id: str,
        range_str: str,
        rule: ConditionRule,
        value: str | None = None,
        *,
        bold: bool | None = None,
        text_color: ColorRGB | None = None,
        background_color: ColorRGB | None = None,
    ) -> EditResult:
        boolean_rule = build.boolean_rule(
            rule,
            value,
            bold=bold,
            text_color=text_color,
            background_color=background_color,
        )
        grid_range = await self._resolve_range(
            spreadsheet_id, range_str, "add conditional format"
        )
        request = build.add_conditional_format(grid_range, boolean_rule)
        return await self._apply(
            spreadsheet_id,
            [request],
            "add conditional format",
            "added",
            range=range_str,
            rule=rule.value,
        )

    async def delete_conditional_format(
        self, spreadsheet_id: str, index: int, sheet: str | None = None
    ) -> EditResult:
        build.check_rule_index(index)
        sheet_id = await self._resolve_sheet(
            spreadsheet_id, sheet, "delete conditional format"
        )
        request = build.delete_conditional_format(sheet_id, index)
        return await self._apply(
            spreadsheet_id,
            [request],
            "delete conditional format",
            "deleted",
            sheet_id=sheet_id,
            index=index,
        )

    # -- dimension verbs -----------------------------------------------------

    async def insert_dimension(
        self,
        spreadsheet_id: str,
        dimension: Dimension,
        at: int,
        count: int = 1,
        sheet: str | None = None,
    ) -> EditResult:
        action = f"insert {dimension.value.lower()}"
        build.check_insert_span(at, count)
        sheet_id = await self._resolve_sheet(spreadsheet_id, sheet, action)
        request = build.insert_dimension(sheet_id, dimension, at, count)
        return await self._apply(
            spreadsheet_id,
            [request],
            action,
            "inserted",
            sheet_id=sheet_id,
            dimension=dimension.value,
            at=at,
            count=count,
        )

    async def delete_dimension(
        self,
        spreadsheet_id: str,
        dimension: Dimension,
        start: int,
        end: int,
        sheet: str | None = None,
    ) -> EditResult:
        action = f"delete {dimension.value.lower()}"
        build.check_dimension_span(start, end)
        sheet_id = await self._resolve_sheet(spreadsheet_id, sheet, action)
        request = build.delete_dimension(sheet_id, dimension, start, end)
        return await self._apply(
            spreadsheet_id,
            [request],
            action,
            "deleted",
            sheet_id=sheet_id,
            dimension=dimension.value,
            start=start,
            end=end,
        )

    async def set_column_width(
        self,
        spreadsheet_id: str,
        column: str,
        width: int,
        sheet: str | None = None,
    ) -> EditResult:
        column_index = letter_to_column_index(column)
        build.check_pixel_size(width)
        sheet_id = await self._resolve_sheet(spreadsheet_id, sheet, "set column width")
        request = build.set_column_width(sheet_id, column_index, width)
        return await self._apply(
            spreadsheet_id,
            [request],
            "set column width",
            "resized",
            sheet_id=sheet_id,
            column=column.upper(),
            width=width,
        )

    async def set_row_height(
        self,
        spreadsheet_id: str,
        row: int,
        height: int,
        sheet: str | None = None,
    ) -> EditResult:
        """Resize the 1-based ``row`` to ``height`` pixels."""
        if row < 1:
            raise ValidationError("row", f"--row must be >= 1, got {row}")
        build.check_pixel_size(height)
        sheet_id = await self._resolve_sheet(spreadsheet_id, sheet, "set row height")
        request = build.set_row_height(sheet_id, row - 1, height)
        return await self._apply(
            spreadsheet_id,
            [request],
            "set row height",
            "resized",
            sheet_id=sheet_id,
            row=row,
            height=height,
        )

    async def freeze(
        self,
        spreadsheet_id: str,
        rows: int | None = None,
        columns: int | None = None,
        sheet: str | None = None,
    ) -> EditResult:
        build.check_freeze_counts(rows, columns)
        sheet_id = await self._resolve_sheet(spreadsheet_id, sheet, "freeze panes")
        request = build.freeze_panes(sheet_id, rows, columns)
        details: dict[str, Any] = {"sheet_id": sheet_id}
        if rows is not None:
            details["frozen_rows"] = rows
        if columns is not None:
            details["frozen_cols"] = columns
        return await self._apply(
            spreadsheet_id, [request], "freeze panes", "frozen", **details
        )

    # -- whole spreadsheet ---------------------------------------------------

    async def find_replace(
        self,
        spreadsheet_id: str,
        find: str,
        replacement: str,
        sheet: str | None = None,
        *,
        match_case: bool = False,
        match_entire_cell: bool = False,
        search_by_regex: bool = False,
        include_formulas: bool = False,
    ) -> EditResult:
        """Replace text in every sheet, or only in ``sheet`` when given."""
        options = {
            "match_case": match_case,
            "match_entire_cell": match_entire_cell,
            "search_by_regex": search_by_regex,
            "include_formulas": include_formulas,
        }
        if not find:
            raise ValidationError("find", "--find must not be empty")
        sheet_id = None
        if sheet is not None:
            sheet_id = await self._resolve_sheet(spreadsheet_id, sheet, "find and replace")
        request = build.find_replace(find, replacement, sheet_id, **options)
        result = await self._apply(
            spreadsheet_id,
            [request],
            "find and replace",
            "replaced",
            find=find,
            replacement=replacement,
        )
        replies = (result.response or {}).get("replies") or [{}]
        counts = replies[0].get("findReplace", {})
        result.details["occurrences_changed"] = counts.get("occurrencesChanged", 0)
        result.details["sheets_changed"] = counts.get("sheetsChanged", 0)
        return result

    async def add_sheet(
        self,
        spreadsheet_id: str,
        title: str,
        rows: int | None = None,
        columns: int | None = None,
    ) -> EditResult:
        request = build.add_sheet(title, rows, columns)
        result = await self._apply(
            spreadsheet_id, [request], "add sheet", "added", title=title
        )
        replies = (result.response or {}).get("replies") or [{}]
        props = replies[0].get("addSheet", {}).get("properties", {})
        if "sheetId" in props:
            result.details["sheet_id"] = props["sheetId"]
        return result

    async def delete_sheet(
        self,
        spreadsheet_id: str,
        name: str | None = None,
        sheet_id: int | None = None,
    ) -> EditResult:
        """Delete a sheet by exact title or by numeric ID (exactly one)."""
        if (name is None) == (sheet_id is None):
            raise ValidationError("name", "exactly one of --name or --sheet-id is required")
        if sheet_id is None:
            sheet_id = await self._resolve_sheet(spreadsheet_id, name, "delete sheet")
        request = build.delete_sheet(sheet_id)
        return await self._apply(
            spreadsheet_id, [request], "delete sheet", "deleted", sheet_id=sheet_id
        )


def _to_csv(values: list[list[Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerows([[str(cell) for cell in row] for row in values])
    return buffer.getvalue()


def _rule_summary(index: int, rule: dict[str, Any], sheet_title: str) -> dict[str, Any]:
    summary: dict[str, Any] = {
        "index": index,
        "ranges": [grid_range_to_a1(r, sheet_title) for r in rule.get("ranges", [])],
    }
    boolean = rule.get("booleanRule")
    if boolean is not None:
        condition = boolean.get("condition", {})
        summary["type"] = condition.get("type", "")
        summary["values"] = [
            value.get("userEnteredValue", "") for value in condition.get("values", [])
        ]
        summary["format"] = boolean.get("format", {})
    elif "gradientRule" in rule:
        summary["type"] = "GRADIENT"
    return summary


def _require_values(values: list[list[Any]]) -> None:
    if not values:
        raise ValidationError("values", "no values provided; use --values or --values-json")


def _sheets_summary(metadata: SpreadsheetMetadata) -> list[dict[str, Any]]:
    return [
        {
            "id": sheet.sheet_id,
            "title": sheet.title,
            "index": sheet.index,
            "rows": sheet.row_count,
            "columns": sheet.column_count,
        }
        for sheet in metadata.sheets
    ]
