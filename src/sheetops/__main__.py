"""CLI entry point for sheetops.

Usage:
    python -m sheetops info <spreadsheet_id_or_url>
    python -m sheetops read <spreadsheet_id_or_url> "Sheet1!A1:D10" --output-format csv
    python -m sheetops create --title "Budget" --sheet-names "Q1,Q2"
    python -m sheetops merge <spreadsheet_id_or_url> "Sheet1!A1:B2"
    python -m sheetops format <spreadsheet_id_or_url> A1:D1 --bold --bg-color "#FFFF00"
    python -m sheetops delete-rows <spreadsheet_id_or_url> --from 3 --to 5

Every command prints one JSON object: the result on stdout, or
{"error": ..., "type": ...} on stderr with exit code 1.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import re
import sys
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, TypeVar

from loguru import logger

from sheetops.client import EditResult, SheetEditor
from sheetops.config import get_settings
from sheetops.exceptions import SheetOpsError
from sheetops.logging import setup_logging
from sheetops.transport import (
    AuthenticationError,
    GoogleSheetsTransport,
    Transport,
    TransportError,
)
from sheetops.types import (
    ConditionRule,
    Dimension,
    HorizontalAlignment,
    MergeType,
    OutputFormat,
    WrapStrategy,
)
from sheetops.utils import parse_hex_color, parse_values

Handler = Callable[[SheetEditor, argparse.Namespace], Awaitable[Any]]
E = TypeVar("E", bound=Enum)


def parse_spreadsheet_id(id_or_url: str) -> str:
    """Extract spreadsheet ID from a URL or return as-is if already an ID."""
    # https://docs.google.com/spreadsheets/d/SPREADSHEET_ID/edit...
    url_pattern = r"docs\.google\.com/spreadsheets/d/([a-zA-Z0-9_-]+)"
    match = re.search(url_pattern, id_or_url)
    if match:
        return match.group(1)
    return id_or_url


def enum_arg(enum_cls: type[E]) -> Callable[[str], E]:
    """argparse type that accepts an enum value or name, case-insensitive."""

    def convert(text: str) -> E:
        for member in enum_cls:
            if text.lower() in (str(member.value).lower(), member.name.lower()):
                return member
        choices = ", ".join(str(m.value) for m in enum_cls)
        raise argparse.ArgumentTypeError(f"invalid choice {text!r} (choose from {choices})")

    convert.__name__ = enum_cls.__name__
    return convert


def _color(value: str | None) -> Any:
    return parse_hex_color(value) if value is not None else None


def _name_list(text: str) -> list[str]:
    """Split a comma-separated list, dropping blanks."""
    return [name.strip() for name in text.split(",") if name.strip()]


# -- command handlers ---------------------------------------------------------


async def cmd_info(editor: SheetEditor, args: argparse.Namespace) -> Any:
    return await editor.info(args.spreadsheet)


async def cmd_list(editor: SheetEditor, args: argparse.Namespace) -> Any:
    return await editor.list_sheets(args.spreadsheet)


async def cmd_list_conditional_formats(
    editor: SheetEditor, args: argparse.Namespace
) -> Any:
    return await editor.list_conditional_formats(args.spreadsheet, sheet=args.sheet)


async def cmd_create(editor: SheetEditor, args: argparse.Namespace) -> Any:
    return await editor.create(args.title, args.sheet_names)


async def cmd_read(editor: SheetEditor, args: argparse.Namespace) -> Any:
    return await editor.read(
        args.spreadsheet, args.range, args.output_format, headers=args.headers
    )


async def cmd_write(editor: SheetEditor, args: argparse.Namespace) -> Any:
    values = parse_values(args.values, args.values_json)
    return await editor.write(args.spreadsheet, args.range, values)


async def cmd_append(editor: SheetEditor, args: argparse.Namespace) -> Any:
    values = parse_values(args.values, args.values_json)
    return await editor.append(args.spreadsheet, args.range, values)


async def cmd_clear(editor: SheetEditor, args: argparse.Namespace) -> Any:
    return await editor.clear(args.spreadsheet, args.range)


async def cmd_merge(editor: SheetEditor, args: argparse.Namespace) -> Any:
    return await editor.merge(args.spreadsheet, args.range, args.type)


async def cmd_unmerge(editor: SheetEditor, args: argparse.Namespace) -> Any:
    return await editor.unmerge(args.spreadsheet, args.range)


async def cmd_sort(editor: SheetEditor, args: argparse.Namespace) -> Any:
    return await editor.sort(
        args.spreadsheet,
        args.range,
        args.by,
        descending=args.desc,
        has_header=args.has_header,
    )


async def cmd_format(editor: SheetEditor, args: argparse.Namespace) -> Any:
    return await editor.format(
        args.spreadsheet,
        args.range,
        bold=args.bold,
        italic=args.italic,
        font_size=args.font_size,
        text_color=_color(args.color),
        background_color=_color(args.bg_color),
        horizontal_alignment=args.align,
        wrap_strategy=args.wrap,
    )


def _insert(dimension: Dimension) -> Handler:
    async def handler(editor: SheetEditor, args: argparse.Namespace) -> Any:
        return await editor.insert_dimension(
            args.spreadsheet, dimension, args.at, args.count, sheet=args.sheet
        )

    return handler


def _delete(dimension: Dimension) -> Handler:
    async def handler(editor: SheetEditor, args: argparse.Namespace) -> Any:
        return await editor.delete_dimension(
            args.spreadsheet, dimension, args.start, args.end, sheet=args.sheet
        )

    return handler


async def cmd_set_col_width(editor: SheetEditor, args: argparse.Namespace) -> Any:
    return await editor.set_column_width(
        args.spreadsheet, args.col, args.width, sheet=args.sheet
    )


async def cmd_set_row_height(editor: SheetEditor, args: argparse.Namespace) -> Any:
    return await editor.set_row_height(
        args.spreadsheet, args.row, args.height, sheet=args.sheet
    )


async def cmd_freeze(editor: SheetEditor, args: argparse.Namespace) -> Any:
    return await editor.freeze(
        args.spreadsheet, rows=args.rows, columns=args.cols, sheet=args.sheet
    )


async def cmd_find_replace(editor: SheetEditor, args: argparse.Namespace) -> Any:
    return await editor.find_replace(
        args.spreadsheet,
        args.find,
        args.replace,
        sheet=args.sheet,
        match_case=args.match_case,
        match_entire_cell=args.entire_cell,
        search_by_regex=args.regex,
        include_formulas=args.formulas,
    )


async def cmd_add_sheet(editor: SheetEditor, args: argparse.Namespace) -> Any:
    return await editor.add_sheet(args.spreadsheet, args.name, args.rows, args.cols)


async def cmd_delete_sheet(editor: SheetEditor, args: argparse.Namespace) -> Any:
    return await editor.delete_sheet(
        args.spreadsheet, name=args.name, sheet_id=args.sheet_id
    )


async def cmd_add_conditional_format(
    editor: SheetEditor, args: argparse.Namespace
) -> Any:
    return await editor.add_conditional_format(
        args.spreadsheet,
        args.range,
        args.rule,
        args.value,
        bold=args.bold,
        text_color=_color(args.color),
        background_color=_color(args.bg_color),
    )


async def cmd_delete_conditional_format(
    editor: SheetEditor, args: argparse.Namespace
) -> Any:
    return await editor.delete_conditional_format(
        args.spreadsheet, args.index, sheet=args.sheet
    )


# -- parser -------------------------------------------------------------------


def _add_command(
    subparsers: Any,
    name: str,
    handler: Handler,
    help_text: str,
    *,
    with_range: bool = False,
    with_spreadsheet: bool = True,
) -> argparse.ArgumentParser:
    parser: argparse.ArgumentParser = subparsers.add_parser(name, help=help_text)
    if with_spreadsheet:
        parser.add_argument(
            "spreadsheet",
            type=parse_spreadsheet_id,
            help="Spreadsheet ID or full Google Sheets URL",
        )
    if with_range:
        parser.add_argument("range", help='Range like "Sheet1!A1:D10" or "A1:D10"')
    parser.set_defaults(handler=handler)
    return parser


def _add_values_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--values",
        default=None,
        help='Comma-separated cells, semicolon-separated rows: "a,b,c;d,e,f"',
    )
    parser.add_argument(
        "--values-json",
        default=None,
        help='JSON array of arrays: \'[["a","b"],["c","d"]]\' (wins over --values)',
    )


def _add_sheet_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--sheet", default=None, help="Sheet name (defaults to the first sheet)"
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the command table. Called once per process."""
    parser = argparse.ArgumentParser(
        prog="sheetops",
        description="Structural edits for Google Sheets from the command line",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug output to stderr"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    _add_command(subparsers, "info", cmd_info, "Get spreadsheet info")
    _add_command(subparsers, "list", cmd_list, "List sheets")

    p = _add_command(
        subparsers, "create", cmd_create, "Create a spreadsheet", with_spreadsheet=False
    )
    p.add_argument("--title", required=True)
    p.add_argument(
        "--sheet-names",
        type=_name_list,
        default=None,
        help="Comma-separated sheet names (default: Sheet1)",
    )

    p = _add_command(subparsers, "read", cmd_read, "Read values from a range", with_range=True)
    p.add_argument(
        "--output-format",
        type=enum_arg(OutputFormat),
        default=OutputFormat.JSON,
        help="json (default) or csv",
    )
    p.add_argument(
        "--headers",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Map rows to objects keyed by the first row (json only)",
    )

    p = _add_command(subparsers, "write", cmd_write, "Write values to cells", with_range=True)
    _add_values_flags(p)
    p = _add_command(
        subparsers, "append", cmd_append, "Append rows to a sheet", with_range=True
    )
    _add_values_flags(p)
    _add_command(subparsers, "clear", cmd_clear, "Clear values in a range", with_range=True)

    p = _add_command(subparsers, "merge", cmd_merge, "Merge cells", with_range=True)
    p.add_argument(
        "--type",
        type=enum_arg(MergeType),
        default=MergeType.ALL,
        help="MERGE_ALL (default), MERGE_COLUMNS or MERGE_ROWS",
    )
    _add_command(subparsers, "unmerge", cmd_unmerge, "Unmerge cells", with_range=True)

    p = _add_command(subparsers, "sort", cmd_sort, "Sort a range", with_range=True)
    p.add_argument("--by", required=True, help="Column letter to sort by, e.g. B")
    p.add_argument("--desc", action="store_true", help="Sort descending")
    p.add_argument(
        "--has-header", action="store_true", help="Keep the first row of the range in place"
    )

    p = _add_command(subparsers, "format", cmd_format, "Format cells", with_range=True)
    p.add_argument("--bold", action=argparse.BooleanOptionalAction, default=None)
    p.add_argument("--italic", action=argparse.BooleanOptionalAction, default=None)
    p.add_argument("--font-size", type=int, default=None)
    p.add_argument("--color", default=None, help="Text color as #RRGGBB")
    p.add_argument("--bg-color", default=None, help="Background color as #RRGGBB")
    p.add_argument("--align", type=enum_arg(HorizontalAlignment), default=None)
    p.add_argument("--wrap", type=enum_arg(WrapStrategy), default=None)

    for name, dimension, noun in (
        ("insert-rows", Dimension.ROWS, "rows"),
        ("insert-cols", Dimension.COLUMNS, "columns"),
    ):
        p = _add_command(subparsers, name, _insert(dimension), f"Insert {noun}")
        p.add_argument("--at", type=int, required=True, help="0-based index to insert at")
        p.add_argument("--count", type=int, default=1, help=f"Number of {noun} (default: 1)")
        _add_sheet_flag(p)

    for name, dimension, noun in (
        ("delete-rows", Dimension.ROWS, "rows"),
        ("delete-cols", Dimension.COLUMNS, "columns"),
    ):
        p = _add_command(subparsers, name, _delete(dimension), f"Delete {noun}")
        p.add_argument(
            "--from", dest="start", type=int, required=True, help="0-based start (inclusive)"
        )
        p.add_argument(
            "--to", dest="end", type=int, required=True, help="0-based end (exclusive)"
        )
        _add_sheet_flag(p)

    p = _add_command(subparsers, "set-col-width", cmd_set_col_width, "Set column width")
    p.add_argument("--col", required=True, help="Column letter, e.g. C")
    p.add_argument("--width", type=int, required=True, help="Width in pixels")
    _add_sheet_flag(p)

    p = _add_command(subparsers, "set-row-height", cmd_set_row_height, "Set row height")
    p.add_argument("--row", type=int, required=True, help="1-based row number")
    p.add_argument("--height", type=int, required=True, help="Height in pixels")
    _add_sheet_flag(p)

    p = _add_command(subparsers, "freeze", cmd_freeze, "Freeze rows and/or columns")
    p.add_argument("--rows", type=int, default=None, help="Frozen rows (0 unfreezes)")
    p.add_argument("--cols", type=int, default=None, help="Frozen columns (0 unfreezes)")
    _add_sheet_flag(p)

    p = _add_command(subparsers, "find-replace", cmd_find_replace, "Find and replace text")
    p.add_argument("--find", required=True)
    p.add_argument("--replace", required=True)
    p.add_argument("--sheet", default=None, help="Limit to one sheet (default: all sheets)")
    p.add_argument("--match-case", action="store_true")
    p.add_argument("--entire-cell", action="store_true")
    p.add_argument("--regex", action="store_true")
    p.add_argument("--formulas", action="store_true", help="Also search formulas")

    p = _add_command(subparsers, "add-sheet", cmd_add_sheet, "Add a sheet")
    p.add_argument("--name", required=True)
    p.add_argument("--rows", type=int, default=None)
    p.add_argument("--cols", type=int, default=None)

    p = _add_command(subparsers, "delete-sheet", cmd_delete_sheet, "Delete a sheet")
    p.add_argument("--name", default=None)
    p.add_argument("--sheet-id", type=int, default=None)

    p = _add_command(
        subparsers,
        "add-conditional-format",
        cmd_add_conditional_format,
        "Add a conditional format rule",
        with_range=True,
    )
    p.add_argument(
        "--rule",
        type=enum_arg(ConditionRule),
        required=True,
        help=", ".join(str(r.value) for r in ConditionRule),
    )
    p.add_argument("--value", default=None)
    p.add_argument("--bold", action=argparse.BooleanOptionalAction, default=None)
    p.add_argument("--color", default=None, help="Text color as #RRGGBB")
    p.add_argument("--bg-color", default=None, help="Background color as #RRGGBB")

    p = _add_command(
        subparsers,
        "list-conditional-formats",
        cmd_list_conditional_formats,
        "List conditional format rules of a sheet",
    )
    _add_sheet_flag(p)

    p = _add_command(
        subparsers,
        "delete-conditional-format",
        cmd_delete_conditional_format,
        "Delete a conditional format rule",
    )
    p.add_argument("--index", type=int, required=True, help="0-based rule index")
    _add_sheet_flag(p)

    return parser


# -- running ------------------------------------------------------------------


def _print_error(error: Exception) -> None:
    payload = {"error": str(error), "type": type(error).__name__}
    print(json.dumps(payload), file=sys.stderr)


async def run(args: argparse.Namespace, transport: Transport) -> int:
    """Run one parsed command against ``transport`` and print the result."""
    editor = SheetEditor(transport)
    try:
        result = await args.handler(editor, args)
    except (SheetOpsError, TransportError) as e:
        logger.debug("{} failed: {}", args.command, e)
        _print_error(e)
        return 1
    finally:
        await transport.close()

    if isinstance(result, EditResult):
        result = result.to_dict()
    print(json.dumps(result, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    settings = get_settings()
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(
        json_logs=settings.json_logs,
        log_level="DEBUG" if args.verbose else settings.log_level,
    )

    if not settings.has_token:
        _print_error(
            AuthenticationError("no access token; set SHEETOPS_ACCESS_TOKEN")
        )
        return 1

    transport = GoogleSheetsTransport(
        access_token=settings.access_token,
        timeout=settings.timeout,
        api_base=settings.api_base,
    )
    result: int = asyncio.run(run(args, transport))
    return result


if __name__ == "__main__":
    sys.exit(main())
