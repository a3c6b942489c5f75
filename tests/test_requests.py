"""Tests for the batchUpdate request builders."""

from __future__ import annotations

import pytest

from sheetops import requests as build
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

GRID = GridRange(sheet_id=3, start_row=0, end_row=10, start_col=0, end_col=4)
RED = ColorRGB(red=1.0, green=0.0, blue=0.0)


class TestFieldMask:
    def test_keeps_order_without_duplicates(self) -> None:
        mask = FieldMask()
        mask.add("b")
        mask.add("a")
        mask.add("b")
        assert str(mask) == "b,a"

    def test_tracks_forced_values(self) -> None:
        mask = FieldMask()
        mask.add("bold", False)
        mask.add("count", 0)
        mask.add("italic", True)
        assert mask.forced == ["bold", "count"]

    def test_empty_is_falsy(self) -> None:
        assert not FieldMask()

    def test_prefixed(self) -> None:
        mask = FieldMask()
        mask.add("textFormat.bold", False)
        prefixed = mask.prefixed("userEnteredFormat")
        assert prefixed.paths == ["userEnteredFormat.textFormat.bold"]
        assert prefixed.forced == ["userEnteredFormat.textFormat.bold"]


class TestInsertDimension:
    def test_insert_rows(self) -> None:
        request = build.insert_dimension(3, Dimension.ROWS, at=5, count=2)
        assert request == {
            "insertDimension": {
                "range": {
                    "sheetId": 3,
                    "dimension": "ROWS",
                    "startIndex": 5,
                    "endIndex": 7,
                },
                "inheritFromBefore": True,
            }
        }

    def test_insert_at_zero_does_not_inherit(self) -> None:
        request = build.insert_dimension(3, Dimension.COLUMNS, at=0, count=1)
        assert request["insertDimension"]["inheritFromBefore"] is False
        assert request["insertDimension"]["range"]["dimension"] == "COLUMNS"

    def test_negative_at(self) -> None:
        with pytest.raises(ValidationError):
            build.insert_dimension(3, Dimension.ROWS, at=-1, count=1)

    def test_zero_count(self) -> None:
        with pytest.raises(ValidationError):
            build.insert_dimension(3, Dimension.ROWS, at=1, count=0)


class TestDeleteDimension:
    def test_delete_columns(self) -> None:
        request = build.delete_dimension(3, Dimension.COLUMNS, 2, 4)
        assert request == {
            "deleteDimension": {
                "range": {
                    "sheetId": 3,
                    "dimension": "COLUMNS",
                    "startIndex": 2,
                    "endIndex": 4,
                }
            }
        }

    @pytest.mark.parametrize(("start", "end"), [(5, 5), (5, 4), (-1, 3)])
    def test_non_positive_span(self, start: int, end: int) -> None:
        with pytest.raises(ValidationError):
            build.delete_dimension(3, Dimension.ROWS, start, end)


class TestMerge:
    def test_merge_all(self) -> None:
        assert build.merge_cells(GRID) == {
            "mergeCells": {"range": GRID.to_api(), "mergeType": "MERGE_ALL"}
        }

    def test_merge_rows(self) -> None:
        request = build.merge_cells(GRID, MergeType.ROWS)
        assert request["mergeCells"]["mergeType"] == "MERGE_ROWS"

    def test_unmerge(self) -> None:
        assert build.unmerge_cells(GRID) == {"unmergeCells": {"range": GRID.to_api()}}


class TestSortRange:
    def test_ascending(self) -> None:
        request = build.sort_range(GRID, column_index=1)
        assert request == {
            "sortRange": {
                "range": GRID.to_api(),
                "sortSpecs": [{"dimensionIndex": 1, "sortOrder": "ASCENDING"}],
            }
        }

    def test_descending(self) -> None:
        request = build.sort_range(GRID, column_index=0, ascending=False)
        assert request["sortRange"]["sortSpecs"][0]["sortOrder"] == "DESCENDING"

    def test_header_row_excluded(self) -> None:
        request = build.sort_range(GRID, column_index=0, has_header=True)
        sorted_range = request["sortRange"]["range"]
        assert sorted_range["startRowIndex"] == 1
        assert sorted_range["endRowIndex"] == 10

    def test_header_only_range(self) -> None:
        header_only = GridRange(sheet_id=3, start_row=0, end_row=1, start_col=0, end_col=4)
        with pytest.raises(ValidationError):
            build.sort_range(header_only, column_index=0, has_header=True)

    def test_column_outside_range(self) -> None:
        with pytest.raises(ValidationError):
            build.sort_range(GRID, column_index=4)


class TestCellFormat:
    def test_bold_only(self) -> None:
        fmt, mask = build.cell_format(bold=True)
        assert fmt == {"textFormat": {"bold": True}}
        assert mask.paths == ["textFormat.bold"]
        assert mask.forced == []

    def test_explicit_false_is_sent(self) -> None:
        fmt, mask = build.cell_format(bold=False, italic=False)
        assert fmt["textFormat"] == {"bold": False, "italic": False}
        assert mask.forced == ["textFormat.bold", "textFormat.italic"]

    def test_all_attributes(self) -> None:
        fmt, mask = build.cell_format(
            bold=True,
            italic=True,
            font_size=14,
            text_color=RED,
            background_color=RED,
            horizontal_alignment=HorizontalAlignment.CENTER,
            wrap_strategy=WrapStrategy.WRAP,
        )
        assert mask.paths == [
            "textFormat.bold",
            "textFormat.italic",
            "textFormat.fontSize",
            "textFormat.foregroundColor",
            "backgroundColor",
            "horizontalAlignment",
            "wrapStrategy",
        ]
        assert fmt["textFormat"]["fontSize"] == 14
        assert fmt["textFormat"]["foregroundColor"] == {"red": 1.0, "green": 0.0, "blue": 0.0}
        assert fmt["backgroundColor"] == {"red": 1.0, "green": 0.0, "blue": 0.0}
        assert fmt["horizontalAlignment"] == "CENTER"
        assert fmt["wrapStrategy"] == "WRAP"

    def test_nothing_set(self) -> None:
        with pytest.raises(ValidationError):
            build.cell_format()

    def test_bad_font_size(self) -> None:
        with pytest.raises(ValidationError):
            build.cell_format(font_size=0)

    def test_repeat_cell(self) -> None:
        fmt, mask = build.cell_format(bold=False, background_color=RED)
        request = build.repeat_cell(GRID, fmt, mask)
        assert request == {
            "repeatCell": {
                "range": GRID.to_api(),
                "cell": {
                    "userEnteredFormat": {
                        "textFormat": {"bold": False},
                        "backgroundColor": {"red": 1.0, "green": 0.0, "blue": 0.0},
                    }
                },
                "fields": "userEnteredFormat.textFormat.bold,userEnteredFormat.backgroundColor",
            }
        }

    def test_repeat_cell_empty_mask(self) -> None:
        with pytest.raises(ValidationError):
            build.repeat_cell(GRID, {}, FieldMask())


class TestDimensionSize:
    def test_column_width(self) -> None:
        assert build.set_column_width(3, 2, 150) == {
            "updateDimensionProperties": {
                "range": {
                    "sheetId": 3,
                    "dimension": "COLUMNS",
                    "startIndex": 2,
                    "endIndex": 3,
                },
                "properties": {"pixelSize": 150},
                "fields": "pixelSize",
            }
        }

    def test_row_height(self) -> None:
        request = build.set_row_height(3, 0, 40)
        body = request["updateDimensionProperties"]
        assert body["range"]["dimension"] == "ROWS"
        assert (body["range"]["startIndex"], body["range"]["endIndex"]) == (0, 1)

    def test_non_positive_size(self) -> None:
        with pytest.raises(ValidationError):
            build.set_column_width(3, 0, 0)
        with pytest.raises(ValidationError):
            build.set_row_height(3, 0, -5)


class TestFreezePanes:
    def test_rows_only(self) -> None:
        assert build.freeze_panes(3, rows=1) == {
            "updateSheetProperties": {
                "properties": {"sheetId": 3, "gridProperties": {"frozenRowCount": 1}},
                "fields": "gridProperties.frozenRowCount",
            }
        }

    def test_both(self) -> None:
        request = build.freeze_panes(3, rows=2, columns=1)
        assert request["updateSheetProperties"]["fields"] == (
            "gridProperties.frozenRowCount,gridProperties.frozenColumnCount"
        )

    def test_zero_unfreezes_explicitly(self) -> None:
        request = build.freeze_panes(3, columns=0)
        body = request["updateSheetProperties"]
        assert body["properties"]["gridProperties"] == {"frozenColumnCount": 0}
        assert body["fields"] == "gridProperties.frozenColumnCount"

    def test_neither(self) -> None:
        with pytest.raises(ValidationError):
            build.freeze_panes(3)

    def test_negative(self) -> None:
        with pytest.raises(ValidationError):
            build.freeze_panes(3, rows=-1)


class TestFindReplace:
    def test_all_sheets_by_default(self) -> None:
        request = build.find_replace("foo", "bar")
        assert request == {
            "findReplace": {
                "find": "foo",
                "replacement": "bar",
                "matchCase": False,
                "matchEntireCell": False,
                "searchByRegex": False,
                "includeFormulas": False,
                "allSheets": True,
            }
        }

    def test_single_sheet(self) -> None:
        body = build.find_replace("foo", "", 9, match_case=True)["findReplace"]
        assert body["sheetId"] == 9
        assert "allSheets" not in body
        assert body["matchCase"] is True

    def test_empty_find(self) -> None:
        with pytest.raises(ValidationError):
            build.find_replace("", "bar")


class TestConditionalFormat:
    def test_greater_than(self) -> None:
        rule = build.boolean_rule(ConditionRule.GREATER, "100", background_color=RED)
        request = build.add_conditional_format(GRID, rule)
        assert request == {
            "addConditionalFormatRule": {
                "rule": {
                    "ranges": [GRID.to_api()],
                    "booleanRule": {
                        "condition": {
                            "type": "NUMBER_GREATER",
                            "values": [{"userEnteredValue": "100"}],
                        },
                        "format": {
                            "backgroundColor": {"red": 1.0, "green": 0.0, "blue": 0.0}
                        },
                    },
                },
                "index": 0,
            }
        }

    def test_blank_needs_no_value(self) -> None:
        rule = build.boolean_rule(ConditionRule.BLANK, bold=True)
        assert rule["condition"] == {"type": "BLANK"}
        assert rule["format"] == {"textFormat": {"bold": True}}

    @pytest.mark.parametrize(
        "rule",
        [r for r in ConditionRule if r not in (ConditionRule.BLANK, ConditionRule.NOT_BLANK)],
    )
    def test_value_required(self, rule: ConditionRule) -> None:
        with pytest.raises(ValidationError, match="--value is required"):
            build.boolean_rule(rule, None, bold=True)

    def test_format_required(self) -> None:
        with pytest.raises(ValidationError):
            build.boolean_rule(ConditionRule.CONTAINS, "x")

    def test_delete(self) -> None:
        assert build.delete_conditional_format(3, 2) == {
            "deleteConditionalFormatRule": {"sheetId": 3, "index": 2}
        }

    def test_delete_negative_index(self) -> None:
        with pytest.raises(ValidationError, match="--index must be >= 0"):
            build.delete_conditional_format(3, -1)


class TestSheets:
    def test_add_sheet(self) -> None:
        assert build.add_sheet("Archive") == {"addSheet": {"properties": {"title": "Archive"}}}

    def test_add_sheet_with_size(self) -> None:
        request = build.add_sheet("Archive", rows=10, columns=3)
        assert request["addSheet"]["properties"]["gridProperties"] == {
            "rowCount": 10,
            "columnCount": 3,
        }

    def test_add_sheet_bad_size(self) -> None:
        with pytest.raises(ValidationError):
            build.add_sheet("Archive", rows=0)

    def test_delete_sheet(self) -> None:
        assert build.delete_sheet(9) == {"deleteSheet": {"sheetId": 9}}
