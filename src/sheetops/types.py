"""Value types shared by the resolver and the request builders."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NamedTuple


class CellRef(NamedTuple):
    """A single cell position, zero-based."""

    col: int
    row: int


@dataclass(frozen=True)
class GridRange:
    """Zero-based, end-exclusive rectangle on one sheet."""

    sheet_id: int
    start_row: int
    end_row: int
    start_col: int
    end_col: int

    def to_api(self) -> dict[str, int]:
        """Return the GridRange dict used by the Sheets API."""
        return {
            "sheetId": self.sheet_id,
            "startRowIndex": self.start_row,
            "endRowIndex": self.end_row,
            "startColumnIndex": self.start_col,
            "endColumnIndex": self.end_col,
        }

    @property
    def row_count(self) -> int:
        return self.end_row - self.start_row


@dataclass(frozen=True)
class ColorRGB:
    """RGB color with channels normalized to [0, 1]."""

    red: float
    green: float
    blue: float

    def to_api(self) -> dict[str, float]:
        return {"red": self.red, "green": self.green, "blue": self.blue}


@dataclass
class FieldMask:
    """Ordered set of attribute paths for a partial update.

    ``forced`` lists the paths whose value is an explicit false or zero.
    Those values must be serialized even though they look like defaults,
    otherwise the backend reads them as "not specified".
    """

    paths: list[str] = field(default_factory=list)
    forced: list[str] = field(default_factory=list)

    def add(self, path: str, value: Any = True) -> None:
        if path not in self.paths:
            self.paths.append(path)
        if value is False or value == 0:
            if path not in self.forced:
                self.forced.append(path)

    def prefixed(self, prefix: str) -> FieldMask:
        """Return a copy with every path nested under ``prefix``."""
        return FieldMask(
            paths=[f"{prefix}.{p}" for p in self.paths],
            forced=[f"{prefix}.{p}" for p in self.forced],
        )

    def __bool__(self) -> bool:
        return bool(self.paths)

    def __str__(self) -> str:
        return ",".join(self.paths)


class Dimension(Enum):
    """Which axis a dimension request operates on."""

    ROWS = "ROWS"
    COLUMNS = "COLUMNS"


class OutputFormat(Enum):
    """How read returns values."""

    JSON = "json"
    CSV = "csv"


class MergeType(Enum):
    ALL = "MERGE_ALL"
    COLUMNS = "MERGE_COLUMNS"
    ROWS = "MERGE_ROWS"


class HorizontalAlignment(Enum):
    LEFT = "LEFT"
    CENTER = "CENTER"
    RIGHT = "RIGHT"


class WrapStrategy(Enum):
    OVERFLOW_CELL = "OVERFLOW_CELL"
    CLIP = "CLIP"
    WRAP = "WRAP"


class ConditionRule(Enum):
    """Conditional format rules accepted on the command line.

    The value is the CLI spelling; ``condition_type`` is the API name.
    """

    GREATER = ">"
    LESS = "<"
    EQUAL = "="
    NOT_EQUAL = "!="
    CONTAINS = "contains"
    NOT_CONTAINS = "not-contains"
    FORMULA = "formula"
    BLANK = "blank"
    NOT_BLANK = "not-blank"

    @property
    def condition_type(self) -> str:
        return _CONDITION_TYPES[self]

    @property
    def needs_value(self) -> bool:
        return self not in (ConditionRule.BLANK, ConditionRule.NOT_BLANK)


_CONDITION_TYPES = {
    ConditionRule.GREATER: "NUMBER_GREATER",
    ConditionRule.LESS: "NUMBER_LESS",
    ConditionRule.EQUAL: "NUMBER_EQ",
    ConditionRule.NOT_EQUAL: "NUMBER_NOT_EQ",
    ConditionRule.CONTAINS: "TEXT_CONTAINS",
    ConditionRule.NOT_CONTAINS: "TEXT_NOT_CONTAINS",
    ConditionRule.FORMULA: "CUSTOM_FORMULA",
    ConditionRule.BLANK: "BLANK",
    ConditionRule.NOT_BLANK: "NOT_BLANK",
}
