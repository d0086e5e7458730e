"""
Result projection for executed queries.

Rows returned by /execsql are JSON objects with arbitrary, possibly differing
keys. The projector derives one stable column order for the whole result set
and formats every cell as display text.
"""

import json
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Tuple

from query_assistant.domain.base_enums import CellKind
from query_assistant.domain.cell_values import CellValue, NULL_CELL
from query_assistant.domain.outcomes import ResultSet
from query_assistant.domain.types import ColumnSet

NULL_PLACEHOLDER = "-"
UNSERIALIZABLE_PLACEHOLDER = "[object]"


@dataclass(frozen=True)
class ResultTable:
    """A result set projected to display text."""

    columns: ColumnSet
    rows: Tuple[Tuple[str, ...], ...]


def compute_columns(rows: Iterable[Any]) -> ColumnSet:
    """
    Union of row keys in first-appearance order.

    Rows are scanned in result order; within a row, keys keep their own order.
    Rows that are not mappings contribute nothing.
    """
    seen = {}
    for row in rows:
        if isinstance(row, Mapping):
            for key in row:
                seen.setdefault(key, None)
    return tuple(seen)


def format_cell(value: Any) -> str:
    """
    Format one cell for display.

    Accepts a CellValue or a raw decoded JSON value.
    """
    cell = CellValue.of(value)

    if cell.kind == CellKind.NULL:
        return NULL_PLACEHOLDER
    if cell.kind == CellKind.STRUCTURED:
        try:
            return json.dumps(cell.value, separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError):
            return UNSERIALIZABLE_PLACEHOLDER
    if cell.kind == CellKind.BOOLEAN:
        return "true" if cell.value else "false"
    if cell.kind == CellKind.NUMBER:
        return _format_number(cell.value)
    return str(cell.value)


def _format_number(value: Any) -> str:
    # 5.0 arrives from JSON as a float but is the integer 5
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return str(value)


def project_row(row: Mapping[str, Any], columns: ColumnSet) -> Tuple[str, ...]:
    """Format a row against a column set; missing keys render like null."""
    return tuple(format_cell(row.get(column, NULL_CELL)) for column in columns)


def project(result: ResultSet) -> ResultTable:
    """Project a whole result set into display text."""
    columns = compute_columns(result.rows)
    return ResultTable(
        columns=columns,
        rows=tuple(project_row(row, columns) for row in result.rows),
    )
