"""
Tagged cell values for result rows.

Rows returned by /execsql are arbitrary JSON objects. Each cell is wrapped in
a CellValue so formatting code dispatches on an explicit kind instead of
guessing from Python types.
"""

from dataclasses import dataclass
from typing import Any, Mapping

from .base_enums import CellKind


@dataclass(frozen=True)
class CellValue:
    """A single JSON cell value tagged with its kind."""

    kind: CellKind
    value: Any = None

    @classmethod
    def of(cls, value: Any) -> "CellValue":
        """
        Classify a decoded JSON value.

        bool is checked before numbers since bool is an int subclass.
        """
        if isinstance(value, CellValue):
            return value
        if value is None:
            return NULL_CELL
        if isinstance(value, bool):
            return cls(CellKind.BOOLEAN, value)
        if isinstance(value, (int, float)):
            return cls(CellKind.NUMBER, value)
        if isinstance(value, str):
            return cls(CellKind.STRING, value)
        return cls(CellKind.STRUCTURED, value)

    @property
    def is_null(self) -> bool:
        return self.kind == CellKind.NULL


NULL_CELL = CellValue(CellKind.NULL)


def to_result_row(raw: Any) -> dict:
    """
    Convert one decoded JSON row into an ordered {column: CellValue} mapping.

    Rows that are not JSON objects (null, scalars) carry no columns.
    """
    if not isinstance(raw, Mapping):
        return {}
    return {str(key): CellValue.of(value) for key, value in raw.items()}
