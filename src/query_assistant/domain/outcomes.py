"""
Outcome values produced by the controllers.

Controllers never raise past their public methods; they return either a
success value or an ErrorOutcome describing what the user should see.
"""

from dataclasses import dataclass, field
from typing import Tuple, Union

from .base_enums import ErrorKind
from .types import ResultRow


@dataclass(frozen=True)
class ErrorOutcome:
    """A failed action, tagged with its failure kind and user-facing message."""

    kind: ErrorKind
    message: str


@dataclass(frozen=True)
class ResultSet:
    """
    Rows returned by a successful execution.

    structured is False when the backend answered successfully but the body
    was not a JSON array; rows is empty in that case.
    """

    rows: Tuple[ResultRow, ...] = field(default_factory=tuple)
    structured: bool = True

    @property
    def row_count(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class ExecutionSuccess:
    """A successful execution with its human-readable summary."""

    result: ResultSet
    message: str


ExecutionOutcome = Union[ExecutionSuccess, ErrorOutcome]
