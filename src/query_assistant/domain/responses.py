"""
Response models for the query assistant backend.

These models validate the JSON bodies returned by the backend and define
the canonical client-side shape of history entries.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any


class GenerateSQLResponse(BaseModel):
    """Success body of POST /nl2sql."""

    generated_sql: str = Field(..., description="SQL generated for the prompt")
    history_id: int = Field(..., description="ID of the history record created for this generation")


class HistoryEntry(BaseModel):
    """
    Canonical client-side history entry.

    Entries are read-only snapshots of server records; the local list is
    replaced wholesale on every refresh.
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="History record ID")
    natural: str = Field(..., description="Natural language prompt")
    sql: str = Field(..., description="SQL generated for the prompt")
    executed: bool = Field(..., description="Whether the generated SQL has been run")
    created_at: str = Field(..., description="Server-side creation timestamp")


class HistoryRecord(BaseModel):
    """
    One element of the GET /history success body.

    executed is stored server-side as an integer flag; it is kept loosely
    typed here and normalized by to_entry().
    """

    id: int
    natural: str
    sql: str
    executed: Any = 0
    created_at: str

    def to_entry(self) -> HistoryEntry:
        """Normalize the server record into a HistoryEntry."""
        return HistoryEntry(
            id=self.id,
            natural=self.natural,
            sql=self.sql,
            executed=is_executed_flag(self.executed),
            created_at=self.created_at,
        )


def is_executed_flag(value: Any) -> bool:
    """
    True only for the integer flag 1.

    JSON booleans are not flags: bool is excluded even though True == 1.
    """
    if isinstance(value, bool):
        return False
    return isinstance(value, (int, float)) and value == 1
