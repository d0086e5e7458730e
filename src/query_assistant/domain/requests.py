"""
Request body models for the query assistant backend.

These models define the JSON bodies sent to the backend endpoints.
"""

from pydantic import BaseModel, Field
from typing import Optional


class GenerateSQLRequest(BaseModel):
    """Body of POST /nl2sql."""

    prompt: str = Field(
        ...,
        description="Natural language description of the data to retrieve. "
                    "Example: 'Show me the 5 most recent orders'"
    )


class ExecuteSQLRequest(BaseModel):
    """
    Body of POST /execsql.

    history_id links the execution to the history record created by
    generation; it is null once the query has been edited by hand.
    """

    history_id: Optional[int] = Field(
        default=None,
        description="History record the SQL was generated for, or null for edited/pasted SQL"
    )
    sql_to_run: str = Field(..., description="SQL text to execute")
