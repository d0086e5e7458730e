"""
Execution controller.

Runs SQL through POST /execsql, classifies failures into the categories the
user sees, and summarizes successful results.

Failure classification (first match wins):
1. 400 with a body starting with "SQL Syntax Error: " -> SQLSyntaxError
2. 403 -> SafetyBlockedError (fixed message, body discarded)
3. anything else -> GenericExecutionError (body, or a status fallback)
"""

from typing import Any, Optional

import httpx

from query_assistant.domain.errors import (
    ExecutionFailure,
    GenericExecutionError,
    QueryAssistantException,
    SQLSyntaxError,
    SafetyBlockedError,
    ValidationError,
)
from query_assistant.domain.cell_values import to_result_row
from query_assistant.domain.outcomes import ExecutionOutcome, ExecutionSuccess, ResultSet
from query_assistant.infrastructure.backend_client import BackendClient, decode_json
from query_assistant.utils.logging import get_module_logger
from query_assistant.utils.tracing import current_trace_id

logger = get_module_logger()

QUERY_REQUIRED_MESSAGE = "Generate or paste SQL before running it."

SYNTAX_ERROR_MARKER = "SQL Syntax Error: "
SYNTAX_ERROR_PREFIX = "We couldn't run the query because of a syntax issue:\n"
SAFETY_BLOCKED_MESSAGE = (
    "The query was blocked for safety. "
    "Remove statements such as DROP, ALTER, TRUNCATE, or CREATE DATABASE."
)

NO_ROWS_MESSAGE = "Query executed successfully. No rows returned."
UNSTRUCTURED_MESSAGE = "Query executed, but no structured rows were returned."


def validate_query(query: str) -> None:
    """
    Raises:
        ValidationError: If the query text is empty or whitespace-only
    """
    if not query.strip():
        raise ValidationError(QUERY_REQUIRED_MESSAGE)


def classify_failure(status_code: int, body: str) -> ExecutionFailure:
    """Map a non-success /execsql response to its failure category."""
    if status_code == 400 and body.startswith(SYNTAX_ERROR_MARKER):
        detail = body[len(SYNTAX_ERROR_MARKER):]
        return SQLSyntaxError(
            f"{SYNTAX_ERROR_PREFIX}{detail}",
            details={"detail": detail},
            http_status=status_code
        )

    if status_code == 403:
        return SafetyBlockedError(SAFETY_BLOCKED_MESSAGE, http_status=status_code)

    return GenericExecutionError(
        body or f"Execution failed ({status_code})",
        http_status=status_code
    )


def summarize(result: ResultSet) -> str:
    """Human-readable summary of a successful execution."""
    if not result.structured:
        return UNSTRUCTURED_MESSAGE
    if result.row_count == 0:
        return NO_ROWS_MESSAGE
    noun = "row" if result.row_count == 1 else "rows"
    return f"Returned {result.row_count} {noun}."


def to_result_set(payload: Any) -> ResultSet:
    """Accept a JSON array as rows; any other success body yields no rows."""
    if isinstance(payload, list):
        return ResultSet(rows=tuple(to_result_row(row) for row in payload), structured=True)
    return ResultSet(rows=(), structured=False)


class ExecutionController:
    """
    Submits SQL to the execution endpoint.

    busy is advisory: it reports whether a call is in flight but does not
    prevent a second one.
    """

    def __init__(self, client: BackendClient):
        self.client = client
        self._in_flight = 0

    @property
    def busy(self) -> bool:
        return self._in_flight > 0

    async def run(self, query: str, origin_id: Optional[int] = None) -> ExecutionOutcome:
        """
        Execute SQL.

        Args:
            query: SQL text, sent as typed
            origin_id: History record the query was generated for; None for
                edited or pasted SQL

        Returns:
            ExecutionSuccess with rows and summary, or an ErrorOutcome
            (VALIDATION, SQL_SYNTAX, SAFETY_BLOCKED, EXECUTION or NETWORK)
        """
        trace_id = current_trace_id()

        try:
            validate_query(query)

            self._in_flight += 1
            try:
                result = await self._request(query, origin_id)
            finally:
                self._in_flight -= 1

        except QueryAssistantException as e:
            logger.warning("SQL execution failed", **e.to_dict(), trace_id=trace_id)
            return e.to_outcome()

        message = summarize(result)
        logger.info(
            "SQL executed",
            history_id=origin_id,
            row_count=result.row_count,
            structured=result.structured,
            trace_id=trace_id
        )
        return ExecutionSuccess(result=result, message=message)

    async def _request(self, query: str, origin_id: Optional[int]) -> ResultSet:
        logger.debug(
            "Requesting SQL execution",
            sql_length=len(query),
            history_id=origin_id,
            trace_id=current_trace_id()
        )

        response: httpx.Response = await self.client.execute_sql(query, history_id=origin_id)
        if not response.is_success:
            raise classify_failure(response.status_code, response.text)

        return to_result_set(decode_json(response))
