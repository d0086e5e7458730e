"""
Custom exception hierarchy for the query assistant client.

Every exception carries:
- A machine-readable error code
- The ErrorKind it is surfaced as
- The HTTP status of the backend response that caused it (when there was one)

Exceptions are raised inside the transport and controller internals and are
converted into ErrorOutcome values at each controller's public boundary;
none of them escape past a controller.

Exception Categories:
- Client-local: ValidationError (never reaches the network)
- Transport: NetworkError (connection failure, unparseable body)
- Backend rejections: GenerationError, SQLSyntaxError, SafetyBlockedError,
  GenericExecutionError, HistoryLoadError

Usage:
    raise ValidationError("Please describe the data you want to retrieve.")
    raise GenerationError("AI Error: model overloaded", http_status=500)
"""

from typing import Any, Dict, Optional

from .base_enums import ErrorKind
from .outcomes import ErrorOutcome


class QueryAssistantException(Exception):
    """
    Base exception for all query assistant errors.

    Attributes:
        message: User-facing error description
        error_code: Machine-readable error code (e.g., "SQL_SYNTAX_ERROR")
        kind: ErrorKind this exception is surfaced as
        http_status: Status of the backend response, None if no response was received
        details: Optional dictionary with additional error context
    """

    error_code: str = "INTERNAL_ERROR"
    kind: ErrorKind = ErrorKind.NETWORK

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        http_status: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.http_status = http_status

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for structured logging."""
        result: Dict[str, Any] = {
            "error_code": self.error_code,
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.http_status is not None:
            result["http_status"] = self.http_status
        if self.details:
            result["details"] = self.details
        return result

    def to_outcome(self) -> ErrorOutcome:
        """Convert exception to the user-facing outcome of the failed action."""
        return ErrorOutcome(kind=self.kind, message=self.message)


# =============================================================================
# Client-local Errors
# =============================================================================


class ValidationError(QueryAssistantException):
    """
    Raised when user input is empty or whitespace-only.

    Raised before any request is built, so no network call is made.
    """

    error_code = "VALIDATION_ERROR"
    kind = ErrorKind.VALIDATION


# =============================================================================
# Transport Errors
# =============================================================================


class NetworkError(QueryAssistantException):
    """
    Raised when the backend could not be reached or its answer could not be read.

    Examples:
        - Connection refused / DNS failure
        - Timeout (when a timeout is configured)
        - Success response whose body is not the expected JSON
    """

    error_code = "NETWORK_ERROR"
    kind = ErrorKind.NETWORK


# =============================================================================
# Generation Errors
# =============================================================================


class GenerationError(QueryAssistantException):
    """
    Raised when /nl2sql answers with a non-success status.

    The message is the response body, or a status-derived fallback.
    """

    error_code = "GENERATION_ERROR"
    kind = ErrorKind.GENERATION


# =============================================================================
# Execution Errors
# =============================================================================


class ExecutionFailure(QueryAssistantException):
    """Base class for non-success /execsql responses."""

    error_code = "EXECUTION_ERROR"
    kind = ErrorKind.EXECUTION


class SQLSyntaxError(ExecutionFailure):
    """
    Raised when /execsql rejects the query as syntactically invalid.

    HTTP Status: 400 with a body starting with "SQL Syntax Error: "
    """

    error_code = "SQL_SYNTAX_ERROR"
    kind = ErrorKind.SQL_SYNTAX


class SafetyBlockedError(ExecutionFailure):
    """
    Raised when /execsql refuses the query under its safety policy.

    HTTP Status: 403. The response body is discarded in favor of a fixed message.
    """

    error_code = "SAFETY_BLOCKED"
    kind = ErrorKind.SAFETY_BLOCKED


class GenericExecutionError(ExecutionFailure):
    """
    Raised for any other non-success /execsql response.

    Examples:
        - 400 "SQL Execution Error: no such table: orders"
        - 500 from the worker runtime
    """

    error_code = "EXECUTION_ERROR"
    kind = ErrorKind.EXECUTION


# =============================================================================
# History Errors
# =============================================================================


class HistoryLoadError(QueryAssistantException):
    """
    Raised when /history answers with a non-success status.

    The previously loaded history list stays in place.
    """

    error_code = "HISTORY_LOAD_ERROR"
    kind = ErrorKind.HISTORY_LOAD
