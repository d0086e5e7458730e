"""
Domain package for the query assistant client.

This package contains the wire models, workflow state, actions and error
types shared by the infrastructure and service layers.
"""

from .base_enums import CellKind, ErrorKind, RequestChannel, WorkflowStatus
from .cell_values import CellValue, NULL_CELL
from .requests import GenerateSQLRequest, ExecuteSQLRequest
from .responses import GenerateSQLResponse, HistoryEntry, HistoryRecord
from .outcomes import ErrorOutcome, ExecutionOutcome, ExecutionSuccess, ResultSet
from .state import GeneratedQuery, RequestSequence, WorkflowState
from .actions import (
    Action,
    Effect,
    EditDraft,
    EditQuery,
    ExecutionCompleted,
    Generate,
    GenerationCompleted,
    HistoryCompleted,
    RefreshHistory,
    RequestExecution,
    RequestGeneration,
    RequestHistory,
    Run,
)

__all__ = [
    # Enums
    "CellKind",
    "ErrorKind",
    "RequestChannel",
    "WorkflowStatus",

    # Cells
    "CellValue",
    "NULL_CELL",

    # Requests
    "GenerateSQLRequest",
    "ExecuteSQLRequest",

    # Responses
    "GenerateSQLResponse",
    "HistoryEntry",
    "HistoryRecord",

    # Outcomes
    "ErrorOutcome",
    "ExecutionOutcome",
    "ExecutionSuccess",
    "ResultSet",

    # State
    "GeneratedQuery",
    "RequestSequence",
    "WorkflowState",

    # Actions and effects
    "Action",
    "Effect",
    "EditDraft",
    "EditQuery",
    "ExecutionCompleted",
    "Generate",
    "GenerationCompleted",
    "HistoryCompleted",
    "RefreshHistory",
    "RequestExecution",
    "RequestGeneration",
    "RequestHistory",
    "Run",
]
