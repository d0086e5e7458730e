from enum import Enum


class WorkflowStatus(str, Enum):
    """States of the generate → edit → execute workflow."""
    IDLE = "idle"
    GENERATING = "generating"
    GENERATION_FAILED = "generation_failed"
    GENERATED_READY = "generated_ready"
    EXECUTING = "executing"
    EXECUTION_FAILED = "execution_failed"
    EXECUTION_SUCCEEDED = "execution_succeeded"


class ErrorKind(str, Enum):
    """Failure categories surfaced to the user."""
    VALIDATION = "validation"
    NETWORK = "network"
    GENERATION = "generation"
    SQL_SYNTAX = "sql_syntax"
    SAFETY_BLOCKED = "safety_blocked"
    EXECUTION = "execution"
    HISTORY_LOAD = "history_load"


class CellKind(str, Enum):
    """Value variants a result cell can hold."""
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    STRUCTURED = "structured"


class RequestChannel(str, Enum):
    """Independent request channels, each with its own busy flag."""
    GENERATION = "generation"
    EXECUTION = "execution"
    HISTORY = "history"
