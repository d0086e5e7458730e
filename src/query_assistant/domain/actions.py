"""
Actions consumed by the workflow reducer and effects it emits.

User intents (Generate, EditDraft, EditQuery, Run, RefreshHistory) come from
the presentation layer. Completions are fed back by the coordinator after it
runs an effect. Effects describe the network calls to make; they carry the
request number the completion must echo.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .outcomes import ErrorOutcome, ExecutionOutcome
from .responses import HistoryEntry
from .state import GeneratedQuery


# =============================================================================
# User intents
# =============================================================================


@dataclass(frozen=True)
class Generate:
    """Generate SQL from the draft; a given prompt replaces the draft first."""

    prompt: Optional[str] = None


@dataclass(frozen=True)
class EditDraft:
    text: str


@dataclass(frozen=True)
class EditQuery:
    """Hand edit of the SQL text; always breaks the origin link."""

    text: str


@dataclass(frozen=True)
class Run:
    """Execute the current query text."""


@dataclass(frozen=True)
class RefreshHistory:
    """Reload the history log."""


# =============================================================================
# Completions
# =============================================================================


@dataclass(frozen=True)
class GenerationCompleted:
    request_id: int
    outcome: Union[GeneratedQuery, ErrorOutcome]


@dataclass(frozen=True)
class ExecutionCompleted:
    request_id: int
    outcome: ExecutionOutcome


@dataclass(frozen=True)
class HistoryCompleted:
    request_id: int
    outcome: Union[Tuple[HistoryEntry, ...], ErrorOutcome]


Action = Union[
    Generate,
    EditDraft,
    EditQuery,
    Run,
    RefreshHistory,
    GenerationCompleted,
    ExecutionCompleted,
    HistoryCompleted,
]


# =============================================================================
# Effects
# =============================================================================


@dataclass(frozen=True)
class RequestGeneration:
    request_id: int
    prompt: str


@dataclass(frozen=True)
class RequestExecution:
    request_id: int
    query: str
    origin_id: Optional[int]


@dataclass(frozen=True)
class RequestHistory:
    request_id: int


Effect = Union[RequestGeneration, RequestExecution, RequestHistory]
