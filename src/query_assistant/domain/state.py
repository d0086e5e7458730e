"""
Workflow state for the query assistant client.

WorkflowState is an immutable snapshot; the reducer in
services/workflow.py produces a new snapshot for every action.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from .base_enums import RequestChannel, WorkflowStatus
from .outcomes import ErrorOutcome, ResultSet
from .responses import HistoryEntry


@dataclass(frozen=True)
class GeneratedQuery:
    """
    SQL text shown to the user plus its link to the originating history record.

    origin_id is only ever set together with text from a generation response;
    any hand edit produces a query with origin_id None.
    """

    text: str = ""
    origin_id: Optional[int] = None

    def edited(self, new_text: str) -> "GeneratedQuery":
        """Return the query after a hand edit; the origin link is always dropped."""
        return GeneratedQuery(text=new_text, origin_id=None)


@dataclass(frozen=True)
class RequestSequence:
    """
    Per-channel request counters.

    Every issued request takes the next number of its channel; a completion
    carrying an older number is stale and is discarded.
    """

    generation: int = 0
    execution: int = 0
    history: int = 0

    def current(self, channel: RequestChannel) -> int:
        return getattr(self, channel.value)

    def advance(self, channel: RequestChannel) -> "RequestSequence":
        return replace(self, **{channel.value: self.current(channel) + 1})


@dataclass(frozen=True)
class WorkflowState:
    """Everything the presentation layer needs to render the workflow."""

    status: WorkflowStatus = WorkflowStatus.IDLE

    # Input
    draft: str = ""
    query: GeneratedQuery = field(default_factory=GeneratedQuery)

    # Busy flags
    is_generating: bool = False
    is_running: bool = False
    history_loading: bool = False

    # Generation
    generation_error: Optional[ErrorOutcome] = None

    # Execution
    execution_error: Optional[ErrorOutcome] = None
    query_result: Optional[ResultSet] = None
    query_message: Optional[str] = None

    # History
    history: Tuple[HistoryEntry, ...] = ()
    history_error: Optional[ErrorOutcome] = None

    sequence: RequestSequence = field(default_factory=RequestSequence)


def ready_status(query: GeneratedQuery) -> WorkflowStatus:
    """Status to settle in once no request is in flight."""
    return WorkflowStatus.GENERATED_READY if query.text.strip() else WorkflowStatus.IDLE
