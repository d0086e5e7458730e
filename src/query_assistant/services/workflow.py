"""
Workflow coordination for generate → edit → execute.

The workflow is split in two:
- reduce(): a pure function from (state, action) to a new state plus the
  network effects to perform. All state transitions live here, including
  every write of GeneratedQuery.origin_id.
- WorkflowCoordinator: holds the current state, runs effects through the
  controllers and feeds their outcomes back into reduce().

Status machine:
    IDLE -> GENERATING -> GENERATION_FAILED | GENERATED_READY
    GENERATED_READY -> EditQuery (self-loop, origin link dropped)
    GENERATED_READY -> EXECUTING -> EXECUTION_FAILED | EXECUTION_SUCCEEDED
Failed/succeeded statuses accept the same actions as IDLE/GENERATED_READY.
Run is ignored while GENERATING, so at most one channel besides history is
ever busy.

Every request takes a fresh number on its channel (see RequestSequence) and
only the completion of the most recently issued request is applied. A new
generation also supersedes an in-flight execution. Successful generations
and executions always trigger a history refresh, even when their own result
is stale, because the server-side log changed either way.
"""

from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Tuple

from query_assistant.domain.actions import (
    Action,
    EditDraft,
    EditQuery,
    Effect,
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
from query_assistant.domain.base_enums import ErrorKind, RequestChannel, WorkflowStatus
from query_assistant.domain.errors import ValidationError
from query_assistant.domain.outcomes import ErrorOutcome
from query_assistant.domain.state import WorkflowState, ready_status
from query_assistant.infrastructure.backend_client import BackendClient
from query_assistant.services.execution_controller import ExecutionController, validate_query
from query_assistant.services.generation_controller import GenerationController, validate_prompt
from query_assistant.services.history_synchronizer import HistorySynchronizer
from query_assistant.utils.logging import get_module_logger
from query_assistant.utils.tracing import current_trace_id, start_trace

logger = get_module_logger()

_COMPLETIONS = (GenerationCompleted, ExecutionCompleted, HistoryCompleted)


@dataclass(frozen=True)
class Transition:
    state: WorkflowState
    effects: Tuple[Effect, ...] = ()


# =============================================================================
# REDUCER
# =============================================================================


def reduce(state: WorkflowState, action: Action) -> Transition:
    """Apply one action to the workflow state."""
    handler = _HANDLERS.get(type(action))
    if handler is None:
        raise TypeError(f"Unsupported workflow action: {type(action).__name__}")
    return handler(state, action)


def _on_edit_draft(state: WorkflowState, action: EditDraft) -> Transition:
    return Transition(replace(state, draft=action.text))


def _on_generate(state: WorkflowState, action: Generate) -> Transition:
    if action.prompt is not None:
        state = replace(state, draft=action.prompt)

    if state.is_generating:
        return Transition(state)

    try:
        validate_prompt(state.draft)
    except ValidationError as e:
        return Transition(replace(state, generation_error=e.to_outcome()))

    sequence = state.sequence.advance(RequestChannel.GENERATION).advance(RequestChannel.EXECUTION)
    generating = replace(
        state,
        status=WorkflowStatus.GENERATING,
        is_generating=True,
        is_running=False,
        generation_error=None,
        execution_error=None,
        query_result=None,
        query_message=None,
        sequence=sequence,
    )
    effect = RequestGeneration(request_id=sequence.generation, prompt=state.draft)
    return Transition(generating, (effect,))


def _on_generation_completed(state: WorkflowState, action: GenerationCompleted) -> Transition:
    outcome = action.outcome
    succeeded = not isinstance(outcome, ErrorOutcome)

    if action.request_id != state.sequence.generation:
        logger.info("Discarding stale generation result", request_id=action.request_id)
        return _with_history_refresh(state) if succeeded else Transition(state)

    if not succeeded:
        return Transition(replace(
            state,
            status=WorkflowStatus.GENERATION_FAILED,
            is_generating=False,
            generation_error=outcome,
        ))

    return _with_history_refresh(replace(
        state,
        status=WorkflowStatus.GENERATED_READY,
        is_generating=False,
        query=outcome,
    ))


def _on_edit_query(state: WorkflowState, action: EditQuery) -> Transition:
    query = state.query.edited(action.text)
    status = state.status
    if status not in (WorkflowStatus.GENERATING, WorkflowStatus.EXECUTING):
        status = ready_status(query)
    return Transition(replace(state, query=query, status=status))


def _on_run(state: WorkflowState, action: Run) -> Transition:
    # The pending generation will replace the query
    if state.is_running or state.is_generating:
        return Transition(state)

    try:
        validate_query(state.query.text)
    except ValidationError as e:
        return Transition(replace(state, execution_error=e.to_outcome()))

    sequence = state.sequence.advance(RequestChannel.EXECUTION)
    running = replace(
        state,
        status=WorkflowStatus.EXECUTING,
        is_running=True,
        execution_error=None,
        query_result=None,
        query_message=None,
        sequence=sequence,
    )
    effect = RequestExecution(
        request_id=sequence.execution,
        query=state.query.text,
        origin_id=state.query.origin_id,
    )
    return Transition(running, (effect,))


def _on_execution_completed(state: WorkflowState, action: ExecutionCompleted) -> Transition:
    outcome = action.outcome
    succeeded = not isinstance(outcome, ErrorOutcome)

    if action.request_id != state.sequence.execution:
        logger.info("Discarding stale execution result", request_id=action.request_id)
        return _with_history_refresh(state) if succeeded else Transition(state)

    if not succeeded:
        return Transition(replace(
            state,
            status=WorkflowStatus.EXECUTION_FAILED,
            is_running=False,
            execution_error=outcome,
        ))

    return _with_history_refresh(replace(
        state,
        status=WorkflowStatus.EXECUTION_SUCCEEDED,
        is_running=False,
        query_result=outcome.result,
        query_message=outcome.message,
    ))


def _on_refresh_history(state: WorkflowState, action: RefreshHistory) -> Transition:
    if state.history_loading:
        return Transition(state)
    return _with_history_refresh(state)


def _on_history_completed(state: WorkflowState, action: HistoryCompleted) -> Transition:
    if action.request_id != state.sequence.history:
        logger.info("Discarding stale history result", request_id=action.request_id)
        return Transition(state)

    outcome = action.outcome
    if isinstance(outcome, ErrorOutcome):
        # Keep the previously loaded list
        return Transition(replace(state, history_loading=False, history_error=outcome))

    return Transition(replace(state, history_loading=False, history=outcome))


def _with_history_refresh(state: WorkflowState) -> Transition:
    sequence = state.sequence.advance(RequestChannel.HISTORY)
    loading = replace(state, history_loading=True, history_error=None, sequence=sequence)
    return Transition(loading, (RequestHistory(request_id=sequence.history),))


_HANDLERS = {
    EditDraft: _on_edit_draft,
    Generate: _on_generate,
    GenerationCompleted: _on_generation_completed,
    EditQuery: _on_edit_query,
    Run: _on_run,
    ExecutionCompleted: _on_execution_completed,
    RefreshHistory: _on_refresh_history,
    HistoryCompleted: _on_history_completed,
}


# =============================================================================
# COORDINATOR
# =============================================================================


StateListener = Callable[[WorkflowState], None]


class WorkflowCoordinator:
    """
    Runs the workflow against the backend.

    Coordinates:
    1. GenerationController - prompt -> GeneratedQuery
    2. ExecutionController - query -> rows + summary
    3. HistorySynchronizer - history log

    dispatch() returns once the action and every follow-up effect it caused
    (including the history refresh after a success) have settled. The state
    is updated, and listeners notified, at each step along the way.

    Usage:
        coordinator = WorkflowCoordinator.from_client(client)
        await coordinator.start()
        await coordinator.generate("Show me the 5 most recent orders")
        coordinator.edit_query("SELECT * FROM orders LIMIT 5")
        await coordinator.run()
    """

    def __init__(
        self,
        generation: GenerationController,
        execution: ExecutionController,
        history: HistorySynchronizer,
        state: Optional[WorkflowState] = None,
    ):
        self.generation = generation
        self.execution = execution
        self.history = history
        self._state = state or WorkflowState()
        self._listeners: List[StateListener] = []

    @classmethod
    def from_client(cls, client: BackendClient) -> "WorkflowCoordinator":
        """Build a coordinator whose controllers share one backend client."""
        return cls(
            generation=GenerationController(client),
            execution=ExecutionController(client),
            history=HistorySynchronizer(client),
        )

    @property
    def state(self) -> WorkflowState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a state listener; returns a function that unregisters it."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    async def dispatch(self, action: Action) -> WorkflowState:
        """Apply an action and run the effects it produces."""
        if not isinstance(action, _COMPLETIONS):
            start_trace()

        transition = self._apply(action)
        for effect in transition.effects:
            await self._run_effect(effect)
        return self._state

    # -------------------------------------------------------------------------
    # User intents
    # -------------------------------------------------------------------------

    async def start(self) -> WorkflowState:
        """Load the history log for the first time."""
        return await self.dispatch(RefreshHistory())

    async def generate(self, prompt: Optional[str] = None) -> WorkflowState:
        return await self.dispatch(Generate(prompt=prompt))

    def edit_query(self, text: str) -> WorkflowState:
        """Replace the SQL text by hand; the origin link is always cleared."""
        self._apply(EditQuery(text=text))
        return self._state

    async def run(self) -> WorkflowState:
        return await self.dispatch(Run())

    async def refresh_history(self) -> WorkflowState:
        return await self.dispatch(RefreshHistory())

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _apply(self, action: Action) -> Transition:
        previous = self._state
        transition = reduce(previous, action)
        self._state = transition.state

        if transition.state.status != previous.status:
            logger.info(
                "Workflow status changed",
                action=type(action).__name__,
                previous=previous.status.value,
                status=transition.state.status.value,
                trace_id=current_trace_id()
            )

        if transition.state is not previous:
            for listener in list(self._listeners):
                listener(self._state)
        return transition

    async def _run_effect(self, effect: Effect) -> None:
        if isinstance(effect, RequestGeneration):
            completion = GenerationCompleted
            call = self.generation.generate(effect.prompt)
        elif isinstance(effect, RequestExecution):
            completion = ExecutionCompleted
            call = self.execution.run(effect.query, effect.origin_id)
        elif isinstance(effect, RequestHistory):
            completion = HistoryCompleted
            call = self.history.refresh()
        else:
            raise TypeError(f"Unsupported workflow effect: {type(effect).__name__}")

        try:
            outcome = await call
        except Exception as e:
            # Every request must complete or its busy flag never clears
            logger.error(
                "Workflow request failed unexpectedly",
                effect=type(effect).__name__,
                error=str(e),
                trace_id=current_trace_id(),
                exc_info=True
            )
            outcome = ErrorOutcome(ErrorKind.NETWORK, f"Unexpected error: {type(e).__name__}")

        await self.dispatch(completion(request_id=effect.request_id, outcome=outcome))
