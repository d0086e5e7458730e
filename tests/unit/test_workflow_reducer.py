"""
Unit tests for the workflow reducer.

The reducer is pure: every test builds a state, applies one action and
inspects the resulting state and effects.
"""

from dataclasses import replace

import pytest

from query_assistant.domain.actions import (
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
from query_assistant.domain.base_enums import ErrorKind, WorkflowStatus
from query_assistant.domain.outcomes import ErrorOutcome, ExecutionSuccess, ResultSet
from query_assistant.domain.responses import HistoryEntry
from query_assistant.domain.state import GeneratedQuery, RequestSequence, WorkflowState
from query_assistant.services.workflow import reduce

ENTRY = HistoryEntry(id=1, natural="all users", sql="SELECT * FROM users", executed=False, created_at="t")


def _ready(text="SELECT * FROM orders", origin_id=7, **overrides):
    state = WorkflowState(
        status=WorkflowStatus.GENERATED_READY,
        draft="show orders",
        query=GeneratedQuery(text=text, origin_id=origin_id),
    )
    return replace(state, **overrides)


def _generating():
    return reduce(WorkflowState(draft="show orders"), Generate()).state


def _running():
    return reduce(_ready(), Run()).state


class TestGenerate:

    @pytest.mark.parametrize("draft", ["", "   "])
    def test_blank_prompt(self, draft):
        transition = reduce(WorkflowState(draft=draft), Generate())

        assert transition.effects == ()
        assert transition.state.generation_error.kind == ErrorKind.VALIDATION
        assert transition.state.status == WorkflowStatus.IDLE

    def test_blank_prompt_keeps_execution_context(self):
        state = _ready(draft="  ", query_message="Returned 1 row.", query_result=ResultSet(rows=({"a": 1},)))

        transition = reduce(state, Generate())

        assert transition.state.query_message == "Returned 1 row."
        assert transition.state.query_result is not None

    def test_issues_request(self):
        transition = reduce(WorkflowState(draft="show orders"), Generate())

        assert transition.state.status == WorkflowStatus.GENERATING
        assert transition.state.is_generating
        assert transition.effects == (RequestGeneration(request_id=1, prompt="show orders"),)

    def test_prompt_replaces_draft(self):
        transition = reduce(WorkflowState(draft="old"), Generate(prompt="new"))

        assert transition.state.draft == "new"
        assert transition.effects[0].prompt == "new"

    def test_clears_execution_context(self):
        state = _ready(
            query_result=ResultSet(rows=()),
            query_message="Query executed successfully. No rows returned.",
            execution_error=ErrorOutcome(ErrorKind.EXECUTION, "boom"),
        )

        generating = reduce(state, Generate()).state

        assert generating.query_result is None
        assert generating.query_message is None
        assert generating.execution_error is None

    def test_keeps_query_while_generating(self):
        generating = reduce(_ready(), Generate()).state
        assert generating.query == GeneratedQuery(text="SELECT * FROM orders", origin_id=7)

    def test_ignored_while_generating(self):
        state = _generating()

        transition = reduce(state, Generate())

        assert transition.effects == ()
        assert transition.state.sequence == state.sequence

    def test_supersedes_running_execution(self):
        state = _running()

        generating = reduce(state, Generate()).state

        assert not generating.is_running
        assert generating.sequence.execution == state.sequence.execution + 1


class TestGenerationCompleted:

    def test_success_sets_query_and_refreshes_history(self):
        state = _generating()
        query = GeneratedQuery(text="SELECT * FROM orders", origin_id=7)

        transition = reduce(state, GenerationCompleted(request_id=1, outcome=query))

        assert transition.state.status == WorkflowStatus.GENERATED_READY
        assert transition.state.query == query
        assert not transition.state.is_generating
        assert transition.state.history_loading
        assert transition.effects == (RequestHistory(request_id=1),)

    def test_failure_keeps_previous_query(self):
        state = reduce(_ready(), Generate()).state
        error = ErrorOutcome(ErrorKind.GENERATION, "AI Error")

        transition = reduce(state, GenerationCompleted(request_id=1, outcome=error))

        assert transition.state.status == WorkflowStatus.GENERATION_FAILED
        assert transition.state.generation_error == error
        assert transition.state.query == GeneratedQuery(text="SELECT * FROM orders", origin_id=7)
        assert transition.effects == ()

    def test_failure_keeps_history(self):
        state = replace(_generating(), history=(ENTRY,))

        transition = reduce(state, GenerationCompleted(request_id=1, outcome=ErrorOutcome(ErrorKind.NETWORK, "x")))

        assert transition.state.history == (ENTRY,)

    def test_stale_result_discarded(self):
        state = replace(_generating(), sequence=RequestSequence(generation=2))

        transition = reduce(state, GenerationCompleted(request_id=1, outcome=GeneratedQuery("SELECT 1", 1)))

        assert transition.state.query == GeneratedQuery()
        assert transition.state.is_generating
        # the server log changed anyway
        assert transition.effects == (RequestHistory(request_id=1),)


class TestEditQuery:

    @pytest.mark.parametrize("text", ["SELECT 2", "SELECT * FROM orders", ""])
    def test_always_clears_origin(self, text):
        transition = reduce(_ready(), EditQuery(text=text))

        assert transition.state.query == GeneratedQuery(text=text, origin_id=None)
        assert transition.effects == ()

    def test_ready_status_follows_text(self):
        assert reduce(WorkflowState(), EditQuery("SELECT 1")).state.status == WorkflowStatus.GENERATED_READY
        assert reduce(_ready(), EditQuery("  ")).state.status == WorkflowStatus.IDLE

    def test_keeps_in_flight_status(self):
        assert reduce(_running(), EditQuery("SELECT 2")).state.status == WorkflowStatus.EXECUTING

    def test_edit_draft(self):
        assert reduce(WorkflowState(), EditDraft("abc")).state.draft == "abc"


class TestRun:

    def test_blank_query(self):
        transition = reduce(_ready(text="   "), Run())

        assert transition.effects == ()
        assert transition.state.execution_error.kind == ErrorKind.VALIDATION

    def test_issues_request_with_origin(self):
        transition = reduce(_ready(), Run())

        assert transition.state.status == WorkflowStatus.EXECUTING
        assert transition.state.is_running
        assert transition.effects == (
            RequestExecution(request_id=1, query="SELECT * FROM orders", origin_id=7),
        )

    def test_edited_query_runs_unlinked(self):
        state = reduce(_ready(), EditQuery("SELECT 1")).state

        transition = reduce(state, Run())

        assert transition.effects[0].origin_id is None

    def test_clears_previous_result(self):
        state = _ready(query_result=ResultSet(rows=()), query_message="old")

        running = reduce(state, Run()).state

        assert running.query_result is None
        assert running.query_message is None

    def test_ignored_while_running(self):
        assert reduce(_running(), Run()).effects == ()

    def test_ignored_while_generating(self):
        state = reduce(_ready(), Generate()).state

        transition = reduce(state, Run())

        assert transition.effects == ()
        assert transition.state is state

    def test_generation_settles_ready_after_ignored_run(self):
        state = reduce(_ready(), Generate()).state
        state = reduce(state, Run()).state
        query = GeneratedQuery(text="SELECT 2", origin_id=8)

        settled = reduce(state, GenerationCompleted(request_id=1, outcome=query)).state

        assert settled.status == WorkflowStatus.GENERATED_READY
        assert not settled.is_running
        assert reduce(settled, Run()).effects == (
            RequestExecution(request_id=2, query="SELECT 2", origin_id=8),
        )


class TestExecutionCompleted:

    def test_success(self):
        result = ResultSet(rows=({"id": 1},))
        outcome = ExecutionSuccess(result=result, message="Returned 1 row.")

        transition = reduce(_running(), ExecutionCompleted(request_id=1, outcome=outcome))

        assert transition.state.status == WorkflowStatus.EXECUTION_SUCCEEDED
        assert transition.state.query_result == result
        assert transition.state.query_message == "Returned 1 row."
        assert transition.state.query.origin_id == 7
        assert transition.effects == (RequestHistory(request_id=1),)

    def test_failure_keeps_query_and_history(self):
        state = replace(_running(), history=(ENTRY,))
        error = ErrorOutcome(ErrorKind.SAFETY_BLOCKED, "blocked")

        transition = reduce(state, ExecutionCompleted(request_id=1, outcome=error))

        assert transition.state.status == WorkflowStatus.EXECUTION_FAILED
        assert transition.state.execution_error == error
        assert transition.state.query == GeneratedQuery(text="SELECT * FROM orders", origin_id=7)
        assert transition.state.history == (ENTRY,)
        assert not transition.state.is_running
        assert transition.effects == ()

    def test_result_superseded_by_generation(self):
        state = reduce(_running(), Generate()).state
        outcome = ExecutionSuccess(result=ResultSet(rows=()), message="done")

        transition = reduce(state, ExecutionCompleted(request_id=1, outcome=outcome))

        assert transition.state.query_result is None
        assert transition.state.query_message is None
        assert len(transition.effects) == 1

    def test_stale_failure_ignored(self):
        state = reduce(_running(), Generate()).state

        transition = reduce(state, ExecutionCompleted(request_id=1, outcome=ErrorOutcome(ErrorKind.EXECUTION, "x")))

        assert transition.state is state
        assert transition.effects == ()


class TestHistory:

    def test_refresh_clears_error(self):
        state = WorkflowState(history_error=ErrorOutcome(ErrorKind.HISTORY_LOAD, "down"))

        transition = reduce(state, RefreshHistory())

        assert transition.state.history_error is None
        assert transition.state.history_loading
        assert transition.effects == (RequestHistory(request_id=1),)

    def test_manual_refresh_ignored_while_loading(self):
        state = reduce(WorkflowState(), RefreshHistory()).state
        assert reduce(state, RefreshHistory()).effects == ()

    def test_success_replaces_list(self):
        state = replace(reduce(WorkflowState(), RefreshHistory()).state, history=(ENTRY,))
        newer = HistoryEntry(id=2, natural="n", sql="s", executed=True, created_at="t")

        transition = reduce(state, HistoryCompleted(request_id=1, outcome=(newer,)))

        assert transition.state.history == (newer,)
        assert not transition.state.history_loading

    def test_failure_keeps_list(self):
        state = replace(reduce(WorkflowState(), RefreshHistory()).state, history=(ENTRY,))
        error = ErrorOutcome(ErrorKind.HISTORY_LOAD, "down")

        transition = reduce(state, HistoryCompleted(request_id=1, outcome=error))

        assert transition.state.history == (ENTRY,)
        assert transition.state.history_error == error
        assert not transition.state.history_loading

    def test_stale_history_discarded(self):
        state = replace(WorkflowState(history_loading=True), sequence=RequestSequence(history=2))

        transition = reduce(state, HistoryCompleted(request_id=1, outcome=(ENTRY,)))

        assert transition.state.history == ()
        assert transition.state.history_loading


def test_unknown_action():
    with pytest.raises(TypeError):
        reduce(WorkflowState(), object())
