"""Unit tests for GenerationController."""

import asyncio

import httpx
import pytest

from query_assistant.domain.base_enums import ErrorKind
from query_assistant.domain.outcomes import ErrorOutcome
from query_assistant.domain.state import GeneratedQuery
from query_assistant.services.generation_controller import (
    PROMPT_REQUIRED_MESSAGE,
    GenerationController,
)


@pytest.fixture
def controller(client):
    return GenerationController(client)


class TestGenerationController:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("prompt", ["", "   ", "\n\t "])
    async def test_blank_prompt_makes_no_request(self, controller, backend, prompt):
        outcome = await controller.generate(prompt)

        assert outcome == ErrorOutcome(ErrorKind.VALIDATION, PROMPT_REQUIRED_MESSAGE)
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_success(self, controller, backend):
        backend.respond("POST", "/nl2sql", json_body={"generated_sql": "SELECT * FROM orders", "history_id": 7})

        outcome = await controller.generate("show orders")

        assert outcome == GeneratedQuery(text="SELECT * FROM orders", origin_id=7)
        assert backend.body(backend.calls("/nl2sql")[0]) == {"prompt": "show orders"}

    @pytest.mark.asyncio
    async def test_prompt_sent_as_typed(self, controller, backend):
        backend.respond("POST", "/nl2sql", json_body={"generated_sql": "SELECT 1", "history_id": 1})

        await controller.generate("  padded prompt  ")

        assert backend.body(backend.calls("/nl2sql")[0]) == {"prompt": "  padded prompt  "}

    @pytest.mark.asyncio
    async def test_failure_uses_body(self, controller, backend):
        backend.respond("POST", "/nl2sql", status_code=500, text="AI Error: model unavailable")

        outcome = await controller.generate("show orders")

        assert outcome == ErrorOutcome(ErrorKind.GENERATION, "AI Error: model unavailable")

    @pytest.mark.asyncio
    async def test_failure_with_empty_body_uses_status(self, controller, backend):
        backend.respond("POST", "/nl2sql", status_code=502, text="")

        outcome = await controller.generate("show orders")

        assert outcome == ErrorOutcome(ErrorKind.GENERATION, "Generation failed (502)")

    @pytest.mark.asyncio
    async def test_malformed_success_body(self, controller, backend):
        backend.respond("POST", "/nl2sql", json_body={"sql": "SELECT 1"})

        outcome = await controller.generate("show orders")

        assert isinstance(outcome, ErrorOutcome)
        assert outcome.kind == ErrorKind.NETWORK

    @pytest.mark.asyncio
    async def test_non_json_success_body(self, controller, backend):
        backend.respond("POST", "/nl2sql", text="SELECT 1")

        outcome = await controller.generate("show orders")

        assert isinstance(outcome, ErrorOutcome)
        assert outcome.kind == ErrorKind.NETWORK

    @pytest.mark.asyncio
    async def test_transport_failure(self, controller, backend):
        def refuse(request):
            raise httpx.ConnectError("Connection refused", request=request)

        backend.route("POST", "/nl2sql", refuse)

        outcome = await controller.generate("show orders")

        assert outcome == ErrorOutcome(ErrorKind.NETWORK, "Connection refused")

    @pytest.mark.asyncio
    async def test_busy_while_in_flight(self, controller, backend):
        release = asyncio.Event()

        async def slow(request):
            await release.wait()
            return httpx.Response(200, json={"generated_sql": "SELECT 1", "history_id": 1})

        backend.route("POST", "/nl2sql", slow)

        assert not controller.busy
        task = asyncio.create_task(controller.generate("show orders"))
        while not backend.calls("/nl2sql"):
            await asyncio.sleep(0)
        assert controller.busy

        release.set()
        await task
        assert not controller.busy

    @pytest.mark.asyncio
    async def test_deeply_nested_success_body(self, controller, backend, deeply_nested_body):
        backend.respond("POST", "/nl2sql", text=deeply_nested_body)

        outcome = await controller.generate("show orders")

        assert isinstance(outcome, ErrorOutcome)
        assert outcome.kind == ErrorKind.NETWORK
        assert not controller.busy
