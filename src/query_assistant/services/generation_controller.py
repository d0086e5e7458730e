"""
Generation controller.

Turns a natural language prompt into a GeneratedQuery by calling
POST /nl2sql. Failures are converted into ErrorOutcome values here and are
never raised to the caller.
"""

from typing import Union

import pydantic

from query_assistant.domain.errors import (
    GenerationError,
    NetworkError,
    QueryAssistantException,
    ValidationError,
)
from query_assistant.domain.outcomes import ErrorOutcome
from query_assistant.domain.responses import GenerateSQLResponse
from query_assistant.domain.state import GeneratedQuery
from query_assistant.infrastructure.backend_client import BackendClient, decode_json, failure_message
from query_assistant.utils.logging import get_module_logger
from query_assistant.utils.tracing import current_trace_id

logger = get_module_logger()

PROMPT_REQUIRED_MESSAGE = "Please describe the data you want to retrieve."

GenerationOutcome = Union[GeneratedQuery, ErrorOutcome]


def validate_prompt(prompt: str) -> None:
    """
    Raises:
        ValidationError: If the prompt is empty or whitespace-only
    """
    if not prompt.strip():
        raise ValidationError(PROMPT_REQUIRED_MESSAGE)


class GenerationController:
    """
    Submits prompts to the generation endpoint.

    busy is advisory: it reports whether a call is in flight but does not
    prevent a second one.
    """

    def __init__(self, client: BackendClient):
        self.client = client
        self._in_flight = 0

    @property
    def busy(self) -> bool:
        return self._in_flight > 0

    async def generate(self, prompt: str) -> GenerationOutcome:
        """
        Generate SQL for a prompt.

        Args:
            prompt: Natural language request, sent as typed

        Returns:
            GeneratedQuery with the SQL text and the ID of the history record
            created for it, or an ErrorOutcome (VALIDATION, GENERATION or NETWORK)
        """
        trace_id = current_trace_id()

        try:
            validate_prompt(prompt)

            self._in_flight += 1
            try:
                query = await self._request(prompt)
            finally:
                self._in_flight -= 1

        except QueryAssistantException as e:
            logger.warning("SQL generation failed", **e.to_dict(), trace_id=trace_id)
            return e.to_outcome()

        logger.info(
            "SQL generated",
            history_id=query.origin_id,
            sql_length=len(query.text),
            trace_id=trace_id
        )
        return query

    async def _request(self, prompt: str) -> GeneratedQuery:
        logger.debug("Requesting SQL generation", prompt_length=len(prompt), trace_id=current_trace_id())

        response = await self.client.generate_sql(prompt)
        if not response.is_success:
            raise GenerationError(
                failure_message(response, "Generation failed"),
                http_status=response.status_code
            )

        payload = decode_json(response)
        try:
            data = GenerateSQLResponse.model_validate(payload)
        except pydantic.ValidationError as e:
            raise NetworkError(
                "Backend returned an unexpected generation response",
                details={"errors": e.error_count()},
                http_status=response.status_code
            ) from e

        return GeneratedQuery(text=data.generated_sql, origin_id=data.history_id)
