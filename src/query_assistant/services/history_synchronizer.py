"""
History synchronizer.

Fetches the full history log from GET /history and normalizes it into
HistoryEntry values. The caller replaces its whole local list with the
result; nothing is merged.
"""

from typing import Any, Tuple, Union

import pydantic

from query_assistant.domain.errors import HistoryLoadError, NetworkError, QueryAssistantException
from query_assistant.domain.outcomes import ErrorOutcome
from query_assistant.domain.responses import HistoryEntry, HistoryRecord
from query_assistant.infrastructure.backend_client import BackendClient, decode_json, failure_message
from query_assistant.utils.logging import get_module_logger
from query_assistant.utils.tracing import current_trace_id

logger = get_module_logger()

HistoryOutcome = Union[Tuple[HistoryEntry, ...], ErrorOutcome]


def normalize_history(payload: Any) -> Tuple[HistoryEntry, ...]:
    """
    Convert a /history success body into HistoryEntry values, keeping server order.

    Raises:
        NetworkError: If the body is not a list of history records
    """
    if not isinstance(payload, list):
        raise NetworkError(
            "Backend returned an unexpected history response",
            details={"payload_type": type(payload).__name__}
        )

    try:
        return tuple(HistoryRecord.model_validate(item).to_entry() for item in payload)
    except pydantic.ValidationError as e:
        raise NetworkError(
            "Backend returned an unexpected history response",
            details={"errors": e.error_count()}
        ) from e


class HistorySynchronizer:
    """
    Loads the history log.

    loading is true while a fetch is in flight.
    """

    def __init__(self, client: BackendClient):
        self.client = client
        self._in_flight = 0

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    async def refresh(self) -> HistoryOutcome:
        """
        Fetch and normalize the full history log.

        Returns:
            Tuple of HistoryEntry in server order, or an ErrorOutcome
            (HISTORY_LOAD or NETWORK)
        """
        trace_id = current_trace_id()

        self._in_flight += 1
        try:
            response = await self.client.fetch_history()
            if not response.is_success:
                raise HistoryLoadError(
                    failure_message(response, "History request failed"),
                    http_status=response.status_code
                )
            entries = normalize_history(decode_json(response))

        except QueryAssistantException as e:
            logger.warning("History refresh failed", **e.to_dict(), trace_id=trace_id)
            return e.to_outcome()

        finally:
            self._in_flight -= 1

        logger.info("History refreshed", entries=len(entries), trace_id=trace_id)
        return entries
