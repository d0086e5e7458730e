"""
HTTP client for the query assistant backend.

This module provides a minimal async client for the three backend endpoints
(generation, execution, history) plus a ping health check.
"""

from typing import Any, Dict, Optional
import httpx

from ..config import BackendConfig
from ..utils.logging import get_module_logger
from ..utils.tracing import current_trace_id
from ..domain.errors import NetworkError
from ..domain.requests import ExecuteSQLRequest, GenerateSQLRequest


logger = get_module_logger()


class BackendClient:
    """
    Minimal async client for the query assistant backend.

    This is a thin infrastructure layer: it builds request bodies, sends them
    and hands back the raw httpx.Response. Classifying status codes and
    parsing bodies is left to the controllers, which know what each endpoint
    means. Transport failures are raised as NetworkError.

    Usage:
        client = BackendClient(config)
        await client.connect()

        response = await client.generate_sql("Show me the 5 most recent orders")
        response = await client.execute_sql("SELECT 1", history_id=7)
        response = await client.fetch_history()

        await client.close()
    """

    def __init__(self, config: BackendConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize backend client with configuration.

        Args:
            config: Backend configuration
            transport: Optional httpx transport (e.g. httpx.MockTransport in tests)
        """
        self.config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._is_connected = False

        self.base_url = config.base_url.rstrip("/")

        logger.info(
            "BackendClient initialized",
            base_url=self.base_url,
            request_timeout_seconds=config.request_timeout_seconds
        )

    async def connect(self) -> None:
        """
        Initialize the HTTP client.

        No request is made here; use health_check() to probe the backend.
        """
        if self._is_connected:
            logger.warning("Backend client already connected")
            return

        trace_id = current_trace_id()
        logger.info("Initializing backend client", trace_id=trace_id)

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Accept": "application/json"},
            timeout=httpx.Timeout(
                self.config.request_timeout_seconds,
                connect=self.config.connect_timeout_seconds
            ),
            limits=httpx.Limits(
                max_connections=self.config.max_connections,
                max_keepalive_connections=self.config.max_keepalive_connections
            ),
            transport=self._transport
        )
        self._is_connected = True

        logger.info("Backend client initialized successfully", trace_id=trace_id)

    async def close(self) -> None:
        """Close HTTP client and release resources."""
        trace_id = current_trace_id()
        logger.info("Closing backend client", trace_id=trace_id)

        if self._client:
            await self._client.aclose()
            logger.info("Backend client closed", trace_id=trace_id)

        self._is_connected = False
        self._client = None

    def is_connected(self) -> bool:
        """Check if backend client is connected."""
        return self._is_connected and self._client is not None

    async def health_check(self) -> Dict[str, Any]:
        """
        Ping the backend.

        Returns:
            Dictionary with status and connection details

        Example:
            {
                "status": "healthy",
                "connected": True,
                "base_url": "http://127.0.0.1:8787"
            }
        """
        trace_id = current_trace_id()

        if not self.is_connected():
            return {
                "status": "unhealthy",
                "connected": False,
                "error": "Backend client not connected"
            }

        try:
            response = await self._send("GET", self.config.ping_path)
        except NetworkError as e:
            return {
                "status": "unhealthy",
                "connected": True,
                "error": e.message
            }

        if not response.is_success:
            return {
                "status": "unhealthy",
                "connected": True,
                "error": f"Unexpected status code: {response.status_code}"
            }

        logger.info("Backend health check passed", trace_id=trace_id)

        return {
            "status": "healthy",
            "connected": True,
            "base_url": self.base_url
        }

    async def fetch_history(self) -> httpx.Response:
        """GET the history log."""
        return await self._send("GET", self.config.history_path)

    async def generate_sql(self, prompt: str) -> httpx.Response:
        """POST a natural language prompt for SQL generation."""
        body = GenerateSQLRequest(prompt=prompt)
        return await self._send("POST", self.config.generate_path, json=body.model_dump())

    async def execute_sql(self, sql: str, history_id: Optional[int] = None) -> httpx.Response:
        """POST SQL for execution, linked to its history record when history_id is set."""
        body = ExecuteSQLRequest(history_id=history_id, sql_to_run=sql)
        return await self._send("POST", self.config.execute_path, json=body.model_dump())

    async def _send(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> httpx.Response:
        """
        Send a request and return the response whatever its status.

        Raises:
            NetworkError: If the client is not connected or the request fails in transport
        """
        if not self.is_connected() or not self._client:
            raise NetworkError("Backend client is not connected")

        trace_id = current_trace_id()
        logger.debug("Sending backend request", method=method, path=path, trace_id=trace_id)

        try:
            response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            error_msg = str(e) or f"Request to {path} failed"
            logger.error(
                "Backend request failed",
                method=method,
                path=path,
                error=error_msg,
                error_type=type(e).__name__,
                trace_id=trace_id
            )
            raise NetworkError(error_msg, details={"path": path}) from e

        logger.info(
            "Backend response received",
            method=method,
            path=path,
            status_code=response.status_code,
            trace_id=trace_id
        )
        return response


def failure_message(response: httpx.Response, label: str) -> str:
    """Response body text, or "<label> (<status>)" when the body is empty."""
    return response.text or f"{label} ({response.status_code})"


def decode_json(response: httpx.Response) -> Any:
    """
    Decode a success body as JSON.

    Raises:
        NetworkError: If the body is not valid JSON or nests too deeply to decode
    """
    try:
        return response.json()
    except (ValueError, RecursionError) as e:
        raise NetworkError(
            f"Backend returned a malformed response: {e}",
            http_status=response.status_code
        ) from e
