"""
Configuration module for the query assistant client.

This module defines all configuration classes using Pydantic BaseModel and BaseSettings.
Configuration is loaded from environment variables with nested delimiter "__".

Example .env:
    BACKEND__BASE_URL=https://cf-ai-query-assistant.example.workers.dev
    BACKEND__REQUEST_TIMEOUT_SECONDS=30
    APP__LOG_LEVEL=DEBUG

Usage:
    from query_assistant.config import get_settings
    settings = get_settings()
    print(settings.backend.base_url)
"""

from functools import lru_cache
from typing import Optional

from query_assistant.config_constants import (
    DEFAULT_BACKEND_URL,
    EXECUTE_PATH,
    GENERATE_PATH,
    HISTORY_PATH,
    PING_PATH,
    LogFormat,
    LogLevel,
)

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


# =============================================================================
# BACKEND CONFIGURATION
# =============================================================================

class BackendConfig(BaseModel):
    """
    HTTP configuration for the query assistant backend.

    Used by BackendClient for the generation, execution and history endpoints.
    The base URL is resolved once at startup and injected into the client;
    it is not expected to change during the process lifetime.
    """

    # Base address of the backend (no trailing slash required)
    # Defaults to the local development worker
    base_url: str = DEFAULT_BACKEND_URL

    # Endpoint paths, relative to base_url
    history_path: str = HISTORY_PATH
    generate_path: str = GENERATE_PATH
    execute_path: str = EXECUTE_PATH
    ping_path: str = PING_PATH

    # Maximum time (seconds) to establish a TCP connection
    # Failing to connect surfaces as a NetworkError
    connect_timeout_seconds: Optional[float] = 10.0

    # Maximum time (seconds) to wait for a response
    # None = wait until the backend answers (requests are never cancelled)
    request_timeout_seconds: Optional[float] = None

    # Maximum total HTTP connections to the backend
    max_connections: int = 10

    # Maximum idle connections to keep alive
    max_keepalive_connections: int = 5


# =============================================================================
# APPLICATION CONFIGURATION
# =============================================================================

class AppConfig(BaseModel):
    """
    General application settings.

    Controls logging verbosity and output format.
    """

    # Logging level: DEBUG, INFO, WARNING, ERROR
    # DEBUG: verbose, includes prompts and SQL text
    # INFO: normal operation logging
    log_level: LogLevel = LogLevel.INFO

    # json: pretty-printed JSON records
    # console: single colored line per record (interactive use)
    log_format: LogFormat = LogFormat.JSON


# =============================================================================
# ROOT SETTINGS (Environment Loading)
# =============================================================================

class Settings(BaseSettings):
    """
    Root settings class that loads all configuration from environment.

    Environment variables use "__" (double underscore) as nested delimiter.
    Example: BACKEND__BASE_URL sets settings.backend.base_url

    Every value has a default, so the client starts against the local
    development backend without any environment.
    """

    # Backend endpoint settings
    backend: BackendConfig = BackendConfig()

    # Application-wide settings
    app: AppConfig = AppConfig()

    model_config = SettingsConfigDict(
        env_file=".env",            # Load from .env file in project root
        env_file_encoding="utf-8",  # UTF-8 encoding for .env file
        case_sensitive=False,       # ENV_VAR and env_var are equivalent
        env_nested_delimiter="__",  # Use __ for nested config (BACKEND__BASE_URL)
        extra="ignore",
    )


# =============================================================================
# SINGLETON ACCESSOR
# =============================================================================

@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance (singleton pattern).

    Settings are loaded once and cached for the lifetime of the process.
    Pass the relevant sub-config into clients explicitly rather than calling
    this from deep inside the code:

        settings = get_settings()
        client = BackendClient(settings.backend)

    Returns:
        Settings instance with all configuration loaded from environment
    """
    return Settings()
