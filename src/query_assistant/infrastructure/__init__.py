"""
Infrastructure layer for external integrations.

This module contains the HTTP client for the query assistant backend.
"""

from .backend_client import BackendClient

__all__ = ["BackendClient"]
