"""
Database Connection Management
Connection base class and configuration checks for store backends
"""
from typing import Optional

from govcon_search.core.config import settings
from govcon_search.core.logging import get_logger

logger = get_logger(__name__)


class DatabaseConnection:
    """Base class for database connections"""

    def __init__(self):
        self._connection: Optional[object] = None
        self._is_connected: bool = False

    def connect(self) -> bool:
        """Establish database connection"""
        raise NotImplementedError("Subclasses must implement connect()")

    def disconnect(self) -> None:
        """Close database connection"""
        raise NotImplementedError("Subclasses must implement disconnect()")

    def is_connected(self) -> bool:
        return self._is_connected

    def get_connection(self):
        """Get the underlying connection object"""
        if not self._is_connected:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._connection


def validate_database_config(backend: Optional[str] = None) -> bool:
    """
    Validate that the configuration for a store backend is present

    Args:
        backend: "memory", "postgres" or "supabase" (defaults to settings.STORE_BACKEND)

    Returns:
        bool: True if configuration is valid

    Raises:
        ValueError: If required configuration is missing
    """
    backend = backend or settings.STORE_BACKEND

    if backend == "postgres" and not settings.DATABASE_URL:
        raise ValueError("DATABASE_URL is required for the postgres store but not set in configuration")

    if backend == "supabase":
        if not settings.SUPABASE_URL:
            raise ValueError("SUPABASE_URL is required but not set in configuration")
        if not settings.SUPABASE_KEY:
            raise ValueError("SUPABASE_KEY is required but not set in configuration")

    logger.debug("Database configuration validated successfully", extra={"backend": backend})
    return True
