"""
Supabase Contract Store
Supabase client wrapper and a snapshot store loaded through it
"""
from typing import Any, Dict, List, Optional

try:
    from supabase import create_client, Client
    SUPABASE_AVAILABLE = True
except ImportError:
    SUPABASE_AVAILABLE = False
    Client = None  # type: ignore

from govcon_search.core.config import settings
from govcon_search.core.exceptions import StoreError
from govcon_search.core.logging import get_logger
from govcon_search.database.connection import DatabaseConnection
from govcon_search.database.memory import InMemoryContractStore

logger = get_logger(__name__)


class SupabaseClient(DatabaseConnection):
    """Supabase client wrapper with connection management"""

    def __init__(self, url: Optional[str] = None, key: Optional[str] = None):
        """
        Initialize Supabase client

        Args:
            url: Supabase project URL (defaults to settings.SUPABASE_URL)
            key: Supabase API key (defaults to settings.SUPABASE_KEY)
        """
        super().__init__()

        if not SUPABASE_AVAILABLE:
            raise ImportError(
                "supabase package is not installed. "
                "Install it with: pip install supabase"
            )

        self.url = url or settings.SUPABASE_URL
        self.key = key or settings.SUPABASE_KEY

        if not self.url or not self.key:
            logger.warning(
                "Supabase credentials not configured. "
                "Set SUPABASE_URL and SUPABASE_KEY environment variables."
            )

    def connect(self) -> bool:
        """
        Establish connection to Supabase

        Raises:
            ValueError: If credentials are missing
        """
        if not self.url or not self.key:
            raise ValueError(
                "Supabase credentials required. "
                "Set SUPABASE_URL and SUPABASE_KEY environment variables."
            )

        try:
            logger.info("Connecting to Supabase", extra={"url": self.url})
            self._connection = create_client(self.url, self.key)
            self._is_connected = True
            logger.info("Successfully connected to Supabase")
            return True
        except Exception as e:
            logger.error("Failed to connect to Supabase", extra={"error": str(e)})
            self._is_connected = False
            raise

    def disconnect(self) -> None:
        if self._is_connected:
            logger.info("Disconnecting from Supabase")
            self._connection = None
            self._is_connected = False

    def get_client(self) -> "Client":
        """
        Get the Supabase client instance, connecting on first use

        Raises:
            RuntimeError: If the client could not be initialized
        """
        if not self._is_connected:
            self.connect()

        if not self._connection:
            raise RuntimeError("Supabase client not initialized")

        return self._connection  # type: ignore


class SupabaseContractStore(InMemoryContractStore):
    """
    Snapshot store loaded from a Supabase table

    Rows are read page by page with ``.range()`` and held in memory;
    ``refresh()`` re-reads the table after a data update.
    """

    name = "supabase"

    def __init__(
        self,
        client: Optional[Any] = None,
        table_name: Optional[str] = None,
        page_size: Optional[int] = None,
        load: bool = True,
    ):
        """
        Args:
            client: supabase-py client (defaults to a connected SupabaseClient)
            table_name: Contracts table (defaults to settings.CONTRACTS_TABLE_NAME)
            page_size: Rows per request (defaults to settings.SUPABASE_PAGE_SIZE)
            load: Read the table immediately
        """
        super().__init__()
        self._client = client
        self.table_name = table_name or settings.CONTRACTS_TABLE_NAME
        self.page_size = page_size or settings.SUPABASE_PAGE_SIZE
        if load:
            self.refresh()

    @property
    def client(self):
        if self._client is None:
            self._client = SupabaseClient().get_client()
        return self._client

    def fetch_rows(self) -> List[Dict[str, Any]]:
        """Read every row of the contracts table"""
        rows: List[Dict[str, Any]] = []
        start = 0
        while True:
            end = start + self.page_size - 1
            response = self.client.table(self.table_name).select("*").range(start, end).execute()
            page = response.data or []
            rows.extend(page)
            if len(page) < self.page_size:
                break
            start += self.page_size
        return rows

    def refresh(self) -> None:
        """
        Reload the snapshot from Supabase

        Raises:
            StoreError: If the table could not be read; the previous snapshot is kept
        """
        try:
            rows = self.fetch_rows()
        except Exception as e:
            logger.error(f"Failed to load contracts from Supabase: {e}", extra={"table": self.table_name})
            raise StoreError(f"Failed to load contracts from Supabase: {e}") from e

        self.load_contracts(rows)
        logger.info(
            f"Supabase snapshot refreshed with {self.count_contracts()} contracts",
            extra={"table": self.table_name, "row_count": len(rows)},
        )

    def health_check(self) -> bool:
        try:
            self.client.table(self.table_name).select("id").limit(1).execute()
            return True
        except Exception as e:
            logger.warning("Supabase health check failed", extra={"error": str(e)})
            return False
