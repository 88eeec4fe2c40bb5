"""
PostgreSQL Contract Store
Parameterized substring search, bound-weight scoring and full-text phrase match
"""
from typing import Any, Dict, List, Optional, Sequence, Tuple
import re
import threading

try:
    import psycopg2
    from psycopg2.extras import RealDictCursor
    from psycopg2.pool import ThreadedConnectionPool
    PSYCOPG2_AVAILABLE = True
except ImportError:
    PSYCOPG2_AVAILABLE = False
    psycopg2 = None  # type: ignore
    RealDictCursor = None  # type: ignore
    ThreadedConnectionPool = None  # type: ignore

from govcon_search.core.config import settings
from govcon_search.core.exceptions import PhraseSearchUnavailableError, StoreError
from govcon_search.core.logging import get_logger
from govcon_search.core.models.contract import Contract
from govcon_search.core.search.ranking import FIELD_WEIGHTS, WeightedTerm
from govcon_search.database.base import ContractStore

logger = get_logger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so a term only ever matches literally"""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def like_pattern(term: str) -> str:
    return f"%{escape_like(term.lower())}%"


def _checked_fields(fields: Sequence[str]) -> List[str]:
    """
    Restrict fields to known columns, heaviest first

    Column names are written into SQL text, so anything outside
    FIELD_WEIGHTS is rejected.
    """
    unknown = [f for f in fields if f not in FIELD_WEIGHTS]
    if unknown:
        raise ValueError(f"Unknown search fields: {unknown}")
    return sorted(dict.fromkeys(fields), key=FIELD_WEIGHTS.get, reverse=True)


def build_match_predicate(terms: Sequence[str], fields: Sequence[str]) -> Tuple[str, List[Any]]:
    """
    WHERE clause true when any field contains any term

    Returns:
        (sql, params); search terms only ever appear in params
    """
    clauses = []
    params: List[Any] = []
    for term in terms:
        for field_name in fields:
            clauses.append(f"COALESCE({field_name}, '') ILIKE %s")
            params.append(like_pattern(term))
    return "(" + " OR ".join(clauses) + ")", params


def build_score_expression(terms: Sequence[WeightedTerm], fields: Sequence[str]) -> Tuple[str, List[Any]]:
    """
    Relevance expression: per term, the heaviest matching field weight times the term weight, summed

    Returns:
        (sql, params); weights and patterns are bound values
    """
    parts = []
    params: List[Any] = []
    for weighted in terms:
        whens = []
        for field_name in fields:
            whens.append(f"WHEN COALESCE({field_name}, '') ILIKE %s THEN %s")
            params.extend([like_pattern(weighted.term), FIELD_WEIGHTS[field_name]])
        parts.append("(CASE " + " ".join(whens) + " ELSE 0 END) * %s")
        params.append(weighted.weight)
    return "(" + " + ".join(parts) + ")", params


class PostgresContractStore(ContractStore):
    """Contract store backed by a PostgreSQL table through psycopg2"""

    name = "postgres"

    def __init__(
        self,
        database_url: Optional[str] = None,
        table_name: Optional[str] = None,
        pool_size: Optional[int] = None,
        connection_pool: Optional[Any] = None,
    ):
        """
        Initialize the store with connection pooling

        Args:
            database_url: PostgreSQL connection URL (defaults to settings.DATABASE_URL)
            table_name: Contracts table (defaults to settings.CONTRACTS_TABLE_NAME)
            pool_size: Max pooled connections (defaults to settings.DATABASE_POOL_SIZE)
            connection_pool: Pre-built pool exposing getconn/putconn
        """
        if not PSYCOPG2_AVAILABLE and connection_pool is None:
            raise ImportError(
                "psycopg2 package is not installed. "
                "Install it with: pip install psycopg2-binary"
            )

        self.database_url = database_url or settings.DATABASE_URL
        self.table_name = table_name or settings.CONTRACTS_TABLE_NAME
        if not _IDENTIFIER.match(self.table_name):
            raise ValueError(f"Invalid table name: {self.table_name!r}")
        self.pool_size = pool_size or settings.DATABASE_POOL_SIZE
        self._connection_pool = connection_pool
        self._lock = threading.Lock()

        if self._connection_pool is None:
            if not self.database_url:
                logger.warning(
                    "DATABASE_URL not configured. "
                    "Set DATABASE_URL environment variable for the postgres store."
                )
            else:
                self._init_connection_pool()

    def _init_connection_pool(self):
        """Initialize connection pool"""
        try:
            self._connection_pool = ThreadedConnectionPool(
                minconn=1,
                maxconn=self.pool_size,
                dsn=self.database_url
            )
            logger.info(f"Connection pool initialized (size: {self.pool_size})")
        except Exception as e:
            logger.warning(f"Failed to create connection pool: {e}. Using single connections.")
            self._connection_pool = None

    def _get_connection(self):
        """Get connection from pool or create new one"""
        if self._connection_pool:
            return self._connection_pool.getconn()
        if not self.database_url:
            raise StoreError("DATABASE_URL is required for the postgres store")
        return psycopg2.connect(self.database_url)

    def _put_connection(self, conn):
        """Return connection to pool"""
        if self._connection_pool:
            try:
                self._connection_pool.putconn(conn)
            except Exception as e:
                logger.warning(f"Failed to return connection to pool: {e}")
                conn.close()
        else:
            conn.close()

    def _fetch(self, sql: str, params: Sequence[Any]) -> List[Dict[str, Any]]:
        conn = self._get_connection()
        try:
            cursor = conn.cursor(cursor_factory=RealDictCursor) if RealDictCursor else conn.cursor()
            cursor.execute(sql, list(params))
            rows = cursor.fetchall()
            cursor.close()
            return [dict(row) for row in rows]
        except Exception:
            conn.rollback()
            raise
        finally:
            self._put_connection(conn)

    def _fetch_contracts(self, sql: str, params: Sequence[Any]) -> List[Contract]:
        contracts = []
        for row in self._fetch(sql, params):
            contract = Contract.from_row(row)
            if contract is not None:
                contracts.append(contract)
        return contracts

    def search_contracts(
        self,
        terms: Sequence[WeightedTerm],
        fields: Optional[Sequence[str]] = None,
    ) -> List[Contract]:
        fields = _checked_fields(self.default_fields(fields))
        terms = [t for t in terms if t.term]
        if not terms:
            return []

        score_sql, score_params = build_score_expression(terms, fields)
        where_sql, where_params = build_match_predicate([t.term for t in terms], fields)
        sql = (
            "SELECT * FROM ("
            f"SELECT *, {score_sql} AS relevance_score FROM {self.table_name} WHERE {where_sql}"
            ") AS scored WHERE relevance_score > 0 "
            "ORDER BY relevance_score DESC, posted_date DESC NULLS LAST, created_at DESC NULLS LAST"
        )

        try:
            contracts = self._fetch_contracts(sql, score_params + where_params)
        except Exception as e:
            logger.error(f"Contract search failed: {e}", extra={"term_count": len(terms)}, exc_info=True)
            raise StoreError(f"Contract search failed: {e}") from e

        logger.debug(f"Postgres search matched {len(contracts)} contracts", extra={"term_count": len(terms)})
        return contracts

    def count_matches(self, terms: Sequence[str], fields: Optional[Sequence[str]] = None) -> int:
        fields = _checked_fields(self.default_fields(fields))
        terms = [t for t in terms if t]
        if not terms:
            return 0

        where_sql, params = build_match_predicate(terms, fields)
        sql = f"SELECT COUNT(*) AS total FROM {self.table_name} WHERE {where_sql}"
        try:
            rows = self._fetch(sql, params)
        except Exception as e:
            logger.error(f"Match count failed: {e}", exc_info=True)
            raise StoreError(f"Match count failed: {e}") from e
        return int(rows[0]["total"]) if rows else 0

    def phrase_search(self, phrase: str, fields: Optional[Sequence[str]] = None) -> List[Contract]:
        """
        Phrase match with PostgreSQL full-text search

        Raises:
            PhraseSearchUnavailableError: The full-text query failed
        """
        fields = _checked_fields(self.default_fields(fields))
        if not phrase or not phrase.strip():
            return []

        document = "to_tsvector('english', concat_ws(' ', " + ", ".join(fields) + "))"
        sql = (
            f"SELECT *, ts_rank({document}, phraseto_tsquery('english', %s)) AS relevance_score "
            f"FROM {self.table_name} "
            f"WHERE {document} @@ phraseto_tsquery('english', %s) "
            "ORDER BY relevance_score DESC, posted_date DESC NULLS LAST, created_at DESC NULLS LAST"
        )
        try:
            return self._fetch_contracts(sql, [phrase, phrase])
        except Exception as e:
            raise PhraseSearchUnavailableError(f"Full-text phrase search failed: {e}") from e

    def get_all_contracts(self) -> List[Contract]:
        sql = (
            f"SELECT * FROM {self.table_name} "
            "ORDER BY posted_date DESC NULLS LAST, created_at DESC NULLS LAST"
        )
        try:
            return self._fetch_contracts(sql, [])
        except Exception as e:
            logger.error(f"Snapshot read failed: {e}", exc_info=True)
            raise StoreError(f"Snapshot read failed: {e}") from e

    def count_contracts(self) -> int:
        try:
            rows = self._fetch(f"SELECT COUNT(*) AS total FROM {self.table_name}", [])
        except Exception as e:
            raise StoreError(f"Contract count failed: {e}") from e
        return int(rows[0]["total"]) if rows else 0

    def health_check(self) -> bool:
        try:
            self._fetch("SELECT 1 AS ok", [])
            return True
        except Exception as e:
            logger.warning("Postgres health check failed", extra={"error": str(e)})
            return False

    def close(self) -> None:
        """Close all pooled connections"""
        with self._lock:
            if self._connection_pool is not None and hasattr(self._connection_pool, "closeall"):
                self._connection_pool.closeall()
                logger.info("Postgres connection pool closed")
            self._connection_pool = None
