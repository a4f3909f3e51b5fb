"""
Supabase Client

Async PostgREST client for the company database.

Plays three roles for the search engine:
- similarity search: the `match_company_chunks` RPC
- record store: `companies` joined with `contacts`
- read-only SQL through the `execute_sql` RPC
"""

import re
import logging
from typing import Any, Dict, List, Optional, Type

import httpx
from pydantic import ValidationError

from .errors import ScoutError, SearchServiceError, StoreError, QueryRejectedError
from .schemas import ChunkMatch, CompanyRecord

logger = logging.getLogger("scout.common.supabase_client")

IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
MODIFYING_KEYWORDS = ("insert", "update", "delete", "drop", "alter", "create", "truncate")
_MODIFYING_RE = re.compile(r"\b(" + "|".join(MODIFYING_KEYWORDS) + r")\b")
_WITH_SELECT_RE = re.compile(r"^with\s+.+\s+select")
_LIMIT_RE = re.compile(r"\blimit\s")

TABLES_QUERY = """
      SELECT table_name
      FROM information_schema.tables
      WHERE table_schema = 'public'
    """

TABLE_SCHEMA_QUERY = """
      SELECT
        column_name,
        data_type,
        is_nullable,
        column_default
      FROM
        information_schema.columns
      WHERE
        table_schema = 'public' AND
        table_name = '{table_name}'
    """


def is_read_only_query(query: str) -> bool:
    """
    Coarse read-only check: SELECT (or WITH ... SELECT) and no data
    modification keywords anywhere in the statement.
    """
    cleaned = re.sub(r"\s+", " ", query.strip().lower())

    is_select = cleaned.startswith("select ") or bool(_WITH_SELECT_RE.match(cleaned))
    no_modification = not _MODIFYING_RE.search(cleaned)

    return is_select and no_modification


def is_identifier(name: str) -> bool:
    return bool(name) and bool(IDENTIFIER_RE.match(name))


def _error_message(response: httpx.Response) -> str:
    """Extract PostgREST's error message, falling back to the raw body."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text or f"HTTP {response.status_code}"


class SupabaseClient:
    """
    Async client for Supabase's REST interface.

    The httpx client is created lazily on first use inside the running
    event loop and reused for every later call.

    Usage:
        client = SupabaseClient(url="https://xyz.supabase.co", service_key="...")
        rows = await client.match_chunks(vector, threshold=0.3, limit=10)
        record = await client.fetch_company("42")
        await client.close()
    """

    def __init__(
        self,
        url: str,
        service_key: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Supabase client.

        Args:
            url: Project URL (https://<project>.supabase.co)
            service_key: Service role key, sent as apikey and bearer token
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.url = url.rstrip("/")
        self.timeout = timeout
        self._service_key = service_key
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Create the httpx client if not yet created."""
        if self._http is None:
            self._http = httpx.AsyncClient(
                base_url=f"{self.url}/rest/v1",
                headers={
                    "apikey": self._service_key,
                    "Authorization": f"Bearer {self._service_key}",
                    "Content-Type": "application/json",
                },
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._http

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def _rpc(
        self,
        function: str,
        params: Dict[str, Any],
        error_cls: Type[ScoutError] = StoreError,
    ) -> Any:
        """Call a Postgres function exposed by PostgREST."""
        if not is_identifier(function):
            raise ValueError(f"Invalid RPC function name: {function!r}")

        client = self._ensure_client()
        try:
            response = await client.post(f"/rpc/{function}", json=params)
        except httpx.HTTPError as e:
            raise error_cls(f"RPC {function} failed: {e}") from e

        if response.is_error:
            raise error_cls(_error_message(response))

        if not response.content:
            return None
        return response.json()

    # ------------------------------------------------------------------ #
    # Similarity search
    # ------------------------------------------------------------------ #

    async def match_chunks(
        self,
        query_embedding: List[float],
        threshold: float,
        limit: int,
        function: str = "match_company_chunks",
    ) -> List[ChunkMatch]:
        """
        Run the chunk similarity RPC.

        Args:
            query_embedding: Query vector
            threshold: Minimum similarity (0-1)
            limit: Maximum number of chunk rows
            function: Name of the match RPC

        Returns:
            Chunk rows as returned by the database (at most `limit`)

        Raises:
            SearchServiceError: With the service's message verbatim
        """
        rows = await self._rpc(
            function,
            {
                "query_embedding": query_embedding,
                "match_threshold": threshold,
                "match_count": limit,
            },
            error_cls=SearchServiceError,
        )
        if not rows:
            return []
        if not isinstance(rows, list):
            raise SearchServiceError(f"Unexpected response from {function}: {type(rows).__name__}")

        return [ChunkMatch.from_row(row) for row in rows]

    # ------------------------------------------------------------------ #
    # Record store
    # ------------------------------------------------------------------ #

    async def fetch_company(self, company_id: str) -> Optional[CompanyRecord]:
        """
        Fetch one company with its contacts.

        Returns:
            The company record, or None if no company has this id

        Raises:
            StoreError: On connection or query errors
        """
        client = self._ensure_client()
        try:
            response = await client.get(
                "/companies",
                params={"id": f"eq.{company_id}", "select": "*,contacts(*)"},
            )
        except httpx.HTTPError as e:
            raise StoreError(f"Company lookup failed: {e}") from e

        if response.is_error:
            raise StoreError(_error_message(response))

        rows = response.json()
        if not rows:
            return None

        try:
            return CompanyRecord.model_validate(rows[0])
        except ValidationError as e:
            raise StoreError(f"Malformed company record: {e}") from e

    # ------------------------------------------------------------------ #
    # SQL
    # ------------------------------------------------------------------ #

    async def execute_read_query(self, query: str, limit: int = 50) -> List[Dict[str, Any]]:
        """
        Execute a read-only SQL query.

        A LIMIT clause is appended when the query has none.

        Raises:
            QueryRejectedError: If the query is not read-only
            StoreError: If the database rejects the query
        """
        if not is_read_only_query(query):
            raise QueryRejectedError("Only SELECT queries are allowed for security reasons")

        query = query.strip().rstrip(";").rstrip()
        if not _LIMIT_RE.search(query.lower()):
            query = f"{query} LIMIT {limit}"

        logger.debug("Executing read query: %s", query)
        rows = await self._rpc("execute_sql", {"query": query})
        return rows or []

    async def list_tables(self) -> List[str]:
        """Names of the tables in the public schema; empty on error."""
        try:
            rows = await self._rpc("execute_sql", {"query": TABLES_QUERY})
        except StoreError as e:
            logger.error("Error fetching tables: %s", e)
            return []
        if not isinstance(rows, list):
            logger.error("Error fetching tables: unexpected response %r", rows)
            return []
        return [row["table_name"] for row in rows if isinstance(row, dict) and row.get("table_name")]

    async def get_table_schema(self, table_name: str) -> List[Dict[str, Any]]:
        """Column descriptions of a public table; empty on error."""
        if not is_identifier(table_name):
            raise ValueError(f"Invalid table name: {table_name!r}")

        try:
            rows = await self._rpc(
                "execute_sql",
                {"query": TABLE_SCHEMA_QUERY.format(table_name=table_name)},
            )
        except StoreError as e:
            logger.error("Error fetching schema for table %s: %s", table_name, e)
            return []
        return rows or []
