"""
Company Scout MCP Server.

Transport: stdio (--stdio) or SSE over HTTP.

Expected MCP Tool Return Format:
{
    "ok": bool,
    "report": str,          # Present if ok is True (text tools)
    "error": str,           # Present if ok is False
    "kind": str             # Error category if ok is False
}
"""

import argparse
import logging
import os
import signal
import sys
from typing import Annotated, Any, Dict, Optional

from dotenv import load_dotenv
from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..common.config import ScoutConfig, load_config, validate_config
from ..common.embedding_service import EmbeddingService
from ..common.errors import ScoutError, UnconfiguredError
from ..common.supabase_client import SupabaseClient, is_identifier
from ..search import (
    DEFAULT_SESSION,
    DetailFetcher,
    SearchAggregator,
    SearchResultCache,
    format_company_detail,
    format_rows,
    format_search_results,
    format_table_list,
    format_table_schema,
)

logger = logging.getLogger("scout.server")

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False)


def _error(exc: Exception) -> Dict[str, Any]:
    """Tagged failure result for a tool call."""
    if isinstance(exc, ScoutError):
        kind = exc.kind
    elif isinstance(exc, ValueError):
        kind = "invalid_argument"
    else:
        kind = "error"
    return {"ok": False, "error": str(exc), "kind": kind}


class MCPServerApp:
    """
    Main application class for the MCP server.

    Collaborators are constructed by the caller and injected here:
    - SupabaseClient: similarity search, record store and SQL
    - EmbeddingService: query embeddings (optional; search is unconfigured without it)
    """

    def __init__(
            self,
            supabase_client: Optional[SupabaseClient] = None,
            embedding_service: Optional[EmbeddingService] = None,
            config: Optional[ScoutConfig] = None,
            mcp_server_name: Optional[str] = None,
        ) -> None:
        """
        Initializes the MCPServerApp with the given collaborators.

        Args:
            supabase_client (SupabaseClient): Database client. Without it every tool reports unconfigured.
            embedding_service (EmbeddingService): Query embedder for semantic search.
            config (ScoutConfig): Settings; defaults when omitted.
            mcp_server_name (str): Advertised MCP server name (overrides config).
        """
        self.config = config or ScoutConfig()
        self.supabase = supabase_client
        self.embedding = embedding_service

        self.cache = SearchResultCache(self.config.search.cache_sessions)
        self.aggregator = None
        self.fetcher = None
        if supabase_client is not None:
            self.aggregator = SearchAggregator(
                embedding_service=embedding_service,
                search_service=supabase_client,
                config=self.config.search,
                cache=self.cache,
            )
            self.fetcher = DetailFetcher(
                supabase_client,
                default_timeout_ms=self.config.search.detail_timeout_ms,
            )

        self.mcp = FastMCP(name=mcp_server_name or self.config.server.name)

        def _require_database() -> None:
            if self.supabase is None:
                raise UnconfiguredError(
                    "Supabase client not configured. Set SUPABASE_URL and SUPABASE_SERVICE_KEY."
                )

        # ---------- MCP Tools: Search Companies ---------- #
        @self.mcp.tool(
            name="search_companies",
            description=(
                "Semantic search over company descriptions. "
                "Returns companies ranked by their best matching text chunk, "
                "with up to two matching snippets each. "
                "top_k bounds the number of matching chunks, so fewer companies may be returned."
            ),
            annotations=READ_ONLY,
        )
        async def tool_search_companies(
            query: Annotated[str, Field(description="Search query to find relevant companies")],
            top_k: Annotated[Optional[int], Field(description="Maximum number of matching chunks to retrieve (default: 10)")] = None,
            threshold: Annotated[Optional[float], Field(description="Minimum similarity threshold (0-1, default: 0.3)")] = None,
            session_id: Annotated[str, Field(description="Caller session; results are cached per session for get_search_result")] = DEFAULT_SESSION,
        ) -> Dict[str, Any]:
            """
            MCP tool to search companies by meaning.

            Args:
                query (str): Free-text query.
                top_k (int): Chunk rows to retrieve.
                threshold (float): Minimum chunk similarity.
                session_id (str): Cache slot for the results.

            Returns:
                Dict[str, Any]: Number of companies and the formatted report.
            """
            try:
                _require_database()
                matches = await self.aggregator.search(
                    query,
                    topk=top_k,
                    threshold=threshold,
                    session_id=session_id,
                )
            except (ScoutError, ValueError) as e:
                logger.warning("search_companies failed: %s", e)
                return _error(e)
            except Exception as e:
                logger.error("search_companies error: %s", e, exc_info=True)
                return _error(e)

            return {
                "ok": True,
                "count": len(matches),
                "report": format_search_results(matches, query),
            }

        # ---------- MCP Tools: Company Details ---------- #
        @self.mcp.tool(
            name="get_company_details",
            description="Get the full record of a company, including its contacts, by company ID.",
            annotations=READ_ONLY,
        )
        async def tool_get_company_details(
            company_id: Annotated[str, Field(description="The ID of the company to get details for")],
            timeout_ms: Annotated[Optional[int], Field(description="Lookup timeout in milliseconds (default: 5000)")] = None,
        ) -> Dict[str, Any]:
            """
            MCP tool to fetch one company under a timeout.

            Args:
                company_id (str): Company identifier.
                timeout_ms (int): Deadline for the lookup.

            Returns:
                Dict[str, Any]: The formatted company report.
            """
            try:
                _require_database()
                record = await self.fetcher.get(company_id, timeout_ms=timeout_ms)
            except (ScoutError, ValueError) as e:
                logger.warning("get_company_details failed: %s", e)
                return _error(e)
            except Exception as e:
                logger.error("get_company_details error: %s", e, exc_info=True)
                return _error(e)

            return {"ok": True, "report": format_company_detail(record)}

        # ---------- MCP Tools: Cached Search Result ---------- #
        @self.mcp.tool(
            name="get_search_result",
            description=(
                "Get a company from the most recent search_companies call of this session "
                "by its 0-based position, without searching again."
            ),
            annotations=READ_ONLY,
        )
        async def tool_get_search_result(
            index: Annotated[int, Field(description="0-based position in the last search results")],
            session_id: Annotated[str, Field(description="Session used for the search")] = DEFAULT_SESSION,
        ) -> Dict[str, Any]:
            """
            MCP tool to resolve "result #k" against the session's cached results.

            Returns:
                Dict[str, Any]: The cached company match.
            """
            match = self.cache.get_position(session_id, index)
            if match is None:
                count = len(self.cache.get(session_id))
                return {
                    "ok": False,
                    "error": f"No search result at position {index} (last search returned {count} companies).",
                    "kind": "not_found",
                }
            return {"ok": True, "result": match.to_dict()}

        # ---------- MCP Tools: Execute Query ---------- #
        @self.mcp.tool(
            name="execute_query",
            description="Execute a read-only SQL query (only SELECT queries are allowed) and return the rows as a table.",
            annotations=READ_ONLY,
        )
        async def tool_execute_query(
            query: Annotated[str, Field(description="SQL query to execute (only SELECT queries are allowed)")],
            limit: Annotated[Optional[int], Field(description="Maximum number of rows to return (default: 50)")] = None,
        ) -> Dict[str, Any]:
            """
            MCP tool to run read-only SQL through the execute_sql RPC.

            Returns:
                Dict[str, Any]: Row count and the rows as a markdown table.
            """
            limit = self.config.search.query_row_limit if limit is None else limit
            try:
                _require_database()
                rows = await self.supabase.execute_read_query(query, limit=limit)
            except (ScoutError, ValueError) as e:
                logger.warning("execute_query failed: %s", e)
                return _error(e)
            except Exception as e:
                logger.error("execute_query error: %s", e, exc_info=True)
                return _error(e)

            if not rows:
                report = "Query executed successfully, but no data was returned."
            else:
                report = format_rows(rows)
            return {"ok": True, "row_count": len(rows), "report": report}

        # ---------- MCP Resources: Schema ---------- #
        @self.mcp.resource(
            "supabase://schema",
            name="database-schema",
            mime_type="text/markdown",
        )
        async def resource_schema() -> str:
            """List of public tables."""
            if self.supabase is None:
                return "Error: Supabase client not configured."
            tables = await self.supabase.list_tables()
            return format_table_list(tables)

        @self.mcp.resource(
            "supabase://tables/{table_name}",
            name="table-schema",
            mime_type="text/markdown",
        )
        async def resource_table_schema(table_name: str) -> str:
            """Columns of one public table."""
            if self.supabase is None:
                return "Error: Supabase client not configured."
            if not is_identifier(table_name):
                return f"Error: Invalid table name: {table_name}"
            columns = await self.supabase.get_table_schema(table_name)
            return format_table_schema(table_name, columns)

    def run(self, transport: Optional[str] = None) -> None:
        """Runs the MCP server on stdio or SSE."""
        transport = transport or self.config.server.transport
        if transport == "stdio":
            logger.info("Company Scout MCP server running with stdio transport")
            self.mcp.run(transport="stdio")
        else:
            logger.info(
                "Company Scout MCP server running with SSE transport on %s:%d",
                self.config.server.host, self.config.server.port,
            )
            self.mcp.run(transport="sse", host=self.config.server.host, port=self.config.server.port)


def build_app(config: ScoutConfig) -> MCPServerApp:
    """Construct the collaborators once and wire them into the server."""
    supabase_client = SupabaseClient(
        url=config.supabase.url,
        service_key=config.supabase.service_key,
        timeout=config.supabase.timeout,
    )
    embedding_service = EmbeddingService(
        api_key=config.embedding.openai_api_key,
        model=config.embedding.model,
        base_url=config.embedding.base_url,
    )
    if not embedding_service.is_available:
        logger.warning("OPENAI_API_KEY not set - search_companies will be unavailable")

    return MCPServerApp(
        supabase_client=supabase_client,
        embedding_service=embedding_service,
        config=config,
    )


def main(argv=None) -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Run the Company Scout MCP server.")
    parser.add_argument(
        "--stdio", "-s",
        action="store_true",
        help="Use stdio transport instead of SSE.",
    )
    parser.add_argument(
        "--server-name",
        default=None,
        help="Advertised MCP server name.",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="SSE port (default: PORT or 3000).",
    )
    args = parser.parse_args(argv)

    config = load_config()
    if args.server_name:
        config.server.name = args.server_name
    if args.port:
        config.server.port = args.port
    if args.stdio:
        config.server.transport = "stdio"

    # stdout belongs to the stdio transport
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, config.server.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Current working directory: %s", os.getcwd())

    problems = validate_config(config)
    if problems:
        for problem in problems:
            logger.error("Configuration error: %s", problem)
        logger.error("Please create a .env file in the project root with SUPABASE_URL and SUPABASE_SERVICE_KEY")
        sys.exit(1)
    logger.info("Configuration validated successfully")

    app = build_app(config)

    def _handle_shutdown(signum, frame):
        raise SystemExit(0)
    for sig in (signal.SIGINT, getattr(signal, "SIGTERM", None)):
        if sig is not None:
            signal.signal(sig, _handle_shutdown)

    app.run()


if __name__ == "__main__":
    main()
