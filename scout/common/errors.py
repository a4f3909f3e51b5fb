"""
Error taxonomy shared by the search engine and the MCP tools.

Core components raise these; the tool layer turns them into
{"ok": False, "error": ..., "kind": ...} results.
"""

from typing import Optional


class ScoutError(Exception):
    """Base error. `kind` is the tag reported to MCP callers."""
    kind = "error"


class UnconfiguredError(ScoutError):
    """A required collaborator (API key, client) is missing."""
    kind = "unconfigured"


class EmbeddingError(ScoutError):
    """The embedding provider failed to embed the query."""
    kind = "embedding_failure"


class SearchServiceError(ScoutError):
    """The similarity search RPC returned an error."""
    kind = "search_service_failure"


class StoreError(ScoutError):
    """The record store failed (connection or query error)."""
    kind = "store_failure"


class QueryRejectedError(ScoutError):
    """A SQL query was refused by the read-only guard."""
    kind = "query_rejected"


class NotFoundError(ScoutError):
    """No company exists with the requested id."""
    kind = "not_found"

    def __init__(self, company_id: str):
        self.company_id = company_id
        super().__init__(
            f'No company found with ID "{company_id}". Please try a different ID.'
        )


class FetchTimeoutError(ScoutError):
    """A store lookup exceeded its deadline."""
    kind = "timeout"

    def __init__(self, timeout_ms: int, company_id: Optional[str] = None):
        self.timeout_ms = timeout_ms
        self.company_id = company_id
        super().__init__(f"Operation timed out after {timeout_ms}ms")
