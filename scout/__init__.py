"""
Company Scout

MCP tools over a Supabase database of companies and their embedded text chunks.

Philosophy:
- Companies are ranked by their single best matching chunk
- Every failure is reported to the caller, never retried or swallowed
- Collaborators are built once at startup and injected

Usage:
    from scout.common import load_config, EmbeddingService, SupabaseClient
    from scout.search import SearchAggregator, DetailFetcher
    from scout.server import MCPServerApp
"""

__version__ = "0.1.0"
