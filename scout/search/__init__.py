"""
Company Search - Semantic Search and Company Details

Key Components:
- SearchAggregator: Embeds queries, groups chunk hits into ranked companies
- SearchResultCache: Last result set per session for positional lookup
- DetailFetcher: Company record lookup bounded by a timeout
- formatter: Text reports for agents

Pipeline:
1. Embed the query
2. Match chunks in Supabase (threshold, topk chunk rows)
3. Group chunks by company, rank by best chunk
4. Render the report
"""

from .result_cache import SearchResultCache, DEFAULT_SESSION
from .aggregator import SearchAggregator, group_chunks
from .detail_fetcher import DetailFetcher
from .formatter import (
    format_search_results,
    format_company_detail,
    format_rows,
    format_table_list,
    format_table_schema,
)

__all__ = [
    "SearchResultCache",
    "DEFAULT_SESSION",
    "SearchAggregator",
    "group_chunks",
    "DetailFetcher",
    "format_search_results",
    "format_company_detail",
    "format_rows",
    "format_table_list",
    "format_table_schema",
]
