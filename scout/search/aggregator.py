"""
Search Aggregator

Semantic company search over embedded text chunks.
Chunk-level hits are collapsed into companies, ranked by each
company's best chunk, and cached per session for positional lookup.
"""

import logging
from typing import Dict, Iterable, List, Optional

from ..common.config import SearchConfig
from ..common.embedding_service import EmbeddingService
from ..common.errors import EmbeddingError, ScoutError, SearchServiceError, UnconfiguredError
from ..common.schemas import ChunkMatch, CompanyMatch
from ..common.supabase_client import SupabaseClient, is_identifier
from .result_cache import DEFAULT_SESSION, SearchResultCache

logger = logging.getLogger("scout.search.aggregator")


def group_chunks(rows: Iterable[ChunkMatch]) -> List[CompanyMatch]:
    """
    Collapse chunk rows into ranked companies.

    - Companies appear in first-seen order before ranking; the first
      row seen for a company supplies its name and industry
    - Company score is the maximum chunk similarity
    - Companies are sorted by descending score (stable on ties)
    - Each company's chunks are sorted by descending similarity
    """
    companies: Dict[str, CompanyMatch] = {}

    for row in rows:
        company = companies.get(row.company_id)
        if company is None:
            company = CompanyMatch(
                company_id=row.company_id,
                company_name=row.company_name,
                industry=row.industry,
            )
            companies[row.company_id] = company
        company.add_chunk(row)

    ranked = sorted(companies.values(), key=lambda c: c.score, reverse=True)

    for rank, company in enumerate(ranked, start=1):
        company.rank = rank
        company.chunks.sort(key=lambda c: c.similarity, reverse=True)

    return ranked


class SearchAggregator:
    """
    Orchestrates embedding + similarity search and ranks companies.

    Note: topk bounds the number of chunk rows requested from the
    database, not the number of companies. Several chunks of the same
    company collapse into one result, so fewer than topk companies may
    come back.
    """

    def __init__(
        self,
        embedding_service: Optional[EmbeddingService],
        search_service: SupabaseClient,
        config: Optional[SearchConfig] = None,
        cache: Optional[SearchResultCache] = None,
    ):
        """
        Initialize aggregator.

        Args:
            embedding_service: Query embedder (None or unavailable = unconfigured)
            search_service: Provides match_chunks()
            config: Search defaults
            cache: Result cache (a new one sized from config if omitted)
        """
        self._embedding = embedding_service
        self._search = search_service
        self._config = config or SearchConfig()
        self._cache = cache if cache is not None else SearchResultCache(self._config.cache_sessions)

    @property
    def cache(self) -> SearchResultCache:
        return self._cache

    async def search(
        self,
        query: str,
        match_function: Optional[str] = None,
        topk: Optional[int] = None,
        threshold: Optional[float] = None,
        session_id: str = DEFAULT_SESSION,
    ) -> List[CompanyMatch]:
        """
        Search companies relevant to a free-text query.

        Args:
            query: Free-text query
            match_function: Similarity RPC name (default from config)
            topk: Maximum number of chunk rows to retrieve
            threshold: Minimum chunk similarity (0-1)
            session_id: Cache slot to overwrite with the results

        Returns:
            Companies sorted by descending score

        Raises:
            UnconfiguredError: No embedding provider configured
            EmbeddingError: The query could not be embedded
            SearchServiceError: The similarity RPC failed
            ValueError: Invalid topk, threshold or function name
        """
        match_function = match_function or self._config.match_function
        topk = self._config.topk if topk is None else topk
        threshold = self._config.threshold if threshold is None else threshold

        if isinstance(topk, bool) or not isinstance(topk, int) or topk < 1:
            raise ValueError(f"topk must be a positive integer, got {topk!r}")
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"threshold must be between 0 and 1, got {threshold!r}")
        if not is_identifier(match_function):
            raise ValueError(f"Invalid match function name: {match_function!r}")

        if self._embedding is None or not self._embedding.is_available:
            raise UnconfiguredError(
                "OpenAI client not initialized. Please provide OPENAI_API_KEY in environment."
            )

        try:
            query_vector = await self._embedding.embed_single(query)
        except ScoutError:
            raise
        except Exception as e:
            raise EmbeddingError(f"Embedding request failed: {e}") from e

        try:
            rows = await self._search.match_chunks(
                query_vector,
                threshold=threshold,
                limit=topk,
                function=match_function,
            )
        except ScoutError:
            raise
        except Exception as e:
            raise SearchServiceError(str(e)) from e

        companies = group_chunks(rows)
        self._cache.put(session_id, companies)

        logger.info(
            "Search %r: %d chunk rows -> %d companies (topk=%d, threshold=%.2f)",
            query, len(rows), len(companies), topk, threshold,
        )
        return companies

    def get_by_position(self, index: int, session_id: str = DEFAULT_SESSION) -> Optional[CompanyMatch]:
        """Company at 0-based `index` of the session's last search, or None."""
        return self._cache.get_position(session_id, index)

    def last_results(self, session_id: str = DEFAULT_SESSION) -> List[CompanyMatch]:
        return self._cache.get(session_id)
