"""
Detail Fetcher

Company lookups bounded by a deadline. On timeout the pending store
call is cancelled, so a hanging request does not keep running in the
background.
"""

import asyncio
import logging
from typing import Optional

from ..common.errors import FetchTimeoutError, NotFoundError, ScoutError, StoreError
from ..common.schemas import CompanyRecord
from ..common.supabase_client import SupabaseClient

logger = logging.getLogger("scout.search.detail_fetcher")

DEFAULT_TIMEOUT_MS = 5000


class DetailFetcher:
    """Fetch a single company record under a timeout."""

    def __init__(self, store: SupabaseClient, default_timeout_ms: int = DEFAULT_TIMEOUT_MS):
        self._store = store
        self._default_timeout_ms = default_timeout_ms

    async def get(self, company_id: str, timeout_ms: Optional[int] = None) -> CompanyRecord:
        """
        Fetch a company with its contacts.

        Args:
            company_id: Company identifier
            timeout_ms: Deadline in milliseconds (default 5000)

        Returns:
            The company record

        Raises:
            NotFoundError: No company with this id
            StoreError: The store failed; carries its message
            FetchTimeoutError: The deadline passed first
        """
        timeout_ms = self._default_timeout_ms if timeout_ms is None else timeout_ms
        if timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {timeout_ms!r}")

        logger.info("Getting company details for ID: %s", company_id)

        try:
            record = await asyncio.wait_for(
                self._store.fetch_company(company_id),
                timeout=timeout_ms / 1000,
            )
        except asyncio.TimeoutError as e:
            logger.warning("Company lookup for %s timed out after %dms", company_id, timeout_ms)
            raise FetchTimeoutError(timeout_ms, company_id) from e
        except ScoutError:
            raise
        except Exception as e:
            raise StoreError(str(e)) from e

        if record is None:
            raise NotFoundError(company_id)
        return record
