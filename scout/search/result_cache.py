"""
Search Result Cache

Keeps the most recent ranked result set per caller session so that
"result #k" can be resolved without searching again.
"""

from collections import OrderedDict
from typing import List, Optional

from ..common.schemas import CompanyMatch

DEFAULT_SESSION = "default"


class SearchResultCache:
    """
    Least-recently-used cache of result sets keyed by session id.

    Each session holds exactly one result set; a new search replaces it
    wholesale. When more than `max_sessions` sessions are cached the
    least recently used one is evicted.
    """

    def __init__(self, max_sessions: int = 128):
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self._max_sessions = max_sessions
        self._entries: "OrderedDict[str, List[CompanyMatch]]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._entries

    def put(self, session_id: str, matches: List[CompanyMatch]) -> None:
        self._entries[session_id] = list(matches)
        self._entries.move_to_end(session_id)
        while len(self._entries) > self._max_sessions:
            self._entries.popitem(last=False)

    def get(self, session_id: str) -> List[CompanyMatch]:
        """Cached result set for the session (empty if none)."""
        if session_id not in self._entries:
            return []
        self._entries.move_to_end(session_id)
        return list(self._entries[session_id])

    def get_position(self, session_id: str, index: int) -> Optional[CompanyMatch]:
        """0-based lookup; None when out of range (negative included)."""
        matches = self.get(session_id)
        if index < 0 or index >= len(matches):
            return None
        return matches[index]

    def clear(self, session_id: Optional[str] = None) -> None:
        if session_id is None:
            self._entries.clear()
        else:
            self._entries.pop(session_id, None)
