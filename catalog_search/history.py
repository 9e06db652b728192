"""Search history log with popularity and analytics aggregation."""
import threading
import uuid
from collections import Counter
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from catalog_search.models import PopularSearch, SearchAnalytics, SearchHistoryEntry
from catalog_search.normalizer import normalize


MAX_HISTORY_ENTRIES = 100


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_entry_id() -> str:
    return f"search_{uuid.uuid4().hex[:12]}"


def _query_key(query: str) -> str:
    return normalize(query) or query.lower()


class SearchHistoryStore:
    """In-memory log of past searches, newest first.

    The log holds at most `max_entries` entries; the oldest are evicted once
    it grows past that. All access goes through one lock so a store can be
    shared between concurrent requests.
    """

    def __init__(
        self,
        max_entries: int = MAX_HISTORY_ENTRIES,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        """Initialize the store.

        Args:
            max_entries: Maximum number of entries kept, at most MAX_HISTORY_ENTRIES
            clock: Returns the current time (defaults to UTC now)
            id_factory: Returns a new unique entry id

        Raises:
            ValueError: If max_entries is outside 1..MAX_HISTORY_ENTRIES
        """
        if not 1 <= max_entries <= MAX_HISTORY_ENTRIES:
            raise ValueError(f"max_entries must be between 1 and {MAX_HISTORY_ENTRIES}, got {max_entries}")
        self.max_entries = max_entries
        self._clock = clock or _utc_now
        self._id_factory = id_factory or _new_entry_id
        self._entries: List[SearchHistoryEntry] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def load(self, entries: Iterable[SearchHistoryEntry]) -> None:
        """Replace the log with previously persisted entries.

        Args:
            entries: Entries in any order; they are sorted newest first and capped
        """
        ordered = sorted(entries, key=lambda entry: entry.timestamp, reverse=True)
        with self._lock:
            self._entries = ordered[: self.max_entries]

    def save_search_to_history(
        self,
        query: str,
        results_count: int,
        clicked_results: Optional[Sequence[str]] = None,
    ) -> Optional[SearchHistoryEntry]:
        """Record a search.

        Blank queries are not recorded.

        Args:
            query: Query as typed (it is stored trimmed)
            results_count: Number of results the search returned
            clicked_results: Ids of results clicked after this search

        Returns:
            The created entry, or None if the query was blank

        Raises:
            ValueError: If results_count is negative
        """
        trimmed = query.strip()
        if not trimmed:
            return None
        if results_count < 0:
            raise ValueError(f"results_count must be >= 0, got {results_count}")

        with self._lock:
            timestamp = self._clock()
            # Keep retrieval order monotonic even if the clock steps backwards
            if self._entries and timestamp < self._entries[0].timestamp:
                timestamp = self._entries[0].timestamp

            entry = SearchHistoryEntry(
                id=self._id_factory(),
                query=trimmed,
                results_count=results_count,
                timestamp=timestamp,
                clicked_results=tuple(clicked_results or ()),
            )
            self._entries.insert(0, entry)
            del self._entries[self.max_entries:]

        return entry

    def get_search_history(self) -> List[SearchHistoryEntry]:
        """Get all entries, newest first."""
        with self._lock:
            return list(self._entries)

    def clear_search_history(self) -> None:
        with self._lock:
            self._entries = []

    def get_popular_searches(self, limit: int = 10) -> List[str]:
        """Get the most frequently searched queries.

        Queries are grouped by their normalized form. Equal counts are
        ordered by most recent use, and each group is reported with its most
        recent spelling.

        Args:
            limit: Maximum number of queries to return

        Returns:
            Distinct queries, most frequent first
        """
        if limit <= 0:
            return []
        return [popular.query for popular in self._rank_queries(self.get_search_history())[:limit]]

    def get_search_analytics(self, top: int = 10) -> SearchAnalytics:
        """Aggregate statistics over the current log.

        Args:
            top: Number of top queries to include

        Returns:
            SearchAnalytics for the current log
        """
        entries = self.get_search_history()
        total = len(entries)
        if total == 0:
            return SearchAnalytics(
                total_searches=0,
                unique_queries=0,
                average_results_per_query=0.0,
                top_queries=[],
                no_results_queries=[],
                click_through_rate=0.0,
            )

        ranked = self._rank_queries(entries)

        no_results = []
        seen = set()
        for entry in entries:
            key = _query_key(entry.query)
            if entry.results_count == 0 and key not in seen:
                seen.add(key)
                no_results.append(entry.query)

        clicked = sum(1 for entry in entries if entry.clicked_results)

        return SearchAnalytics(
            total_searches=total,
            unique_queries=len(ranked),
            average_results_per_query=sum(entry.results_count for entry in entries) / total,
            top_queries=ranked[:max(top, 0)],
            no_results_queries=no_results,
            click_through_rate=clicked / total,
        )

    @staticmethod
    def _rank_queries(entries: List[SearchHistoryEntry]) -> List[PopularSearch]:
        """Count queries in a newest-first log and rank them."""
        counts: Counter = Counter()
        spelling: Dict[str, str] = {}
        last_seen: Dict[str, int] = {}
        for position, entry in enumerate(entries):
            key = _query_key(entry.query)
            counts[key] += 1
            if key not in spelling:
                spelling[key] = entry.query
                last_seen[key] = position

        half = len(entries) // 2
        newer = Counter(_query_key(entry.query) for entry in entries[:half])
        older = Counter(_query_key(entry.query) for entry in entries[half:])

        ranked_keys = sorted(counts, key=lambda key: (-counts[key], last_seen[key]))

        popular = []
        for key in ranked_keys:
            if half == 0:
                trend = "stable"
            elif newer[key] > older[key]:
                trend = "up"
            elif newer[key] < older[key]:
                trend = "down"
            else:
                trend = "stable"
            popular.append(PopularSearch(query=spelling[key], count=counts[key], trend=trend))
        return popular
