from __future__ import annotations

from typing import Dict, Iterator, List

MAX_ENTRIES = 100
RETAIN_ENTRIES = 50
COMPACTION_INTERVAL_SECONDS = 60.0


class LoadedUrlCache:
    """
    Page URLs already merged into the view, in insertion order.
    Bounded by periodic ``compact`` rather than on every ``add``.
    """

    def __init__(self, max_entries: int = MAX_ENTRIES, retain: int = RETAIN_ENTRIES) -> None:
        if retain > max_entries:
            raise ValueError("retain must be <= max_entries")
        self.max_entries = max_entries
        self.retain = retain
        # dict keeps insertion order and gives O(1) membership
        self._urls: Dict[str, None] = {}

    def contains(self, url: str) -> bool:
        return url in self._urls

    __contains__ = contains

    def add(self, url: str) -> None:
        # Re-adding keeps the original position.
        self._urls.setdefault(url, None)

    def compact(self) -> int:
        """Trim to the most recent ``retain`` URLs once over ``max_entries``. Returns the evicted count."""
        if len(self._urls) <= self.max_entries:
            return 0
        keep = list(self._urls)[-self.retain:]
        evicted = len(self._urls) - len(keep)
        self._urls = dict.fromkeys(keep)
        return evicted

    def urls(self) -> List[str]:
        return list(self._urls)

    def __len__(self) -> int:
        return len(self._urls)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._urls))
