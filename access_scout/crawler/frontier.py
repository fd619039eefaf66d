# access_scout/crawler/frontier.py
"""
Crawl frontier: visited/pending bookkeeping for one scan.

The frontier deduplicates by canonical URL but remembers the first raw form
it was given, so navigation goes to an address the site actually serves.
"""
from __future__ import annotations

from collections import OrderedDict
from typing import Dict, List, Optional, Tuple

from access_scout.config import MAX_PAGE_CEILING
from access_scout.crawler.urls import normalize_url


class Frontier:
    """FIFO frontier capped by a page budget (attempted pages count against it)."""

    def __init__(self, seed_url: str, budget: int = MAX_PAGE_CEILING) -> None:
        self.seed_url = seed_url
        self.budget = max(1, min(int(budget), MAX_PAGE_CEILING))
        self._pending: "OrderedDict[str, str]" = OrderedDict()
        self._visited: List[str] = []
        self._failed: Dict[str, str] = {}
        self._seen: set[str] = set()
        self.add(seed_url)

    # -- queries ---------------------------------------------------------
    @property
    def visited(self) -> List[str]:
        """Canonical URLs audited successfully, in visit order."""
        return list(self._visited)

    @property
    def failed(self) -> Dict[str, str]:
        """Canonical URL → failure reason for pages visited with an error."""
        return dict(self._failed)

    @property
    def attempted(self) -> int:
        return len(self._visited) + len(self._failed)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def is_done(self) -> bool:
        return not self._pending or self.attempted >= self.budget

    # -- mutation --------------------------------------------------------
    def add(self, url: str) -> bool:
        """Enqueue *url* unless its canonical form was already seen."""
        canonical = normalize_url(url)
        if canonical in self._seen:
            return False
        self._seen.add(canonical)
        self._pending[canonical] = url
        return True

    def pop(self) -> Optional[Tuple[str, str]]:
        """Return ``(canonical, raw)`` for the next URL, or None when done."""
        if self.is_done():
            return None
        return self._pending.popitem(last=False)

    def mark_visited(self, canonical: str) -> None:
        self._visited.append(canonical)

    def mark_failed(self, canonical: str, reason: str) -> None:
        self._failed[canonical] = reason


__all__ = ["Frontier"]
