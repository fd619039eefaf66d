# access_scout/classifier.py
"""
Importance classifier: picks the pages that get a screenshot and a deep AI
review. Selection is first-come; once every slot is taken later pages are
skipped, earlier picks are never evicted.
"""
from __future__ import annotations

from typing import List


class ImportanceClassifier:
    """Tags pages as importance-eligible and hands out snapshot slots."""

    def __init__(self, max_snapshots: int = 10, violation_threshold: int = 5) -> None:
        self.max_snapshots = max_snapshots
        self.violation_threshold = violation_threshold
        self._selected: List[str] = []

    def is_eligible(self, *, is_first: bool, form_controls: int = 0, violation_count: int = 0) -> bool:
        return is_first or form_controls >= 1 or violation_count >= self.violation_threshold

    @property
    def slots_left(self) -> int:
        return max(0, self.max_snapshots - len(self._selected))

    def claim(self, url: str) -> bool:
        """Reserve a snapshot slot for *url*; False once the cap is reached."""
        if url in self._selected:
            return True
        if self.slots_left == 0:
            return False
        self._selected.append(url)
        return True


__all__ = ["ImportanceClassifier"]
