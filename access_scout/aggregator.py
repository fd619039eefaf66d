# File: access_scout/aggregator.py
"""access_scout.aggregator: Накопление нарушений доступности за один скан."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from access_scout.crawler.models import IMPACT_LEVELS, AxeFinding


@dataclass(slots=True)
class Violation:
    """Нормализованное нарушение; fixed_status/fixed_date меняются только внешними системами."""

    violation_id: str
    scan_id: str
    customer_id: str
    page_url: str
    rule_id: str
    impact: str
    description: str
    element_selector: str
    help_url: str
    detected_date: str
    fixed_status: str = "open"
    fixed_date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def compliance_score(total_violations: int, penalty: int = 5) -> int:
    """Оценка соответствия: max(0, 100 − penalty × число нарушений)."""
    return max(0, 100 - penalty * total_violations)


def _id_prefix(scan_id: str) -> str:
    return f"VIO_{scan_id.removeprefix('SCAN_')}"


class ViolationAggregator:
    """Собирает нарушения всех страниц, присваивает id и считает статистику."""

    def __init__(self, scan_id: str, customer_id: str, *, penalty: int = 5) -> None:
        self.scan_id = scan_id
        self.customer_id = customer_id
        self.penalty = penalty
        self._violations: List[Violation] = []
        self._next_index = 0

    def add_page(self, page_url: str, findings: Sequence[AxeFinding]) -> List[Violation]:
        """Добавляет нарушения страницы; индекс в id монотонный и не переиспользуется."""
        detected = datetime.now(timezone.utc).isoformat()
        added: List[Violation] = []
        for finding in findings:
            violation = Violation(
                violation_id=f"{_id_prefix(self.scan_id)}_{self._next_index}",
                scan_id=self.scan_id,
                customer_id=self.customer_id,
                page_url=page_url,
                rule_id=finding.rule_id,
                impact=finding.impact,
                description=finding.description,
                element_selector=finding.element_selector,
                help_url=finding.help_url,
                detected_date=detected,
            )
            self._next_index += 1
            added.append(violation)
        self._violations.extend(added)
        return added

    @property
    def violations(self) -> List[Violation]:
        return list(self._violations)

    @property
    def total(self) -> int:
        return len(self._violations)

    def impact_counts(self) -> Dict[str, int]:
        """Число нарушений по уровням critical/serious/moderate/minor/unknown."""
        counts = {level: 0 for level in (*IMPACT_LEVELS, "unknown")}
        for violation in self._violations:
            key = violation.impact if violation.impact in counts else "unknown"
            counts[key] += 1
        return counts

    def compliance_score(self) -> int:
        return compliance_score(self.total, self.penalty)


__all__ = ["Violation", "ViolationAggregator", "compliance_score"]
