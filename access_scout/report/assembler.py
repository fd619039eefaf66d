# File: access_scout/report/assembler.py
"""access_scout.report.assembler: Сборка итогового ответа сканирования."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from access_scout import __version__
from access_scout.aggregator import ViolationAggregator
from access_scout.crawler.crawler import CrawlOutcome
from access_scout.enrichment.pipeline import EnrichmentOutcome
from access_scout.errors import CrawlUnreachableError
from access_scout.schemas import EnrichmentLevel, ScanRequest

SCANNER_VERSION = f"AccessScout {__version__} (axe-core + playwright + claude)"
SCAN_METHOD = "Headless Chromium + axe-core + Claude AI"


@dataclass(slots=True)
class ScanReport:
    """Успешный результат сканирования сайта."""

    metadata: Dict[str, Any]
    violations: List[Dict[str, Any]] = field(default_factory=list)
    counts: Dict[str, int] = field(default_factory=dict)
    compliance_score: int = 100
    pages_scanned: int = 0
    scanned_urls: List[str] = field(default_factory=list)
    failed_urls: Dict[str, str] = field(default_factory=dict)
    max_pages: int = 0
    ai_level: str = EnrichmentLevel.NONE.value
    deep_analysis: List[Dict[str, Any]] = field(default_factory=list)
    scan_date: str = ""
    scan_duration_seconds: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Плоское представление в формате ответа API."""
        data = asdict(self)
        metadata = data.pop("metadata")
        counts = data.pop("counts")
        return {
            "success": True,
            "status": "completed",
            **metadata,
            "violations": data.pop("violations"),
            "total_violations": sum(counts.values()),
            **{f"{level}_count": n for level, n in counts.items()},
            **data,
            "scanner_version": SCANNER_VERSION,
            "scan_method": SCAN_METHOD,
        }


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def assemble_report(
    request: ScanRequest,
    aggregator: ViolationAggregator,
    crawl: CrawlOutcome,
    enrichment: EnrichmentOutcome,
    duration: float,
) -> ScanReport:
    """Объединяет нарушения, статистику обхода и результаты ИИ в ScanReport."""
    violations = []
    for violation in aggregator.violations:
        item = violation.to_dict()
        item["ai_explanation"] = enrichment.explanation_for(violation.rule_id)
        violations.append(item)

    deep_analysis = [
        {"url": record.key, "status": record.result.status.value, "analysis": record.payload}
        for record in enrichment.analyses
    ]

    return ScanReport(
        metadata=request.metadata(),
        violations=violations,
        counts=aggregator.impact_counts(),
        compliance_score=aggregator.compliance_score(),
        pages_scanned=crawl.pages_scanned,
        scanned_urls=list(crawl.scanned_urls),
        failed_urls=dict(crawl.failed_urls),
        max_pages=crawl.budget,
        ai_level=enrichment.level.value,
        deep_analysis=deep_analysis,
        scan_date=_now(),
        scan_duration_seconds=round(duration),
    )


def unreachable_report(request: ScanRequest, error: CrawlUnreachableError, duration: float) -> Dict[str, Any]:
    """Отдельный исход: ни одна страница сайта не была проверена."""
    return {
        "success": False,
        "status": "unreachable",
        **request.metadata(),
        "violations": [],
        "total_violations": 0,
        "pages_scanned": 0,
        "error": f"Website could not be reached: {error.seed_url}",
        "error_details": error.details(),
        "scan_date": _now(),
        "scan_duration_seconds": round(duration),
    }


def failure_report(message: str, request: Optional[ScanRequest] = None) -> Dict[str, Any]:
    """Ответ при ошибке валидации или внутренней ошибке."""
    report: Dict[str, Any] = {
        "success": False,
        "status": "failed",
        "violations": [],
        "total_violations": 0,
        "compliance_score": 0,
        "error": message,
    }
    if request is not None:
        report.update(request.metadata())
    return report


__all__ = ["ScanReport", "assemble_report", "unreachable_report", "failure_report", "SCANNER_VERSION"]
