# File: access_scout/engine.py
"""access_scout.engine: Orchestration layer: обход сайта, агрегация, ИИ-обогащение и сборка ответа."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import ValidationError

from access_scout.aggregator import ViolationAggregator
from access_scout.config import ScannerConfig
from access_scout.crawler.crawler import AccessCrawler, RendererFactory
from access_scout.enrichment.pipeline import EnrichmentPipeline, SleepFunc
from access_scout.enrichment.service import AIService, build_ai_service
from access_scout.errors import CrawlUnreachableError
from access_scout.logger import logger
from access_scout.report.assembler import assemble_report, failure_report, unreachable_report
from access_scout.schemas import EnrichmentLevel, ScanRequest

__all__ = ["ScanEngine", "run_scan", "validation_message"]


def validation_message(exc: ValidationError) -> str:
    """Короткое сообщение об ошибке валидации запроса: «website_url is required» и т.п."""
    parts = []
    for error in exc.errors():
        field = ".".join(str(p) for p in error.get("loc", ())) or "request"
        if error.get("type") == "missing":
            parts.append(f"{field} is required")
        else:
            parts.append(f"{field}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)


class ScanEngine:
    """Фасад для сервера, CLI и тестов: один вызов run() выполняет одно сканирование."""

    def __init__(
        self,
        config: ScannerConfig,
        *,
        ai_service: Optional[AIService] = None,
        renderer_factory: Optional[RendererFactory] = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """Коллабораторы (браузер, ИИ-сервис) передаются явно и живут дольше одного скана."""
        self.config = config
        self.ai_service = ai_service
        self.renderer_factory = renderer_factory
        self._sleep = sleep

    @classmethod
    def from_config(cls, config: ScannerConfig) -> ScanEngine:
        """Создаёт Engine с общим ИИ-клиентом по ключу из конфигурации."""
        return cls(config, ai_service=build_ai_service(config))

    async def run(self, request: ScanRequest) -> Dict[str, Any]:
        """Выполняет скан и всегда возвращает структурированный ответ, без исключений."""
        start = time.monotonic()
        level = request.enrichment_level
        logger.info(
            "Scan %s started: %s (plan %s, AI %s, budget %d)",
            request.scan_id, request.website_url, request.plan.value, level.value, request.page_budget,
        )
        try:
            aggregator = ViolationAggregator(
                request.scan_id, request.customer_id, penalty=self.config.violation_penalty
            )
            async with AccessCrawler(
                self.config,
                seed_url=request.website_url,
                aggregator=aggregator,
                budget=request.page_budget,
                deep_review=level is EnrichmentLevel.ADVANCED,
                renderer_factory=self.renderer_factory,
            ) as crawler:
                crawl = await crawler.crawl()

            pipeline = EnrichmentPipeline.from_config(self.config, self.ai_service, sleep=self._sleep)
            enrichment = await pipeline.run(level, aggregator.violations, crawl.snapshots)
            report = assemble_report(request, aggregator, crawl, enrichment, time.monotonic() - start)
        except CrawlUnreachableError as exc:
            logger.warning("Scan %s: site unreachable (%s)", request.scan_id, exc.seed_url)
            return unreachable_report(request, exc, time.monotonic() - start)
        except Exception as exc:
            logger.exception("Scan %s failed: %s", request.scan_id, exc)
            return failure_report(str(exc) or type(exc).__name__, request)

        logger.info(
            "Scan %s completed: %d pages, %d violations, score %d in %d s",
            request.scan_id, report.pages_scanned, len(report.violations),
            report.compliance_score, report.scan_duration_seconds,
        )
        return report.to_dict()

    async def run_payload(self, payload: Mapping[str, Any]) -> Tuple[int, Dict[str, Any]]:
        """Валидирует тело запроса и запускает скан; возвращает (HTTP-статус, ответ)."""
        try:
            request = ScanRequest.model_validate(dict(payload))
        except ValidationError as exc:
            message = validation_message(exc)
            logger.warning("Rejected scan request: %s", message)
            return 400, failure_report(message)

        result = await self.run(request)
        if result.get("status") == "failed":
            return 500, result
        return 200, result


async def run_scan(config: ScannerConfig, request: ScanRequest) -> Dict[str, Any]:
    """Запускает одно сканирование с коллабораторами по умолчанию (Chromium, Anthropic)."""
    return await ScanEngine.from_config(config).run(request)
