# access_scout/crawler/crawler.py
from __future__ import annotations

import logging
import time
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from typing import AsyncContextManager, Callable, Dict, List, Optional

from access_scout.aggregator import ViolationAggregator
from access_scout.classifier import ImportanceClassifier
from access_scout.config import ScannerConfig
from access_scout.crawler.auditor import PageAuditor
from access_scout.crawler.axe import AxeEngine
from access_scout.crawler.frontier import Frontier
from access_scout.crawler.models import PageSnapshot
from access_scout.crawler.renderer import PlaywrightRenderer, Renderer
from access_scout.errors import CrawlUnreachableError, PageAuditError

__all__ = ("CrawlOutcome", "AccessCrawler", "RendererFactory")

RendererFactory = Callable[[], AsyncContextManager[Renderer]]


@dataclass(slots=True)
class CrawlOutcome:
    """What one bounded crawl produced, besides the aggregated violations."""
    seed_url: str
    budget: int
    scanned_urls: List[str] = field(default_factory=list)
    failed_urls: Dict[str, str] = field(default_factory=dict)
    snapshots: List[PageSnapshot] = field(default_factory=list)

    @property
    def pages_scanned(self) -> int:
        return len(self.scanned_urls)


class AccessCrawler:
    """
    Sequential same-origin crawler: one page is fully audited, links included,
    before the next URL is taken from the frontier.
    """

    def __init__(
        self,
        config: ScannerConfig,
        *,
        seed_url: str,
        aggregator: ViolationAggregator,
        budget: Optional[int] = None,
        deep_review: bool = False,
        renderer_factory: Optional[RendererFactory] = None,
    ) -> None:
        self.config = config
        self.seed_url = seed_url
        self.aggregator = aggregator
        self.budget = budget or config.max_pages
        self.deep_review = deep_review
        self.classifier = ImportanceClassifier(
            max_snapshots=config.max_snapshots,
            violation_threshold=config.importance_violation_threshold,
        )
        self._renderer_factory = renderer_factory or (lambda: PlaywrightRenderer(config))
        self._stack: Optional[AsyncExitStack] = None
        self.renderer: Optional[Renderer] = None
        self.logger = logging.getLogger("AccessScout")

    async def __aenter__(self) -> AccessCrawler:
        stack = AsyncExitStack()
        try:
            self.renderer = await stack.enter_async_context(self._renderer_factory())
        except BaseException:
            await stack.aclose()
            raise
        self._stack = stack
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._stack is not None:
            await self._stack.aclose()
            self._stack = None
        self.renderer = None

    async def crawl(self) -> CrawlOutcome:
        if self.renderer is None:
            raise RuntimeError("Renderer not initialized")
        self.logger.info("Crawl started: %s (budget %d)", self.seed_url, self.budget)
        start = time.monotonic()

        frontier = Frontier(self.seed_url, self.budget)
        auditor = PageAuditor(
            self.renderer,
            AxeEngine(self.config.axe_script_url, self.config.axe_tags),
            self.classifier,
            seed_url=self.seed_url,
            navigation_timeout=self.config.navigation_timeout,
            deep_review=self.deep_review,
            text_chars=self.config.content_text_chars,
        )
        outcome = CrawlOutcome(seed_url=self.seed_url, budget=frontier.budget)

        while (item := frontier.pop()) is not None:
            canonical, target = item
            try:
                audit = await auditor.audit(canonical, target=target, is_first=not frontier.visited)
            except PageAuditError as exc:
                self.logger.warning("Audit failed for %s: %s", canonical, exc.reason)
                frontier.mark_failed(canonical, exc.reason)
                continue

            frontier.mark_visited(canonical)
            self.aggregator.add_page(canonical, audit.findings)
            if audit.snapshot is not None:
                outcome.snapshots.append(audit.snapshot)
            added = sum(1 for link in audit.links if frontier.add(link))
            self.logger.debug(
                "Audited %s: %d violations, %d new links, %d pending",
                canonical, len(audit.findings), added, frontier.pending_count,
            )

        outcome.scanned_urls = frontier.visited
        outcome.failed_urls = frontier.failed
        duration = time.monotonic() - start
        self.logger.info(
            "Crawl finished: %d pages, %d failed in %.2f s",
            outcome.pages_scanned, len(outcome.failed_urls), duration,
        )
        if not outcome.scanned_urls:
            raise CrawlUnreachableError(self.seed_url, outcome.failed_urls)
        return outcome
