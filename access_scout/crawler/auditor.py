# access_scout/crawler/auditor.py
"""
Page auditor: render one URL, run axe-core, collect same-origin links and,
for deep reviews, the structured content and a viewport screenshot.
"""
from __future__ import annotations

import logging
from typing import Optional

from access_scout.classifier import ImportanceClassifier
from access_scout.crawler.axe import AxeEngine
from access_scout.crawler.content import extract_content
from access_scout.crawler.models import PageAudit, PageContent, PageSnapshot
from access_scout.crawler.renderer import RenderedPage, Renderer
from access_scout.crawler.urls import same_origin_links
from access_scout.errors import PageAuditError


class PageAuditor:
    """Audits pages one at a time; the rendering context is closed on every path."""

    def __init__(
        self,
        renderer: Renderer,
        axe: AxeEngine,
        classifier: ImportanceClassifier,
        *,
        seed_url: str,
        navigation_timeout: float = 30.0,
        deep_review: bool = False,
        text_chars: int = 3000,
    ) -> None:
        self.renderer = renderer
        self.axe = axe
        self.classifier = classifier
        self.seed_url = seed_url
        self.navigation_timeout = navigation_timeout
        self.deep_review = deep_review
        self.text_chars = text_chars
        self.logger = logging.getLogger("AccessScout")

    async def audit(self, url: str, *, target: Optional[str] = None, is_first: bool = False) -> PageAudit:
        """
        Audit *url* (canonical form) by navigating to *target* (raw form,
        defaults to *url*). Any failure surfaces as :class:`PageAuditError`.
        """
        target = target or url
        try:
            page = await self.renderer.new_page()
        except Exception as exc:
            raise PageAuditError(url, f"could not open rendering context: {exc}") from exc

        try:
            return await self._audit_page(page, url, target, is_first)
        except PageAuditError:
            raise
        except Exception as exc:
            raise PageAuditError(url, str(exc) or type(exc).__name__) from exc
        finally:
            try:
                await page.close()
            except Exception as exc:
                self.logger.warning("Could not close rendering context for %s: %s", url, exc)

    async def _audit_page(self, page: RenderedPage, url: str, target: str, is_first: bool) -> PageAudit:
        await page.goto(target, self.navigation_timeout)
        findings = await self.axe.run(page)
        links = same_origin_links(await page.links(), page.url or target, self.seed_url)
        self.logger.debug("%s: %d violations, %d links", url, len(findings), len(links))

        content: Optional[PageContent] = None
        if self.deep_review:
            content = extract_content(await page.content(), text_chars=self.text_chars)
        important = self.classifier.is_eligible(
            is_first=is_first,
            form_controls=len(content.form_controls) if content else 0,
            violation_count=len(findings) if content else 0,
        )

        audit = PageAudit(url=url, findings=findings, links=links, important=important)
        if important and self.deep_review and self.classifier.claim(url):
            audit.snapshot = PageSnapshot(
                url=url,
                screenshot=await self._screenshot(page, url),
                content=content,
                findings=list(findings),
            )
        return audit

    async def _screenshot(self, page: RenderedPage, url: str) -> Optional[bytes]:
        try:
            return await page.screenshot()
        except Exception as exc:
            self.logger.warning("Screenshot failed for %s: %s", url, exc)
            return None


__all__ = ["PageAuditor"]
