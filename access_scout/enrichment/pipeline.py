# access_scout/enrichment/pipeline.py
"""
Two-tier AI enrichment.

Tier 1 (``basic`` and ``advanced``): one explanation per distinct rule id.
Tier 2 (``advanced`` only): one deep review per importance-tagged page.

Calls are strictly sequential with a fixed pause between them. A failed or
unparseable call only leaves its own record empty.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Type

from pydantic import BaseModel

from access_scout.aggregator import Violation
from access_scout.config import ScannerConfig
from access_scout.crawler.models import PageSnapshot
from access_scout.enrichment.parsing import (
    AIResult,
    PageAnalysis,
    RuleExplanation,
    parse_ai_response,
)
from access_scout.enrichment.prompts import page_analysis_prompt, rule_explanation_prompt
from access_scout.enrichment.service import AIService
from access_scout.errors import EnrichmentCallError
from access_scout.schemas import EnrichmentLevel

SleepFunc = Callable[[float], Awaitable[Any]]


class EnrichmentTier(str, Enum):
    EXPLANATION = "explanation"
    PAGE_ANALYSIS = "page_analysis"


@dataclass(slots=True)
class EnrichmentRecord:
    """AI output for one rule id (tier 1) or one page url (tier 2)."""

    key: str
    tier: EnrichmentTier
    result: AIResult

    @property
    def payload(self) -> Optional[Dict[str, Any]]:
        return self.result.data if self.result.ok else None


@dataclass(slots=True)
class EnrichmentOutcome:
    level: EnrichmentLevel
    explanations: Dict[str, EnrichmentRecord] = field(default_factory=dict)
    analyses: List[EnrichmentRecord] = field(default_factory=list)

    def explanation_for(self, rule_id: str) -> Optional[Dict[str, Any]]:
        record = self.explanations.get(rule_id)
        return record.payload if record else None


def group_by_rule(violations: Sequence[Violation]) -> Dict[str, List[Violation]]:
    """Rule id → its violations, in first-seen order."""
    groups: Dict[str, List[Violation]] = {}
    for violation in violations:
        groups.setdefault(violation.rule_id, []).append(violation)
    return groups


class EnrichmentPipeline:
    def __init__(
        self,
        service: Optional[AIService],
        *,
        explanation_delay: float = 0.5,
        analysis_delay: float = 1.0,
        explanation_max_tokens: int = 1024,
        analysis_max_tokens: int = 2048,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self.service = service
        self.explanation_delay = explanation_delay
        self.analysis_delay = analysis_delay
        self.explanation_max_tokens = explanation_max_tokens
        self.analysis_max_tokens = analysis_max_tokens
        self._sleep = sleep
        self.logger = logging.getLogger("AccessScout")

    @classmethod
    def from_config(
        cls, config: ScannerConfig, service: Optional[AIService], *, sleep: SleepFunc = asyncio.sleep
    ) -> EnrichmentPipeline:
        return cls(
            service,
            explanation_delay=config.explanation_delay,
            analysis_delay=config.analysis_delay,
            explanation_max_tokens=config.explanation_max_tokens,
            analysis_max_tokens=config.analysis_max_tokens,
            sleep=sleep,
        )

    async def run(
        self,
        level: EnrichmentLevel,
        violations: Sequence[Violation],
        snapshots: Sequence[PageSnapshot],
    ) -> EnrichmentOutcome:
        outcome = EnrichmentOutcome(level=level)
        if level is EnrichmentLevel.NONE:
            return outcome
        self.logger.info("AI enrichment (%s) started", level.value)
        outcome.explanations = await self.explain_rules(violations)
        if level is EnrichmentLevel.ADVANCED:
            outcome.analyses = await self.analyze_pages(snapshots)
        return outcome

    async def explain_rules(self, violations: Sequence[Violation]) -> Dict[str, EnrichmentRecord]:
        records: Dict[str, EnrichmentRecord] = {}
        for index, (rule_id, group) in enumerate(group_by_rule(violations).items()):
            if index and self.service is not None:
                await self._sleep(self.explanation_delay)
            prompt = rule_explanation_prompt(group[0], occurrences=len(group))
            result = await self._call(rule_id, prompt, RuleExplanation, max_tokens=self.explanation_max_tokens)
            records[rule_id] = EnrichmentRecord(rule_id, EnrichmentTier.EXPLANATION, result)
        ok = sum(1 for r in records.values() if r.result.ok)
        self.logger.info("Rule explanations: %d/%d succeeded", ok, len(records))
        return records

    async def analyze_pages(self, snapshots: Sequence[PageSnapshot]) -> List[EnrichmentRecord]:
        records: List[EnrichmentRecord] = []
        for index, snapshot in enumerate(snapshots):
            if index and self.service is not None:
                await self._sleep(self.analysis_delay)
            prompt = page_analysis_prompt(snapshot, (f.rule_id for f in snapshot.findings))
            result = await self._call(
                snapshot.url,
                prompt,
                PageAnalysis,
                image=snapshot.screenshot_b64,
                max_tokens=self.analysis_max_tokens,
            )
            records.append(EnrichmentRecord(snapshot.url, EnrichmentTier.PAGE_ANALYSIS, result))
        ok = sum(1 for r in records if r.result.ok)
        self.logger.info("Page analyses: %d/%d succeeded", ok, len(records))
        return records

    async def _call(
        self,
        key: str,
        prompt: str,
        shape: Type[BaseModel],
        *,
        image: Optional[str] = None,
        max_tokens: int,
    ) -> AIResult:
        if self.service is None:
            return AIResult.failed("AI service not configured")
        try:
            text = await self.service.complete(prompt, image_png_b64=image, max_tokens=max_tokens)
        except EnrichmentCallError as exc:
            self.logger.warning("AI call failed for %s: %s", key, exc)
            return AIResult.failed(str(exc))
        except Exception as exc:
            self.logger.warning("Unexpected AI service error for %s: %r", key, exc, exc_info=True)
            return AIResult.failed(f"{type(exc).__name__}: {exc}")
        result = parse_ai_response(text, shape)
        if not result.ok:
            self.logger.warning("AI response for %s is %s: %s", key, result.status.value, result.error)
        return result


__all__ = [
    "EnrichmentTier",
    "EnrichmentRecord",
    "EnrichmentOutcome",
    "EnrichmentPipeline",
    "group_by_rule",
]
