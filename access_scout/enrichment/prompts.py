# access_scout/enrichment/prompts.py
"""Prompt texts for rule explanations and deep page reviews."""
from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List

from access_scout.aggregator import Violation
from access_scout.crawler.models import PageSnapshot

RULE_EXPLANATION_PROMPT = """You are helping a small-business website owner fix an accessibility problem
found by an automated checker. Explain the rule below in plain English, without jargon.

Rule: {rule_id}
Impact: {impact}
Description: {description}
Example element: {selector}
Example page: {page_url}
Occurrences on the site: {occurrences}
Reference: {help_url}

Respond with a single JSON object and nothing else:
{{
  "plain_language": "what the problem is, in one or two sentences",
  "user_impact": "who is affected and how",
  "fix_steps": ["step 1", "step 2"],
  "code_example": {{"before": "<problematic markup>", "after": "<fixed markup>"}},
  "estimated_time": "e.g. 15 minutes"
}}"""

# Categories axe-core already reports; the deep review must not repeat them.
ENGINE_REPORTED_CATEGORIES = (
    "colour contrast ratios",
    "missing image alt text",
    "missing form labels",
    "ARIA attribute validity",
    "document language",
    "duplicate IDs",
    "landmark and heading markup rules",
)

PAGE_ANALYSIS_PROMPT = """Review this web page for accessibility problems that automated testing cannot find.
You have a viewport screenshot and structured content extracted from the page.

Do NOT report anything in these categories, an automated engine already covers them:
{excluded}
Rules the engine already flagged on this page: {flagged}

Report only issues observable from the screenshot or the content:
VISUAL: touch targets smaller than 44x44 px, focus indicator visibility, text embedded in
images, layout and spacing that hurts reading.
CONTENT: reading level (target grade 8), inputs whose only label is a placeholder, generic
link text ("click here", "read more"), unhelpful error messages, instructions relying on
colour, shape or position.

Page: {url}
Structured content:
{content}

Respond with a single JSON object and nothing else:
{{
  "summary": "2-3 sentence overview",
  "visual_issues": [{{"type": "touch_target|focus_indicator|text_in_image|layout",
    "description": "...", "location": "...", "wcag_criterion": "...", "recommendation": "..."}}],
  "content_issues": [{{"type": "reading_level|placeholder_label|link_text|error_messages|sensory_instructions",
    "description": "...", "examples": ["..."], "wcag_criterion": "...", "recommendation": "..."}}],
  "priority_fixes": [{{"rank": 1, "issue": "...", "impact": "critical|serious|moderate|minor",
    "fix": "...", "estimated_time": "..."}}],
  "reading_level": {{"current": "...", "target": "Grade 8", "recommendation": "..."}},
  "estimated_fix_time": "total for critical and serious issues"
}}"""


def rule_explanation_prompt(violation: Violation, occurrences: int) -> str:
    return RULE_EXPLANATION_PROMPT.format(
        rule_id=violation.rule_id,
        impact=violation.impact,
        description=violation.description,
        selector=violation.element_selector,
        page_url=violation.page_url,
        occurrences=occurrences,
        help_url=violation.help_url or "n/a",
    )


def _content_payload(snapshot: PageSnapshot) -> Dict[str, Any]:
    if snapshot.content is None:
        return {}
    return snapshot.content.to_dict()


def page_analysis_prompt(snapshot: PageSnapshot, flagged_rules: Iterable[str]) -> str:
    flagged: List[str] = sorted(set(flagged_rules))
    return PAGE_ANALYSIS_PROMPT.format(
        excluded="\n".join(f"- {c}" for c in ENGINE_REPORTED_CATEGORIES),
        flagged=", ".join(flagged) if flagged else "none",
        url=snapshot.url,
        content=json.dumps(_content_payload(snapshot), ensure_ascii=False, indent=2),
    )


__all__ = [
    "ENGINE_REPORTED_CATEGORIES",
    "rule_explanation_prompt",
    "page_analysis_prompt",
]
