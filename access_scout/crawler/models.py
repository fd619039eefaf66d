# access_scout/crawler/models.py
"""
Data models produced by the AccessScout page auditor.
"""
from __future__ import annotations

import base64
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional

IMPACT_LEVELS = ("critical", "serious", "moderate", "minor")


@dataclass(slots=True)
class AxeFinding:
    """One failing axe-core rule on one page."""

    rule_id: str
    impact: str
    description: str
    element_selector: str
    help_url: str

    @classmethod
    def from_axe(cls, raw: Mapping[str, Any]) -> "AxeFinding":
        impact = raw.get("impact")
        selector = "N/A"
        nodes = raw.get("nodes") or []
        if nodes:
            target = nodes[0].get("target") or []
            if target:
                # shadow-DOM targets come back as nested lists
                first = target[0]
                selector = " >>> ".join(first) if isinstance(first, list) else str(first)
        return cls(
            rule_id=str(raw.get("id", "")),
            impact=impact if impact in IMPACT_LEVELS else "unknown",
            description=str(raw.get("description", "")),
            element_selector=selector,
            help_url=str(raw.get("helpUrl", "")),
        )


@dataclass(slots=True)
class FormControl:
    tag: str
    type: str
    name: str
    label: str
    placeholder: str
    placeholder_only_label: bool


@dataclass(slots=True)
class InteractiveElement:
    tag: str
    text: str
    href: str
    generic_text: bool


@dataclass(slots=True)
class LiveRegion:
    tag: str
    role: str
    aria_live: str
    text: str


@dataclass(slots=True)
class PageContent:
    """Structured content pulled out of a rendered page for deep review."""

    text_sample: str = ""
    form_controls: List[FormControl] = field(default_factory=list)
    interactive_elements: List[InteractiveElement] = field(default_factory=list)
    live_regions: List[LiveRegion] = field(default_factory=list)
    sensory_phrases: List[str] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class PageSnapshot:
    """Screenshot and content of an importance-tagged page."""

    url: str
    screenshot: Optional[bytes] = None
    content: Optional[PageContent] = None
    findings: List[AxeFinding] = field(default_factory=list)

    @property
    def screenshot_b64(self) -> Optional[str]:
        if self.screenshot is None:
            return None
        return base64.b64encode(self.screenshot).decode("ascii")


@dataclass(slots=True)
class PageAudit:
    """Everything the auditor learned about one page."""

    url: str
    findings: List[AxeFinding] = field(default_factory=list)
    links: List[str] = field(default_factory=list)
    important: bool = False
    snapshot: Optional[PageSnapshot] = None


__all__ = [
    "IMPACT_LEVELS",
    "AxeFinding",
    "FormControl",
    "InteractiveElement",
    "LiveRegion",
    "PageContent",
    "PageSnapshot",
    "PageAudit",
]
