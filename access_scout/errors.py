# access_scout/errors.py
"""
Exception hierarchy for AccessScout.

Only request validation (pydantic) and :class:`CrawlUnreachableError` reach
the caller as distinct outcomes; the others are isolated to a single page or
a single AI call and logged.
"""
from __future__ import annotations

from typing import Mapping


class AccessScoutError(Exception):
    """Base class for all project errors."""


class PageAuditError(AccessScoutError):
    """A single page could not be rendered or audited."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class CrawlUnreachableError(AccessScoutError):
    """No page of the site was audited successfully."""

    def __init__(self, seed_url: str, failures: Mapping[str, str] | None = None) -> None:
        self.seed_url = seed_url
        self.failures = dict(failures or {})
        super().__init__(f"Site unreachable: {seed_url}")

    def details(self) -> str:
        """Human-readable explanation listing every failed URL."""
        if not self.failures:
            return f"Could not load {self.seed_url}: no page could be audited."
        lines = [f"Could not load {self.seed_url}. Failed pages:"]
        lines.extend(f"- {url}: {reason}" for url, reason in self.failures.items())
        return "\n".join(lines)


class EnrichmentCallError(AccessScoutError):
    """The AI service call failed (transport, API or empty response)."""


__all__ = [
    "AccessScoutError",
    "PageAuditError",
    "CrawlUnreachableError",
    "EnrichmentCallError",
]
