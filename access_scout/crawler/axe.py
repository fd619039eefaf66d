# access_scout/crawler/axe.py
"""
Accessibility engine: axe-core injected into the rendered page.
"""
from __future__ import annotations

from typing import Any, List, Sequence

from access_scout.crawler.models import AxeFinding
from access_scout.crawler.renderer import RenderedPage

_AXE_RUN_JS = """
async (tags) => {
  if (!window.axe) { throw new Error("axe-core was not injected"); }
  const result = await window.axe.run(document, { runOnly: { type: "tag", values: tags } });
  return { violations: result.violations };
}
"""


class AxeEngine:
    """Runs axe-core restricted to *tags* against the current document."""

    def __init__(self, script_url: str, tags: Sequence[str]) -> None:
        self.script_url = script_url
        self.tags = list(tags)

    async def run(self, page: RenderedPage) -> List[AxeFinding]:
        await page.add_script(self.script_url)
        result: Any = await page.evaluate(_AXE_RUN_JS, self.tags)
        if not isinstance(result, dict):
            raise ValueError(f"unexpected axe result: {type(result).__name__}")
        return [AxeFinding.from_axe(v) for v in result.get("violations") or []]


__all__ = ["AxeEngine"]
