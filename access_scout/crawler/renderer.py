# access_scout/crawler/renderer.py
"""
Rendering collaborator: a headless browser shared for one scan.

:class:`Renderer` and :class:`RenderedPage` are the contracts the auditor
depends on; :class:`PlaywrightRenderer` implements them with Chromium.
Every page gets its own browser context so cookies and storage never leak
between audits.
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional, Protocol

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from access_scout.config import ScannerConfig

_LINKS_JS = "els => els.map(e => e.href)"


class RenderedPage(Protocol):
    """One open page inside an isolated rendering context."""

    @property
    def url(self) -> str: ...

    async def goto(self, url: str, timeout: float) -> None: ...

    async def add_script(self, url: str) -> None: ...

    async def evaluate(self, expression: str, arg: Any = None) -> Any: ...

    async def links(self) -> List[str]: ...

    async def content(self) -> str: ...

    async def screenshot(self) -> bytes: ...

    async def close(self) -> None: ...


class Renderer(Protocol):
    async def new_page(self) -> RenderedPage: ...


class PlaywrightPage:
    """:class:`RenderedPage` backed by a Playwright page and its own context."""

    def __init__(self, context: BrowserContext, page: Page) -> None:
        self._context = context
        self._page = page

    @property
    def url(self) -> str:
        return self._page.url

    async def goto(self, url: str, timeout: float) -> None:
        await self._page.goto(url, wait_until="domcontentloaded", timeout=timeout * 1000)

    async def add_script(self, url: str) -> None:
        await self._page.add_script_tag(url=url)

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        return await self._page.evaluate(expression, arg)

    async def links(self) -> List[str]:
        return await self._page.eval_on_selector_all("a[href]", _LINKS_JS)

    async def content(self) -> str:
        return await self._page.content()

    async def screenshot(self) -> bytes:
        return await self._page.screenshot(full_page=False, type="png")

    async def close(self) -> None:
        await self._context.close()


class PlaywrightRenderer:
    """Chromium launched once per scan; use as ``async with``."""

    def __init__(self, config: ScannerConfig) -> None:
        self.config = config
        self.logger = logging.getLogger("AccessScout")
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def __aenter__(self) -> PlaywrightRenderer:
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(
                headless=self.config.headless,
                args=list(self.config.browser_args),
            )
        except Exception:
            await self._playwright.stop()
            self._playwright = None
            raise
        self.logger.debug("Chromium started")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def new_page(self) -> PlaywrightPage:
        if self._browser is None:
            raise RuntimeError("Renderer not started")
        context = await self._browser.new_context(
            viewport={"width": self.config.viewport_width, "height": self.config.viewport_height}
        )
        try:
            page = await context.new_page()
        except Exception:
            await context.close()
            raise
        return PlaywrightPage(context, page)

    async def close(self) -> None:
        try:
            if self._browser is not None:
                await self._browser.close()
        finally:
            self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None
            self.logger.debug("Chromium stopped")


__all__ = ["RenderedPage", "Renderer", "PlaywrightPage", "PlaywrightRenderer"]
