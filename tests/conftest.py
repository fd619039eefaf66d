# File: tests/conftest.py
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import pytest

from access_scout.config import ScannerConfig
from access_scout.crawler.urls import normalize_url
from access_scout.engine import ScanEngine
from access_scout.errors import EnrichmentCallError
from access_scout.logger import init_logging

EXPLANATION_JSON = """Here is the explanation:
```json
{"plain_language": "Images need a text alternative.",
 "user_impact": "Screen reader users miss the content.",
 "fix_steps": ["Add an alt attribute", "Describe the image"],
 "code_example": {"before": "<img src=x>", "after": "<img src=x alt=Logo>"},
 "estimated_time": "5 minutes"}
```"""

ANALYSIS_JSON = """{"summary": "Form fields rely on placeholders.",
 "visual_issues": [],
 "content_issues": [{"type": "placeholder_only", "severity": "serious"}],
 "priority_fixes": [{"rank": 1, "issue": "Labels", "impact": "serious", "fix": "Add labels"}],
 "estimated_fix_time": "1 hour"}"""


def violation(rule_id: str, impact: str = "serious", target: str = "body") -> Dict[str, Any]:
    """Raw axe-core violation as returned by ``axe.run``."""
    return {
        "id": rule_id,
        "impact": impact,
        "description": f"{rule_id} description",
        "helpUrl": f"https://dequeuniversity.com/rules/axe/4.10/{rule_id}",
        "nodes": [{"target": [target]}],
    }


@dataclass
class FakeResponse:
    links: List[str] = field(default_factory=list)
    violations: List[Dict[str, Any]] = field(default_factory=list)
    body: str = ""
    error: Optional[str] = None
    final_url: Optional[str] = None

    @property
    def html(self) -> str:
        anchors = "".join(f'<a href="{href}">link</a>' for href in self.links)
        return f"<html><body>{anchors}{self.body}</body></html>"


class FakePage:
    """In-memory RenderedPage: pages are looked up by canonical URL."""

    def __init__(self, renderer: "FakeRenderer") -> None:
        self.renderer = renderer
        self.response: Optional[FakeResponse] = None
        self._url = "about:blank"
        self.closed = False

    @property
    def url(self) -> str:
        return self._url

    async def goto(self, url: str, timeout: float) -> None:
        self.renderer.navigations.append(url)
        response = self.renderer.site.get(normalize_url(url))
        if response is None:
            raise RuntimeError(f"net::ERR_NAME_NOT_RESOLVED at {url}")
        if response.error:
            raise RuntimeError(response.error)
        self.response = response
        self._url = response.final_url or url

    async def add_script(self, url: str) -> None:
        self.renderer.scripts.append(url)

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        return {"violations": list(self.response.violations)}

    async def links(self) -> List[str]:
        return list(self.response.links)

    async def content(self) -> str:
        return self.response.html

    async def screenshot(self) -> bytes:
        return b"\x89PNG fake screenshot"

    async def close(self) -> None:
        self.closed = True
        self.renderer.closed_pages += 1


class FakeRenderer:
    """Renderer over a dict ``canonical url -> FakeResponse``; usable with ``async with``."""

    def __init__(self, site: Dict[str, FakeResponse], *, fail_on_start: bool = False) -> None:
        self.site = {normalize_url(url): response for url, response in site.items()}
        self.fail_on_start = fail_on_start
        self.navigations: List[str] = []
        self.scripts: List[str] = []
        self.opened_pages = 0
        self.closed_pages = 0
        self.entered = False
        self.exited = False

    async def __aenter__(self) -> "FakeRenderer":
        if self.fail_on_start:
            raise RuntimeError("browser launch failed")
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.exited = True

    async def new_page(self) -> FakePage:
        self.opened_pages += 1
        return FakePage(self)


class FakeAIService:
    """AIService stub: explanation JSON for text prompts, analysis JSON for prompts with an image."""

    def __init__(self, responder: Optional[Callable[[str, Optional[str]], str]] = None) -> None:
        self.responder = responder
        self.calls: List[Dict[str, Any]] = []

    async def complete(self, prompt: str, *, image_png_b64: Optional[str] = None, max_tokens: int = 1024) -> str:
        self.calls.append({"prompt": prompt, "image": image_png_b64, "max_tokens": max_tokens})
        if self.responder is not None:
            return self.responder(prompt, image_png_b64)
        return ANALYSIS_JSON if image_png_b64 else EXPLANATION_JSON


def failing_for(marker: str, text: str = EXPLANATION_JSON) -> Callable[[str, Optional[str]], str]:
    """Responder that raises EnrichmentCallError for prompts mentioning *marker*."""

    def respond(prompt: str, image: Optional[str]) -> str:
        if marker in prompt:
            raise EnrichmentCallError("overloaded_error: try again later")
        return ANALYSIS_JSON if image else text

    return respond


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture(autouse=True)
def stderr_logging():
    """Each test logs to its own captured stderr."""
    init_logging(level="DEBUG", stream=sys.stderr)
    yield


@pytest.fixture()
def scanner_config() -> ScannerConfig:
    return ScannerConfig(explanation_delay=0.5, analysis_delay=1.0)


@pytest.fixture()
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture()
def small_site() -> Dict[str, FakeResponse]:
    """Seed plus two pages, two violations in total."""
    return {
        "https://example.com/": FakeResponse(
            links=["/about", "/contact", "https://other.org/", "mailto:info@example.com"],
            violations=[violation("image-alt", "critical", "img.logo")],
        ),
        "https://example.com/about": FakeResponse(links=["/", "/contact#form"]),
        "https://example.com/contact": FakeResponse(
            links=["/about"],
            violations=[violation("label", "serious", "#email")],
        ),
    }


@pytest.fixture()
def make_engine(scanner_config, sleep_recorder):
    """Build a ScanEngine over a fake site."""

    def _make(site, *, ai_service=None, fail_on_start=False):
        renderers: List[FakeRenderer] = []

        def factory():
            renderer = FakeRenderer(site, fail_on_start=fail_on_start)
            renderers.append(renderer)
            return renderer

        engine = ScanEngine(
            scanner_config,
            ai_service=ai_service,
            renderer_factory=factory,
            sleep=sleep_recorder,
        )
        engine.renderers = renderers
        return engine

    return _make
