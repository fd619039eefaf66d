# access_scout/enrichment/service.py
"""
AI text/vision collaborator.

:class:`AIService` is the contract the pipeline depends on: send a prompt
(optionally with one PNG image), get free-form text back. The Anthropic
implementation is built once at process start and shared across scans so the
HTTP connection pool is reused.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol

import anthropic

from access_scout.config import ScannerConfig
from access_scout.errors import EnrichmentCallError


class AIService(Protocol):
    async def complete(
        self, prompt: str, *, image_png_b64: Optional[str] = None, max_tokens: int = 1024
    ) -> str: ...


class AnthropicService:
    """:class:`AIService` backed by the Anthropic Messages API."""

    def __init__(self, model: str, *, api_key: Optional[str] = None, client: Any = None) -> None:
        self.model = model
        self._client = client or anthropic.AsyncAnthropic(api_key=api_key)
        self.logger = logging.getLogger("AccessScout")

    async def complete(
        self, prompt: str, *, image_png_b64: Optional[str] = None, max_tokens: int = 1024
    ) -> str:
        content: List[Dict[str, Any]] = []
        if image_png_b64:
            content.append(
                {
                    "type": "image",
                    "source": {"type": "base64", "media_type": "image/png", "data": image_png_b64},
                }
            )
        content.append({"type": "text", "text": prompt})

        try:
            response = await self._client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": content}],
            )
        except anthropic.APIError as exc:
            raise EnrichmentCallError(f"{type(exc).__name__}: {exc}") from exc

        text = "\n".join(b.text for b in response.content if getattr(b, "type", "") == "text")
        if not text.strip():
            raise EnrichmentCallError("empty response from model")
        return text


def build_ai_service(config: ScannerConfig) -> Optional[AnthropicService]:
    """Return the shared service, or None when no API key is configured."""
    if not config.ai_api_key:
        logging.getLogger("AccessScout").warning("No AI API key configured; enrichment disabled")
        return None
    return AnthropicService(config.ai_model, api_key=config.ai_api_key)


__all__ = ["AIService", "AnthropicService", "build_ai_service"]
