# access_scout/enrichment/parsing.py
"""
Turning free-form model output into validated JSON payloads.

The model may wrap its answer in prose or a fenced code block. We take the
first fenced block if there is one, then the first balanced ``{...}`` span
inside it, parse it and validate its shape. Every outcome is reported as an
:class:`AIResult` tagged with :class:`AIStatus`; nothing here raises.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

_FENCE_RE = re.compile(r"```[ \t]*([A-Za-z0-9_-]*)[ \t]*\n?(.*?)```", re.DOTALL)


class AIStatus(str, Enum):
    OK = "ok"
    INVALID = "invalid"
    UNPARSEABLE = "unparseable"
    CALL_FAILED = "call_failed"


@dataclass(slots=True)
class AIResult:
    status: AIStatus
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is AIStatus.OK

    @classmethod
    def failed(cls, error: str) -> "AIResult":
        return cls(AIStatus.CALL_FAILED, error=error)


# --------------------------------------------------------------------------- #
# Expected shapes                                                             #
# --------------------------------------------------------------------------- #


class CodeExample(BaseModel):
    model_config = ConfigDict(extra="allow")

    before: str = ""
    after: str = ""


class RuleExplanation(BaseModel):
    """Plain-language explanation of one axe rule."""
    model_config = ConfigDict(extra="allow")

    plain_language: str
    user_impact: str
    fix_steps: List[str]
    code_example: Optional[CodeExample] = None
    estimated_time: str = ""

    @field_validator("fix_steps", mode="before")
    def _single_step(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [v]
        return v


class PageAnalysis(BaseModel):
    """Deep review of one page (visual and content-quality findings)."""
    model_config = ConfigDict(extra="allow")

    summary: str
    visual_issues: List[Dict[str, Any]] = Field(default_factory=list)
    content_issues: List[Dict[str, Any]] = Field(default_factory=list)
    priority_fixes: List[Dict[str, Any]] = Field(default_factory=list)
    reading_level: Optional[Dict[str, Any]] = None
    estimated_fix_time: Optional[str] = None


# --------------------------------------------------------------------------- #
# Extraction                                                                  #
# --------------------------------------------------------------------------- #


def _balanced_object(text: str) -> Optional[str]:
    """First ``{...}`` span with balanced braces, string literals respected."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for pos in range(start, len(text)):
            char = text[pos]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start : pos + 1]
        # unbalanced from here on; try the next opening brace
        start = text.find("{", start + 1)
    return None


def extract_json_text(text: str) -> Optional[str]:
    """Locate the JSON object inside *text*, or None."""
    if not text:
        return None
    candidate = text
    fences = _FENCE_RE.findall(text)
    if fences:
        json_fences = [body for lang, body in fences if lang.lower() == "json"]
        candidate = json_fences[0] if json_fences else fences[0][1]
    span = _balanced_object(candidate)
    if span is None and candidate is not text:
        span = _balanced_object(text)
    return span


def parse_ai_response(text: str, shape: Type[BaseModel]) -> AIResult:
    """Parse *text* and validate it against *shape*."""
    span = extract_json_text(text)
    if span is None:
        return AIResult(AIStatus.UNPARSEABLE, error="no JSON object in response")
    try:
        data = json.loads(span)
    except (ValueError, RecursionError) as exc:
        return AIResult(AIStatus.UNPARSEABLE, error=f"invalid JSON: {exc}")
    if not isinstance(data, dict):
        return AIResult(AIStatus.INVALID, error="JSON payload is not an object")
    try:
        model = shape.model_validate(data)
    except ValidationError as exc:
        return AIResult(AIStatus.INVALID, data=data, error=f"{exc.error_count()} schema error(s)")
    return AIResult(AIStatus.OK, data=model.model_dump(mode="json"))


__all__ = [
    "AIStatus",
    "AIResult",
    "CodeExample",
    "RuleExplanation",
    "PageAnalysis",
    "extract_json_text",
    "parse_ai_response",
]
