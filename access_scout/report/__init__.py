"""access_scout.report: Сборка ответа и сохранение отчётов (JSON и HTML) для CLI."""

from __future__ import annotations

from access_scout.report.html_report import render_html
from access_scout.report.json_report import render_json

__all__ = ["render_json", "render_html"]
