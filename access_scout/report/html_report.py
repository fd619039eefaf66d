# access_scout/report/html_report.py
"""access_scout.report.html_report: HTML-отчёт по ответу сканирования (Jinja2)."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
TEMPLATE_NAME = "report.html.j2"


def _environment(template_dir: Path) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(enabled_extensions=("html", "j2"), default_for_string=True),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["impact_class"] = lambda impact: impact if impact in ("critical", "serious") else ""
    return env


def render_html(
    report: Mapping[str, Any],
    template_dir: Optional[Union[Path, str]],
    output_path: Union[Path, str],
) -> Path:
    """Рендерит ``report.html.j2`` для ответа *report* и пишет результат в *output_path*.

    *template_dir* подменяет встроенный шаблон пакета; ``None`` оставляет его.
    В шаблон передаются ``report`` целиком, а также ``violations`` и
    ``deep_analysis`` (пустые списки для ответов с ошибкой).
    """
    env = _environment(Path(template_dir) if template_dir else DEFAULT_TEMPLATE_DIR)
    html = env.get_template(TEMPLATE_NAME).render(
        report=report,
        violations=report.get("violations") or [],
        deep_analysis=report.get("deep_analysis") or [],
    )

    target = Path(output_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(html, encoding="utf-8")
    return target
