# access_scout/report/json_report.py
"""Запись ответа сканирования в JSON-файл (для CLI)."""
import json
from pathlib import Path
from typing import Any, Mapping


def render_json(report: Mapping[str, Any], output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Пишет *report* (успешный ответ или ответ с ошибкой) в файл UTF-8.

    Каталоги создаются при необходимости; ``pretty=False`` даёт одну строку.
    Возвращает путь к записанному файлу::

        render_json(result, 'reports/SCAN_42.json')
    """
    target = Path(output_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(dict(report), ensure_ascii=False, indent=2 if pretty else None)
    target.write_text(text + "\n" if pretty else text, encoding="utf-8")
    return target
