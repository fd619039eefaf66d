#!/usr/bin/env python3
"""
Командная строка AccessScout.

    access-scout scan URL      аудит сайта, отчёт в stdout или в файлы --json/--html
    access-scout serve         HTTP-сервис: POST /api/scan, GET /health
    access-scout config        действующая конфигурация (без ключа API)

Групповые опции --config, --log-level, --log-file и --log-format действуют на
все команды. Логи пишутся в stderr, поэтому JSON из ``scan`` можно передавать
дальше по конвейеру.

Пример:
  access-scout --log-level DEBUG scan example.com --plan guest -l 10 --json out/report.json
"""
import asyncio
import json
import sys
import uuid
from pathlib import Path
from typing import Any, Dict, Optional

import click
from pydantic import ValidationError

from access_scout import __version__
from access_scout.config import ScannerConfig, load_config
from access_scout.engine import run_scan, validation_message
from access_scout.logger import init_logging
from access_scout.report.html_report import render_html
from access_scout.report.json_report import render_json
from access_scout.schemas import PlanTier, ScanRequest
from access_scout.server import run_server

CONTEXT_SETTINGS = dict(help_option_names=["--help"])
LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']

FilePath = click.Path(writable=True, dir_okay=False, path_type=Path)


def fail(message: str):
    """Сообщение красным в stderr и код выхода 1."""
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _execute(cfg: ScannerConfig, request: ScanRequest, timeout: Optional[float]) -> Dict[str, Any]:
    scan = run_scan(cfg, request)
    if timeout:
        scan = asyncio.wait_for(scan, timeout=timeout)
    try:
        return asyncio.run(scan)
    except asyncio.TimeoutError:
        fail(f'Сканирование не завершено за {timeout} секунд')


def _emit(result: Dict[str, Any], json_output, html_output, template_dir, pretty: bool) -> None:
    if json_output is None and html_output is None:
        click.echo(json.dumps(result, ensure_ascii=False, indent=2 if pretty else None))
        return
    if json_output is not None:
        try:
            click.echo(f'JSON report: {render_json(result, json_output, pretty=pretty)}')
        except OSError as e:
            fail(f'Не удалось записать JSON-отчёт: {e}')
    if html_output is not None:
        try:
            click.echo(f'HTML report: {render_html(result, template_dir, html_output)}')
        except Exception as e:
            fail(f'Не удалось построить HTML-отчёт: {e}')


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='AccessScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path', default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='YAML/JSON-конфиг (по умолчанию configs/default.yaml, если есть).'
)
@click.option('--log-level', type=click.Choice(LOG_LEVELS), default=None,
              help='Уровень логирования (по умолчанию из конфига).')
@click.option('--log-file', type=FilePath, default=None, help='Файл логов с ротацией.')
@click.option('--log-format', default='%(asctime)s %(levelname)s %(message)s', show_default=True,
              help='Формат строк лога.')
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """AccessScout: аудит доступности сайта (axe-core) с пояснениями ИИ."""
    try:
        cfg = load_config(config_path)
    except (OSError, ValueError, TypeError, ValidationError) as e:
        fail(f'Ошибка загрузки конфигурации: {e}')
    init_logging(
        level=log_level or cfg.log_level,
        log_file=log_file or cfg.log_file,
        log_format=log_format,
        stream=sys.stderr,
    )
    ctx.obj = {'config': cfg}


@cli.command('scan', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--plan', '-p', type=click.Choice([p.value for p in PlanTier]),
              default=PlanTier.FREE.value, show_default=True,
              help='Тариф: free без ИИ, guest с пояснениями, essentials/professional с разбором страниц.')
@click.option('--max-pages', '-l', type=int, default=None, help='Бюджет страниц (1..50).')
@click.option('--scan-id', default=None, help='Идентификатор скана (по умолчанию SCAN_<uuid>).')
@click.option('--customer-id', default='cli', show_default=True, help='Идентификатор клиента.')
@click.option('--email', default=None, help='Контактный e-mail, возвращается в ответе.')
@click.option('--company', 'company_name', default=None, help='Название компании, возвращается в ответе.')
@click.option('--json', '-j', 'json_output', type=FilePath, default=None, help='Записать JSON-отчёт в файл.')
@click.option('--html', '-h', 'html_output', type=FilePath, default=None, help='Записать HTML-отчёт в файл.')
@click.option('--template', '-t', 'template_dir', default=None,
              type=click.Path(exists=True, file_okay=False, path_type=Path),
              help='Каталог со своим report.html.j2.')
@click.option('--pretty', is_flag=True, help='JSON с отступом 2.')
@click.option('--scan-timeout', type=float, default=None, help='Предел времени на весь скан (секунд).')
@click.pass_context
def scan(ctx, url, plan, max_pages, scan_id, customer_id, email, company_name,
         json_output, html_output, template_dir, pretty, scan_timeout):
    """Просканировать сайт URL и вывести или сохранить отчёт."""
    try:
        request = ScanRequest(
            website_url=url,
            scan_id=scan_id or f'SCAN_{uuid.uuid4().hex[:12]}',
            customer_id=customer_id,
            plan=plan,
            max_pages=max_pages,
            email=email,
            company_name=company_name,
        )
    except ValidationError as e:
        fail(f'Некорректный запрос: {validation_message(e)}')

    result = _execute(ctx.obj['config'], request, scan_timeout)
    _emit(result, json_output, html_output, template_dir, pretty)
    if not result.get('success'):
        fail(f"Сканирование завершилось с ошибкой: {result.get('error', 'unknown error')}")


@cli.command('serve', context_settings=CONTEXT_SETTINGS)
@click.option('--host', default=None, help='Адрес (по умолчанию из конфига).')
@click.option('--port', type=int, default=None, help='Порт (по умолчанию из конфига или $PORT).')
@click.pass_context
def serve(ctx, host, port):
    """Запустить HTTP-сервис сканирования."""
    run_server(ctx.obj['config'], host=host, port=port)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать действующую конфигурацию в JSON (ключ API скрыт)."""
    click.echo(ctx.obj['config'].model_dump_json(indent=2, exclude={'ai_api_key'}))


if __name__ == "__main__":
    cli()
