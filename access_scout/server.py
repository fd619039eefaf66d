# access_scout/server.py
"""
HTTP entry point: ``POST /api/scan`` and ``GET /health`` on aiohttp.web.

The engine, and with it the shared AI client, is built once per process and
reused by every request.
"""
from __future__ import annotations

import json
from typing import Optional

from aiohttp import web

from access_scout.config import ScannerConfig
from access_scout.engine import ScanEngine
from access_scout.logger import logger
from access_scout.report.assembler import failure_report

ENGINE_KEY = web.AppKey("engine", ScanEngine)
SERVICE_NAME = "access-scout"


async def handle_scan(request: web.Request) -> web.Response:
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return web.json_response(failure_report("request body must be valid JSON"), status=400)
    if not isinstance(payload, dict):
        return web.json_response(failure_report("request body must be a JSON object"), status=400)

    engine = request.app[ENGINE_KEY]
    status, body = await engine.run_payload(payload)
    return web.json_response(body, status=status)


async def handle_health(_: web.Request) -> web.Response:
    return web.json_response({"status": "ok", "service": SERVICE_NAME})


def create_app(config: ScannerConfig, engine: Optional[ScanEngine] = None) -> web.Application:
    app = web.Application(client_max_size=1024 * 1024)
    app[ENGINE_KEY] = engine or ScanEngine.from_config(config)
    app.router.add_post("/api/scan", handle_scan)
    app.router.add_get("/health", handle_health)
    return app


def run_server(config: ScannerConfig, host: Optional[str] = None, port: Optional[int] = None) -> None:
    host = host or config.host
    port = port or config.port
    logger.info("AccessScout listening on %s:%d", host, port)
    web.run_app(create_app(config), host=host, port=port, print=None)


__all__ = ["create_app", "run_server", "handle_scan", "handle_health", "ENGINE_KEY"]
