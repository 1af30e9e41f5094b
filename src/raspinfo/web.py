"""Read API served with aiohttp.web.

Routes:
  - ``GET /api/status`` latest transport, weather and electricity records
  - ``GET /api/debug/status`` masked configuration plus the status payload
  - ``GET /api/debug/timeline`` call history
  - ``GET /api/debug/logs`` captured application log
  - ``GET /api/debug/device`` latest device metrics sample
  - ``GET /`` static front end, when ``config.static_dir`` exists

Handlers only read store copies; upstream failures are never surfaced here
beyond the call history.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from aiohttp import web

from raspinfo._redact import redact_for_log
from raspinfo.config import RaspInfoConfig
from raspinfo.state.store import SnapshotStore

_logger = logging.getLogger(__name__)

STORE_KEY = web.AppKey("store", SnapshotStore)
CONFIG_KEY = web.AppKey("config", RaspInfoConfig)


def _json_response(payload: Any, what: str) -> web.Response:
    try:
        body = json.dumps(payload)
    except (TypeError, ValueError) as exc:
        _logger.error("Error encoding %s: %s", what, exc)
        return web.Response(status=500, text="encoding error")
    return web.Response(text=body, content_type="application/json")


async def handle_status(request: web.Request) -> web.Response:
    snapshot = request.app[STORE_KEY].get()
    return _json_response(snapshot.status_payload(), "response")


async def handle_debug_status(request: web.Request) -> web.Response:
    snapshot = request.app[STORE_KEY].get()
    payload = {
        "config": redact_for_log(request.app[CONFIG_KEY]),
        "store": snapshot.status_payload(),
    }
    return _json_response(payload, "debug status")


async def handle_timeline(request: web.Request) -> web.Response:
    view = request.app[STORE_KEY].get_debug_view()
    return _json_response([record.model_dump(mode="json") for record in view.call_history], "timeline")


async def handle_logs(request: web.Request) -> web.Response:
    view = request.app[STORE_KEY].get_debug_view()
    return _json_response([line.model_dump(mode="json") for line in view.app_log], "logs")


async def handle_device(request: web.Request) -> web.Response:
    view = request.app[STORE_KEY].get_debug_view()
    return _json_response(view.device.model_dump(mode="json"), "device info")


def _static_handler(root: Path) -> Callable[[web.Request], Awaitable[web.StreamResponse]]:
    root = root.resolve()

    async def handle_static(request: web.Request) -> web.StreamResponse:
        relative = request.match_info.get("tail") or "index.html"
        target = (root / relative).resolve()
        if target != root and root not in target.parents:
            raise web.HTTPNotFound()
        if target.is_dir():
            target = target / "index.html"
        if not target.is_file():
            raise web.HTTPNotFound()
        return web.FileResponse(target)

    return handle_static


def create_app(store: SnapshotStore, config: RaspInfoConfig) -> web.Application:
    """Build the read API application around an existing store."""
    app = web.Application()
    app[STORE_KEY] = store
    app[CONFIG_KEY] = config

    app.router.add_get("/api/status", handle_status)
    app.router.add_get("/api/debug/status", handle_debug_status)
    app.router.add_get("/api/debug/timeline", handle_timeline)
    app.router.add_get("/api/debug/logs", handle_logs)
    app.router.add_get("/api/debug/device", handle_device)

    static_dir = Path(config.static_dir)
    if static_dir.is_dir():
        app.router.add_get("/{tail:.*}", _static_handler(static_dir))
    else:
        _logger.info("Static directory %s not found, front end disabled", static_dir)
    return app
