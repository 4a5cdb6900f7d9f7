"""Local HTTP server exposing the dashboard data as JSON."""

import asyncio
import functools
import json
import logging
from typing import Any, Dict

from aiohttp import web

from .controller import DashboardController

logger = logging.getLogger(__name__)

CONTROLLER_KEY = web.AppKey('controller', DashboardController)

_dumps = functools.partial(json.dumps, ensure_ascii=False)


def _json(data: Any, status: int = 200) -> web.Response:
    return web.json_response(data, status=status, dumps=_dumps)


def _options_payload(controller: DashboardController) -> Dict[str, Any]:
    return {
        'cities': controller.city_options,
        'banks': controller.bank_options,
        'filter': controller.filter_state.to_dict(),
    }


async def _handle_root(_: web.Request) -> web.Response:
    html = (
        "<html><head><meta charset='utf-8'><title>ATM Dashboard API</title></head><body>"
        "<h2>ATM Dashboard API</h2>"
        "<ul>"
        "<li><code>GET /api/options</code> selectable cities and banks</li>"
        "<li><code>GET /api/summary</code> counts and chart data for the current filter</li>"
        "<li><code>GET /api/features</code> GeoJSON points for the map</li>"
        "<li><code>POST /api/filter</code> change the filter with <code>{\"city\": ..., \"bank\": ...}</code></li>"
        "</ul>"
        "</body></html>"
    )
    return web.Response(text=html, content_type='text/html')


async def _handle_favicon(_: web.Request) -> web.Response:
    return web.Response(status=204)


async def _handle_options(request: web.Request) -> web.Response:
    return _json(_options_payload(request.app[CONTROLLER_KEY]))


async def _handle_summary(request: web.Request) -> web.Response:
    return _json(request.app[CONTROLLER_KEY].summary.to_dict(include_features=False))


async def _handle_features(request: web.Request) -> web.Response:
    return _json(request.app[CONTROLLER_KEY].summary.features)


async def _handle_filter(request: web.Request) -> web.Response:
    controller = request.app[CONTROLLER_KEY]
    try:
        body = await request.json()
    except ValueError:
        # JSONDecodeError and UnicodeDecodeError both subclass ValueError
        return _json({'error': 'Request body must be JSON'}, status=400)
    if not isinstance(body, dict):
        return _json({'error': 'Request body must be a JSON object'}, status=400)
    for key in ('city', 'bank'):
        if body.get(key) is not None and not isinstance(body[key], str):
            return _json({'error': f"'{key}' must be a string or null"}, status=400)

    state = controller.filter_state
    if 'city' in body and body['city'] != state.city:
        state = state.with_city(body['city'])
    if 'bank' in body:
        state = state.with_bank(body['bank'])

    summary = controller.apply_filter(state)
    payload = summary.to_dict(include_features=False)
    payload['options'] = _options_payload(controller)
    return _json(payload)


def create_app(controller: DashboardController) -> web.Application:
    app = web.Application()
    app.add_routes([
        web.get('/', _handle_root),
        web.get('/favicon.ico', _handle_favicon),
        web.get('/api/options', _handle_options),
        web.get('/api/summary', _handle_summary),
        web.get('/api/features', _handle_features),
        web.post('/api/filter', _handle_filter),
    ])
    app[CONTROLLER_KEY] = controller
    return app


async def run_dashboard_server(controller: DashboardController, host: str, port: int) -> None:
    """Serve the dashboard API until the task is cancelled."""
    app = create_app(controller)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host=host, port=port)
    await site.start()
    logger.info(f"Dashboard API listening on http://{host}:{port}")

    try:
        while True:
            await asyncio.sleep(3600)
    finally:
        await runner.cleanup()
