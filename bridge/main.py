"""HTTP/MCP bridge for chat-assistant integrations.

Speaks JSON-RPC 2.0 on a single endpoint and forwards tool calls to the
notes REST API.

Endpoints:
  POST /mcp               — JSON-RPC: initialize, ping, tools/list, tools/call
  GET  /mcp               — Service information
  GET  /widgets/{name}    — HTML widgets (note-card, note-detail, notes-list, note-editor)
  GET  /health            — Bridge and notes API reachability
  GET  /metrics           — Prometheus metrics
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from api.metrics import BRIDGE_REQUESTS, BRIDGE_TOOL_DURATION
from api.middleware import MetricsMiddleware
from bridge import widgets
from bridge.client import NotesApiClient, NotesApiError
from bridge.tools import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    HANDLERS,
    TOOLS_DEFINITION,
    JsonRpcError,
    ToolContext,
    call_tool,
)
from mcp_servers.notes.config import settings

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"
SERVER_INFO = {"name": "notes-mcp-server", "version": "1.0.0"}

_NO_CACHE = {"Cache-Control": "no-cache, no-store, must-revalidate"}
_KNOWN_METHODS = ("initialize", "ping", "tools/list", "tools/call")

# --- Global instances ---
client = NotesApiClient(settings.notes_api_url, timeout=settings.notes_api_timeout)
tool_context = ToolContext(
    client, settings.public_base_url if settings.widgets_enabled else None
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: open the notes API connection pool."""
    if "localhost" in settings.notes_api_url:
        logger.warning(
            "Notes API is %s; remote assistants will not reach it",
            settings.notes_api_url,
        )
    await client.connect()
    yield
    await client.close()
    logger.info("Bridge shut down.")


app = FastAPI(title="Notes MCP Bridge", version="1.0.0", lifespan=lifespan)

app.add_middleware(MetricsMiddleware, app_name="bridge")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    max_age=86400,
)


# --- JSON-RPC helpers ---


def _result(req_id: Any, result: dict[str, Any]) -> JSONResponse:
    return JSONResponse(
        {"jsonrpc": "2.0", "id": req_id, "result": result}, headers=_NO_CACHE
    )


def _error(req_id: Any, code: int, message: str, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        {"jsonrpc": "2.0", "id": req_id, "error": {"code": code, "message": message}},
        status_code=status_code,
        headers=_NO_CACHE,
    )


async def _tools_call(params: dict[str, Any]) -> dict[str, Any]:
    name = params.get("name")
    if not name or not isinstance(name, str):
        raise JsonRpcError(INVALID_REQUEST, "Invalid Request: tool name is required")
    arguments = params.get("arguments") or {}
    if not isinstance(arguments, dict):
        raise JsonRpcError(INVALID_PARAMS, "Invalid params: arguments must be an object")

    metric_tool = name if name in HANDLERS else "unknown"
    start = time.perf_counter()
    try:
        return await call_tool(tool_context, name, arguments)
    finally:
        BRIDGE_TOOL_DURATION.labels(tool_name=metric_tool).observe(time.perf_counter() - start)


async def dispatch(method: str, params: dict[str, Any]) -> dict[str, Any]:
    """Run one JSON-RPC method and return its result member."""
    if method == "initialize":
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "serverInfo": SERVER_INFO,
            "capabilities": {"tools": {}},
        }
    if method == "ping":
        return {}
    if method == "tools/list":
        return {"tools": TOOLS_DEFINITION}
    if method == "tools/call":
        return await _tools_call(params)
    raise JsonRpcError(METHOD_NOT_FOUND, f"Unknown method: {method}")


# --- Endpoints ---


@app.post("/mcp")
async def mcp_endpoint(request: Request) -> Response:
    """Main JSON-RPC endpoint."""
    try:
        body = await request.json()
    except ValueError:
        BRIDGE_REQUESTS.labels(method="unparsed", status="error").inc()
        return _error(None, PARSE_ERROR, "Parse error: Invalid JSON", status_code=400)

    if not isinstance(body, dict):
        return _error(None, INVALID_REQUEST, "Invalid Request: expected an object")

    req_id = body.get("id")
    method = body.get("method")
    if not method or not isinstance(method, str):
        return _error(req_id, INVALID_REQUEST, "Invalid Request: method is required")

    # Notifications carry no id and expect no response body.
    if method.startswith("notifications/"):
        BRIDGE_REQUESTS.labels(method="notification", status="ok").inc()
        return Response(status_code=202)

    params = body.get("params") or {}
    if not isinstance(params, dict):
        return _error(req_id, INVALID_PARAMS, "Invalid params: expected an object")

    logger.info("MCP request [%s] id=%s", method, req_id)
    metric_method = method if method in _KNOWN_METHODS else "unknown"
    try:
        result = await dispatch(method, params)
    except JsonRpcError as exc:
        BRIDGE_REQUESTS.labels(method=metric_method, status="error").inc()
        logger.info("MCP request [%s] failed: %d %s", method, exc.code, exc.message)
        return _error(req_id, exc.code, exc.message)
    except NotesApiError as exc:
        BRIDGE_REQUESTS.labels(method=metric_method, status="error").inc()
        logger.error("Notes API failure during [%s]: %s", method, exc)
        return _error(req_id, INTERNAL_ERROR, str(exc))
    except Exception as exc:
        BRIDGE_REQUESTS.labels(method=metric_method, status="error").inc()
        logger.exception("Unhandled error during [%s]", method)
        return _error(req_id, INTERNAL_ERROR, str(exc) or "Internal error")

    BRIDGE_REQUESTS.labels(method=metric_method, status="ok").inc()
    return _result(req_id, result)


@app.get("/mcp")
async def mcp_info() -> dict[str, Any]:
    """Describe the bridge."""
    return {
        **SERVER_INFO,
        "description": "MCP Notes Server for chat assistants",
        "protocol": "mcp",
        "status": "ok",
    }


_RENDERERS = {
    "note-card": widgets.render_note_card,
    "note-detail": widgets.render_note_detail,
    "notes-list": widgets.render_notes_list,
    "note-editor": widgets.render_note_editor,
}


@app.get("/widgets/{name}")
async def widget(name: str, data: str | None = None) -> Response:
    """Render a widget from the JSON passed in ``data``."""
    render = _RENDERERS.get(name)
    if render is None:
        return JSONResponse({"error": f"Unknown widget: {name}"}, status_code=404)
    if data is None:
        if name == "note-editor":
            return HTMLResponse(widgets.render_note_editor(None))
        return JSONResponse({"error": "Missing note data"}, status_code=400)

    try:
        payload = json.loads(data)
    except ValueError as exc:
        return JSONResponse({"error": f"Invalid widget data: {exc}"}, status_code=400)
    if name == "notes-list":
        if not isinstance(payload, list) or not all(isinstance(n, dict) for n in payload):
            return JSONResponse(
                {"error": "Widget data must be a list of note objects"}, status_code=400
            )
    elif not isinstance(payload, dict):
        return JSONResponse({"error": "Widget data must be a note object"}, status_code=400)
    return HTMLResponse(render(payload))


@app.get("/health")
async def health() -> dict[str, Any]:
    """Report whether the notes API answers."""
    try:
        await client.list_notes()
        upstream = "healthy"
    except NotesApiError as exc:
        logger.warning("Notes API health check failed: %s", exc)
        upstream = "unreachable"
    return {
        "bridge": "healthy",
        "notes_api": upstream,
        "notes_api_url": client.base_url,
        "widgets": tool_context.widget_base_url is not None,
    }


@app.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


def main() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.bridge_host, port=settings.bridge_port)


if __name__ == "__main__":
    main()
