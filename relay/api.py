from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from starlette.applications import Starlette
from starlette.endpoints import HTTPEndpoint
from starlette.exceptions import HTTPException
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route

from .store import ACTION_KINDS, NO_CHANGE, ActionMailbox, SnapshotStore

LOGGER = logging.getLogger("poker_relay")

DEFAULT_TABLE = "default"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


class BadRequest(Exception):
    """Raised by request parsing; the message becomes the 400 body."""


def _text(body: str, status: int) -> PlainTextResponse:
    return PlainTextResponse(body, status_code=status)


def _empty() -> Response:
    return Response(status_code=204)


async def _json_body(request: Request) -> Dict[str, object]:
    try:
        data = await request.json()
    except ValueError:
        raise BadRequest("Invalid JSON") from None
    return data if isinstance(data, dict) else {}


def _seat_param(request: Request) -> Tuple[str, int]:
    table_id = request.query_params.get("tableId")
    raw_seat = request.query_params.get("seatIndex")
    if not table_id:
        raise BadRequest("Missing tableId")
    if not raw_seat:
        raise BadRequest("Missing seatIndex")
    try:
        return table_id, int(raw_seat)
    except ValueError:
        raise BadRequest("Invalid seatIndex") from None


def _since_version(raw: Optional[str]) -> int:
    if not raw:
        return 0
    try:
        return int(raw)
    except ValueError:
        return 0


def _whole(value: object) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


class StateEndpoint(HTTPEndpoint):
    async def get(self, request: Request) -> Response:
        store: SnapshotStore = request.app.state.store
        table_id = request.query_params.get("tableId") or DEFAULT_TABLE
        since = _since_version(request.query_params.get("sinceVersion"))
        record = store.read(table_id, since)
        if record is None:
            return _text("Not found", 404)
        if record is NO_CHANGE:
            return _empty()
        return JSONResponse(record.as_payload())  # type: ignore[union-attr]

    async def post(self, request: Request) -> Response:
        store: SnapshotStore = request.app.state.store
        try:
            data = await _json_body(request)
        except BadRequest as exc:
            return _text(str(exc), 400)
        if "state" not in data:
            return _text("Missing state", 400)
        notifications = data.get("notifications")
        if notifications is not None and not isinstance(notifications, list):
            return _text("Invalid notifications", 400)
        table_id = data.get("tableId") or DEFAULT_TABLE
        record = store.publish(str(table_id), data["state"], notifications)
        LOGGER.debug("Table %s now at version %s", table_id, record.version)
        return JSONResponse({"ok": True, "version": record.version, "updatedAt": record.updated_at})


class ActionEndpoint(HTTPEndpoint):
    async def get(self, request: Request) -> Response:
        mailbox: ActionMailbox = request.app.state.mailbox
        try:
            table_id, seat_index = _seat_param(request)
        except BadRequest as exc:
            return _text(str(exc), 400)
        record = mailbox.get(table_id, seat_index)
        if record is None:
            return _empty()
        return JSONResponse(record.as_payload())

    async def post(self, request: Request) -> Response:
        mailbox: ActionMailbox = request.app.state.mailbox
        try:
            data = await _json_body(request)
        except BadRequest as exc:
            return _text(str(exc), 400)

        table_id = data.get("tableId")
        seat_index = data.get("seatIndex")
        action = data.get("action")
        amount = data.get("amount")
        if not table_id:
            return _text("Missing tableId", 400)
        seat = _whole(seat_index)
        if seat is None:
            return _text("Missing or invalid seatIndex", 400)
        if action not in ACTION_KINDS:
            return _text("Missing or invalid action", 400)
        chips = 0 if amount is None else _whole(amount)
        if chips is None:
            return _text("Invalid amount", 400)

        record = mailbox.put(str(table_id), seat, str(action), chips)
        LOGGER.info("Queued %s (%s) for table %s seat %s", record.action, record.amount, table_id, seat_index)
        return JSONResponse({"ok": True, **record.as_payload()})

    async def delete(self, request: Request) -> Response:
        mailbox: ActionMailbox = request.app.state.mailbox
        try:
            table_id, seat_index = _seat_param(request)
        except BadRequest as exc:
            return _text(str(exc), 400)
        mailbox.delete(table_id, seat_index)
        return JSONResponse({"ok": True})


class RelayMiddleware(BaseHTTPMiddleware):
    """Preflight short-circuit, CORS headers and the catch-all 500."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method == "OPTIONS":
            response: Response = _empty()
        else:
            try:
                response = await call_next(request)
            except Exception:
                LOGGER.exception("Unexpected error handling %s %s", request.method, request.url.path)
                response = _text("Internal error", 500)
        response.headers.update(CORS_HEADERS)
        return response


async def _http_error(request: Request, exc: Exception) -> Response:
    status = exc.status_code if isinstance(exc, HTTPException) else 500
    if status == 404:
        return _text("Not found", 404)
    if status == 405:
        return _text("Method not allowed", 405)
    return _text("Internal error", status)


def create_app(store: Optional[SnapshotStore] = None, mailbox: Optional[ActionMailbox] = None) -> Starlette:
    app = Starlette(
        routes=[
            Route("/state", StateEndpoint),
            Route("/action", ActionEndpoint),
        ],
        middleware=[Middleware(RelayMiddleware)],
        exception_handlers={HTTPException: _http_error},
    )
    app.state.store = store or SnapshotStore()
    app.state.mailbox = mailbox or ActionMailbox()
    return app
