from __future__ import annotations

import json
import logging
from typing import Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from ..errors import InvalidColumn, InvalidRowid, InvalidTable, NotOpen, OpenFailed, SQLiteRESTError
from ..services.db_service import DatabaseService

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

INVALID_JSON = object()


def success(data: Any, meta: Optional[dict] = None) -> dict:
    body = {"success": True, "data": data}
    if meta:
        body["meta"] = meta
    return body


def error(code: str, message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": {"code": code, "message": message}},
    )


def bad_request(message: str) -> JSONResponse:
    return error("bad_request", message, 400)


def error_for(exc: Exception, sql_status: int = 500) -> JSONResponse:
    """Map a database error to its envelope; statement failures use ``sql_status``."""
    if isinstance(exc, NotOpen):
        return error(exc.code, "Database is not open", 503)
    if isinstance(exc, InvalidColumn):
        return error(exc.code, str(exc), 400)
    if isinstance(exc, (InvalidTable, InvalidRowid)):
        return error(exc.code, str(exc), 404)
    if isinstance(exc, OpenFailed):
        return error(exc.code, str(exc), 500)
    if isinstance(exc, SQLiteRESTError):
        return error(exc.code, str(exc), sql_status)
    logger.exception("unhandled error", exc_info=exc)
    return error("internal_error", "internal error", 500)


def get_service(request: Request) -> DatabaseService:
    return request.app.state.db_service


async def json_body(request: Request):
    """Parsed JSON body, None when empty, INVALID_JSON when it does not parse."""
    raw = await request.body()
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return INVALID_JSON


def int_or(value: Optional[str], default: int) -> int:
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default
