from __future__ import annotations

import platform
from typing import Any, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ValidationError

from .. import __version__
from ..logs import LogContext
from ..services.db_service import DatabaseService
from .envelope import API_PREFIX, INVALID_JSON, bad_request, error_for, get_service, json_body, success

router = APIRouter(prefix=API_PREFIX)


class SQLRequest(BaseModel):
    sql: str
    params: Optional[List[Any]] = None


def runtime_info() -> dict:
    return {
        "python": platform.python_version(),
        "implementation": platform.python_implementation(),
        "platform": platform.platform(),
    }


@router.get("/db/info")
def api_db_info(svc: DatabaseService = Depends(get_service)):
    try:
        return success(svc.get_db_info())
    except Exception as e:
        return error_for(e)


@router.get("/system/info")
def api_system_info(svc: DatabaseService = Depends(get_service)):
    try:
        data = {
            "database": svc.get_database_metadata(),
            "runtime": runtime_info(),
            "app": {"name": "sqliterest", "version": __version__},
        }
        return success(data)
    except Exception as e:
        return error_for(e)


@router.post("/db/sql")
def api_execute_sql(body=Depends(json_body), svc: DatabaseService = Depends(get_service)):
    if body is INVALID_JSON or not isinstance(body, dict):
        return bad_request("Missing or invalid 'sql' in body")
    try:
        req = SQLRequest.model_validate(body)
    except ValidationError:
        return bad_request("Missing or invalid 'sql' in body")
    if not req.sql.strip():
        return bad_request("Missing or invalid 'sql' in body")
    sql, params = req.sql, req.params or []

    log = LogContext("EXECUTE_SQL")
    log.set_payload({"sql": sql, "params": params})
    try:
        res = svc.execute_sql(sql, params)
    except Exception as e:
        log.write("ERROR", str(e))
        return error_for(e, sql_status=400)
    log.set_after({"type": res.type})
    log.write("OK")
    return success(res.as_dict(), {"executionTime": res.execution_time})
