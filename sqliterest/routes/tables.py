from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..domain.paging import DEFAULT_PAGE, DEFAULT_PER_PAGE
from ..logs import LogContext
from ..services.db_service import DatabaseService
from .envelope import API_PREFIX, INVALID_JSON, bad_request, error_for, get_service, int_or, json_body, success

router = APIRouter(prefix=API_PREFIX)

# query keys with a leading underscore are paging controls, the rest are column filters
RESERVED_PREFIX = "_"


def _parse_rowid(rowid: str):
    try:
        return int(rowid)
    except ValueError:
        return None


@router.get("/tables")
def api_list_tables(svc: DatabaseService = Depends(get_service)):
    try:
        return success(svc.get_all_tables())
    except Exception as e:
        return error_for(e)


@router.get("/tables/{table}/schema")
def api_table_schema(table: str, svc: DatabaseService = Depends(get_service)):
    if not table:
        return bad_request("Missing table name")
    try:
        return success(svc.get_table_schema(table))
    except Exception as e:
        return error_for(e)


@router.get("/tables/{table}/rows")
def api_list_rows(table: str, request: Request, svc: DatabaseService = Depends(get_service)):
    query = dict(request.query_params)
    page = int_or(query.get("_page"), DEFAULT_PAGE)
    per_page = int_or(query.get("_per_page"), DEFAULT_PER_PAGE)
    filters = {k: v for k, v in query.items() if not k.startswith(RESERVED_PREFIX)}
    try:
        res = svc.list_rows(
            table,
            page=page,
            per_page=per_page,
            sort=query.get("_sort"),
            order=query.get("_order"),
            filters=filters,
            raw_filter=query.get("_filter"),
        )
    except Exception as e:
        return error_for(e)
    meta = {"page": page, "per_page": per_page, "total_rows": res["totalRows"]}
    return success({"columns": res["columns"], "rows": res["rows"]}, meta)


@router.post("/tables/{table}/rows", status_code=201)
def api_create_row(table: str, body=Depends(json_body), svc: DatabaseService = Depends(get_service)):
    if body is INVALID_JSON or not isinstance(body, dict) or not body:
        return bad_request("Body must be a non-empty JSON object")
    log = LogContext("CREATE_ROW")
    log.set_payload(body)
    try:
        rowid = svc.create_row(table, body)
    except Exception as e:
        log.set_entity(table, None)
        log.write("ERROR", str(e))
        return error_for(e, sql_status=400)
    log.set_entity(table, rowid)
    log.write("OK")
    return success({"rowid": rowid})


@router.put("/tables/{table}/rows/{rowid}")
def api_update_row(table: str, rowid: str, body=Depends(json_body), svc: DatabaseService = Depends(get_service)):
    rid = _parse_rowid(rowid)
    if rid is None:
        return bad_request("Missing table name or invalid rowid")
    if body is INVALID_JSON or not isinstance(body, dict):
        return bad_request("Body must be a JSON object")
    log = LogContext("UPDATE_ROW")
    log.set_entity(table, rid)
    log.set_payload(body)
    try:
        affected = svc.update_row(table, rid, body)
    except Exception as e:
        log.write("ERROR", str(e))
        return error_for(e, sql_status=400)
    log.set_after({"rowsAffected": affected})
    log.write("OK")
    return success({"rowsAffected": affected})


@router.delete("/tables/{table}/rows/{rowid}")
def api_delete_row(table: str, rowid: str, svc: DatabaseService = Depends(get_service)):
    rid = _parse_rowid(rowid)
    if rid is None:
        return bad_request("Missing table name or invalid rowid")
    log = LogContext("DELETE_ROW")
    log.set_entity(table, rid)
    try:
        affected = svc.delete_row(table, rid)
    except Exception as e:
        log.write("ERROR", str(e))
        return error_for(e, sql_status=400)
    log.set_after({"rowsAffected": affected})
    log.write("OK")
    return success({"rowsAffected": affected})
