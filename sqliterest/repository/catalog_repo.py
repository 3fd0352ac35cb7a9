from __future__ import annotations

import logging
from sqlite3 import Connection
from typing import Optional

from ..errors import SQLiteRESTError
from . import query_builder as qb
from .executor import run_query, scalar

logger = logging.getLogger(__name__)

SYSTEM_PREFIX = "sqlite_"


def pragma(conn: Connection, name: str) -> Optional[str]:
    """Best-effort single-value pragma read; None when it cannot be read."""
    try:
        val = scalar(conn, f"PRAGMA {name};")
    except SQLiteRESTError as e:
        logger.debug("PRAGMA %s unavailable: %s", name, e)
        return None
    return None if val is None else str(val)


def pragma_int(conn: Connection, name: str) -> Optional[int]:
    val = pragma(conn, name)
    try:
        return int(val) if val is not None else None
    except ValueError:
        return None


def integrity_check(conn: Connection) -> str:
    try:
        val = scalar(conn, "PRAGMA integrity_check;")
    except SQLiteRESTError as e:
        logger.warning("integrity_check failed: %s", e)
        return "error"
    return str(val) if val is not None else "error"


def sqlite_version(conn: Connection) -> str:
    try:
        val = scalar(conn, "SELECT sqlite_version()")
    except SQLiteRESTError:
        return "unknown"
    return val if isinstance(val, str) else "unknown"


def list_tables(conn: Connection) -> list[dict]:
    res = run_query(conn, *qb.list_tables())
    out = []
    for name, typ in res.rows:
        name = name or ""
        out.append({"name": name, "type": "system" if name.startswith(SYSTEM_PREFIX) else (typ or "table")})
    return out


def exists(conn: Connection, table: str) -> bool:
    return bool(run_query(conn, *qb.table_exists(table)).rows)


def lookup(conn: Connection, table: str) -> Optional[tuple[str, Optional[str]]]:
    rows = run_query(conn, *qb.table_lookup(table)).rows
    if not rows:
        return None
    name, sql = rows[0]
    return name, sql


def columns(conn: Connection, table: str) -> list[dict]:
    # PRAGMA table_info: cid, name, type, notnull, dflt_value, pk
    res = run_query(conn, *qb.table_info(table))
    return [
        {
            "position": cid,
            "name": name,
            "declaredType": typ or "",
            "isPrimaryKey": bool(pk),
            "notNull": bool(notnull),
            "defaultValue": dflt,
        }
        for cid, name, typ, notnull, dflt, pk in res.rows
    ]
