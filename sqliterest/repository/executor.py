"""Statement execution against an open ``sqlite3.Connection``.

``run_query`` returns column names and JSON-ready rows; ``run_execute``
returns the affected-row count and last insert rowid. Driver exceptions are
translated into PrepareFailed / BindFailed / StepFailed with the engine's
message kept verbatim.
"""
from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from ..domain.value_codec import to_json_row, to_sql_params
from ..errors import BindFailed, PrepareFailed, StepFailed, SQLFailed

logger = logging.getLogger(__name__)

# error names sqlite reports for statements that fail to compile
_COMPILE_ERRORS = {None, "SQLITE_ERROR"}


@dataclass
class QueryResult:
    columns: list[str] = field(default_factory=list)
    rows: list[list[Any]] = field(default_factory=list)


@dataclass
class ExecResult:
    rows_affected: int = 0
    last_insert_id: int = 0


def translate_error(exc: Exception, sql: str, stepping: bool) -> SQLFailed:
    msg = str(exc)
    if isinstance(exc, sqlite3.InterfaceError) or (
        isinstance(exc, sqlite3.ProgrammingError) and "bind" in msg.lower()
    ):
        return BindFailed(msg)
    if stepping:
        return StepFailed(msg)
    if isinstance(exc, (sqlite3.ProgrammingError, sqlite3.Warning)):
        return PrepareFailed(sql, msg)
    if isinstance(exc, sqlite3.OperationalError) and getattr(exc, "sqlite_errorname", None) in _COMPILE_ERRORS:
        return PrepareFailed(sql, msg)
    return StepFailed(msg)


def _open_cursor(conn: sqlite3.Connection, sql: str, params: Sequence[Any]) -> sqlite3.Cursor:
    try:
        return conn.execute(sql, to_sql_params(params))
    except (sqlite3.Error, sqlite3.Warning) as e:
        logger.debug("Statement failed: %s (%s)", sql, e)
        raise translate_error(e, sql, stepping=False) from e


def run_query(conn: sqlite3.Connection, sql: str, params: Optional[Sequence[Any]] = None) -> QueryResult:
    cur = _open_cursor(conn, sql, params or [])
    try:
        columns = [d[0] for d in (cur.description or [])]
        try:
            rows = [to_json_row(r) for r in cur.fetchall()]
        except sqlite3.Error as e:
            raise translate_error(e, sql, stepping=True) from e
        return QueryResult(columns, rows)
    finally:
        cur.close()


def run_execute(conn: sqlite3.Connection, sql: str, params: Optional[Sequence[Any]] = None) -> ExecResult:
    cur = _open_cursor(conn, sql, params or [])
    try:
        # statements that still produce rows are drained so they run to completion
        if cur.description is not None:
            try:
                cur.fetchall()
            except sqlite3.Error as e:
                raise translate_error(e, sql, stepping=True) from e
        return ExecResult(max(cur.rowcount, 0), cur.lastrowid or 0)
    finally:
        cur.close()


def scalar(conn: sqlite3.Connection, sql: str, params: Optional[Sequence[Any]] = None):
    res = run_query(conn, sql, params)
    if not res.rows or not res.rows[0]:
        return None
    return res.rows[0][0]
