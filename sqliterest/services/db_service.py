"""
Database service: the operations the HTTP layer calls.

Each public method is one unit of work run under the connection manager's
lock, so concurrent callers queue up and never interleave statements.
"""
from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..db import MEMORY_PATH, ConnectionManager
from ..domain.identifiers import sanitize_identifier
from ..domain.paging import DEFAULT_PAGE, DEFAULT_PER_PAGE, PageSpec
from ..errors import InvalidTable
from ..repository import catalog_repo
from ..repository import query_builder as qb
from ..repository.executor import run_execute, run_query, scalar

logger = logging.getLogger(__name__)

QUERY = "query"
EXECUTE = "execute"


def classify_sql(sql: str) -> str:
    """SELECT/WITH statements return rows; everything else reports changes."""
    head = (sql or "").strip().upper()
    return QUERY if head.startswith("SELECT") or head.startswith("WITH") else EXECUTE


@dataclass
class SQLResult:
    type: str
    payload: Dict[str, Any] = field(default_factory=dict)
    execution_time: float = 0.0

    def as_dict(self) -> Dict[str, Any]:
        return {"type": self.type, **self.payload}


def _file_size(path: str) -> int:
    if path == MEMORY_PATH:
        return 0
    try:
        return os.path.getsize(path)
    except OSError:
        return 0


def _abs_path(path: str) -> str:
    return path if path == MEMORY_PATH else os.path.abspath(path)


class DatabaseService:
    """Facade over one SQLite file: info, raw SQL, schema and row CRUD by rowid."""

    def __init__(self, manager: Optional[ConnectionManager] = None):
        self.manager = manager or ConnectionManager()

    # ---------------- lifecycle ----------------

    def open(self, path: str) -> None:
        self.manager.open(path)

    def close(self) -> None:
        self.manager.close()

    def is_open(self) -> bool:
        return self.manager.is_open()

    # ---------------- info ----------------

    def get_db_info(self) -> Dict[str, Any]:
        with self.manager.session() as conn:
            path = self.manager.path
            info: Dict[str, Any] = {
                "filename": os.path.basename(path),
                "path": _abs_path(path),
                "sizeBytes": _file_size(path),
            }
            mode = catalog_repo.pragma(conn, "journal_mode")
            if mode is not None:
                info["journalMode"] = mode
            info["integrity"] = catalog_repo.integrity_check(conn)
            return info

    def get_database_metadata(self) -> Dict[str, Any]:
        with self.manager.session() as conn:
            path = self.manager.path
            ints = {
                key: catalog_repo.pragma_int(conn, name) or 0
                for key, name in (
                    ("pageSize", "page_size"),
                    ("pageCount", "page_count"),
                    ("freelistCount", "freelist_count"),
                    ("schemaVersion", "schema_version"),
                    ("userVersion", "user_version"),
                    ("autoVacuum", "auto_vacuum"),
                    ("synchronous", "synchronous"),
                )
            }
            info: Dict[str, Any] = {
                "filename": os.path.basename(path),
                "path": _abs_path(path),
                "absolutePath": _abs_path(path),
                "sizeBytes": _file_size(path),
                "estimatedSizeBytes": ints["pageSize"] * ints["pageCount"],
                **ints,
                "sqliteVersion": catalog_repo.sqlite_version(conn),
            }
            encoding = catalog_repo.pragma(conn, "encoding")
            if encoding is not None:
                info["encoding"] = encoding
            mode = catalog_repo.pragma(conn, "journal_mode")
            if mode is not None:
                info["journalMode"] = mode
            info["integrity"] = catalog_repo.integrity_check(conn)
            return info

    # ---------------- raw SQL ----------------

    def execute_sql(self, sql: str, params: Optional[Sequence[Any]] = None) -> SQLResult:
        kind = classify_sql(sql)
        with self.manager.session() as conn:
            start = time.perf_counter()
            if kind == QUERY:
                res = run_query(conn, sql, params)
                payload = {"columns": res.columns, "rows": res.rows}
            else:
                res = run_execute(conn, sql, params)
                payload = {"rowsAffected": res.rows_affected, "lastInsertId": res.last_insert_id}
            elapsed = time.perf_counter() - start
        logger.debug("executeSQL %s in %.4fs", kind, elapsed)
        return SQLResult(kind, payload, elapsed)

    # ---------------- schema ----------------

    def get_all_tables(self) -> List[Dict[str, Any]]:
        with self.manager.session() as conn:
            return catalog_repo.list_tables(conn)

    def get_table_schema(self, table: str) -> Dict[str, Any]:
        with self.manager.session() as conn:
            found = catalog_repo.lookup(conn, sanitize_identifier(table))
            if found is None:
                raise InvalidTable(table)
            name, sql = found
            return {"name": name, "sql": sql, "columns": catalog_repo.columns(conn, name)}

    # ---------------- rows ----------------

    def _require_table(self, conn, table: str) -> str:
        safe = sanitize_identifier(table)
        if not catalog_repo.exists(conn, safe):
            raise InvalidTable(table)
        return safe

    def list_rows(
        self,
        table: str,
        page: int = DEFAULT_PAGE,
        per_page: int = DEFAULT_PER_PAGE,
        sort: Optional[str] = None,
        order: Optional[str] = None,
        filters: Optional[Mapping[str, str]] = None,
        raw_filter: Optional[str] = None,
    ) -> Dict[str, Any]:
        paging = PageSpec(page, per_page, sort, order)
        with self.manager.session() as conn:
            safe = self._require_table(conn, table)
            where, params = qb.build_where(filters, raw_filter)
            total = scalar(conn, *qb.count_rows(safe, where, params)) or 0
            res = run_query(conn, *qb.list_rows(safe, paging, where, params))
            return {"columns": res.columns, "rows": res.rows, "totalRows": int(total)}

    def create_row(self, table: str, fields: Mapping[str, Any]) -> int:
        with self.manager.session() as conn:
            safe = self._require_table(conn, table)
            return run_execute(conn, *qb.insert_row(safe, fields)).last_insert_id

    def update_row(self, table: str, rowid: int, fields: Mapping[str, Any]) -> int:
        with self.manager.session() as conn:
            safe = self._require_table(conn, table)
            if not fields:
                return 0
            return run_execute(conn, *qb.update_row(safe, rowid, fields)).rows_affected

    def delete_row(self, table: str, rowid: int) -> int:
        with self.manager.session() as conn:
            safe = self._require_table(conn, table)
            return run_execute(conn, *qb.delete_row(safe, rowid)).rows_affected
