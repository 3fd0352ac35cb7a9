"""Parameterized SQL for the row endpoints.

Every function returns ``(sql, params)``. Table and column names go through
``sanitize_identifier`` before they reach the SQL text; data values are only
ever bound as parameters.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

from ..domain.identifiers import sanitize_identifier
from ..domain.paging import PageSpec
from ..domain.value_codec import to_sql
from ..errors import InvalidColumn

CATALOG_TYPES = "type IN ('table','view')"


def column_name(name: str) -> str:
    """Sanitized column name; raises InvalidColumn when nothing usable is left."""
    col = sanitize_identifier(name)
    if not col:
        raise InvalidColumn(name)
    return col


def build_where(filters: Optional[Mapping[str, str]] = None, raw_filter: Optional[str] = None) -> tuple[str, list]:
    """Column-equality filters (sorted by key) AND-ed with an optional raw fragment."""
    parts: list[str] = []
    params: list[Any] = []
    for key in sorted(filters or {}):
        parts.append(f"{column_name(key)} = ?")
        params.append(to_sql(filters[key]))
    if raw_filter and raw_filter.strip():
        parts.append(f"({raw_filter})")
    if not parts:
        return "", params
    return " WHERE " + " AND ".join(parts), params


def count_rows(table: str, where: str = "", params: Optional[list] = None) -> tuple[str, list]:
    return f"SELECT COUNT(*) FROM {sanitize_identifier(table)}{where}", list(params or [])


def list_rows(table: str, page: PageSpec, where: str = "", params: Optional[list] = None) -> tuple[str, list]:
    sql = (
        f"SELECT rowid, * FROM {sanitize_identifier(table)}{where}"
        f" ORDER BY {page.sort_column} {page.direction} LIMIT ? OFFSET ?"
    )
    return sql, [*(params or []), page.limit, page.offset]


def insert_row(table: str, fields: Mapping[str, Any]) -> tuple[str, list]:
    # field order is kept as given; no WHERE clause depends on it
    keys = list(fields)
    cols = ", ".join(column_name(k) for k in keys)
    placeholders = ", ".join("?" for _ in keys)
    sql = f"INSERT INTO {sanitize_identifier(table)} ({cols}) VALUES ({placeholders})"
    return sql, [to_sql(fields[k]) for k in keys]


def update_row(table: str, rowid: int, fields: Mapping[str, Any]) -> tuple[str, list]:
    keys = sorted(fields)
    sets = ", ".join(f"{column_name(k)} = ?" for k in keys)
    sql = f"UPDATE {sanitize_identifier(table)} SET {sets} WHERE rowid = ?"
    return sql, [*(to_sql(fields[k]) for k in keys), rowid]


def delete_row(table: str, rowid: int) -> tuple[str, list]:
    return f"DELETE FROM {sanitize_identifier(table)} WHERE rowid = ?", [rowid]


def table_exists(table: str) -> tuple[str, list]:
    return f"SELECT 1 FROM sqlite_master WHERE {CATALOG_TYPES} AND name = ?", [table]


def table_lookup(table: str) -> tuple[str, list]:
    return f"SELECT name, sql FROM sqlite_master WHERE {CATALOG_TYPES} AND name = ?", [table]


def table_info(table: str) -> tuple[str, list]:
    return f"PRAGMA table_info({sanitize_identifier(table)})", []


def list_tables() -> tuple[str, list]:
    return f"SELECT name, type FROM sqlite_master WHERE {CATALOG_TYPES} ORDER BY type, name", []
