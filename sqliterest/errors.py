"""Error taxonomy shared by the database layer and the HTTP layer.

Each error carries a stable ``code`` so the transport can map it to a
status code without string matching on messages.
"""
from __future__ import annotations


class SQLiteRESTError(Exception):
    code = "sql_error"


class NotOpen(SQLiteRESTError):
    code = "db_not_open"

    def __init__(self):
        super().__init__("Database is not open")


class OpenFailed(SQLiteRESTError):
    code = "open_failed"

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"Failed to open {path}: {message}")


class InvalidTable(SQLiteRESTError):
    code = "invalid_table"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Table not found: {name}")


class InvalidColumn(SQLiteRESTError):
    code = "invalid_column"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Invalid column name: {name!r}")


class InvalidRowid(SQLiteRESTError):
    # defined for callers; update/delete report rowsAffected == 0 instead
    code = "invalid_rowid"

    def __init__(self, table: str, rowid: int):
        self.table = table
        self.rowid = rowid
        super().__init__(f"Row {rowid} not found in {table}")


class SQLFailed(SQLiteRESTError):
    code = "sql_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class PrepareFailed(SQLFailed):
    def __init__(self, sql: str, message: str):
        self.sql = sql
        super().__init__(message)


class StepFailed(SQLFailed):
    pass


class BindFailed(SQLFailed):
    pass
