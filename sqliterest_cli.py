#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SQLite REST server (FastAPI + SQLite)

Commands:
  serve               Open the database and serve the REST API with uvicorn
  info                Print filename, size, journal mode and integrity of the database
  tables              List tables and views
  sql                 Run one SQL statement (query results are printed as a table)

Notes:
- The database path comes from --db, else SQLITEREST_DB_PATH, else config.yaml.
- SQL parameters are given positionally after the statement; each is read as
  JSON when it parses (1, 2.5, null, "text") and as plain text otherwise.
"""

import argparse
import json
import logging
import os
import sys

import pandas as pd


# ---------------- CFG helpers ----------------

def _apply_config(args):
    if args.config:
        os.environ["SQLITEREST_CONFIG"] = os.path.abspath(args.config)


def _open_service(args):
    from sqliterest.db import ConnectionManager, get_db_path
    from sqliterest.services.config_svc import get_config
    from sqliterest.services.db_service import DatabaseService

    cfg = get_config()
    svc = DatabaseService(ConnectionManager(foreign_keys=cfg["foreign_keys"]))
    svc.open(args.db or get_db_path())
    return svc


def _parse_param(raw: str):
    try:
        return json.loads(raw)
    except ValueError:
        return raw


# ---------------- Commands ----------------

def cmd_serve(args):
    import uvicorn

    from sqliterest.api import create_app
    from sqliterest.db import get_db_path
    from sqliterest.services.config_svc import get_config

    cfg = get_config()
    app = create_app(db_path=args.db or get_db_path())
    uvicorn.run(
        app,
        host=args.host or cfg["host"],
        port=args.port or cfg["port"],
        log_level=args.log_level,
    )


def cmd_info(args):
    svc = _open_service(args)
    try:
        print(json.dumps(svc.get_db_info(), ensure_ascii=False, indent=2))
    finally:
        svc.close()


def cmd_tables(args):
    svc = _open_service(args)
    try:
        df = pd.DataFrame(svc.get_all_tables(), columns=["name", "type"])
    finally:
        svc.close()
    print(df.to_string(index=False) if not df.empty else "(empty)")


def cmd_sql(args):
    svc = _open_service(args)
    try:
        res = svc.execute_sql(args.statement, [_parse_param(p) for p in args.params])
    finally:
        svc.close()

    if res.type == "query":
        df = pd.DataFrame(res.payload["rows"], columns=res.payload["columns"])
        pd.set_option("display.max_rows", 200)
        pd.set_option("display.width", 160)
        print(df if not df.empty else "(empty)")
        if args.csv:
            df.to_csv(args.csv, index=False, encoding="utf-8-sig")
            print(f"\nCSV exported to {args.csv}")
    else:
        print(json.dumps(res.payload))
    print(f"({res.execution_time * 1000:.1f} ms)")


# ---------------- Entry ----------------

def main(argv=None):
    parser = argparse.ArgumentParser(description="SQLite REST server")
    parser.add_argument("--config", default=None, help="path to config.yaml")
    parser.add_argument("--db", default=None, help="database file (created if missing)")
    parser.add_argument("--verbose", action="store_true")
    sub = parser.add_subparsers()

    p_serve = sub.add_parser("serve", help="serve the REST API")
    p_serve.add_argument("--host", default=None)
    p_serve.add_argument("--port", default=None, type=int)
    p_serve.add_argument("--log-level", default="info")
    p_serve.set_defaults(func=cmd_serve)

    p_info = sub.add_parser("info", help="print database info")
    p_info.set_defaults(func=cmd_info)

    p_tables = sub.add_parser("tables", help="list tables and views")
    p_tables.set_defaults(func=cmd_tables)

    p_sql = sub.add_parser("sql", help="run one SQL statement")
    p_sql.add_argument("statement")
    p_sql.add_argument("params", nargs="*")
    p_sql.add_argument("--csv", required=False, help="export query rows to this CSV file")
    p_sql.set_defaults(func=cmd_sql)

    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    _apply_config(args)

    from sqliterest.errors import SQLiteRESTError

    try:
        args.func(args)
    except SQLiteRESTError as e:
        print(f"error [{e.code}]: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
