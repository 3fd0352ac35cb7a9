"""
FastAPI app entry point aggregating the routers under sqliterest/routes.
Keep as `uvicorn sqliterest.api:app`.
"""
from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .db import ConnectionManager, get_db_path
from .errors import SQLiteRESTError
from .logs import LogContext, configure_log_buffer
from .routes import base as base_routes
from .routes import database as database_routes
from .routes import logs as logs_routes
from .routes import tables as tables_routes
from .services.config_svc import get_config
from .services.db_service import DatabaseService


def create_app(service: Optional[DatabaseService] = None, db_path: Optional[str] = None) -> FastAPI:
    """
    Build the app around one owned DatabaseService.

    A service that is already open is used as is; otherwise ``db_path`` (or the
    configured path) is opened at startup. The service is closed at shutdown.
    """
    cfg = get_config()
    configure_log_buffer(cfg["log_buffer_size"])
    svc = service or DatabaseService(ConnectionManager(foreign_keys=cfg["foreign_keys"]))

    app = FastAPI(title="sqliterest", version=__version__)
    app.state.db_service = svc

    if cfg["cors_origins"]:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cfg["cors_origins"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.on_event("startup")
    def on_startup():
        if svc.is_open():
            return
        path = db_path or get_db_path()
        log = LogContext("STARTUP")
        log.set_entity("database", path)
        try:
            svc.open(path)
        except SQLiteRESTError as e:
            # the server still answers; database endpoints report db_not_open
            log.write("ERROR", str(e))
            return
        log.write("OK")

    @app.on_event("shutdown")
    def on_shutdown():
        svc.close()
        LogContext("SHUTDOWN").write("OK")

    app.include_router(base_routes.router)
    app.include_router(database_routes.router)
    app.include_router(tables_routes.router)
    app.include_router(logs_routes.router)
    return app


app = create_app()
