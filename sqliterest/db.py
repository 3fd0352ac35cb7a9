from __future__ import annotations

# sqliterest/db.py
import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

import yaml

from .domain.value_codec import decode_text
from .errors import NotOpen, OpenFailed

logger = logging.getLogger(__name__)

# DB path resolution order:
# 1) SQLITEREST_DB_PATH environment variable
# 2) config.yaml test_db_path (when running under tests)
# 3) config.yaml db_path
# 4) sqliterest.db at the project root
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
_ROOT_DB = os.path.join(_PROJECT_ROOT, "sqliterest.db")

MEMORY_PATH = ":memory:"


def config_path() -> str:
    return os.environ.get("SQLITEREST_CONFIG") or os.path.join(_PROJECT_ROOT, "config.yaml")


def read_config_yaml() -> dict:
    path = config_path()
    if not os.path.exists(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return {}
    return cfg if isinstance(cfg, dict) else {}


def get_db_path(_: str | None = None) -> str:
    env_path = os.environ.get("SQLITEREST_DB_PATH")
    cfg = read_config_yaml()
    cfg_db = cfg.get("db_path")
    cfg_test = cfg.get("test_db_path")
    is_test = (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)

    if env_path:
        path = env_path
    elif is_test and isinstance(cfg_test, str) and cfg_test.strip():
        path = cfg_test.strip()
    elif isinstance(cfg_db, str) and cfg_db.strip():
        path = cfg_db.strip()
    else:
        path = _ROOT_DB

    if path != MEMORY_PATH:
        dirn = os.path.dirname(path) or "."
        os.makedirs(dirn, exist_ok=True)
    return path


class ConnectionManager:
    """
    Owns the single SQLite handle and serializes every use of it.

    ``session()`` holds the lock for the whole unit of work, so a second
    caller waits until the first one finishes. ``open``/``close`` take the
    same lock.
    """

    def __init__(self, foreign_keys: bool = True):
        self._lock = threading.RLock()
        self._conn: Optional[sqlite3.Connection] = None
        self._path: Optional[str] = None
        self.foreign_keys = foreign_keys

    @property
    def path(self) -> Optional[str]:
        with self._lock:
            return self._path

    def open(self, path: str) -> None:
        """Open ``path`` read-write, creating it if absent. Any previous connection is closed first."""
        with self._lock:
            self._close_locked()
            try:
                conn = sqlite3.connect(
                    path,
                    check_same_thread=False,
                    isolation_level=None,
                )
            except sqlite3.Error as e:
                raise OpenFailed(path, str(e)) from e
            conn.text_factory = decode_text
            if self.foreign_keys:
                try:
                    conn.execute("PRAGMA foreign_keys = ON;")
                except sqlite3.Error as e:
                    conn.close()
                    raise OpenFailed(path, str(e)) from e
            self._conn = conn
            self._path = path
            logger.info("Opened database %s", path)

    def close(self) -> None:
        with self._lock:
            self._close_locked()

    def _close_locked(self) -> None:
        if self._conn is not None:
            self._conn.close()
            logger.info("Closed database %s", self._path)
            self._conn = None
        self._path = None

    def is_open(self) -> bool:
        with self._lock:
            return self._conn is not None

    @contextmanager
    def session(self) -> Iterator[sqlite3.Connection]:
        """Exclusive access to the open connection; raises NotOpen without one."""
        with self._lock:
            if self._conn is None:
                raise NotOpen()
            yield self._conn

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False
