import os
import sys
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


SCHEMA = """
CREATE TABLE Product (
  name TEXT NOT NULL,
  price REAL,
  qty INTEGER DEFAULT 0,
  data BLOB
);
CREATE TABLE Audit (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  note TEXT
);
CREATE VIEW ProductNames AS SELECT name FROM Product;
"""


@pytest.fixture()
def tmp_db_path(tmp_path):
    path = tmp_path / "sqliterest_test.db"
    import sqlite3
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(SCHEMA)
        conn.commit()
    finally:
        conn.close()
    return str(path)


@pytest.fixture()
def svc(tmp_db_path):
    from sqliterest.services.db_service import DatabaseService
    service = DatabaseService()
    service.open(tmp_db_path)
    yield service
    service.close()


@pytest.fixture()
def client(svc):
    # Build the app around the already-open service
    from sqliterest.api import create_app
    from fastapi.testclient import TestClient
    return TestClient(create_app(service=svc))


@pytest.fixture(autouse=True)
def _clean_logs():
    from sqliterest.logs import clear_logs, set_log_handler
    clear_logs()
    yield
    set_log_handler(None)
