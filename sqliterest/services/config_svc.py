# sqliterest/services/config_svc.py
from __future__ import annotations

from ..db import read_config_yaml

DEFAULTS = {
    "host": "127.0.0.1",
    "port": 8080,
    "cors_origins": [],
    # PRAGMA foreign_keys = ON right after open
    "foreign_keys": True,
    # operation log entries kept in memory for /api/v1/logs/search
    "log_buffer_size": 500,
}


def _to_bool(v, default: bool) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        return v.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(v, (int, float)):
        return bool(v)
    return default


def _to_int(v, default: int) -> int:
    try:
        return int(v)
    except (TypeError, ValueError):
        return default


def get_config() -> dict:
    """Typed settings from config.yaml, falling back to DEFAULTS per key."""
    cfg = read_config_yaml()

    origins = cfg.get("cors_origins", DEFAULTS["cors_origins"])
    if isinstance(origins, str):
        origins = [o.strip() for o in origins.split(",") if o.strip()]
    elif not isinstance(origins, list):
        origins = list(DEFAULTS["cors_origins"])

    out = {
        "host": str(cfg.get("host") or DEFAULTS["host"]),
        "port": _to_int(cfg.get("port"), DEFAULTS["port"]),
        "cors_origins": [str(o) for o in origins],
        "foreign_keys": _to_bool(cfg.get("foreign_keys"), DEFAULTS["foreign_keys"]),
        "log_buffer_size": max(1, _to_int(cfg.get("log_buffer_size"), DEFAULTS["log_buffer_size"])),
    }
    return out
