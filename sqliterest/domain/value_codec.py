"""Conversions between SQLite values and JSON-compatible values.

A value crossing the SQL boundary is always one of the tags in ``ValueTag``.
``to_sql`` is used when binding request data, ``to_json`` when projecting a
result column. Inputs of any other type are bound as text rather than
rejected.
"""
from __future__ import annotations

import base64
import json
import math
from enum import Enum
from typing import Any

BLOB_PLACEHOLDER = "<BLOB>"
BLOB_PLACEHOLDER_THRESHOLD = 1024

_INT64_MIN = -(2 ** 63)
_INT64_MAX = 2 ** 63 - 1


class ValueTag(str, Enum):
    NULL = "null"
    INTEGER = "integer"
    REAL = "real"
    TEXT = "text"
    BLOB = "blob"


def classify(value: Any) -> ValueTag:
    """Tag a bindable value. Anything unrecognized is tagged as TEXT."""
    if value is None:
        return ValueTag.NULL
    if isinstance(value, bool):
        return ValueTag.INTEGER
    if isinstance(value, int):
        return ValueTag.INTEGER if _INT64_MIN <= value <= _INT64_MAX else ValueTag.TEXT
    if isinstance(value, float):
        return ValueTag.REAL
    if isinstance(value, str):
        return ValueTag.TEXT
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ValueTag.BLOB
    return ValueTag.TEXT


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False, sort_keys=True, default=str)
    return str(value)


def to_sql(value: Any):
    """Request value -> value handed to ``sqlite3`` for binding."""
    tag = classify(value)
    if tag is ValueTag.NULL:
        return None
    if tag is ValueTag.INTEGER:
        return int(value)
    if tag is ValueTag.REAL:
        return float(value)
    if tag is ValueTag.BLOB:
        return bytes(value)
    return _as_text(value)


def to_sql_params(values) -> list:
    return [to_sql(v) for v in (values or [])]


def to_json(value: Any):
    """Column value read from ``sqlite3`` -> JSON-compatible value.

    Blobs up to BLOB_PLACEHOLDER_THRESHOLD bytes are base64 encoded; larger
    ones are replaced by BLOB_PLACEHOLDER. Non-finite reals become the text
    "inf", "-inf" or "nan".
    """
    if isinstance(value, float) and not math.isfinite(value):
        return repr(value)
    if value is None or isinstance(value, (int, float, str)):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        raw = bytes(value)
        if len(raw) > BLOB_PLACEHOLDER_THRESHOLD:
            return BLOB_PLACEHOLDER
        return base64.b64encode(raw).decode("ascii")
    return None


def to_json_row(row) -> list:
    return [to_json(v) for v in row]


def decode_text(raw: bytes) -> str:
    """Text factory for connections: invalid UTF-8 is replaced, never raised."""
    return raw.decode("utf-8", errors="replace")
