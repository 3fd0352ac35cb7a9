from __future__ import annotations

from fastapi import APIRouter

from ..logs import search_operation_logs
from .envelope import API_PREFIX, success

router = APIRouter(prefix=API_PREFIX)


@router.get("/logs/search")
def api_logs_search(
    page: int = 1,
    size: int = 20,
    action: str | None = None,
    query: str | None = None,
    ts_from: str | None = None,
    ts_to: str | None = None,
):
    total, items = search_operation_logs(query, action, ts_from, ts_to, page, size)
    return success({"total": total, "items": items})
