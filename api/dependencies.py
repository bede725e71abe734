# api/dependencies.py
from typing import Optional

from fastapi import Depends, Query, Request

from analytics.transfers import QueryOptions, parse_query_options
from common.settings import Settings
from storage.manager import StorageManager

from .responses import ApiError


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> StorageManager:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise ApiError(500, "Storage not initialized")
    return store


def get_demo(settings: Settings = Depends(get_settings)) -> bool:
    return settings.demo.enabled


def query_options(
    limit: Optional[int] = Query(default=None, description="Rows to return"),
    offset: Optional[int] = Query(default=None, description="Rows to skip"),
    sort_by: Optional[str] = Query(default=None, alias="sortBy"),
    sort_dir: Optional[str] = Query(default=None, alias="sortDir"),
    settings: Settings = Depends(get_settings),
) -> QueryOptions:
    """limit/offset/sortBy/sortDir shared by the list endpoints."""
    try:
        return parse_query_options(limit, offset, sort_by, sort_dir, max_limit=settings.api.max_limit)
    except ValueError as e:
        raise ApiError(400, str(e))
