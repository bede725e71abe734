# api/routers/explorer.py
from fastapi import APIRouter, Depends, Query

from analytics import explorer as svc
from analytics.transfers import network_summary
from storage.manager import StorageManager

from ..dependencies import get_store
from ..responses import listing, ok

router = APIRouter()


@router.get("/explorer/stats")
def get_explorer_stats(store: StorageManager = Depends(get_store)):
    """Everything the explorer page shows in one call"""
    return ok(svc.explorer_stats(store))


@router.get("/explorer/network")
def get_network_stats(store: StorageManager = Depends(get_store)):
    return ok(svc.network_stats(store))


@router.get("/explorer/overview")
def get_network_overview(store: StorageManager = Depends(get_store)):
    return ok(svc.network_overview(store))


@router.get("/explorer/activity")
def get_recent_activity(
    limit: int = Query(default=20, ge=1, le=1000),
    store: StorageManager = Depends(get_store),
):
    return listing(svc.recent_activity(store, limit))


@router.get("/explorer/tokens/top")
def get_top_tokens(
    limit: int = Query(default=10, ge=1, le=1000),
    store: StorageManager = Depends(get_store),
):
    return listing(svc.top_tokens(store, limit))


@router.get("/explorer/tokens/trending")
def get_trending_tokens(
    limit: int = Query(default=5, ge=1, le=1000),
    store: StorageManager = Depends(get_store),
):
    return listing(svc.trending_tokens(store, limit))


@router.get("/network/stats")
def get_network_summary(store: StorageManager = Depends(get_store)):
    return ok(network_summary(store))
