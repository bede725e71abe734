# api/routers/analytics.py
from fastapi import APIRouter, Depends, Query

from analytics import metrics as svc
from storage.manager import StorageManager

from ..dependencies import get_demo, get_store
from ..responses import ApiError, listing, ok

router = APIRouter()

TIME_RANGE = Query(default="24h", alias="timeRange", description="24h, 7d or 30d")


def _check_range(time_range: str) -> str:
    if time_range not in svc.TIME_RANGES:
        raise ApiError(400, f"timeRange must be one of {', '.join(svc.TIME_RANGES)}")
    return time_range


@router.get("/analytics/overview")
def get_overview(
    time_range: str = TIME_RANGE,
    store: StorageManager = Depends(get_store),
    demo: bool = Depends(get_demo),
):
    return ok(svc.analytics_overview(store, _check_range(time_range), demo=demo))


@router.get("/analytics/metrics")
def get_metrics(store: StorageManager = Depends(get_store), demo: bool = Depends(get_demo)):
    return ok(svc.network_metrics(store, demo=demo))


@router.get("/analytics/volume")
def get_volume(
    time_range: str = TIME_RANGE,
    store: StorageManager = Depends(get_store),
    demo: bool = Depends(get_demo),
):
    return listing(svc.transaction_volume(store, _check_range(time_range), demo=demo))


@router.get("/analytics/tokens")
def get_tokens(store: StorageManager = Depends(get_store)):
    return ok({
        "distribution": svc.token_distribution(store, 10),
        "topTokens": svc.top_tokens_analysis(store, 10),
    })


@router.get("/analytics/tokens/top")
def get_top_tokens(
    limit: int = Query(default=10, ge=1, le=1000),
    store: StorageManager = Depends(get_store),
):
    return listing(svc.top_tokens_analysis(store, limit))


@router.get("/analytics/gas")
def get_gas(
    days: int = Query(default=7, ge=1, le=90),
    store: StorageManager = Depends(get_store),
    demo: bool = Depends(get_demo),
):
    return listing(svc.gas_data(store, days, demo=demo))
