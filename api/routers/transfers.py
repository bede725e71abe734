# api/routers/transfers.py
import logging

from fastapi import APIRouter, Depends

from analytics import transfers as svc
from analytics.transfers import QueryOptions
from common.logging_setup import log_with_context
from storage.manager import StorageManager

from ..dependencies import get_store, query_options
from ..responses import listing

logger = logging.getLogger(__name__)

router = APIRouter()


# static paths first so "recent" is never taken for an address
@router.get("/transfers/recent")
@router.get("/transactions/recent")
def get_recent_transfers(
    opts: QueryOptions = Depends(query_options),
    store: StorageManager = Depends(get_store),
):
    """Latest transfers across all tokens"""
    rows = svc.recent_transfers(store, opts)
    log_with_context(logger, logging.DEBUG, "Recent transfers fetched", count=len(rows), limit=opts.limit)
    return listing(rows)


@router.get("/transfers/{address}")
def get_transfers_by_address(
    address: str,
    opts: QueryOptions = Depends(query_options),
    store: StorageManager = Depends(get_store),
):
    """Transfers sent or received by an address"""
    rows = svc.transfers_by_address(store, address, opts)
    log_with_context(logger, logging.DEBUG, "Transfers by address fetched", address=address, count=len(rows))
    return listing(rows)


@router.get("/transfers/{address}/from")
def get_transfers_from(
    address: str,
    opts: QueryOptions = Depends(query_options),
    store: StorageManager = Depends(get_store),
):
    """Transfers sent from an address"""
    return listing(svc.transfers_from(store, address, opts))


@router.get("/transfers/{address}/to")
def get_transfers_to(
    address: str,
    opts: QueryOptions = Depends(query_options),
    store: StorageManager = Depends(get_store),
):
    """Transfers received by an address"""
    return listing(svc.transfers_to(store, address, opts))
