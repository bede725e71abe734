# api/routers/addresses.py
import logging

from fastapi import APIRouter, Depends, Query

from analytics import transfers as svc
from analytics.addresses import address_details
from analytics.transfers import QueryOptions
from common.logging_setup import log_with_context
from storage.manager import StorageManager

from ..dependencies import get_store, query_options
from ..responses import listing, ok

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/addresses/top")
def get_top_addresses(
    opts: QueryOptions = Depends(query_options),
    store: StorageManager = Depends(get_store),
):
    """Addresses with the most sent plus received transfers"""
    return listing(svc.top_addresses(store, opts.limit))


@router.get("/addresses/{address}")
def get_address(
    address: str,
    limit: int = Query(default=100, ge=1, le=1000),
    store: StorageManager = Depends(get_store),
):
    """Latest transfers, counters and per token net flow for an address"""
    details = address_details(store, address, limit=limit)
    log_with_context(logger, logging.DEBUG, "Address details fetched",
                     address=address, transfers=len(details["transfers"]))
    return ok(details)


@router.get("/addresses/{address}/tokens/{token_address}/transfers")
def get_address_token_transfers(
    address: str,
    token_address: str,
    opts: QueryOptions = Depends(query_options),
    store: StorageManager = Depends(get_store),
):
    return listing(svc.transfers_by_address_and_token(store, address, token_address, opts))
