# api/routers/tokens.py
from fastapi import APIRouter, Depends

from analytics import transfers as svc
from analytics.transfers import QueryOptions
from storage.manager import StorageManager

from ..dependencies import get_store, query_options
from ..responses import listing, ok

router = APIRouter()


@router.get("/tokens/{token_address}/transfers")
def get_token_transfers(
    token_address: str,
    opts: QueryOptions = Depends(query_options),
    store: StorageManager = Depends(get_store),
):
    """Transfers of one ERC-20 contract"""
    return listing(svc.transfers_by_token(store, token_address, opts))


@router.get("/baseindex/{token_address}")
def get_base_index(
    token_address: str,
    opts: QueryOptions = Depends(query_options),
    store: StorageManager = Depends(get_store),
):
    """Token transfers for the indexer page; an empty result carries a message instead of a count"""
    rows = svc.transfers_by_token(store, token_address, opts)
    if not rows:
        return ok([], message=f"No record found for the address {token_address}", queryType="address")
    return listing(rows)
