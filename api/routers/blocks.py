# api/routers/blocks.py
import logging
import re
from typing import Optional

from fastapi import APIRouter, Depends, Query

from analytics import blocks as svc
from common.logging_setup import log_with_context
from storage.manager import StorageManager

from ..dependencies import get_demo, get_store
from ..responses import ApiError, listing, ok

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/blocks")
def get_blocks(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=1000),
    min_transactions: Optional[int] = Query(default=None, alias="minTransactions", ge=0),
    max_transactions: Optional[int] = Query(default=None, alias="maxTransactions", ge=0),
    date_range: Optional[str] = Query(default=None, alias="dateRange"),
    store: StorageManager = Depends(get_store),
    demo: bool = Depends(get_demo),
):
    """Blocks, newest first, with transaction count and date filters"""
    try:
        result = svc.blocks_paginated(
            store, page, limit, min_transactions, max_transactions, date_range, demo=demo,
        )
    except ValueError as e:
        raise ApiError(400, str(e))
    return ok(result["blocks"], count=len(result["blocks"]), pagination=result["pagination"])


@router.get("/blocks/recent")
def get_recent_blocks(
    limit: int = Query(default=10, ge=1, le=1000),
    store: StorageManager = Depends(get_store),
    demo: bool = Depends(get_demo),
):
    return listing(svc.block_summaries(store, limit, demo=demo))


@router.get("/blocks/stats")
def get_block_stats(store: StorageManager = Depends(get_store)):
    return ok(svc.block_stats(store))


@router.get("/blocks/search")
def search_blocks(
    q: Optional[str] = Query(default=None, description="Block number or 0x hex"),
    store: StorageManager = Depends(get_store),
    demo: bool = Depends(get_demo),
):
    if not q or not q.strip():
        raise ApiError(400, "Search query is required")
    rows = svc.search_blocks(store, q, demo=demo)
    log_with_context(logger, logging.DEBUG, "Block search", q=q, count=len(rows))
    return listing(rows)


@router.get("/blocks/{block_number}")
def get_block(
    block_number: str,
    store: StorageManager = Depends(get_store),
    demo: bool = Depends(get_demo),
):
    if not re.fullmatch(r"\d+", block_number, re.ASCII):
        raise ApiError(400, "Invalid block number")
    n = int(block_number)
    if n > svc.MAX_BLOCK_NUMBER:
        raise ApiError(404, "Block not found")
    details = svc.block_details(store, n, demo=demo)
    if details is None:
        raise ApiError(404, "Block not found")
    return ok(details)
