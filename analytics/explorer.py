# analytics/explorer.py
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from analytics.tokens import token_symbol
from analytics.transfers import (
    QueryOptions,
    count_transfers,
    recent_transfers,
    unique_address_count,
)
from common.utils import iso, utcnow
from storage.manager import StorageManager

logger = logging.getLogger(__name__)

TRENDING_WINDOW = 200


def network_stats(store: StorageManager, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Headline counters for the explorer page. recentActivity covers the last 24 hours.
    """
    since = (now or utcnow()) - timedelta(hours=24)
    row = store.query_one("""
        SELECT
          COUNT(DISTINCT "tokenAddress") AS tokens,
          COUNT(DISTINCT "blockNumber")  AS blocks
        FROM transfer_events
    """) or {}
    recent = store.scalar(
        "SELECT COUNT(*) AS c FROM transfer_events WHERE timestamp >= :since",
        {"since": since},
        default=0,
    )
    return {
        "totalTransfers": count_transfers(store),
        "uniqueAddresses": unique_address_count(store),
        "uniqueTokens": int(row.get("tokens") or 0),
        "uniqueBlocks": int(row.get("blocks") or 0),
        "recentActivity": int(recent),
    }


def top_tokens(store: StorageManager, limit: int = 10) -> List[Dict[str, Any]]:
    rows = store.query("""
        SELECT "tokenAddress" AS token, COUNT(*) AS transfers, MAX(timestamp) AS last_activity
          FROM transfer_events
         GROUP BY "tokenAddress"
         ORDER BY transfers DESC, token ASC
         LIMIT :limit
    """, {"limit": int(limit)})
    return [
        {
            "address": r["token"],
            "symbol": token_symbol(r["token"]),
            "transferCount": int(r["transfers"]),
            "lastActivity": iso(r["last_activity"]),
        }
        for r in rows
    ]


def recent_activity(store: StorageManager, limit: int = 20) -> List[Dict[str, Any]]:
    rows = recent_transfers(store, QueryOptions(limit=int(limit)))
    return [{**r, "type": "transfer"} for r in rows]


def trending_tokens(store: StorageManager, limit: int = 5, window: int = TRENDING_WINDOW) -> List[Dict[str, Any]]:
    """Tokens ranked by their share of the latest `window` transfers."""
    rows = store.query("""
        SELECT r.token AS token, COUNT(*) AS recent
          FROM (
            SELECT "tokenAddress" AS token
              FROM transfer_events
             ORDER BY timestamp DESC, id DESC
             LIMIT :window
          ) r
         GROUP BY r.token
         ORDER BY recent DESC, token ASC
         LIMIT :limit
    """, {"window": int(window), "limit": int(limit)})
    return [
        {"address": r["token"], "symbol": token_symbol(r["token"]), "recentTransfers": int(r["recent"])}
        for r in rows
    ]


def _edge_block(store: StorageManager, direction: str) -> Optional[Dict[str, Any]]:
    return store.query_one(f"""
        SELECT "blockNumber" AS number, timestamp
          FROM transfer_events
         ORDER BY "blockNumber" {direction}, id {direction}
         LIMIT 1
    """)


def network_overview(store: StorageManager) -> Dict[str, Any]:
    latest = _edge_block(store, "DESC")
    oldest = _edge_block(store, "ASC")
    if not latest or not oldest:
        return {
            "latestBlock": 0,
            "oldestBlock": 0,
            "blockRange": 0,
            "indexingStartTime": None,
            "lastIndexedTime": None,
        }
    return {
        "latestBlock": int(latest["number"]),
        "oldestBlock": int(oldest["number"]),
        "blockRange": int(latest["number"]) - int(oldest["number"]) + 1,
        "indexingStartTime": iso(oldest["timestamp"]),
        "lastIndexedTime": iso(latest["timestamp"]),
    }


def explorer_stats(store: StorageManager, now: Optional[datetime] = None) -> Dict[str, Any]:
    logger.debug("building explorer stats")
    return {
        "network": network_stats(store, now=now),
        "overview": network_overview(store),
        "topTokens": top_tokens(store, 10),
        "trendingTokens": trending_tokens(store, 5),
        "recentActivity": recent_activity(store, 15),
    }
