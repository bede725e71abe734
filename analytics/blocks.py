# analytics/blocks.py
"""
Block views derived from transfer_events.

There is no blocks table: a block is the group of transfers sharing a
blockNumber. Header style fields come from analytics.synthetic.
"""
from __future__ import annotations

import math
import re
from collections import Counter
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from analytics import synthetic
from common.utils import as_datetime, iso, parse_amount, to_float, utcnow
from storage.manager import StorageManager, in_clause

DEFAULT_BLOCK_TIME = 12
SEARCH_RADIUS = 5
DATE_RANGES = {"24h": timedelta(hours=24), "7d": timedelta(days=7), "30d": timedelta(days=30)}

MAX_BLOCK_NUMBER = 2 ** 63 - 1


def _summary_rows(
    store: StorageManager,
    where: str = "1=1",
    having: str = "1=1",
    params: Optional[Dict[str, Any]] = None,
    limit: int = 50,
    offset: int = 0,
) -> List[Dict[str, Any]]:
    sql = f"""
        SELECT "blockNumber"                  AS number,
               COUNT(*)                       AS transfers,
               MAX(timestamp)                 AS ts,
               COUNT(DISTINCT "tokenAddress") AS tokens,
               {store.amount_sum()} AS total_value
          FROM transfer_events
         WHERE {where}
         GROUP BY "blockNumber"
        HAVING {having}
         ORDER BY "blockNumber" DESC
         LIMIT :limit OFFSET :offset
    """
    return store.query(sql, {**(params or {}), "limit": int(limit), "offset": int(offset)})


def _top_tokens_for(store: StorageManager, numbers: List[int]) -> Dict[int, str]:
    """Most active token per block; ties go to the lowest address."""
    if not numbers:
        return {}
    placeholders, params = in_clause("b", numbers)
    rows = store.query(f"""
        SELECT "blockNumber" AS number, "tokenAddress" AS token, COUNT(*) AS c
          FROM transfer_events
         WHERE "blockNumber" IN ({placeholders})
         GROUP BY "blockNumber", "tokenAddress"
    """, params)
    best: Dict[int, Tuple[int, str]] = {}
    for r in rows:
        n, token, c = int(r["number"]), r["token"] or "", int(r["c"])
        cur = best.get(n)
        if cur is None or c > cur[0] or (c == cur[0] and token < cur[1]):
            best[n] = (c, token)
    return {n: v[1] for n, v in best.items()}


def _format_summary(row: Dict[str, Any], top_token: Optional[str], demo: bool) -> Dict[str, Any]:
    number = int(row["number"])
    count = int(row["transfers"])
    return {
        "number": number,
        "timestamp": iso(row["ts"]),
        "transactions": count,
        **synthetic.block_fields(number, count, enabled=demo),
        "totalValue": f"{to_float(row['total_value']):.2f}",
        "uniqueTokens": int(row["tokens"]),
        "topToken": top_token or "Unknown",
    }


def _summaries(store: StorageManager, rows: List[Dict[str, Any]], demo: bool) -> List[Dict[str, Any]]:
    tops = _top_tokens_for(store, [int(r["number"]) for r in rows])
    return [_format_summary(r, tops.get(int(r["number"])), demo) for r in rows]


def block_summaries(store: StorageManager, limit: int = 50, demo: bool = True) -> List[Dict[str, Any]]:
    """Latest `limit` blocks, highest blockNumber first."""
    return _summaries(store, _summary_rows(store, limit=limit), demo)


def block_details(store: StorageManager, block_number: int, demo: bool = True) -> Optional[Dict[str, Any]]:
    rows = store.query("""
        SELECT id, "from", "to", value, "tokenAddress", timestamp, "transactionHash"
          FROM transfer_events
         WHERE "blockNumber" = :n
         ORDER BY timestamp DESC, id DESC
    """, {"n": int(block_number)})
    if not rows:
        return None

    total = sum((parse_amount(r["value"]) for r in rows), Decimal(0))
    addresses = {r["from"] for r in rows} | {r["to"] for r in rows}
    counts = Counter(r["tokenAddress"] for r in rows)
    top_token = min(counts, key=lambda t: (-counts[t], t or "")) if counts else None

    return {
        "number": int(block_number),
        "timestamp": iso(rows[0]["timestamp"]),
        "transactions": len(rows),
        **synthetic.block_fields(block_number, len(rows), enabled=demo),
        "totalValue": f"{float(total):.2f}",
        "uniqueTokens": len(counts),
        "uniqueAddresses": len(addresses - {None}),
        "topToken": top_token or "Unknown",
        "transfers": [
            {
                "hash": r["transactionHash"] or f"tx_{r['id']}",
                "from": r["from"],
                "to": r["to"],
                "value": str(r["value"]),
                "tokenAddress": r["tokenAddress"],
                "timestamp": iso(r["timestamp"]),
            }
            for r in rows
        ],
    }


def average_block_time(store: StorageManager) -> float:
    """Seconds per block over the indexed range, 12 when it cannot be measured."""
    row = store.query_one("""
        SELECT MIN("blockNumber") AS lo, MAX("blockNumber") AS hi,
               MIN(timestamp) AS first_ts, MAX(timestamp) AS last_ts
          FROM transfer_events
    """)
    if not row or row["lo"] is None:
        return float(DEFAULT_BLOCK_TIME)
    blocks = int(row["hi"]) - int(row["lo"])
    span = (as_datetime(row["last_ts"]) - as_datetime(row["first_ts"])).total_seconds()
    if blocks <= 0 or span <= 0:
        return float(DEFAULT_BLOCK_TIME)
    return span / blocks


def block_stats(store: StorageManager) -> Dict[str, Any]:
    row = store.query_one("""
        SELECT COUNT(DISTINCT "blockNumber") AS blocks, COUNT(*) AS transfers
          FROM transfer_events
    """) or {}
    latest = store.query_one("""
        SELECT "blockNumber" AS number, timestamp
          FROM transfer_events
         ORDER BY "blockNumber" DESC, id DESC
         LIMIT 1
    """)
    blocks = int(row.get("blocks") or 0)
    transfers = int(row.get("transfers") or 0)
    return {
        "totalBlocks": blocks,
        "latestBlockNumber": int(latest["number"]) if latest else 0,
        "latestBlockTimestamp": iso(latest["timestamp"]) if latest else None,
        "avgTransactionsPerBlock": int(transfers / (blocks or 1) + 0.5),
        "avgBlockTime": round(average_block_time(store), 2),
        "totalTransactions": transfers,
    }


def parse_block_query(q: str) -> Optional[int]:
    """Decimal block number or a 0x hex string (block hashes encode the number)."""
    q = (q or "").strip()
    if re.fullmatch(r"\d+", q, re.ASCII):
        n = int(q)
    elif re.fullmatch(r"0[xX][0-9a-fA-F]+", q):
        n = int(q[2:], 16)
    else:
        return None
    return n if n <= MAX_BLOCK_NUMBER else None


def search_blocks(store: StorageManager, q: str, demo: bool = True) -> List[Dict[str, Any]]:
    n = parse_block_query(q)
    if n is None:
        return []
    rows = _summary_rows(
        store,
        where='"blockNumber" BETWEEN :lo AND :hi',
        params={"lo": max(0, n - SEARCH_RADIUS), "hi": min(n + SEARCH_RADIUS, MAX_BLOCK_NUMBER)},
        limit=2 * SEARCH_RADIUS + 1,
    )
    return _summaries(store, rows, demo)


def blocks_paginated(
    store: StorageManager,
    page: int = 1,
    limit: int = 20,
    min_transactions: Optional[int] = None,
    max_transactions: Optional[int] = None,
    date_range: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
    demo: bool = True,
) -> Dict[str, Any]:
    if page < 1 or limit < 1:
        raise ValueError("page and limit must be positive integers")
    where, having, params = ["1=1"], ["1=1"], {}
    if date_range and date_range != "all":
        if date_range not in DATE_RANGES:
            raise ValueError(f"dateRange must be one of all, {', '.join(DATE_RANGES)}")
        where.append("timestamp >= :cutoff")
        params["cutoff"] = (now or utcnow()) - DATE_RANGES[date_range]
    if min_transactions is not None:
        having.append("COUNT(*) >= :min_tx")
        params["min_tx"] = int(min_transactions)
    if max_transactions is not None:
        having.append("COUNT(*) <= :max_tx")
        params["max_tx"] = int(max_transactions)

    where_sql, having_sql = " AND ".join(where), " AND ".join(having)
    total = int(store.scalar(f"""
        SELECT COUNT(*) AS c FROM (
          SELECT "blockNumber"
            FROM transfer_events
           WHERE {where_sql}
           GROUP BY "blockNumber"
          HAVING {having_sql}
        ) g
    """, params, default=0))
    rows = _summary_rows(store, where_sql, having_sql, params, limit=limit, offset=(page - 1) * limit)
    return {
        "blocks": _summaries(store, rows, demo),
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": math.ceil(total / limit),
        },
    }
