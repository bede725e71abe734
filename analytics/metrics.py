# analytics/metrics.py
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from analytics import synthetic
from analytics.blocks import average_block_time
from analytics.tokens import chart_color, short_address, token_symbol
from analytics.transfers import count_transfers, unique_address_count
from common.utils import as_datetime, to_float, utcnow
from storage.manager import StorageManager, in_clause

logger = logging.getLogger(__name__)

# range -> (bucket count, bucket width)
TIME_RANGES = {
    "24h": (24, timedelta(hours=1)),
    "7d": (7, timedelta(days=1)),
    "30d": (30, timedelta(days=1)),
}


def _pct_change(recent: float, total: float, floor: float = 1.0) -> float:
    """Recent amount as a percentage of what came before it."""
    return recent / max(floor, total - recent) * 100


def _window(store: StorageManager, start: datetime, end: Optional[datetime] = None) -> Dict[str, Any]:
    where = "timestamp >= :start" + (" AND timestamp < :end" if end is not None else "")
    params: Dict[str, Any] = {"start": start}
    if end is not None:
        params["end"] = end
    row = store.query_one(f"""
        SELECT COUNT(*) AS transfers,
               {store.amount_sum()} AS volume,
               COUNT(DISTINCT "blockNumber") AS blocks
          FROM transfer_events
         WHERE {where}
    """, params) or {}
    return {
        "transfers": int(row.get("transfers") or 0),
        "volume": to_float(row.get("volume")),
        "blocks": int(row.get("blocks") or 0),
        "addresses": unique_address_count(store, where, params),
    }


def network_metrics(store: StorageManager, now: Optional[datetime] = None, demo: bool = True) -> Dict[str, Any]:
    now = now or utcnow()
    totals = store.query_one(f"""
        SELECT {store.amount_sum()} AS volume,
               COUNT(DISTINCT "blockNumber") AS blocks,
               MIN(timestamp) AS first_ts,
               MAX(timestamp) AS last_ts
          FROM transfer_events
    """) or {}
    total_tx = count_transfers(store)
    addresses = unique_address_count(store)
    total_value = to_float(totals.get("volume"))
    day = _window(store, now - timedelta(hours=24))

    first_ts, last_ts = as_datetime(totals.get("first_ts")), as_datetime(totals.get("last_ts"))
    span = (last_ts - first_ts).total_seconds() if first_ts and last_ts else 86400.0
    span = max(1.0, span)
    avg_tps = total_tx / span
    tps_24h = day["transfers"] / 86400.0

    return {
        "totalTransactions": total_tx,
        "totalValue": total_value,
        "activeAddresses": addresses,
        "avgBlockTime": average_block_time(store),
        "totalBlocks": int(totals.get("blocks") or 0),
        "tps": avg_tps,
        "totalGasUsed": synthetic.gas_used(total_tx, enabled=demo),
        "change24h": {
            "transactions": _pct_change(day["transfers"], total_tx),
            "value": _pct_change(day["volume"], total_value),
            "addresses": _pct_change(day["addresses"], addresses),
            "tps": tps_24h / max(0.001, avg_tps - tps_24h) * 100,
        },
        "synthetic": demo,
    }


def _bucket_label(start: datetime, hourly: bool) -> str:
    if hourly:
        return start.strftime("%H:%M")
    return f"{start:%b} {start.day}"


def transaction_volume(
    store: StorageManager,
    time_range: str = "24h",
    now: Optional[datetime] = None,
    demo: bool = True,
) -> List[Dict[str, Any]]:
    """Transfers and volume per hour (24h) or per day (7d, 30d), oldest bucket first."""
    if time_range not in TIME_RANGES:
        raise ValueError(f"timeRange must be one of {', '.join(TIME_RANGES)}")
    points, width = TIME_RANGES[time_range]
    now = now or utcnow()
    start = now - points * width
    out = []
    for i in range(points):
        lo = start + i * width
        w = _window(store, lo, lo + width)
        out.append({
            "time": _bucket_label(lo, time_range == "24h"),
            "transactions": w["transfers"],
            "volume": w["volume"],
            "gasUsed": synthetic.gas_used(w["transfers"], enabled=demo),
            "timestamp": lo.isoformat(),
        })
    return out


def _token_rows(store: StorageManager, limit: int) -> List[Dict[str, Any]]:
    return store.query(f"""
        SELECT "tokenAddress"              AS token,
               COUNT(*)                    AS transfers,
               {store.amount_sum()} AS volume,
               {store.amount_avg()} AS avg_value
          FROM transfer_events
         GROUP BY "tokenAddress"
         ORDER BY transfers DESC, token ASC
         LIMIT :limit
    """, {"limit": int(limit)})


def token_distribution(store: StorageManager, limit: int = 10) -> List[Dict[str, Any]]:
    """Share of all transfers per token; `value` is a percentage."""
    total = count_transfers(store)
    out = []
    for i, r in enumerate(_token_rows(store, limit)):
        sym = token_symbol(r["token"])
        transfers = int(r["transfers"])
        out.append({
            "name": sym or f"Token {i + 1}",
            "symbol": sym or f"T{i + 1}",
            "value": transfers / total * 100 if total else 0.0,
            "volume": to_float(r["volume"]),
            "color": chart_color(i),
            "address": r["token"],
            "transferCount": transfers,
        })
    return out


def gas_data(store: StorageManager, days: int = 7, now: Optional[datetime] = None, demo: bool = True) -> List[Dict[str, Any]]:
    if days < 1:
        raise ValueError("days must be a positive integer")
    today = (now or utcnow()).replace(hour=0, minute=0, second=0, microsecond=0)
    out = []
    for i in range(days - 1, -1, -1):
        lo = today - timedelta(days=i)
        w = _window(store, lo, lo + timedelta(days=1))
        out.append({
            "date": _bucket_label(lo, hourly=False),
            "avgGasPrice": synthetic.avg_gas_price(lo.date(), enabled=demo),
            "gasUsed": synthetic.gas_used(w["transfers"], enabled=demo),
            "blockCount": w["blocks"],
        })
    return out


def _addresses_per_token(store: StorageManager, tokens: List[str]) -> Dict[str, int]:
    if not tokens:
        return {}
    placeholders, params = in_clause("t", tokens)
    rows = store.query(f"""
        SELECT u.token AS token, COUNT(*) AS addresses FROM (
          SELECT "tokenAddress" AS token, "from" AS address
            FROM transfer_events WHERE "tokenAddress" IN ({placeholders})
          UNION
          SELECT "tokenAddress" AS token, "to" AS address
            FROM transfer_events WHERE "tokenAddress" IN ({placeholders})
        ) u
         WHERE u.address IS NOT NULL
         GROUP BY u.token
    """, params)
    return {r["token"]: int(r["addresses"]) for r in rows}


def top_tokens_analysis(store: StorageManager, limit: int = 10, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    since = (now or utcnow()) - timedelta(hours=24)
    rows = _token_rows(store, limit)
    tokens = [r["token"] for r in rows]
    addresses = _addresses_per_token(store, tokens)

    recent: Dict[str, int] = {}
    if tokens:
        placeholders, params = in_clause("t", tokens)
        recent = {
            r["token"]: int(r["c"])
            for r in store.query(f"""
                SELECT "tokenAddress" AS token, COUNT(*) AS c
                  FROM transfer_events
                 WHERE "tokenAddress" IN ({placeholders}) AND timestamp >= :since
                 GROUP BY "tokenAddress"
            """, {**params, "since": since})
        }

    out = []
    for r in rows:
        token = r["token"]
        transfers = int(r["transfers"])
        out.append({
            "symbol": token_symbol(token) or short_address(token),
            "address": token,
            "volume": to_float(r["volume"]),
            "transactions": transfers,
            "uniqueAddresses": addresses.get(token, 0),
            "avgTransferValue": to_float(r["avg_value"]),
            "change24h": _pct_change(recent.get(token, 0), transfers),
        })
    return out


def analytics_overview(
    store: StorageManager,
    time_range: str = "24h",
    now: Optional[datetime] = None,
    demo: bool = True,
) -> Dict[str, Any]:
    now = now or utcnow()
    logger.debug("building analytics overview range=%s", time_range)
    return {
        "networkMetrics": network_metrics(store, now=now, demo=demo),
        "transactionVolumeData": transaction_volume(store, time_range, now=now, demo=demo),
        "tokenDistribution": token_distribution(store, 10),
        "gasData": gas_data(store, 7, now=now, demo=demo),
        "topTokens": top_tokens_analysis(store, 10, now=now),
        "timestamp": now.isoformat(),
    }
