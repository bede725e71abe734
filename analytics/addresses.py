# analytics/addresses.py
from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List

from analytics.tokens import token_symbol
from analytics.transfers import QueryOptions, transfers_by_address
from common.utils import iso, parse_amount
from storage.manager import StorageManager


def _amount_text(v: Decimal) -> str:
    s = format(v, "f")
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return "0" if s in ("", "-0") else s


def token_flows(store: StorageManager, address: str) -> List[Dict[str, Any]]:
    """
    Net amount per token for an address: received minus sent.
    Only what is in transfer_events counts, so this is a flow, not an on-chain balance.
    Summed with Decimal so 18 decimal wei amounts stay exact on every backend.
    """
    sql = """
      WITH deltas AS (
        SELECT "tokenAddress" AS token, value, 1 AS sign
          FROM transfer_events
         WHERE LOWER("to") = LOWER(:address)
        UNION ALL
        SELECT "tokenAddress" AS token, value, -1 AS sign
          FROM transfer_events
         WHERE LOWER("from") = LOWER(:address)
      )
      SELECT token, value, sign FROM deltas
    """
    balances: Dict[str, Decimal] = {}
    counts: Dict[str, int] = {}
    for r in store.query(sql, {"address": address}):
        token = r["token"]
        balances[token] = balances.get(token, Decimal(0)) + int(r["sign"]) * parse_amount(r["value"])
        counts[token] = counts.get(token, 0) + 1
    ordered = sorted(counts, key=lambda t: (-counts[t], t or ""))
    return [
        {
            "tokenAddress": token,
            "symbol": token_symbol(token),
            "balance": _amount_text(balances[token]),
            "transfers": counts[token],
        }
        for token in ordered
    ]


def address_details(store: StorageManager, address: str, limit: int = 100) -> Dict[str, Any]:
    summary = store.query_one(
        """
        SELECT
          SUM(CASE WHEN LOWER("from") = LOWER(:address) THEN 1 ELSE 0 END) AS sent,
          SUM(CASE WHEN LOWER("to")   = LOWER(:address) THEN 1 ELSE 0 END) AS received,
          MIN(timestamp) AS first_seen,
          MAX(timestamp) AS last_seen
        FROM transfer_events
        WHERE LOWER("from") = LOWER(:address) OR LOWER("to") = LOWER(:address)
        """,
        {"address": address},
    ) or {}
    return {
        "address": address,
        "transfers": transfers_by_address(store, address, QueryOptions(limit=int(limit))),
        "sentCount": int(summary.get("sent") or 0),
        "receivedCount": int(summary.get("received") or 0),
        "firstSeen": iso(summary.get("first_seen")),
        "lastSeen": iso(summary.get("last_seen")),
        "tokens": token_flows(store, address),
    }
