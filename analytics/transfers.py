# analytics/transfers.py
"""
Transfer lookups by address and token, plus the small network summary.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from common.utils import iso
from storage.manager import StorageManager
from storage.schema import SELECT_TRANSFER_COLUMNS

SORTABLE = {
    "id": "id",
    "from": '"from"',
    "to": '"to"',
    "value": "CAST(value AS DECIMAL)",
    "tokenAddress": '"tokenAddress"',
    "blockNumber": '"blockNumber"',
    "timestamp": "timestamp",
    "transactionHash": '"transactionHash"',
}

DEFAULT_LIMIT = 100
MAX_LIMIT = 1000


@dataclass
class QueryOptions:
    limit: int = DEFAULT_LIMIT
    offset: int = 0
    sort_by: str = "timestamp"
    sort_dir: str = "DESC"

    def order_clause(self) -> str:
        col = SORTABLE[self.sort_by]
        # id keeps pages stable when the sort column has ties
        if self.sort_by == "id":
            return f"ORDER BY id {self.sort_dir}"
        return f"ORDER BY {col} {self.sort_dir}, id {self.sort_dir}"


def parse_query_options(
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    sort_by: Optional[str] = None,
    sort_dir: Optional[str] = None,
    *,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> QueryOptions:
    """
    Build options from raw query parameters.
    Unknown sortBy or negative paging raise ValueError. sortDir other than ASC/DESC means DESC.
    """
    lim = default_limit if limit is None else int(limit)
    off = 0 if offset is None else int(offset)
    if lim < 1:
        raise ValueError("limit must be a positive integer")
    if off < 0:
        raise ValueError("offset must not be negative")
    col = sort_by or "timestamp"
    if col not in SORTABLE:
        raise ValueError(f"sortBy must be one of {', '.join(SORTABLE)}")
    d = (sort_dir or "").upper()
    return QueryOptions(
        limit=min(lim, max_limit),
        offset=off,
        sort_by=col,
        sort_dir=d if d in ("ASC", "DESC") else "DESC",
    )


def format_transfer(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "from": row["from"],
        "to": row["to"],
        "value": str(row["value"]) if row["value"] is not None else "0",
        "tokenAddress": row["tokenAddress"],
        "blockNumber": int(row["blockNumber"]) if row["blockNumber"] is not None else None,
        "timestamp": iso(row["timestamp"]),
        "transactionHash": row.get("transactionHash"),
    }


def _select(store: StorageManager, where: str, params: Dict[str, Any], opts: QueryOptions) -> List[Dict]:
    sql = f"""
        SELECT {SELECT_TRANSFER_COLUMNS}
          FROM transfer_events
         WHERE {where}
         {opts.order_clause()}
         LIMIT :limit OFFSET :offset
    """
    rows = store.query(sql, {**params, "limit": opts.limit, "offset": opts.offset})
    return [format_transfer(r) for r in rows]


def transfers_by_address(store: StorageManager, address: str, opts: Optional[QueryOptions] = None) -> List[Dict]:
    """Transfers sent or received by address; a self transfer appears once."""
    where = 'LOWER("from") = LOWER(:address) OR LOWER("to") = LOWER(:address)'
    return _select(store, f"({where})", {"address": address}, opts or QueryOptions())


def transfers_from(store: StorageManager, address: str, opts: Optional[QueryOptions] = None) -> List[Dict]:
    return _select(store, 'LOWER("from") = LOWER(:address)', {"address": address}, opts or QueryOptions())


def transfers_to(store: StorageManager, address: str, opts: Optional[QueryOptions] = None) -> List[Dict]:
    return _select(store, 'LOWER("to") = LOWER(:address)', {"address": address}, opts or QueryOptions())


def transfers_by_token(store: StorageManager, token: str, opts: Optional[QueryOptions] = None) -> List[Dict]:
    return _select(store, 'LOWER("tokenAddress") = LOWER(:token)', {"token": token}, opts or QueryOptions())


def transfers_by_address_and_token(
    store: StorageManager,
    address: str,
    token: str,
    opts: Optional[QueryOptions] = None,
) -> List[Dict]:
    where = (
        '(LOWER("from") = LOWER(:address) OR LOWER("to") = LOWER(:address))'
        ' AND LOWER("tokenAddress") = LOWER(:token)'
    )
    return _select(store, where, {"address": address, "token": token}, opts or QueryOptions())


def recent_transfers(store: StorageManager, opts: Optional[QueryOptions] = None) -> List[Dict]:
    return _select(store, "1=1", {}, opts or QueryOptions(limit=10))


def top_addresses(store: StorageManager, limit: int = 10) -> List[Dict]:
    """Addresses ranked by sent plus received transfer count."""
    sql = """
      WITH touches AS (
        SELECT "from" AS address FROM transfer_events WHERE "from" IS NOT NULL
        UNION ALL
        SELECT "to"   AS address FROM transfer_events WHERE "to" IS NOT NULL
      )
      SELECT address, COUNT(*) AS count
        FROM touches
       GROUP BY address
       ORDER BY count DESC, address ASC
       LIMIT :limit
    """
    rows = store.query(sql, {"limit": int(limit)})
    return [{"address": r["address"], "count": int(r["count"])} for r in rows]


def count_transfers(store: StorageManager) -> int:
    return int(store.scalar("SELECT COUNT(*) AS c FROM transfer_events", default=0))


def unique_address_count(store: StorageManager, where: str = "1=1", params: Optional[Dict] = None) -> int:
    """Distinct addresses over senders and recipients together."""
    sql = f"""
      SELECT COUNT(*) AS c FROM (
        SELECT "from" AS address FROM transfer_events WHERE {where} AND "from" IS NOT NULL
        UNION
        SELECT "to"   AS address FROM transfer_events WHERE {where} AND "to" IS NOT NULL
      ) u
    """
    return int(store.scalar(sql, params or {}, default=0))


def network_summary(store: StorageManager) -> Dict[str, Any]:
    latest = store.scalar('SELECT MAX("blockNumber") AS b FROM transfer_events')
    return {
        "totalTransfers": count_transfers(store),
        "uniqueAddresses": unique_address_count(store),
        "latestBlock": int(latest) if latest is not None else None,
    }


__all__ = [
    "QueryOptions",
    "parse_query_options",
    "format_transfer",
    "transfers_by_address",
    "transfers_from",
    "transfers_to",
    "transfers_by_token",
    "transfers_by_address_and_token",
    "recent_transfers",
    "top_addresses",
    "count_transfers",
    "unique_address_count",
    "network_summary",
]
