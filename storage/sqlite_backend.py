from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import closing
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from common.utils import as_datetime, as_decstr, as_int
from storage.manager import StorageError, StorageManager
from storage.schema import (
    CREATE_INDEXES,
    CREATE_TABLE_TRANSFER_EVENTS_SQLITE,
    INSERT_TRANSFER,
)

logger = logging.getLogger(__name__)


def _ts_text(v) -> Optional[str]:
    """Timestamps are stored as naive UTC ISO text so string comparison orders them."""
    dt = as_datetime(v)
    if dt is None:
        return None
    return dt.astimezone(timezone.utc).replace(tzinfo=None).isoformat(sep=" ")


def _adapt(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    out = {}
    for k, v in (params or {}).items():
        out[k] = _ts_text(v) if isinstance(v, datetime) else v
    return out


class SQLiteStorage(StorageManager):
    dialect = "sqlite"

    def __init__(self, path: str):
        self.path = path

    def _connect(self) -> sqlite3.Connection:
        con = sqlite3.connect(self.path, check_same_thread=False)
        con.row_factory = sqlite3.Row
        return con

    def setup(self) -> None:
        from storage.migrations import upgrade

        parent = os.path.dirname(self.path)
        if parent and self.path != ":memory:":
            os.makedirs(parent, exist_ok=True)
        with closing(self._connect()) as con:
            con.execute(CREATE_TABLE_TRANSFER_EVENTS_SQLITE)
            for ddl in CREATE_INDEXES:
                con.execute(ddl)
            con.commit()
        upgrade(self)

    def query(self, sql: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        try:
            with closing(self._connect()) as con:
                cur = con.execute(sql, _adapt(params))
                return [dict(r) for r in cur.fetchall()]
        except sqlite3.Error as e:
            logger.error("sqlite query failed: %s", e)
            raise StorageError(str(e)) from e

    def execute(self, sql: str, params: Optional[Dict[str, Any]] = None) -> None:
        try:
            with closing(self._connect()) as con:
                con.execute(sql, _adapt(params))
                con.commit()
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e

    # integer SUM overflows past 2**63, wei amounts get there in two transfers
    def amount_sum(self, expr: str = "value") -> str:
        return f"TOTAL(CAST({expr} AS REAL))"

    def amount_avg(self, expr: str = "value") -> str:
        return f"AVG(CAST({expr} AS REAL))"

    def columns(self, table: str) -> List[str]:
        rows = self.query(f"PRAGMA table_info({table})")
        return [r["name"] for r in rows]

    def write_transfer(self, tr: Dict[str, Any]) -> int:
        """
        Persist a transfer for local seeding. Value is stored as base 10 text to avoid 64 bit overflow.
        """
        params = {
            "from_addr": tr.get("from") or tr.get("sender"),
            "to_addr": tr.get("to") or tr.get("recipient"),
            "value": as_decstr(tr.get("value")),
            "token": tr.get("tokenAddress") or tr.get("token") or tr.get("contract") or "",
            "block_number": as_int(tr.get("blockNumber", tr.get("block_number"))),
            "ts": _ts_text(tr.get("timestamp") or datetime.now(timezone.utc)),
            "tx_hash": tr.get("transactionHash") or tr.get("tx_hash"),
        }
        try:
            with closing(self._connect()) as con:
                cur = con.execute(INSERT_TRANSFER, params)
                con.commit()
                return int(cur.lastrowid)
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e
