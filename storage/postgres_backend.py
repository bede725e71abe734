from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import psycopg2
from psycopg2.extras import RealDictCursor
from psycopg2.pool import ThreadedConnectionPool

from common.utils import as_datetime, as_decstr, as_int
from storage.manager import StorageError, StorageManager
from storage.schema import (
    CREATE_INDEXES,
    CREATE_TABLE_TRANSFER_EVENTS_PG,
    INSERT_TRANSFER,
)

logger = logging.getLogger(__name__)

# :name -> %(name)s, leaving ::casts alone
_NAMED = re.compile(r"(?<![:\w]):([A-Za-z_]\w*)")


def to_pyformat(sql: str) -> str:
    return _NAMED.sub(r"%(\1)s", sql)


class PostgresStorage(StorageManager):
    dialect = "postgres"

    def __init__(
        self,
        dsn: Optional[str] = None,
        *,
        dbname: str = "root",
        user: str = "root",
        password: str = "password",
        host: str = "localhost",
        port: int = 5432,
        ssl: bool = False,
        pool_size: int = 5,
    ):
        self.dsn = dsn
        self.conn_kwargs = {
            "dbname": dbname,
            "user": user,
            "password": password,
            "host": host,
            "port": int(port),
        }
        if ssl:
            self.conn_kwargs["sslmode"] = "require"
        self.pool_size = max(1, int(pool_size))
        self.pool: Optional[ThreadedConnectionPool] = None

    def _pool(self) -> ThreadedConnectionPool:
        if self.pool is None:
            try:
                if self.dsn:
                    self.pool = ThreadedConnectionPool(1, self.pool_size, self.dsn)
                else:
                    self.pool = ThreadedConnectionPool(1, self.pool_size, **self.conn_kwargs)
            except psycopg2.Error as e:
                logger.error("database connection error: %s (host=%s db=%s)",
                             e, self.conn_kwargs["host"], self.conn_kwargs["dbname"])
                raise StorageError(str(e)) from e
            logger.info("database connected host=%s db=%s", self.conn_kwargs["host"], self.conn_kwargs["dbname"])
        return self.pool

    def _run(self, sql: str, params: Optional[Dict[str, Any]], fetch: bool):
        pool = self._pool()
        conn = pool.getconn()
        try:
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(to_pyformat(sql), params or {})
                rows = [dict(r) for r in cur.fetchall()] if fetch and cur.description else []
            conn.commit()
            return rows
        except psycopg2.Error as e:
            conn.rollback()
            logger.error("postgres query failed: %s", e)
            raise StorageError(str(e)) from e
        finally:
            pool.putconn(conn)

    def setup(self) -> None:
        from storage.migrations import upgrade

        self.execute(CREATE_TABLE_TRANSFER_EVENTS_PG)
        for ddl in CREATE_INDEXES:
            self.execute(ddl)
        upgrade(self)

    def query(self, sql: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        return self._run(sql, params, fetch=True)

    def execute(self, sql: str, params: Optional[Dict[str, Any]] = None) -> None:
        self._run(sql, params, fetch=False)

    def columns(self, table: str) -> List[str]:
        rows = self.query(
            "SELECT column_name FROM information_schema.columns WHERE table_name = :table",
            {"table": table},
        )
        return [r["column_name"] for r in rows]

    def write_transfer(self, tr: Dict[str, Any]) -> int:
        params = {
            "from_addr": tr.get("from") or tr.get("sender"),
            "to_addr": tr.get("to") or tr.get("recipient"),
            "value": as_decstr(tr.get("value")),
            "token": tr.get("tokenAddress") or tr.get("token") or tr.get("contract") or "",
            "block_number": as_int(tr.get("blockNumber", tr.get("block_number"))),
            "ts": as_datetime(tr.get("timestamp")) or datetime.now(timezone.utc),
            "tx_hash": tr.get("transactionHash") or tr.get("tx_hash"),
        }
        rows = self._run(INSERT_TRANSFER + " RETURNING id", params, fetch=True)
        return int(rows[0]["id"])

    def close(self) -> None:
        if self.pool is not None:
            self.pool.closeall()
            self.pool = None
