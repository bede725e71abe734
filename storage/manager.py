# storage/manager.py
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class StorageError(Exception):
    pass


class StorageManager(ABC):
    """
    Read side of the transfer_events store.
    SQL is written with :name placeholders and double quoted identifiers;
    each backend adapts it to its driver.
    """
    dialect: str = ""

    @abstractmethod
    def setup(self) -> None:
        """Create the table when missing and apply pending migrations."""

    @abstractmethod
    def query(self, sql: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def execute(self, sql: str, params: Optional[Dict[str, Any]] = None) -> None:
        ...

    @abstractmethod
    def columns(self, table: str) -> List[str]:
        ...

    @abstractmethod
    def write_transfer(self, tr: Dict[str, Any]) -> int:
        ...

    def close(self) -> None:
        pass

    def query_one(self, sql: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        rows = self.query(sql, params)
        return rows[0] if rows else None

    def scalar(self, sql: str, params: Optional[Dict[str, Any]] = None, default: Any = None) -> Any:
        row = self.query_one(sql, params)
        if not row:
            return default
        v = next(iter(row.values()))
        return default if v is None else v

    def amount_sum(self, expr: str = "value") -> str:
        """SQL aggregate for a column of decimal amount text."""
        return f"SUM(CAST({expr} AS DECIMAL))"

    def amount_avg(self, expr: str = "value") -> str:
        return f"AVG(CAST({expr} AS DECIMAL))"


def in_clause(prefix: str, values) -> Tuple[str, Dict[str, Any]]:
    """Expand values into ':p0, :p1, ...' placeholders for an IN (...) list."""
    names = [f"{prefix}{i}" for i in range(len(values))]
    return ", ".join(f":{n}" for n in names), dict(zip(names, values))


def get_storage(backend: str, **opts: Any) -> StorageManager:
    """
    Factory for storage backends. Accepts flexible option names.
      - sqlite: db_path | sqlite_path | path
      - postgres: dsn or individual kwargs (dbname, user, password, host, port, ssl, pool_size)
    """
    b = (backend or "").lower()
    if b == "sqlite":
        from storage.sqlite_backend import SQLiteStorage

        db_path = opts.get("db_path") or opts.get("sqlite_path") or opts.get("path") or "data/dev.db"
        return SQLiteStorage(db_path)
    elif b in ("postgres", "postgresql", "pg"):
        from storage.postgres_backend import PostgresStorage

        return PostgresStorage(**opts)
    else:
        raise ValueError(f"Unknown storage backend: {backend!r}")


def storage_from_settings(settings) -> StorageManager:
    db = settings.db
    logger.info("opening %s storage", db.driver)
    if db.driver == "sqlite":
        return get_storage("sqlite", sqlite_path=db.sqlite_path)
    return get_storage(
        "postgres",
        dbname=db.name,
        user=db.user,
        password=db.password,
        host=db.host,
        port=db.port,
        ssl=db.ssl,
        pool_size=db.pool_size,
    )
