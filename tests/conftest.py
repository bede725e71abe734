import os
from datetime import datetime, timedelta, timezone

import pytest

from storage.sqlite_backend import SQLiteStorage

# importing dashboard.streamlit_app must never render the ui under pytest
os.environ.setdefault("INDEXER_DASHBOARD_TEST_MODE", "1")

NOW = datetime(2025, 7, 13, 12, 0, tzinfo=timezone.utc)

A = "0x00000000000000000000000000000000000000aa"
B = "0x00000000000000000000000000000000000000bb"
C = "0x00000000000000000000000000000000000000cc"
D = "0x00000000000000000000000000000000000000dd"
USDT = "0xdac17f958d2ee523a2206206994597c13d831ec7"
USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
BEEF = "0x000000000000000000000000000000000000beef"


def _seed_blocks(sm: SQLiteStorage):
    """
    block 99: 1 transfer three days ago
    block 100: 3 transfers two hours ago
    block 101: 2 transfers one hour ago
    """
    sm.setup()
    rows = [
        (A, B, "10", USDT, 99, NOW - timedelta(days=3), None),
        (A, B, "100", USDT, 100, NOW - timedelta(hours=2), "0xh100a"),
        (B, C, "50", USDT, 100, NOW - timedelta(hours=2) + timedelta(seconds=1), None),
        (C, A, "25", USDC, 100, NOW - timedelta(hours=2) + timedelta(seconds=2), None),
        (A, D, "5", USDC, 101, NOW - timedelta(hours=1), None),
        (D, A, "1", BEEF, 101, NOW - timedelta(hours=1) + timedelta(seconds=1), None),
    ]
    for frm, to, value, token, block, ts, tx in rows:
        sm.write_transfer({
            "from": frm, "to": to, "value": value, "tokenAddress": token,
            "blockNumber": block, "timestamp": ts, "transactionHash": tx,
        })


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def store(tmp_path):
    sm = SQLiteStorage(str(tmp_path / "indexer.db"))
    sm.setup()
    return sm


@pytest.fixture
def seeded(tmp_path):
    sm = SQLiteStorage(str(tmp_path / "seeded.db"))
    _seed_blocks(sm)
    return sm


@pytest.fixture
def seeded_pg():
    """The same rows as `seeded`, in the Postgres named by INDEXER_TEST_PG_DSN."""
    dsn = os.environ.get("INDEXER_TEST_PG_DSN")
    if not dsn:
        pytest.skip("Requires INDEXER_TEST_PG_DSN pointing at a disposable Postgres")
    from storage.postgres_backend import PostgresStorage

    ps = PostgresStorage(dsn)
    ps.setup()
    ps.execute("DELETE FROM transfer_events")
    _seed_blocks(ps)
    yield ps
    ps.close()
