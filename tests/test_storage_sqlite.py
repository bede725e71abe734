import sqlite3
from contextlib import closing
from datetime import datetime, timezone

import pytest

from storage.manager import StorageError, get_storage, in_clause
from storage.migrations import INDEX_TRANSACTION_HASH, downgrade, has_transaction_hash, status, upgrade
from storage.schema import CREATE_TABLE_TRANSFER_EVENTS_SQLITE
from storage.sqlite_backend import SQLiteStorage

TS = datetime(2025, 7, 1, 12, 0, tzinfo=timezone.utc)


def _index_names(ss: SQLiteStorage):
    rows = ss.query("SELECT name FROM sqlite_master WHERE type = 'index'")
    return {r["name"] for r in rows}


def test_sqlite_write_read_transfer(tmp_path):
    ss = SQLiteStorage(str(tmp_path / "test.db"))
    ss.setup()
    rid = ss.write_transfer({
        "from": "0xA", "to": "0xB", "value": "0x64", "tokenAddress": "0xT",
        "blockNumber": "0x10", "timestamp": TS, "transactionHash": "0xh1",
    })
    row = ss.query_one("SELECT * FROM transfer_events WHERE id = :id", {"id": rid})
    assert row["value"] == "100"
    assert row["blockNumber"] == 16
    assert row["transactionHash"] == "0xh1"
    assert row["timestamp"] == "2025-07-01 12:00:00"


def test_sqlite_accepts_ingester_key_names(tmp_path):
    ss = SQLiteStorage(str(tmp_path / "keys.db"))
    ss.setup()
    ss.write_transfer({
        "tx_hash": "0x2", "contract": "0xToken",
        "sender": "0xA", "recipient": "0xB", "value": 7, "block_number": 3,
    })
    row = ss.query_one('SELECT "from", "to", "tokenAddress", "transactionHash" FROM transfer_events')
    assert row == {"from": "0xA", "to": "0xB", "tokenAddress": "0xToken", "transactionHash": "0x2"}


@pytest.mark.parametrize("bad", ["-5", "abc", None, "nan"])
def test_sqlite_rejects_bad_values(tmp_path, bad):
    ss = SQLiteStorage(str(tmp_path / "bad.db"))
    ss.setup()
    with pytest.raises(ValueError):
        ss.write_transfer({"from": "0xA", "to": "0xB", "value": bad, "tokenAddress": "0xT", "blockNumber": 1})
    assert ss.scalar("SELECT COUNT(*) FROM transfer_events") == 0


def test_large_values_are_kept_exact(tmp_path):
    ss = SQLiteStorage(str(tmp_path / "big.db"))
    ss.setup()
    big = str(2 ** 200)
    ss.write_transfer({"from": "0xA", "to": "0xB", "value": big, "tokenAddress": "0xT", "blockNumber": 1})
    assert ss.scalar("SELECT value FROM transfer_events") == big


def test_setup_migrates_existing_table(tmp_path):
    path = str(tmp_path / "legacy.db")
    with closing(sqlite3.connect(path)) as con:
        con.execute(CREATE_TABLE_TRANSFER_EVENTS_SQLITE)
        con.execute(
            'INSERT INTO transfer_events ("from", "to", value, "tokenAddress", "blockNumber", timestamp) '
            "VALUES ('0xA', '0xB', '1', '0xT', 1, '2025-07-01 00:00:00')"
        )
        con.commit()

    ss = SQLiteStorage(path)
    assert not has_transaction_hash(ss)
    assert status(ss) == "pending"
    ss.setup()
    assert has_transaction_hash(ss)
    assert status(ss) == "applied"
    assert INDEX_TRANSACTION_HASH in _index_names(ss)
    # existing rows survive with a null hash
    assert ss.query_one('SELECT "transactionHash" FROM transfer_events')["transactionHash"] is None


def test_migration_up_down_idempotent(tmp_path):
    ss = SQLiteStorage(str(tmp_path / "mig.db"))
    ss.setup()
    assert upgrade(ss) is False

    assert downgrade(ss) is True
    assert not has_transaction_hash(ss)
    assert INDEX_TRANSACTION_HASH not in _index_names(ss)
    assert downgrade(ss) is False

    assert upgrade(ss) is True
    assert has_transaction_hash(ss)
    assert INDEX_TRANSACTION_HASH in _index_names(ss)


def test_sqlite_errors_are_wrapped(tmp_path):
    ss = SQLiteStorage(str(tmp_path / "err.db"))
    ss.setup()
    with pytest.raises(StorageError):
        ss.query("SELECT * FROM no_such_table")


def test_scalar_default_and_in_clause(tmp_path):
    ss = get_storage("sqlite", db_path=str(tmp_path / "s.db"))
    ss.setup()
    assert ss.scalar('SELECT MAX("blockNumber") FROM transfer_events', default=-1) == -1
    placeholders, params = in_clause("b", [5, 6])
    assert placeholders == ":b0, :b1"
    assert params == {"b0": 5, "b1": 6}


def test_get_storage_unknown_backend():
    with pytest.raises(ValueError):
        get_storage("mongo")
