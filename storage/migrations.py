# storage/migrations.py
"""
Schema migrations for transfer_events.

There is a single migration: the nullable "transactionHash" column and its index.
Both directions are idempotent so setup() can call upgrade() on every start.
"""
from __future__ import annotations

import argparse
import logging

from storage.manager import StorageManager
from storage.schema import TABLE

logger = logging.getLogger(__name__)

ADD_TRANSACTION_HASH = "20250713183446_add_transaction_hash"
INDEX_TRANSACTION_HASH = "transfer_events_transaction_hash"


def has_transaction_hash(store: StorageManager) -> bool:
    return "transactionHash" in store.columns(TABLE)


def upgrade(store: StorageManager) -> bool:
    """Apply the migration. Returns True when something changed."""
    changed = False
    if not has_transaction_hash(store):
        col_type = "TEXT" if store.dialect == "sqlite" else "VARCHAR(255)"
        store.execute(f'ALTER TABLE {TABLE} ADD COLUMN "transactionHash" {col_type} NULL')
        changed = True
    store.execute(f'CREATE INDEX IF NOT EXISTS {INDEX_TRANSACTION_HASH} ON {TABLE} ("transactionHash")')
    if changed:
        logger.info("applied migration %s", ADD_TRANSACTION_HASH)
    return changed


def downgrade(store: StorageManager) -> bool:
    """Revert the migration. Returns True when something changed."""
    store.execute(f"DROP INDEX IF EXISTS {INDEX_TRANSACTION_HASH}")
    if not has_transaction_hash(store):
        return False
    store.execute(f'ALTER TABLE {TABLE} DROP COLUMN "transactionHash"')
    logger.info("reverted migration %s", ADD_TRANSACTION_HASH)
    return True


def status(store: StorageManager) -> str:
    return "applied" if has_transaction_hash(store) else "pending"


def main():
    from common.logging_setup import setup_logging
    from common.settings import load_settings
    from storage.manager import storage_from_settings

    p = argparse.ArgumentParser(description="transfer_events schema migrations")
    p.add_argument("action", choices=["up", "down", "status"])
    p.add_argument("--config", default="config.yaml", help="Path to config.yaml")
    args = p.parse_args()

    settings = load_settings(args.config)
    setup_logging(settings.log_level)
    store = storage_from_settings(settings)
    try:
        if args.action == "up":
            store.setup()
        elif args.action == "down":
            downgrade(store)
        print(f"{ADD_TRANSACTION_HASH}: {status(store)}")
    finally:
        store.close()


if __name__ == "__main__":
    main()
