import argparse

from analytics.blocks import block_summaries
from analytics.explorer import network_stats, top_tokens
from analytics.transfers import QueryOptions, transfers_by_address
from analytics.tokens import configure_tokens
from common.settings import load_settings
from storage.manager import get_storage, storage_from_settings


def main():
    p = argparse.ArgumentParser(description="Transfer analytics from the command line")
    p.add_argument("--config", default="config.yaml", help="Path to config.yaml")
    p.add_argument("--db", default=None, help="Path to SQLite DB (overrides config)")
    p.add_argument("--top", type=int, default=10, help="Top N rows")
    sub = p.add_subparsers(dest="command", required=True)
    sub.add_parser("stats", help="Network counters")
    sub.add_parser("blocks", help="Latest blocks")
    sub.add_parser("tokens", help="Most active tokens")
    addr = sub.add_parser("address", help="Transfers for an address")
    addr.add_argument("address")
    args = p.parse_args()

    settings = load_settings(args.config)
    configure_tokens(settings.tokens)
    store = get_storage("sqlite", sqlite_path=args.db) if args.db else storage_from_settings(settings)
    try:
        if args.command == "stats":
            for k, v in network_stats(store).items():
                print(f"{k:>16}: {v}")
        elif args.command == "blocks":
            for b in block_summaries(store, args.top, demo=settings.demo.enabled):
                print(f"{b['number']:>10}  {b['transactions']:>5} transfers  top {b['topToken']}")
        elif args.command == "tokens":
            for i, t in enumerate(top_tokens(store, args.top), 1):
                print(f"{i:02d}. {t['address']}  {t['symbol'] or '-':>6}  {t['transferCount']}")
        elif args.command == "address":
            rows = transfers_by_address(store, args.address, QueryOptions(limit=args.top))
            for r in rows:
                print(f"{r['blockNumber']:>10}  {r['from']} -> {r['to']}  {r['value']}")
    finally:
        store.close()


if __name__ == "__main__":
    main()
