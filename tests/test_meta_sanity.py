import importlib


def test_core_modules_and_symbols_exist():
    mods = [
        ("common.settings", ["load_settings", "Settings"]),
        ("common.logging_setup", ["setup_logging", "log_with_context"]),
        ("storage.manager", ["StorageManager", "StorageError", "get_storage"]),
        ("storage.sqlite_backend", ["SQLiteStorage"]),
        ("storage.migrations", ["upgrade", "downgrade", "status"]),
        ("analytics.transfers", ["transfers_by_address", "transfers_from", "transfers_to", "transfers_by_token"]),
        ("analytics.blocks", ["block_summaries", "block_details", "block_stats", "search_blocks", "blocks_paginated"]),
        ("analytics.explorer", ["network_stats", "top_tokens", "recent_activity", "trending_tokens", "network_overview"]),
        ("analytics.metrics", ["network_metrics", "transaction_volume", "token_distribution", "gas_data"]),
        ("api.main", ["create_app"]),
        ("dashboard.client", ["ApiClient"]),
    ]
    for mod_name, symbols in mods:
        mod = importlib.import_module(mod_name)
        for sym in symbols:
            assert hasattr(mod, sym), f"{mod_name} missing {sym}"
