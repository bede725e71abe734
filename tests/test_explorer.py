from analytics.addresses import address_details
from analytics.explorer import (
    explorer_stats,
    network_overview,
    network_stats,
    recent_activity,
    top_tokens,
    trending_tokens,
)
from analytics.transfers import count_transfers
from analytics.tokens import configure_tokens, short_address, token_symbol

A = "0x00000000000000000000000000000000000000aa"
USDT = "0xdac17f958d2ee523a2206206994597c13d831ec7"
USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
BEEF = "0x000000000000000000000000000000000000beef"


def test_network_stats(seeded, now):
    stats = network_stats(seeded, now=now)
    assert stats["totalTransfers"] == count_transfers(seeded) == 6
    assert stats["uniqueAddresses"] == 4
    assert stats["uniqueTokens"] == 3
    assert stats["uniqueBlocks"] == 3
    # block 99 is three days old
    assert stats["recentActivity"] == 5


def test_top_and_trending_tokens(seeded):
    top = top_tokens(seeded, 10)
    assert [(t["address"], t["transferCount"]) for t in top] == [(USDT, 3), (USDC, 2), (BEEF, 1)]
    assert top[0]["symbol"] == "USDT"
    assert top[2]["symbol"] is None

    trending = trending_tokens(seeded, 5, window=2)
    assert [(t["address"], t["recentTransfers"]) for t in trending] == [(BEEF, 1), (USDC, 1)]


def test_recent_activity(seeded):
    rows = recent_activity(seeded, 3)
    assert len(rows) == 3
    assert all(r["type"] == "transfer" for r in rows)
    assert rows[0]["blockNumber"] == 101


def test_network_overview(seeded, store):
    ov = network_overview(seeded)
    assert ov["latestBlock"] == 101
    assert ov["oldestBlock"] == 99
    assert ov["blockRange"] == 3
    assert ov["indexingStartTime"] == "2025-07-10T12:00:00+00:00"

    empty = network_overview(store)
    assert (empty["latestBlock"], empty["oldestBlock"], empty["blockRange"]) == (0, 0, 0)


def test_explorer_stats_sections(seeded, now):
    data = explorer_stats(seeded, now=now)
    assert set(data) == {"network", "overview", "topTokens", "trendingTokens", "recentActivity"}
    assert len(data["recentActivity"]) == 6


def test_address_details(seeded):
    d = address_details(seeded, A)
    assert d["sentCount"] == 3
    assert d["receivedCount"] == 2
    assert len(d["transfers"]) == 5
    assert d["firstSeen"] == "2025-07-10T12:00:00+00:00"
    flows = {t["tokenAddress"]: t["balance"] for t in d["tokens"]}
    assert flows == {USDT: "-110", USDC: "20", BEEF: "1"}


def test_token_symbols_are_configurable():
    try:
        configure_tokens({BEEF.upper().replace("0X", "0x"): "BEEF"})
        assert token_symbol(BEEF) == "BEEF"
        assert token_symbol(USDT) == "USDT"
    finally:
        configure_tokens(None)
    assert token_symbol(BEEF) is None
    assert short_address(USDT) == "0xdac1...1ec7"
