import pytest

from analytics.metrics import (
    analytics_overview,
    gas_data,
    network_metrics,
    token_distribution,
    top_tokens_analysis,
    transaction_volume,
)
from analytics.synthetic import avg_gas_price, block_fields

USDT = "0xdac17f958d2ee523a2206206994597c13d831ec7"


def test_token_distribution_sums_to_100(seeded):
    dist = token_distribution(seeded, 10)
    assert len(dist) == 3
    assert sum(d["value"] for d in dist) == pytest.approx(100.0)
    assert dist[0]["symbol"] == "USDT"
    assert dist[0]["value"] == pytest.approx(50.0)
    assert dist[2]["symbol"] == "T3"
    assert len({d["color"] for d in dist}) == 3


def test_token_distribution_empty(store):
    assert token_distribution(store) == []


@pytest.mark.parametrize("time_range,points", [("24h", 24), ("7d", 7), ("30d", 30)])
def test_transaction_volume_bucket_counts(seeded, now, time_range, points):
    series = transaction_volume(seeded, time_range, now=now)
    assert len(series) == points
    stamps = [p["timestamp"] for p in series]
    assert stamps == sorted(stamps)


def test_transaction_volume_counts_rows_in_range(seeded, now):
    day = transaction_volume(seeded, "24h", now=now)
    assert sum(p["transactions"] for p in day) == 5
    assert day[0]["time"] == "12:00"
    assert day[-1]["transactions"] == 2
    assert day[-1]["gasUsed"] == 2 * 21000

    week = transaction_volume(seeded, "7d", now=now)
    assert sum(p["transactions"] for p in week) == 6
    assert sum(p["volume"] for p in week) == pytest.approx(191.0)


def test_transaction_volume_rejects_unknown_range(seeded):
    with pytest.raises(ValueError):
        transaction_volume(seeded, "1y")


def test_gas_data_is_deterministic(seeded, now):
    first = gas_data(seeded, 7, now=now)
    assert first == gas_data(seeded, 7, now=now)
    assert len(first) == 7
    assert first[-1]["date"] == "Jul 13"
    assert first[-1]["blockCount"] == 2
    assert all(0.00001 <= float(g["avgGasPrice"]) < 0.00006 for g in first)

    off = gas_data(seeded, 7, now=now, demo=False)
    assert all(g["avgGasPrice"] is None and g["gasUsed"] is None for g in off)


def test_network_metrics(seeded, now):
    m = network_metrics(seeded, now=now)
    assert m["totalTransactions"] == 6
    assert m["activeAddresses"] == 4
    assert m["totalBlocks"] == 3
    assert m["totalValue"] == pytest.approx(191.0)
    assert m["totalGasUsed"] == 6 * 21000
    assert m["avgBlockTime"] > 12
    assert m["synthetic"] is True
    assert set(m["change24h"]) == {"transactions", "value", "addresses", "tps"}

    off = network_metrics(seeded, now=now, demo=False)
    assert off["totalGasUsed"] is None
    assert off["synthetic"] is False


def test_network_metrics_empty(store, now):
    m = network_metrics(store, now=now)
    assert m["totalTransactions"] == 0
    assert m["avgBlockTime"] == 12
    assert m["tps"] == 0


def test_top_tokens_analysis(seeded, now):
    top = top_tokens_analysis(seeded, 10, now=now)
    usdt = top[0]
    assert usdt["address"] == USDT
    assert usdt["symbol"] == "USDT"
    assert usdt["transactions"] == 3
    assert usdt["uniqueAddresses"] == 3
    assert usdt["volume"] == pytest.approx(160.0)
    assert top[2]["symbol"] == "0x0000...beef"


def test_analytics_overview_sections(seeded, now):
    data = analytics_overview(seeded, "7d", now=now)
    assert set(data) == {
        "networkMetrics", "transactionVolumeData", "tokenDistribution", "gasData", "topTokens", "timestamp",
    }
    assert len(data["transactionVolumeData"]) == 7
    assert len(data["gasData"]) == 7


def test_synthetic_helpers_are_stable(now):
    assert avg_gas_price(now.date()) == avg_gas_price(now.date())
    assert avg_gas_price(now.date(), enabled=False) is None
    assert block_fields(5, 10) == block_fields(5, 10)
    assert block_fields(5, 10)["size"] == 55000


def test_wei_scale_volume(store, now):
    for _ in range(2):
        store.write_transfer({"from": "0xa", "to": "0xb", "value": "5000000000000000000",
                              "tokenAddress": USDT, "blockNumber": 7, "timestamp": now})
    m = network_metrics(store, now=now)
    assert m["totalValue"] == pytest.approx(1e19)
    top = top_tokens_analysis(store, 5, now=now)
    assert top[0]["volume"] == pytest.approx(1e19)
    assert top[0]["avgTransferValue"] == pytest.approx(5e18)
    assert token_distribution(store, 5)[0]["volume"] == pytest.approx(1e19)
