# dashboard/streamlit_app.py

from __future__ import annotations

import io
import os
import zipfile
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pandas as pd
import streamlit as st

from analytics.tokens import configure_tokens, short_address, token_symbol
from common.settings import load_settings
from dashboard.client import ApiClient, first_error


# ============================================================
# pure helpers only below this line
# nothing here should call the api at import time
# ============================================================

TIME_RANGES = ("24h", "7d", "30d")
DATE_RANGES = ("all", "24h", "7d", "30d")


def format_number(n: Any) -> str:
    try:
        v = float(n)
    except (TypeError, ValueError):
        return "0"
    if v >= 1_000_000:
        return f"{v / 1_000_000:.1f}M"
    if v >= 1_000:
        return f"{v / 1_000:.1f}K"
    return f"{int(v)}" if v == int(v) else f"{v:.2f}"


def token_label(address: Optional[str]) -> str:
    return token_symbol(address) or short_address(address)


def transactions_frame(rows: List[Dict[str, Any]]) -> pd.DataFrame:
    """Activity rows shaped as the transactions table: hash, value with symbol, status."""
    cols = ["hash", "from", "to", "value", "token", "blockNumber", "timestamp", "status"]
    if not rows:
        return pd.DataFrame(columns=cols)
    out = []
    for r in rows:
        out.append({
            "hash": r.get("transactionHash") or f"tx_{r.get('id')}",
            "from": r.get("from"),
            "to": r.get("to"),
            "value": f"{r.get('value')} {token_label(r.get('tokenAddress'))}",
            "token": r.get("tokenAddress"),
            "blockNumber": r.get("blockNumber"),
            "timestamp": r.get("timestamp"),
            # every indexed transfer succeeded on chain
            "status": "success",
        })
    return pd.DataFrame(out, columns=cols)


def filter_transactions(df: pd.DataFrame, query: str) -> pd.DataFrame:
    query = (query or "").strip().lower()
    if df.empty or not query:
        return df
    mask = pd.Series(False, index=df.index)
    for col in ("hash", "from", "to", "value", "token"):
        mask |= df[col].astype(str).str.lower().str.contains(query, regex=False)
    return df[mask]


def blocks_frame(blocks: List[Dict[str, Any]]) -> pd.DataFrame:
    cols = ["number", "timestamp", "transactions", "totalValue", "uniqueTokens", "topToken", "gasUsed", "validator"]
    if not blocks:
        return pd.DataFrame(columns=cols)
    df = pd.DataFrame(blocks)
    for c in cols:
        if c not in df.columns:
            df[c] = None
    df["topToken"] = df["topToken"].map(lambda a: token_label(a) if a and a != "Unknown" else "Unknown")
    return df[cols]


def volume_frame(points: List[Dict[str, Any]]) -> pd.DataFrame:
    if not points:
        return pd.DataFrame(columns=["transactions", "volume"])
    df = pd.DataFrame(points)
    return df.set_index("time")[["transactions", "volume"]]


def gas_frame(points: List[Dict[str, Any]]) -> pd.DataFrame:
    """avgGasPrice arrives as decimal text; None outside demo mode."""
    if not points:
        return pd.DataFrame(columns=["avgGasPrice"])
    df = pd.DataFrame(points).set_index("date")
    df["avgGasPrice"] = pd.to_numeric(df["avgGasPrice"], errors="coerce")
    return df[["avgGasPrice"]]


def distribution_frame(items: List[Dict[str, Any]]) -> pd.DataFrame:
    if not items:
        return pd.DataFrame(columns=["symbol", "value", "transferCount"])
    df = pd.DataFrame(items)
    df["value"] = df["value"].astype(float).round(2)
    return df[["symbol", "value", "transferCount", "address"]]


def _synthetic_badge_html(synthetic: bool) -> str:
    if synthetic:
        return "<span style='background:#FFF3E0;color:#E65100;padding:2px 8px;border-radius:8px;'>demo values for gas, hash and validator</span>"
    return ""


# ============================================================
# everything below runs only when render_app is called
# streamlit will call this in the container
# pytest in ci sets INDEXER_DASHBOARD_TEST_MODE=1 which skips execution
# ============================================================

def render_app() -> None:
    settings = load_settings(os.environ.get("INDEXER_CONFIG", "config.yaml"))
    configure_tokens(settings.tokens)

    st.set_page_config(page_title="Transfer Indexer", layout="wide")
    st.title("ERC 20 Transfer Indexer")
    st.caption("Explorer and analytics over indexed transfer events")

    with st.sidebar:
        st.header("Settings")
        api_url = st.text_input("API base URL", settings.dashboard.api_url)
        poll = st.slider("Refresh every (s)", min_value=15, max_value=60, value=settings.dashboard.poll_seconds)
        if st.button("Refresh now"):
            st.cache_data.clear()

    @st.cache_data(ttl=poll, show_spinner=False)
    def fetch(base_url: str, name: str, *args):
        return getattr(ApiClient(base_url), name)(*args)

    tab_explorer, tab_blocks, tab_txs, tab_analytics = st.tabs(["Explorer", "Blocks", "Transactions", "Analytics"])

    # explorer
    with tab_explorer:
        data, err = fetch(api_url, "explorer_stats")
        if err:
            st.error(f"Connection Error: {err}")
        net, ov = data["network"], data["overview"]
        c1, c2, c3, c4, c5 = st.columns(5)
        c1.metric("Transfers", format_number(net["totalTransfers"]))
        c2.metric("Addresses", format_number(net["uniqueAddresses"]))
        c3.metric("Tokens", format_number(net["uniqueTokens"]))
        c4.metric("Blocks", format_number(net["uniqueBlocks"]))
        c5.metric("Last 24h", format_number(net["recentActivity"]))
        st.caption(f"Blocks {ov['oldestBlock']} to {ov['latestBlock']}, last indexed {ov['lastIndexedTime']}")

        left, right = st.columns(2)
        with left:
            st.subheader("Top Tokens")
            top = pd.DataFrame(data["topTokens"])
            if top.empty:
                st.info("No tokens indexed yet.")
            else:
                top["token"] = top["address"].map(token_label)
                st.bar_chart(top.set_index("token")["transferCount"])
        with right:
            st.subheader("Trending")
            trending = pd.DataFrame(data["trendingTokens"])
            if trending.empty:
                st.info("No recent activity.")
            else:
                trending["token"] = trending["address"].map(token_label)
                st.dataframe(trending[["token", "recentTransfers", "address"]], use_container_width=True)

        st.subheader("Recent Activity")
        st.dataframe(transactions_frame(data["recentActivity"]), use_container_width=True)

    # blocks
    with tab_blocks:
        stats, stats_err = fetch(api_url, "block_stats")
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Latest block", stats["latestBlockNumber"])
        c2.metric("Blocks", format_number(stats["totalBlocks"]))
        c3.metric("Avg transfers per block", stats["avgTransactionsPerBlock"])
        c4.metric("Avg block time", f"{stats['avgBlockTime']}s")

        f1, f2, f3, f4 = st.columns(4)
        date_range = f1.selectbox("Date range", DATE_RANGES, index=0)
        min_tx = f2.number_input("Min transfers", min_value=0, value=0, step=1)
        max_tx = f3.number_input("Max transfers (0 = any)", min_value=0, value=0, step=1)
        page = f4.number_input("Page", min_value=1, value=1, step=1)

        query = st.text_input("Search block number or 0x hex", "")
        if query.strip():
            rows, list_err = fetch(api_url, "search_blocks", query.strip())
            total_pages = None
        else:
            result, list_err = fetch(
                api_url, "blocks", int(page), 20,
                int(min_tx) or None, int(max_tx) or None, date_range,
            )
            rows, total_pages = result["blocks"], result["pagination"].get("totalPages")
        err = first_error(stats_err, list_err)
        if err:
            st.error(f"Connection Error: {err}")
        if rows and rows[0].get("synthetic"):
            st.markdown(_synthetic_badge_html(True), unsafe_allow_html=True)
        st.dataframe(blocks_frame(rows), use_container_width=True)
        if total_pages:
            st.caption(f"Page {int(page)} of {total_pages}")

        number = st.number_input("Block details", min_value=0, value=0, step=1)
        if number:
            details, derr = fetch(api_url, "block", int(number))
            if derr:
                st.warning(derr)
            elif details:
                st.json({k: v for k, v in details.items() if k != "transfers"})
                st.dataframe(pd.DataFrame(details["transfers"]), use_container_width=True)

    # transactions
    with tab_txs:
        limit = st.slider("Rows", min_value=10, max_value=500, value=50, step=10)
        rows, err = fetch(api_url, "transactions", limit)
        if err:
            st.error(f"Connection Error: {err}")
        search = st.text_input("Filter by hash, address, value or token", "")
        txs = filter_transactions(transactions_frame(rows), search)
        st.caption(f"{len(txs)} of {len(rows)} transfers")
        st.dataframe(txs, use_container_width=True)

        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as z:
            now = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
            z.writestr(f"transfers_{now}/transfers.csv", txs.to_csv(index=False))
        st.download_button("Download transfers zip", data=buf.getvalue(), file_name="transfers.zip", mime="application/zip")

    # analytics
    with tab_analytics:
        time_range = st.radio("Time range", TIME_RANGES, horizontal=True)
        data, err = fetch(api_url, "analytics_overview", time_range)
        if err:
            st.error(f"Connection Error: {err}")
        m = data["networkMetrics"]
        c1, c2, c3, c4, c5 = st.columns(5)
        c1.metric("Transactions", format_number(m["totalTransactions"]), f"{m['change24h']['transactions']:.1f}%")
        c2.metric("Volume", format_number(m["totalValue"]), f"{m['change24h']['value']:.1f}%")
        c3.metric("Active addresses", format_number(m["activeAddresses"]), f"{m['change24h']['addresses']:.1f}%")
        c4.metric("TPS", f"{m['tps']:.4f}")
        c5.metric("Avg block time", f"{m['avgBlockTime']:.1f}s")
        if m.get("synthetic"):
            st.markdown(_synthetic_badge_html(True), unsafe_allow_html=True)

        st.subheader("Transfer Volume")
        vol = volume_frame(data["transactionVolumeData"])
        if vol.empty:
            st.info("No transfers in this range.")
        else:
            st.line_chart(vol["transactions"])
            st.bar_chart(vol["volume"])

        left, right = st.columns(2)
        with left:
            st.subheader("Token Distribution")
            dist = distribution_frame(data["tokenDistribution"])
            if dist.empty:
                st.info("No tokens indexed yet.")
            else:
                st.bar_chart(dist.set_index("symbol")["value"])
        with right:
            st.subheader("Gas")
            gas = gas_frame(data["gasData"])
            if gas.empty or gas["avgGasPrice"].isna().all():
                st.info("Gas figures are only available in demo mode.")
            else:
                st.line_chart(gas["avgGasPrice"])

        st.subheader("Top Tokens")
        st.dataframe(pd.DataFrame(data["topTokens"]), use_container_width=True)


# ============================================================
# import safety for tests and ci
# set INDEXER_DASHBOARD_TEST_MODE=1 in ci so imports never execute the app
# streamlit runtime will execute render_app when serving locally or in the container
# ============================================================

if os.getenv("INDEXER_DASHBOARD_TEST_MODE") != "1":
    render_app()
