# analytics/tokens.py
from typing import Dict, Mapping, Optional

# well known mainnet ERC-20 contracts, lowercase address -> symbol
KNOWN_TOKENS: Dict[str, str] = {
    "0xdac17f958d2ee523a2206206994597c13d831ec7": "USDT",
    "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48": "USDC",
    "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2": "WETH",
    "0x6b175474e89094c44da98b954eedeac495271d0f": "DAI",
    "0x514910771af9ca656af840dff83e8264ecf986ca": "LINK",
    "0x1f9840a85d5af5bf1d1762f925bdaddc4201f984": "UNI",
}

CHART_COLORS = (
    "#22c55e", "#3b82f6", "#8b5cf6", "#f59e0b", "#ef4444",
    "#06b6d4", "#84cc16", "#f97316", "#ec4899", "#6b7280",
)

_symbols: Dict[str, str] = dict(KNOWN_TOKENS)


def configure_tokens(extra: Optional[Mapping[str, str]]) -> None:
    """Merge configured symbols over the built-in table."""
    _symbols.clear()
    _symbols.update(KNOWN_TOKENS)
    for addr, sym in (extra or {}).items():
        _symbols[str(addr).lower()] = str(sym)


def token_symbol(address: Optional[str]) -> Optional[str]:
    if not address:
        return None
    return _symbols.get(address.lower())


def short_address(address: Optional[str]) -> str:
    if not address:
        return "Unknown"
    if len(address) <= 12:
        return address
    return f"{address[:6]}...{address[-4:]}"


def chart_color(index: int) -> str:
    return CHART_COLORS[index % len(CHART_COLORS)]
