# dashboard/client.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Tuple

import requests

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:3000"

Result = Tuple[Any, Optional[str]]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# zeroed payloads shown while the api is unreachable, shaped like the real ones

def placeholder_explorer() -> Dict[str, Any]:
    return {
        "network": {
            "totalTransfers": 0,
            "uniqueAddresses": 0,
            "uniqueTokens": 0,
            "uniqueBlocks": 0,
            "recentActivity": 0,
        },
        "overview": {
            "latestBlock": 0,
            "oldestBlock": 0,
            "blockRange": 0,
            "indexingStartTime": _now_iso(),
            "lastIndexedTime": _now_iso(),
        },
        "topTokens": [],
        "trendingTokens": [],
        "recentActivity": [],
    }


def placeholder_block_stats() -> Dict[str, Any]:
    return {
        "totalBlocks": 0,
        "latestBlockNumber": 0,
        "latestBlockTimestamp": None,
        "avgTransactionsPerBlock": 0,
        "avgBlockTime": 12,
        "totalTransactions": 0,
    }


def placeholder_blocks(page: int = 1, limit: int = 20) -> Dict[str, Any]:
    return {"blocks": [], "pagination": {"page": page, "limit": limit, "total": 0, "totalPages": 0}}


def placeholder_analytics() -> Dict[str, Any]:
    return {
        "networkMetrics": {
            "totalTransactions": 0,
            "totalValue": 0,
            "activeAddresses": 0,
            "avgBlockTime": 12,
            "totalBlocks": 0,
            "tps": 0,
            "totalGasUsed": 0,
            "change24h": {"transactions": 0, "value": 0, "addresses": 0, "tps": 0},
            "synthetic": False,
        },
        "transactionVolumeData": [],
        "tokenDistribution": [],
        "gasData": [],
        "topTokens": [],
        "timestamp": _now_iso(),
    }


class ApiClient:
    """
    Thin requests wrapper over the indexer api.
    Every call returns (data, error); on failure data is a placeholder and
    error is the message to show in the connection banner.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: float = 10.0):
        self.base_url = (base_url or DEFAULT_API_URL).rstrip("/")
        self.timeout = timeout
        self.last_error: Optional[str] = None

    @classmethod
    def from_settings(cls, settings, timeout: float = 10.0) -> "ApiClient":
        return cls(settings.dashboard.api_url, timeout=timeout)

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Tuple[Optional[dict], Optional[str]]:
        url = f"{self.base_url}{path}"
        try:
            resp = requests.get(url, params=params, timeout=self.timeout)
            body = resp.json()
        except (requests.RequestException, ValueError) as e:
            return None, f"Request to {url} failed: {e}"
        if not isinstance(body, dict):
            return None, f"Unexpected response from {url}"
        if resp.status_code >= 400 or not body.get("success"):
            return None, body.get("error") or f"HTTP error! status: {resp.status_code}"
        return body, None

    def _fetch(self, path: str, placeholder: Callable[[], Any], params: Optional[Dict[str, Any]] = None,
               pick: Callable[[dict], Any] = lambda b: b.get("data")) -> Result:
        body, err = self._get(path, params)
        self.last_error = err
        if err:
            logger.warning("api call failed path=%s err=%s", path, err)
            return placeholder(), err
        return pick(body), None

    # explorer

    def explorer_stats(self) -> Result:
        return self._fetch("/api/explorer/stats", placeholder_explorer)

    def transactions(self, limit: int = 50) -> Result:
        return self._fetch("/api/explorer/activity", list, {"limit": limit})

    # blocks

    def blocks(
        self,
        page: int = 1,
        limit: int = 20,
        min_transactions: Optional[int] = None,
        max_transactions: Optional[int] = None,
        date_range: Optional[str] = None,
    ) -> Result:
        params: Dict[str, Any] = {"page": page, "limit": limit}
        if date_range and date_range != "all":
            params["dateRange"] = date_range
        if min_transactions is not None:
            params["minTransactions"] = min_transactions
        if max_transactions is not None:
            params["maxTransactions"] = max_transactions
        return self._fetch(
            "/api/blocks",
            lambda: placeholder_blocks(page, limit),
            params,
            pick=lambda b: {"blocks": b.get("data") or [], "pagination": b.get("pagination") or {}},
        )

    def block_stats(self) -> Result:
        return self._fetch("/api/blocks/stats", placeholder_block_stats)

    def search_blocks(self, q: str) -> Result:
        return self._fetch("/api/blocks/search", list, {"q": q})

    def block(self, number: int) -> Result:
        return self._fetch(f"/api/blocks/{number}", lambda: None)

    def address(self, address: str) -> Result:
        return self._fetch(f"/api/addresses/{address}", lambda: None)

    # analytics

    def analytics_overview(self, time_range: str = "24h") -> Result:
        return self._fetch("/api/analytics/overview", placeholder_analytics, {"timeRange": time_range})

    def health(self) -> bool:
        try:
            return requests.get(f"{self.base_url}/health", timeout=self.timeout).status_code == 200
        except requests.RequestException:
            return False


def first_error(*errors: Optional[str]) -> Optional[str]:
    for e in errors:
        if e:
            return e
    return None


__all__ = [
    "ApiClient",
    "first_error",
    "placeholder_analytics",
    "placeholder_block_stats",
    "placeholder_blocks",
    "placeholder_explorer",
]
