# analytics/synthetic.py
"""
Placeholder chain fields for the dashboard.

transfer_events has no block headers, receipts or gas data. The explorer views
still show hash, validator, gas and reward columns, so these are derived from
the block number and transfer count. They are deterministic and only filled in
when demo mode is on; otherwise they come back as None.
"""
from __future__ import annotations

import hashlib
from datetime import date
from typing import Any, Dict, Optional

GAS_PER_TRANSFER = 21000
GAS_LIMIT = "30.0M"
BASE_FEE_PER_GAS = 0.00000001

BLOCK_FIELDS = ("hash", "validator", "gasUsed", "gasLimit", "baseFeePerGas", "reward", "size")


def block_hash(number: int) -> str:
    return "0x" + format(int(number), "x").rjust(64, "0")


def validator(number: int) -> str:
    return "0xvalidator" + str(int(number))[-10:].rjust(10, "0")


def block_fields(number: int, transfer_count: int, enabled: bool = True) -> Dict[str, Any]:
    if not enabled:
        return {k: None for k in BLOCK_FIELDS} | {"synthetic": False}
    n = int(transfer_count)
    return {
        "hash": block_hash(number),
        "validator": validator(number),
        "gasUsed": f"{n * 0.021:.1f}M",
        "gasLimit": GAS_LIMIT,
        "baseFeePerGas": BASE_FEE_PER_GAS,
        "reward": f"{n * 0.0001:.4f}",
        "size": n * 500 + 50000,
        "synthetic": True,
    }


def gas_used(transfer_count: int, enabled: bool = True) -> Optional[int]:
    return int(transfer_count) * GAS_PER_TRANSFER if enabled else None


def avg_gas_price(day: date, enabled: bool = True) -> Optional[str]:
    """Stable per-day value in [0.00001, 0.00006)."""
    if not enabled:
        return None
    digest = hashlib.sha256(day.isoformat().encode()).digest()
    frac = int.from_bytes(digest[:8], "big") / 2 ** 64
    return f"{frac * 0.00005 + 0.00001:.8f}"
