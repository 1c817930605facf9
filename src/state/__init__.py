"""
State tables for the fee router
"""

from .balances import NATIVE_ASSET, AssetBank, BalanceTable
from .nonces import NonceTable

__all__ = [
    "NATIVE_ASSET",
    "AssetBank",
    "BalanceTable",
    "NonceTable",
]
