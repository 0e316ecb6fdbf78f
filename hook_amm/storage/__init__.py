"""Curve store implementations."""

from hook_amm.storage.database import SQLiteCurveStore
from hook_amm.storage.memory import InMemoryCurveStore

__all__ = [
    "InMemoryCurveStore",
    "SQLiteCurveStore",
]
