"""Constant product bonding curve exchange."""

import logging

from hook_amm.core.errors import HookAmmError
from hook_amm.core.state import ReserveState
from hook_amm.core.trade import TradeEvent, TradeQuote, TradeResult, TradeSide
from hook_amm.exchange.ledger import InMemoryLedger
from hook_amm.exchange.lifecycle import BondingCurveExchange

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "BondingCurveExchange",
    "HookAmmError",
    "InMemoryLedger",
    "ReserveState",
    "TradeEvent",
    "TradeQuote",
    "TradeResult",
    "TradeSide",
]
