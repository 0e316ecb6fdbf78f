"""Core pricing and accounting components."""

from hook_amm.core.errors import HookAmmError, parse_error
from hook_amm.core.fees import FEE_BASIS_POINTS, FEE_DENOMINATOR, FeeBreakdown, compute_fee
from hook_amm.core.interfaces import AssetTransfer, CurveStore, TradeEventSink
from hook_amm.core.pricing import price_impact_bps, quote_buy, quote_sell, spot_price
from hook_amm.core.state import CurveStatus, GlobalConfig, ReserveState
from hook_amm.core.trade import TradeEvent, TradeQuote, TradeResult, TradeSide

__all__ = [
    "FEE_BASIS_POINTS",
    "FEE_DENOMINATOR",
    "AssetTransfer",
    "CurveStatus",
    "CurveStore",
    "FeeBreakdown",
    "GlobalConfig",
    "HookAmmError",
    "ReserveState",
    "TradeEvent",
    "TradeEventSink",
    "TradeQuote",
    "TradeResult",
    "TradeSide",
    "compute_fee",
    "parse_error",
    "price_impact_bps",
    "quote_buy",
    "quote_sell",
    "spot_price",
]
