"""Exchange orchestration and reference collaborators."""

from hook_amm.exchange.events import EventLog, LoggingEventSink
from hook_amm.exchange.ledger import InMemoryLedger
from hook_amm.exchange.lifecycle import BondingCurveExchange
from hook_amm.exchange.registry import GlobalRegistry

__all__ = [
    "BondingCurveExchange",
    "EventLog",
    "GlobalRegistry",
    "InMemoryLedger",
    "LoggingEventSink",
]
