"""Trade event sinks."""

import logging
import threading
from typing import Callable, Optional

from hook_amm.core.interfaces import TradeEventSink
from hook_amm.core.trade import TradeEvent

logger = logging.getLogger(__name__)


class EventLog(TradeEventSink):
    """Keeps every published event in memory, optionally forwarding it."""

    def __init__(self, on_event: Optional[Callable[[TradeEvent], None]] = None):
        self._events: list[TradeEvent] = []
        self._lock = threading.Lock()
        self._on_event = on_event

    def publish(self, event: TradeEvent) -> None:
        with self._lock:
            self._events.append(event)
        if self._on_event is not None:
            self._on_event(event)

    @property
    def events(self) -> list[TradeEvent]:
        with self._lock:
            return list(self._events)

    def for_mint(self, mint: str) -> list[TradeEvent]:
        return [e for e in self.events if e.mint == mint]

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)


class LoggingEventSink(TradeEventSink):
    """Writes each trade event to the module logger at INFO."""

    def publish(self, event: TradeEvent) -> None:
        logger.info(
            "%s %s: %d tokens for %d lamports (fee %d), reserves sol=%d token=%d",
            event.user,
            "bought" if event.is_buy else "sold",
            event.token_amount,
            event.sol_amount,
            event.fee,
            event.virtual_sol_reserves,
            event.virtual_token_reserves,
        )
