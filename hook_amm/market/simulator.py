"""Drive retail flow through a bonding curve and record the outcome."""

import logging
from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Optional

import pandas as pd

from hook_amm.config import (
    BASELINE_SIMULATION,
    DEFAULT_SETTINGS,
    ExchangeSettings,
    SimulationSettings,
)
from hook_amm.core.errors import (
    CurveComplete,
    InsufficientBalance,
    InsufficientReserves,
    InvalidAmount,
    SlippageExceeded,
    TransferRejected,
)
from hook_amm.core.interfaces import NATIVE_ASSET, CurveStore, TradeEventSink
from hook_amm.core.state import ReserveState
from hook_amm.core.trade import TradeEvent
from hook_amm.exchange.events import EventLog
from hook_amm.exchange.ledger import InMemoryLedger
from hook_amm.exchange.lifecycle import BondingCurveExchange
from hook_amm.market.retail import RetailOrder, RetailTrader

logger = logging.getLogger(__name__)

# Rejections that are part of normal market flow, not simulation bugs
_EXPECTED_REJECTIONS = (
    CurveComplete,
    InsufficientBalance,
    InsufficientReserves,
    InvalidAmount,
    SlippageExceeded,
    TransferRejected,
)

HISTORY_COLUMNS = [
    "timestamp",
    "user",
    "side",
    "sol_amount",
    "token_amount",
    "fee",
    "virtual_sol_reserves",
    "virtual_token_reserves",
    "spot_price",
]


def events_to_frame(events: list[TradeEvent]) -> pd.DataFrame:
    """Trade history as a DataFrame, one row per event."""
    if not events:
        return pd.DataFrame(columns=HISTORY_COLUMNS)
    df = pd.DataFrame([asdict(e) for e in events])
    df["side"] = df["is_buy"].map({True: "buy", False: "sell"})
    df["spot_price"] = df["virtual_sol_reserves"].astype(float) / df["virtual_token_reserves"].astype(float)
    return df[HISTORY_COLUMNS]


@dataclass
class SimulationResult:
    """Outcome of a simulation run."""
    mint: str
    initial_state: ReserveState
    final_state: ReserveState
    history: pd.DataFrame
    rejected: Counter = field(default_factory=Counter)
    fees_collected: int = 0

    @property
    def n_trades(self) -> int:
        return len(self.history)

    @property
    def price_change(self) -> float:
        """Relative change of the spot price over the run."""
        start = self.initial_state.spot_price
        if start == 0:
            return 0.0
        return float((self.final_state.spot_price - start) / start)

    def summary(self) -> dict:
        buys = int((self.history["side"] == "buy").sum()) if self.n_trades else 0
        return {
            "trades": self.n_trades,
            "buys": buys,
            "sells": self.n_trades - buys,
            "rejected": sum(self.rejected.values()),
            "fees_collected": self.fees_collected,
            "real_sol_reserves": self.final_state.real_sol_reserves,
            "real_token_reserves": self.final_state.real_token_reserves,
            "spot_price": float(self.final_state.spot_price),
            "price_change": self.price_change,
            "complete": self.final_state.complete,
        }


class CurveSimulation:
    """Runs retail order flow against one curve of an exchange."""

    def __init__(
        self,
        exchange: BondingCurveExchange,
        ledger: InMemoryLedger,
        mint: str,
        retail: RetailTrader,
        slippage_bps: int = BASELINE_SIMULATION.slippage_bps,
    ):
        self.exchange = exchange
        self.ledger = ledger
        self.mint = mint
        self.retail = retail
        self.slippage_bps = slippage_bps
        self.event_log = EventLog()

    def run(self, n_steps: int) -> SimulationResult:
        initial_state = self.exchange.get_curve(self.mint)
        fee_recipient = self.exchange.registry.fee_recipient
        fees_before = self.ledger.balance_of(NATIVE_ASSET, fee_recipient)
        rejected: Counter = Counter()

        for step in range(n_steps):
            for order in self.retail.generate_orders():
                try:
                    event = self._execute(order)
                except _EXPECTED_REJECTIONS as exc:
                    rejected[type(exc).__name__] += 1
                    logger.debug("Step %d: %s %s rejected: %s", step, order.trader, order.side, exc)
                    continue
                if event is not None:
                    self.event_log.publish(event)

        final_state = self.exchange.get_curve(self.mint)
        return SimulationResult(
            mint=self.mint,
            initial_state=initial_state,
            final_state=final_state,
            history=events_to_frame(self.event_log.events),
            rejected=rejected,
            fees_collected=self.ledger.balance_of(NATIVE_ASSET, fee_recipient) - fees_before,
        )

    def _execute(self, order: RetailOrder) -> Optional[TradeEvent]:
        if order.side == "buy":
            amount = max(1, int(order.size))
            quote = self.exchange.preview_buy(self.mint, amount)
            result = self.exchange.buy(
                self.mint, order.trader, amount, self._min_out(quote.amount_out)
            )
            return result.event

        holdings = self.ledger.balance_of(self.mint, order.trader)
        amount = int(holdings * order.size)
        if amount == 0:
            return None
        quote = self.exchange.preview_sell(self.mint, amount)
        result = self.exchange.sell(self.mint, order.trader, amount, self._min_out(quote.amount_out))
        return result.event

    def _min_out(self, expected: int) -> int:
        return expected * (10_000 - self.slippage_bps) // 10_000


def setup_simulation(
    settings: ExchangeSettings = DEFAULT_SETTINGS,
    sim: SimulationSettings = BASELINE_SIMULATION,
    seed: Optional[int] = None,
    store: Optional[CurveStore] = None,
    events: Optional[TradeEventSink] = None,
    mint: str = "SIMTOKEN",
) -> CurveSimulation:
    """Build a funded exchange with one open curve and a retail flow over it."""
    ledger = InMemoryLedger()
    exchange = BondingCurveExchange(ledger, store=store, events=events, settings=settings)
    if not exchange.registry.initialized:
        exchange.initialize_global_config(authority="authority", fee_recipient="fee-recipient")

    creator = "creator"
    ledger.create_mint(mint, authority=creator, supply=settings.initial_supply)
    exchange.open_curve(
        mint,
        creator,
        settings.initial_supply,
        settings.virtual_token_reserves,
        settings.virtual_sol_reserves,
    )

    traders = [f"trader-{i}" for i in range(sim.n_traders)]
    for trader in traders:
        ledger.airdrop(trader, sim.trader_funding)

    retail = RetailTrader(
        traders,
        arrival_rate=sim.arrival_rate,
        mean_size=sim.mean_buy_lamports,
        size_sigma=sim.size_sigma,
        buy_prob=sim.buy_prob,
        sell_fraction=sim.sell_fraction,
        seed=seed,
    )
    return CurveSimulation(exchange, ledger, mint, retail, slippage_bps=sim.slippage_bps)
