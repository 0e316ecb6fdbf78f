"""Trade data classes."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Iterator


class TradeSide(Enum):
    """Side of a trade from the trader's perspective."""
    BUY = "buy"    # Trader pays quote, receives tokens
    SELL = "sell"  # Trader pays tokens, receives quote


@dataclass(frozen=True)
class TradeQuote:
    """Priced trade that has not been executed.

    For buys, amount_in is the gross quote paid and amount_out the tokens
    received. For sells, amount_in is the tokens paid and amount_out the
    quote received after the fee.
    """
    side: TradeSide
    amount_in: int
    amount_out: int
    gross_quote: int      # Quote amount the fee was taken from
    fee: int
    net_quote: int        # gross_quote - fee
    price_impact_bps: Decimal

    @property
    def effective_price(self) -> Decimal:
        """Quote units per token, fees included."""
        tokens = self.amount_out if self.side is TradeSide.BUY else self.amount_in
        quote = self.amount_in if self.side is TradeSide.BUY else self.amount_out
        if tokens == 0:
            return Decimal("0")
        return Decimal(quote) / Decimal(tokens)


@dataclass(frozen=True)
class TradeEvent:
    """Notification published after every executed trade.

    The reserve fields carry the post-trade effective reserves, keeping the
    field names of the on-chain event.
    """
    mint: str
    user: str
    sol_amount: int               # Gross quote amount
    token_amount: int
    is_buy: bool
    fee: int
    virtual_sol_reserves: int     # Effective quote reserves after the trade
    virtual_token_reserves: int   # Effective token reserves after the trade
    timestamp: int                # Trade sequence number

    @property
    def side(self) -> TradeSide:
        return TradeSide.BUY if self.is_buy else TradeSide.SELL

    @property
    def implied_price(self) -> Decimal:
        """Quote per token for this trade, before fee."""
        if self.token_amount == 0:
            return Decimal("0")
        return Decimal(self.sol_amount) / Decimal(self.token_amount)


@dataclass(frozen=True)
class TradeResult:
    """Outcome of an executed trade as seen by the trader.

    Unpacks to (token_amount, fee) for buys and (sol_amount, fee) for sells.
    """
    side: TradeSide
    token_amount: int   # Tokens received (buy) or paid (sell)
    sol_amount: int     # Quote paid gross (buy) or received after fee (sell)
    fee: int
    event: TradeEvent

    def __iter__(self) -> Iterator[int]:
        if self.side is TradeSide.BUY:
            yield self.token_amount
        else:
            yield self.sol_amount
        yield self.fee
