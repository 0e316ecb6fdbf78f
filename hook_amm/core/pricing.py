"""Constant product pricing over effective reserves.

Both directions hold k = reserves_in * reserves_out fixed across a trade:

    new_reserves_in  = reserves_in + amount_in
    new_reserves_out = floor(k / new_reserves_in)
    amount_out       = reserves_out - new_reserves_out

The product and sum are computed in the u128 range; only the output is
narrowed back to u64. Flooring the new output-side reserve rounds the
post-trade product down by less than one denominator unit, never up.

For a positive input the output is always in (0, reserves_out): the new
output-side reserve is strictly below reserves_out, and a trade that would
floor it to zero is rejected.
"""

from decimal import Decimal

from hook_amm.core.checked import (
    checked_add,
    checked_div,
    checked_mul,
    checked_sub,
    narrow_u64,
    require_u64,
)
from hook_amm.core.errors import InsufficientReserves


def _swap_out(amount_in: int, reserves_in: int, reserves_out: int) -> int:
    new_reserves_in = checked_add(reserves_in, amount_in)
    k = checked_mul(reserves_in, reserves_out)
    new_reserves_out = checked_div(k, new_reserves_in)
    if new_reserves_out == 0 and reserves_out > 0:
        raise InsufficientReserves(f"trade of {amount_in} would drain all {reserves_out} reserves")
    amount_out = checked_sub(reserves_out, new_reserves_out, error=InsufficientReserves)
    return narrow_u64(amount_out)


def quote_buy(net_quote_in: int, quote_reserves: int, token_reserves: int) -> int:
    """Tokens received for a net (post-fee) quote input.

    Args:
        net_quote_in: Quote units entering the curve after the fee
        quote_reserves: Effective quote reserves before the trade
        token_reserves: Effective token reserves before the trade

    Returns:
        Number of tokens leaving the curve

    Raises:
        ArithmeticOverflow: If an input or the result leaves u64, or the
            new quote reserves are zero
        InsufficientReserves: If truncation would produce a negative output,
            or the trade would take every token in token_reserves
    """
    return _swap_out(
        require_u64(net_quote_in, "net_quote_in"),
        require_u64(quote_reserves, "quote_reserves"),
        require_u64(token_reserves, "token_reserves"),
    )


def quote_sell(token_in: int, token_reserves: int, quote_reserves: int) -> int:
    """Quote units produced (before fee) for a token input.

    Mirror of quote_buy with the roles of the reserves swapped.
    """
    return _swap_out(
        require_u64(token_in, "token_in"),
        require_u64(token_reserves, "token_reserves"),
        require_u64(quote_reserves, "quote_reserves"),
    )


def spot_price(quote_reserves: int, token_reserves: int) -> Decimal:
    """Marginal price in quote units per token, before fees."""
    if token_reserves == 0:
        return Decimal("0")
    return Decimal(quote_reserves) / Decimal(token_reserves)


def price_impact_bps(
    amount_in: int,
    amount_out: int,
    reserves_in: int,
    reserves_out: int,
) -> Decimal:
    """Shortfall of the execution price against the spot price, in bps.

    Spot output rate is reserves_out / reserves_in; the execution rate is
    amount_out / amount_in. A trade at the spot rate has zero impact.
    """
    if amount_in == 0 or reserves_in == 0 or reserves_out == 0:
        return Decimal("0")
    spot = Decimal(reserves_out) / Decimal(reserves_in)
    effective = Decimal(amount_out) / Decimal(amount_in)
    return (spot - effective) / spot * Decimal(10_000)
