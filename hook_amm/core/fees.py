"""Protocol fee computation."""

from dataclasses import dataclass

from hook_amm.core.checked import (
    U16_MAX,
    checked_div,
    checked_mul,
    checked_sub,
    narrow_u64,
    require_u64,
)
from hook_amm.core.errors import InvalidAmount

FEE_BASIS_POINTS = 100  # 1%
FEE_DENOMINATOR = 10_000


@dataclass(frozen=True)
class FeeBreakdown:
    """Split of a gross quote amount into protocol fee and net amount.

    Invariant: fee + net == gross.
    """
    fee: int
    net: int

    @property
    def gross(self) -> int:
        return self.fee + self.net

    def __iter__(self):
        yield self.fee
        yield self.net


def compute_fee(gross_quote_amount: int, rate_bps: int = FEE_BASIS_POINTS) -> FeeBreakdown:
    """Compute the fee on a gross quote amount.

    fee = floor(gross * rate_bps / 10_000), with the product taken in the
    u128 range so that gross values up to u64::MAX are exact.

    Args:
        gross_quote_amount: Quote units before fee (u64)
        rate_bps: Fee rate in basis points (u16, at most 10_000)

    Returns:
        FeeBreakdown with the fee and the remaining net amount

    Raises:
        InvalidAmount: If the rate is outside [0, 10_000]
        ArithmeticOverflow: If an intermediate cannot be represented
    """
    gross = require_u64(gross_quote_amount, "gross_quote_amount")
    if isinstance(rate_bps, bool) or not isinstance(rate_bps, int):
        raise InvalidAmount(f"rate_bps must be an integer, got {rate_bps!r}")
    if rate_bps < 0 or rate_bps > U16_MAX or rate_bps > FEE_DENOMINATOR:
        raise InvalidAmount(f"rate_bps must be in [0, {FEE_DENOMINATOR}], got {rate_bps}")

    fee = narrow_u64(checked_div(checked_mul(gross, rate_bps), FEE_DENOMINATOR))
    net = checked_sub(gross, fee)
    return FeeBreakdown(fee=fee, net=net)
