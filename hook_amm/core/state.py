"""Per-curve reserve state and the process-wide config record."""

from dataclasses import asdict, dataclass, fields, replace
from decimal import Decimal
from enum import Enum
from typing import Any

from hook_amm.core.checked import checked_add, checked_sub, narrow_u64, require_u64
from hook_amm.core.errors import CurveComplete, HookAmmError, InsufficientReserves
from hook_amm.core.pricing import spot_price


class CurveStatus(Enum):
    OPEN = "open"
    COMPLETE = "complete"


_U64_FIELDS = (
    "virtual_token_reserves",
    "virtual_sol_reserves",
    "real_token_reserves",
    "real_sol_reserves",
    "token_total_supply",
    "index",
)


@dataclass(frozen=True)
class ReserveState:
    """Reserve accounting for one bonding curve.

    Uses the tokens-out-of-custody convention:
    - real_token_reserves counts tokens the curve has sold and not bought back
    - real_sol_reserves counts quote units the curve holds from trades
    - effective reserves are (virtual_sol + real_sol, virtual_token - real_token)

    Instances are immutable; trades produce successors through apply_buy and
    apply_sell, so index can never change and complete can only be set once.
    """
    mint: str
    creator: str
    virtual_token_reserves: int
    virtual_sol_reserves: int
    real_token_reserves: int
    real_sol_reserves: int
    token_total_supply: int
    complete: bool
    index: int

    def __post_init__(self) -> None:
        for name in _U64_FIELDS:
            require_u64(getattr(self, name), name)
        self.check_invariants()

    @classmethod
    def open(
        cls,
        mint: str,
        creator: str,
        initial_supply: int,
        virtual_token_reserves: int,
        virtual_sol_reserves: int,
        index: int,
    ) -> "ReserveState":
        """State of a freshly opened curve: no real reserves, trading enabled."""
        return cls(
            mint=mint,
            creator=creator,
            virtual_token_reserves=virtual_token_reserves,
            virtual_sol_reserves=virtual_sol_reserves,
            real_token_reserves=0,
            real_sol_reserves=0,
            token_total_supply=initial_supply,
            complete=False,
            index=index,
        )

    @property
    def effective_sol_reserves(self) -> int:
        return narrow_u64(checked_add(self.virtual_sol_reserves, self.real_sol_reserves))

    @property
    def effective_token_reserves(self) -> int:
        return checked_sub(
            self.virtual_token_reserves, self.real_token_reserves, error=InsufficientReserves
        )

    @property
    def k(self) -> int:
        """Constant product over effective reserves."""
        return self.effective_sol_reserves * self.effective_token_reserves

    @property
    def status(self) -> CurveStatus:
        return CurveStatus.COMPLETE if self.complete else CurveStatus.OPEN

    @property
    def spot_price(self) -> Decimal:
        """Current quote-per-token price before fees."""
        return spot_price(self.effective_sol_reserves, self.effective_token_reserves)

    def check_invariants(self) -> None:
        """Raise InsufficientReserves if effective token reserves are exhausted."""
        if self.real_token_reserves >= self.virtual_token_reserves:
            raise InsufficientReserves(
                f"real_token_reserves ({self.real_token_reserves}) must stay below "
                f"virtual_token_reserves ({self.virtual_token_reserves})"
            )

    def check_successor(self, successor: "ReserveState") -> None:
        """Validate that successor is a legal next state of this curve."""
        if successor.mint != self.mint or successor.index != self.index:
            raise HookAmmError("curve identity and index are immutable")
        if self.complete and not successor.complete:
            raise CurveComplete("completion cannot be reversed")

    def apply_buy(self, net_quote_in: int, tokens_out: int) -> "ReserveState":
        """Successor state after a buy settled net_quote_in for tokens_out."""
        real_sol = narrow_u64(checked_add(self.real_sol_reserves, net_quote_in))
        real_token = narrow_u64(checked_add(self.real_token_reserves, tokens_out))
        return replace(self, real_sol_reserves=real_sol, real_token_reserves=real_token)

    def apply_sell(self, token_in: int, sol_out: int) -> "ReserveState":
        """Successor state after a sell of token_in paid out sol_out (gross)."""
        real_token = checked_sub(self.real_token_reserves, token_in, error=InsufficientReserves)
        real_sol = checked_sub(self.real_sol_reserves, sol_out, error=InsufficientReserves)
        return replace(self, real_sol_reserves=real_sol, real_token_reserves=real_token)

    def mark_complete(self) -> "ReserveState":
        if self.complete:
            raise CurveComplete(self.mint)
        return replace(self, complete=True)

    def to_record(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "ReserveState":
        """Build a state from a storage row, converting u64 text columns."""
        values = {f.name: record[f.name] for f in fields(cls)}
        for name in _U64_FIELDS:
            values[name] = int(values[name])
        values["complete"] = bool(values["complete"])
        return cls(**values)


@dataclass
class GlobalConfig:
    """Process-wide exchange configuration and curve counter."""
    authority: str
    fee_recipient: str
    total_curves: int = 0
