"""Exchange error taxonomy.

Every failure raised by the engine derives from HookAmmError and carries a
numeric code. Codes in the 6000 range match the on-chain program's error
enum so that clients can share one lookup table.
"""

from typing import Optional


class HookAmmError(Exception):
    """Base class for all exchange errors."""
    code: int = 6999
    message: str = "Unknown error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail
        text = self.message if detail is None else f"{self.message}: {detail}"
        super().__init__(text)


class InvalidAmount(HookAmmError):
    code = 6000
    message = "Invalid amount"


class SlippageExceeded(HookAmmError):
    code = 6001
    message = "Slippage exceeded"


class CurveComplete(HookAmmError):
    code = 6002
    message = "Curve is complete"


class InsufficientReserves(HookAmmError):
    code = 6003
    message = "Insufficient reserves"


class ArithmeticOverflow(HookAmmError):
    code = 6004
    message = "Overflow"


class UnauthorizedMintAuthority(HookAmmError):
    code = 6005
    message = "Unauthorized mint authority"


class InvalidSupply(HookAmmError):
    code = 6006
    message = "Invalid supply"


class CurveAlreadyExists(HookAmmError):
    code = 6008
    message = "Curve account not empty"


class VirtualReservesTooSmall(HookAmmError):
    code = 6009
    message = "Virtual reserves too small"


class InsufficientBalance(HookAmmError):
    code = 6010
    message = "Insufficient balance"


class CurveNotFound(HookAmmError):
    code = 6100
    message = "Curve not found"


class GlobalConfigNotInitialized(HookAmmError):
    code = 6101
    message = "Global config not initialized"


class GlobalConfigAlreadyInitialized(HookAmmError):
    code = 6102
    message = "Global config already initialized"


class TransferRejected(HookAmmError):
    code = 6103
    message = "Transfer rejected by hook"


_MESSAGES = {
    InvalidAmount.code: "Invalid amount provided",
    SlippageExceeded.code: "Slippage tolerance exceeded",
    CurveComplete.code: "Bonding curve is already complete",
    InsufficientReserves.code: "Insufficient reserves for this operation",
    ArithmeticOverflow.code: "Numerical overflow in calculation",
    UnauthorizedMintAuthority.code: "Creator is not the mint authority",
    InvalidSupply.code: "Curve custody does not hold the initial supply",
    CurveAlreadyExists.code: "A curve already exists for this mint",
    VirtualReservesTooSmall.code: "Virtual token reserves must exceed the initial supply",
    InsufficientBalance.code: "Insufficient balance",
    CurveNotFound.code: "No curve exists for this mint",
    GlobalConfigNotInitialized.code: "Global config has not been initialized",
    GlobalConfigAlreadyInitialized.code: "Global config is already initialized",
    TransferRejected.code: "Token transfer rejected by transfer hook",
}


def parse_error(code: int) -> str:
    """Human-readable message for an error code."""
    return _MESSAGES.get(code, f"Unknown error: {code}")
