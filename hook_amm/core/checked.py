"""Checked unsigned integer arithmetic.

Reserve and amount values are stored as u64. Intermediate products are
computed in a u128 range, and every step is range-checked so results are
never silently wrapped or truncated.
"""

import numbers
from typing import Type

from hook_amm.core.errors import ArithmeticOverflow, HookAmmError, InvalidAmount

U16_MAX = 2**16 - 1
U64_MAX = 2**64 - 1
U128_MAX = 2**128 - 1


def require_u64(value: int, name: str = "value") -> int:
    """Validate that value is an unsigned 64-bit integer and return it as int."""
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidAmount(f"{name} must be an integer, got {value!r}")
    value = int(value)
    if value < 0:
        raise InvalidAmount(f"{name} must be >= 0, got {value}")
    if value > U64_MAX:
        raise ArithmeticOverflow(f"{name} does not fit in u64: {value}")
    return value


def _check_u128(value: int) -> int:
    if value < 0 or value > U128_MAX:
        raise ArithmeticOverflow(f"intermediate does not fit in u128: {value}")
    return value


def checked_add(a: int, b: int) -> int:
    return _check_u128(a + b)


def checked_mul(a: int, b: int) -> int:
    return _check_u128(a * b)


def checked_div(a: int, b: int) -> int:
    """Floor division; a zero divisor is reported as overflow."""
    if b == 0:
        raise ArithmeticOverflow("division by zero")
    return a // b


def checked_sub(a: int, b: int, error: Type[HookAmmError] = ArithmeticOverflow) -> int:
    if b > a:
        raise error(f"{a} - {b} underflows")
    return a - b


def narrow_u64(value: int) -> int:
    """Narrow a u128 intermediate back to u64."""
    if value < 0 or value > U64_MAX:
        raise ArithmeticOverflow(f"result does not fit in u64: {value}")
    return value
