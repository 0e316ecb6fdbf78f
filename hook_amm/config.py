"""Shared configuration for exchange parameters and simulations."""

from dataclasses import dataclass, replace
import os
from typing import Mapping, Optional

from hook_amm.core.fees import FEE_BASIS_POINTS


@dataclass(frozen=True)
class ExchangeSettings:
    fee_basis_points: int
    initial_supply: int
    virtual_token_reserves: int
    virtual_sol_reserves: int
    # Curves complete automatically once real_sol_reserves reaches this (None = never)
    graduation_sol_threshold: Optional[int] = None


DEFAULT_SETTINGS = ExchangeSettings(
    fee_basis_points=FEE_BASIS_POINTS,
    initial_supply=1_000_000_000_000_000,
    virtual_token_reserves=1_073_000_000_000_000,
    virtual_sol_reserves=30_000_000_000,
    graduation_sol_threshold=None,
)


@dataclass(frozen=True)
class SimulationSettings:
    n_steps: int
    arrival_rate: float
    mean_buy_lamports: float
    size_sigma: float
    buy_prob: float
    sell_fraction: float
    n_traders: int
    trader_funding: int
    slippage_bps: int


BASELINE_SIMULATION = SimulationSettings(
    n_steps=1000,
    arrival_rate=0.8,
    mean_buy_lamports=500_000_000.0,
    size_sigma=1.2,
    buy_prob=0.6,
    sell_fraction=0.5,
    n_traders=20,
    trader_funding=1_000_000_000_000,
    slippage_bps=500,
)


def resolve_log_level(env: Optional[Mapping[str, str]] = None) -> str:
    """Resolve log level from environment."""
    env = os.environ if env is None else env
    return env.get("HOOK_AMM_LOG_LEVEL", "WARNING")


def resolve_db_path(env: Optional[Mapping[str, str]] = None) -> Optional[str]:
    env = os.environ if env is None else env
    return env.get("HOOK_AMM_DB_PATH") or None


def resolve_settings(env: Optional[Mapping[str, str]] = None) -> ExchangeSettings:
    """Default settings with environment overrides applied."""
    env = os.environ if env is None else env
    threshold = env.get("HOOK_AMM_GRADUATION_THRESHOLD")
    if threshold:
        return replace(DEFAULT_SETTINGS, graduation_sol_threshold=int(threshold))
    return DEFAULT_SETTINGS
