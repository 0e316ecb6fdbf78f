"""Market simulation components."""

from hook_amm.market.retail import RetailOrder, RetailTrader
from hook_amm.market.simulator import CurveSimulation, SimulationResult, setup_simulation

__all__ = [
    "CurveSimulation",
    "RetailOrder",
    "RetailTrader",
    "SimulationResult",
    "setup_simulation",
]
