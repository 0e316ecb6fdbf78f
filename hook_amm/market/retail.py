"""Retail trader simulation with Poisson arrivals."""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np


@dataclass
class RetailOrder:
    """A retail order to be sent to a bonding curve."""
    side: str     # "buy" or "sell" (trader's perspective, re: tokens)
    trader: str
    size: float   # Lamports to spend (buy) or fraction of holdings to sell (sell)


class RetailTrader:
    """Generates retail trading flow with Poisson arrivals.

    Orders arrive according to a Poisson process. Buy sizes are lognormal
    in lamports; sells dispose of a uniformly drawn fraction (up to
    sell_fraction) of the trader's current holdings.
    """

    def __init__(
        self,
        traders: Sequence[str],
        arrival_rate: float = 1.0,
        mean_size: float = 500_000_000.0,
        size_sigma: float = 1.2,
        buy_prob: float = 0.5,
        sell_fraction: float = 0.5,
        seed: Optional[int] = None,
    ):
        """
        Args:
            traders: Account identities orders are drawn for
            arrival_rate: Expected number of orders per time step (lambda)
            mean_size: Mean buy size in lamports
            size_sigma: Lognormal sigma (log-space)
            buy_prob: Probability of a buy order
            sell_fraction: Upper bound of the holdings fraction sold per order
            seed: Random seed for reproducibility
        """
        if not traders:
            raise ValueError("traders cannot be empty")
        if not 0 < sell_fraction <= 1:
            raise ValueError(f"sell_fraction must be in (0, 1], got {sell_fraction}")
        self.traders = list(traders)
        self.arrival_rate = arrival_rate
        self.mean_size = mean_size
        self.size_sigma = size_sigma
        self.buy_prob = buy_prob
        self.sell_fraction = sell_fraction
        self._rng = np.random.default_rng(seed)

    def reset(self, seed: Optional[int] = None) -> None:
        """Reset the random state."""
        if seed is not None:
            self._rng = np.random.default_rng(seed)

    def generate_orders(self) -> list[RetailOrder]:
        """Generate retail orders for one time step.

        Returns:
            List of retail orders (may be empty if no arrivals)
        """
        n_arrivals = self._rng.poisson(self.arrival_rate)

        if n_arrivals == 0:
            return []

        orders = []
        for _ in range(n_arrivals):
            trader = self.traders[int(self._rng.integers(len(self.traders)))]

            if self._rng.random() < self.buy_prob:
                # Lognormally distributed sizes with mean = mean_size
                sigma = max(self.size_sigma, 0.01)
                mean = max(self.mean_size, 1.0)
                mu = float(np.log(mean) - 0.5 * sigma * sigma)
                orders.append(RetailOrder("buy", trader, float(self._rng.lognormal(mu, sigma))))
            else:
                fraction = float(self._rng.uniform(0.0, self.sell_fraction))
                orders.append(RetailOrder("sell", trader, fraction))

        return orders
