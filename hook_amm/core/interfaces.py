"""Collaborator interfaces the exchange depends on.

The engine computes amounts and reserve transitions. Moving balances,
persisting records and publishing notifications are delegated to
implementations of these interfaces.
"""

from abc import ABC, abstractmethod
from typing import ContextManager, Optional

from hook_amm.core.state import GlobalConfig, ReserveState
from hook_amm.core.trade import TradeEvent

NATIVE_ASSET = "SOL"


def custody_account(mint: str) -> str:
    """Account that holds a curve's token supply and quote reserves."""
    return f"curve:{mint}"


class AssetTransfer(ABC):
    """Moves base and quote assets between accounts.

    move() is the single entry point for transfers. Implementations decide
    whether a plain transfer suffices or a hook-aware path is required for
    the asset; the engine never branches on it.
    """

    @abstractmethod
    def balance_of(self, asset: str, account: str) -> int:
        """Current balance of asset held by account."""

    @abstractmethod
    def move(self, asset: str, source: str, destination: str, amount: int) -> None:
        """Transfer amount of asset, or raise without moving anything."""

    @abstractmethod
    def mint_authority(self, asset: str) -> Optional[str]:
        """Account allowed to mint asset, or None once revoked."""

    @abstractmethod
    def revoke_mint_authority(self, asset: str, authority: str) -> None:
        """Permanently disable minting of asset."""

    @abstractmethod
    def atomic(self) -> ContextManager[None]:
        """Scope in which all moves are applied together or not at all."""


class CurveStore(ABC):
    """Durable home of curve records and the global config."""

    @abstractmethod
    def get(self, mint: str) -> Optional[ReserveState]:
        pass

    @abstractmethod
    def save(self, state: ReserveState) -> None:
        pass

    @abstractmethod
    def list_curves(self) -> list[ReserveState]:
        pass

    @abstractmethod
    def load_config(self) -> Optional[GlobalConfig]:
        pass

    @abstractmethod
    def save_config(self, config: GlobalConfig) -> None:
        pass

    def __contains__(self, mint: str) -> bool:
        return self.get(mint) is not None


class TradeEventSink(ABC):
    """Consumer of trade notifications."""

    @abstractmethod
    def publish(self, event: TradeEvent) -> None:
        pass
