"""In-memory asset ledger implementing the AssetTransfer interface."""

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from hook_amm.core.checked import narrow_u64, require_u64
from hook_amm.core.errors import (
    InsufficientBalance,
    TransferRejected,
    UnauthorizedMintAuthority,
)
from hook_amm.core.interfaces import NATIVE_ASSET, AssetTransfer

logger = logging.getLogger(__name__)

# (asset, source, destination, amount) -> allow?
TransferHook = Callable[[str, str, str, int], bool]


class InMemoryLedger(AssetTransfer):
    """Balances, mint authorities and transfer hooks held in process memory.

    Assets with registered hooks take the hook-aware transfer path: every
    hook must approve the transfer before balances move. Other assets,
    including the native quote asset, use a plain transfer.

    atomic() snapshots balances and mint authorities on entry and restores
    them if the block raises, so a multi-leg trade either settles completely
    or not at all.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._balances: dict[tuple[str, str], int] = {}
        self._mint_authorities: dict[str, Optional[str]] = {}
        self._hooks: dict[str, list[TransferHook]] = {}
        self._depth = 0

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def create_mint(
        self,
        asset: str,
        authority: str,
        supply: int = 0,
        holder: Optional[str] = None,
    ) -> None:
        """Register a token with its mint authority and optional initial supply."""
        with self._lock:
            self._mint_authorities[asset] = authority
        if supply:
            self.mint_to(asset, holder or authority, supply, authority)

    def mint_to(self, asset: str, account: str, amount: int, authority: str) -> None:
        with self._lock:
            if self._mint_authorities.get(asset) != authority:
                raise UnauthorizedMintAuthority(f"{authority} cannot mint {asset}")
            self._credit(asset, account, require_u64(amount, "amount"))

    def airdrop(self, account: str, amount: int) -> None:
        """Credit native quote units to an account."""
        with self._lock:
            self._credit(NATIVE_ASSET, account, require_u64(amount, "amount"))

    def add_transfer_hook(self, asset: str, hook: TransferHook) -> None:
        with self._lock:
            self._hooks.setdefault(asset, []).append(hook)

    # ------------------------------------------------------------------
    # AssetTransfer
    # ------------------------------------------------------------------

    def balance_of(self, asset: str, account: str) -> int:
        with self._lock:
            return self._balances.get((asset, account), 0)

    def move(self, asset: str, source: str, destination: str, amount: int) -> None:
        amount = require_u64(amount, "amount")
        with self._lock:
            if asset in self._hooks:
                self._hooked_move(asset, source, destination, amount)
            else:
                self._plain_move(asset, source, destination, amount)

    def mint_authority(self, asset: str) -> Optional[str]:
        with self._lock:
            return self._mint_authorities.get(asset)

    def revoke_mint_authority(self, asset: str, authority: str) -> None:
        with self._lock:
            if self._mint_authorities.get(asset) != authority:
                raise UnauthorizedMintAuthority(f"{authority} is not the authority of {asset}")
            self._mint_authorities[asset] = None
        logger.info("Mint authority revoked for %s", asset)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            snapshot = None
            if self._depth == 0:
                snapshot = (dict(self._balances), dict(self._mint_authorities))
            self._depth += 1
            try:
                yield
            except BaseException:
                if snapshot is not None:
                    self._balances, self._mint_authorities = snapshot
                    logger.debug("Ledger unit rolled back")
                raise
            finally:
                self._depth -= 1

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def total_supply(self, asset: str) -> int:
        with self._lock:
            return sum(v for (a, _), v in self._balances.items() if a == asset)

    def _hooked_move(self, asset: str, source: str, destination: str, amount: int) -> None:
        for hook in self._hooks[asset]:
            if not hook(asset, source, destination, amount):
                raise TransferRejected(f"{asset} {source} -> {destination} ({amount})")
        self._plain_move(asset, source, destination, amount)

    def _plain_move(self, asset: str, source: str, destination: str, amount: int) -> None:
        if amount == 0:
            return
        available = self._balances.get((asset, source), 0)
        if available < amount:
            raise InsufficientBalance(
                f"{source} holds {available} {asset}, needs {amount}"
            )
        self._balances[(asset, source)] = available - amount
        self._credit(asset, destination, amount)

    def _credit(self, asset: str, account: str, amount: int) -> None:
        key = (asset, account)
        self._balances[key] = narrow_u64(self._balances.get(key, 0) + amount)
