"""Bonding curve exchange: curve creation, trading and completion."""

import itertools
import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from hook_amm.config import DEFAULT_SETTINGS, ExchangeSettings
from hook_amm.core.checked import require_u64
from hook_amm.core.errors import (
    CurveAlreadyExists,
    CurveComplete,
    CurveNotFound,
    InsufficientBalance,
    InvalidAmount,
    InvalidSupply,
    SlippageExceeded,
    UnauthorizedMintAuthority,
    VirtualReservesTooSmall,
)
from hook_amm.core.fees import compute_fee
from hook_amm.core.interfaces import (
    NATIVE_ASSET,
    AssetTransfer,
    CurveStore,
    TradeEventSink,
    custody_account,
)
from hook_amm.core.pricing import price_impact_bps, quote_buy, quote_sell
from hook_amm.core.state import GlobalConfig, ReserveState
from hook_amm.core.trade import TradeEvent, TradeQuote, TradeResult, TradeSide
from hook_amm.exchange.registry import GlobalRegistry
from hook_amm.storage.memory import InMemoryCurveStore

logger = logging.getLogger(__name__)


class BondingCurveExchange:
    """Runs constant product bonding curves over pluggable collaborators.

    Each trade checks out exactly one curve under that curve's lock, prices
    it on effective reserves, builds the successor state, settles every
    transfer leg inside one atomic ledger unit, and only then commits the
    successor to the store. A failure at any step leaves the stored curve
    and all balances as they were.

    Callers are trusted: identities are not authenticated here.
    """

    def __init__(
        self,
        transfers: AssetTransfer,
        store: Optional[CurveStore] = None,
        events: Optional[TradeEventSink] = None,
        registry: Optional[GlobalRegistry] = None,
        settings: ExchangeSettings = DEFAULT_SETTINGS,
    ):
        self.transfers = transfers
        self.store = store if store is not None else InMemoryCurveStore()
        self.events = events
        self.registry = registry if registry is not None else GlobalRegistry(self.store)
        self.settings = settings
        self._locks: dict[str, threading.Lock] = {}
        self._lock_users: dict[str, int] = {}
        self._locks_guard = threading.Lock()
        self._sequence = itertools.count()

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def initialize_global_config(self, authority: str, fee_recipient: str) -> GlobalConfig:
        return self.registry.initialize(authority, fee_recipient)

    def open_curve(
        self,
        mint: str,
        creator: str,
        initial_supply: int,
        virtual_token_reserves: int,
        virtual_sol_reserves: int,
    ) -> str:
        """Open a bonding curve for mint and move its supply into custody.

        Args:
            mint: Base asset identity; also the curve id
            creator: Account holding the full initial supply and mint authority
            initial_supply: Token units placed under curve custody
            virtual_token_reserves: Token-side pricing liquidity, > initial_supply
            virtual_sol_reserves: Quote-side pricing liquidity

        Returns:
            The curve id (the mint identity)

        Raises:
            InvalidAmount: If any amount is zero
            VirtualReservesTooSmall: If virtual token reserves <= initial supply
            CurveAlreadyExists: If mint already has a curve
            UnauthorizedMintAuthority: If creator cannot mint the asset
            InsufficientBalance: If creator does not hold exactly initial_supply
            InvalidSupply: If custody does not end up with initial_supply
        """
        initial_supply = require_u64(initial_supply, "initial_supply")
        virtual_token_reserves = require_u64(virtual_token_reserves, "virtual_token_reserves")
        virtual_sol_reserves = require_u64(virtual_sol_reserves, "virtual_sol_reserves")

        if initial_supply == 0:
            raise InvalidAmount("initial_supply must be > 0")
        if virtual_token_reserves == 0:
            raise InvalidAmount("virtual_token_reserves must be > 0")
        if virtual_sol_reserves == 0:
            raise InvalidAmount("virtual_sol_reserves must be > 0")
        if virtual_token_reserves <= initial_supply:
            raise VirtualReservesTooSmall(
                f"virtual_token_reserves ({virtual_token_reserves}) must exceed "
                f"initial_supply ({initial_supply})"
            )

        with self._checkout_lock(mint):
            if mint in self.store:
                raise CurveAlreadyExists(mint)
            if self.transfers.mint_authority(mint) != creator:
                raise UnauthorizedMintAuthority(f"{creator} is not the mint authority of {mint}")
            balance = self.transfers.balance_of(mint, creator)
            if balance != initial_supply:
                raise InsufficientBalance(
                    f"creator holds {balance}, initial_supply is {initial_supply}"
                )

            custody = custody_account(mint)
            with self.registry.allocate() as index:
                state = ReserveState.open(
                    mint=mint,
                    creator=creator,
                    initial_supply=initial_supply,
                    virtual_token_reserves=virtual_token_reserves,
                    virtual_sol_reserves=virtual_sol_reserves,
                    index=index,
                )
                with self.transfers.atomic():
                    self.transfers.move(mint, creator, custody, initial_supply)
                    if self.transfers.balance_of(mint, custody) != initial_supply:
                        raise InvalidSupply(
                            f"custody holds {self.transfers.balance_of(mint, custody)}"
                        )
                    self.transfers.revoke_mint_authority(mint, creator)
                    self.store.save(state)

        logger.info(
            "Opened curve #%d for %s (supply=%d, virtual_token=%d, virtual_sol=%d)",
            state.index, mint, initial_supply, virtual_token_reserves, virtual_sol_reserves,
        )
        return mint

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_curve(self, mint: str) -> ReserveState:
        state = self.store.get(mint)
        if state is None:
            raise CurveNotFound(mint)
        return state

    def list_curves(self) -> list[ReserveState]:
        return self.store.list_curves()

    def preview_buy(self, mint: str, gross_quote_in: int) -> TradeQuote:
        """Price a buy against the current state without executing it."""
        return self._price_buy(self.get_curve(mint), gross_quote_in)

    def preview_sell(self, mint: str, token_in: int) -> TradeQuote:
        """Price a sell against the current state without executing it."""
        return self._price_sell(self.get_curve(mint), token_in)

    # ------------------------------------------------------------------
    # Trading
    # ------------------------------------------------------------------

    def buy(self, mint: str, user: str, gross_quote_in: int, min_token_out: int) -> TradeResult:
        """Spend gross_quote_in lamports on tokens.

        Raises:
            InvalidAmount: If gross_quote_in is zero
            CurveComplete: If the curve no longer trades
            SlippageExceeded: If fewer than min_token_out tokens would be received
            InsufficientReserves, ArithmeticOverflow: From pricing or accounting
        """
        min_token_out = require_u64(min_token_out, "min_token_out")
        with self._checkout(mint) as state:
            quote = self._price_buy(state, gross_quote_in)
            if quote.amount_out < min_token_out:
                raise SlippageExceeded(f"{quote.amount_out} tokens < minimum {min_token_out}")

            successor = state.apply_buy(quote.net_quote, quote.amount_out)
            threshold = self.settings.graduation_sol_threshold
            if threshold is not None and successor.real_sol_reserves >= threshold:
                successor = successor.mark_complete()

            custody = custody_account(mint)
            fee_recipient = self.registry.fee_recipient
            with self.transfers.atomic():
                self.transfers.move(NATIVE_ASSET, user, custody, quote.net_quote)
                if quote.fee > 0:
                    self.transfers.move(NATIVE_ASSET, user, fee_recipient, quote.fee)
                self.transfers.move(mint, custody, user, quote.amount_out)
                self._commit(state, successor)

        if successor.complete:
            logger.info("Curve %s graduated at %d real lamports", mint, successor.real_sol_reserves)
        event = self._publish(
            successor, user, quote.gross_quote, quote.amount_out, quote.fee, is_buy=True
        )
        return TradeResult(
            side=TradeSide.BUY,
            token_amount=quote.amount_out,
            sol_amount=quote.gross_quote,
            fee=quote.fee,
            event=event,
        )

    def sell(self, mint: str, user: str, token_in: int, min_quote_out: int) -> TradeResult:
        """Sell token_in tokens for lamports, net of fee.

        Raises:
            InvalidAmount: If token_in is zero
            CurveComplete: If the curve no longer trades
            SlippageExceeded: If the net payout would be below min_quote_out
            InsufficientReserves: If the curve cannot absorb the sale
        """
        min_quote_out = require_u64(min_quote_out, "min_quote_out")
        with self._checkout(mint) as state:
            quote = self._price_sell(state, token_in)
            if quote.net_quote < min_quote_out:
                raise SlippageExceeded(f"{quote.net_quote} lamports < minimum {min_quote_out}")

            successor = state.apply_sell(quote.amount_in, quote.gross_quote)

            custody = custody_account(mint)
            fee_recipient = self.registry.fee_recipient
            with self.transfers.atomic():
                self.transfers.move(mint, user, custody, quote.amount_in)
                self.transfers.move(NATIVE_ASSET, custody, user, quote.net_quote)
                if quote.fee > 0:
                    self.transfers.move(NATIVE_ASSET, custody, fee_recipient, quote.fee)
                self._commit(state, successor)

        event = self._publish(
            successor, user, quote.gross_quote, quote.amount_in, quote.fee, is_buy=False
        )
        return TradeResult(
            side=TradeSide.SELL,
            token_amount=quote.amount_in,
            sol_amount=quote.net_quote,
            fee=quote.fee,
            event=event,
        )

    def complete_curve(self, mint: str) -> ReserveState:
        """Retire a curve from trading. Completion is permanent."""
        with self._checkout(mint) as state:
            successor = state.mark_complete()
            self._commit(state, successor)
        logger.info("Curve %s completed", mint)
        return successor

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _price_buy(self, state: ReserveState, gross_quote_in: int) -> TradeQuote:
        if state.complete:
            raise CurveComplete(state.mint)
        gross_quote_in = require_u64(gross_quote_in, "gross_quote_in")
        if gross_quote_in == 0:
            raise InvalidAmount("gross_quote_in must be > 0")

        fee, net = compute_fee(gross_quote_in, self.settings.fee_basis_points)
        quote_reserves = state.effective_sol_reserves
        token_reserves = state.effective_token_reserves
        tokens_out = quote_buy(net, quote_reserves, token_reserves)

        return TradeQuote(
            side=TradeSide.BUY,
            amount_in=gross_quote_in,
            amount_out=tokens_out,
            gross_quote=gross_quote_in,
            fee=fee,
            net_quote=net,
            price_impact_bps=price_impact_bps(net, tokens_out, quote_reserves, token_reserves),
        )

    def _price_sell(self, state: ReserveState, token_in: int) -> TradeQuote:
        if state.complete:
            raise CurveComplete(state.mint)
        token_in = require_u64(token_in, "token_in")
        if token_in == 0:
            raise InvalidAmount("token_in must be > 0")

        token_reserves = state.effective_token_reserves
        quote_reserves = state.effective_sol_reserves
        sol_out = quote_sell(token_in, token_reserves, quote_reserves)
        fee, net = compute_fee(sol_out, self.settings.fee_basis_points)

        return TradeQuote(
            side=TradeSide.SELL,
            amount_in=token_in,
            amount_out=net,
            gross_quote=sol_out,
            fee=fee,
            net_quote=net,
            price_impact_bps=price_impact_bps(token_in, sol_out, token_reserves, quote_reserves),
        )

    def _commit(self, state: ReserveState, successor: ReserveState) -> None:
        state.check_successor(successor)
        successor.check_invariants()
        self.store.save(successor)

    def _publish(
        self,
        state: ReserveState,
        user: str,
        sol_amount: int,
        token_amount: int,
        fee: int,
        is_buy: bool,
    ) -> TradeEvent:
        event = TradeEvent(
            mint=state.mint,
            user=user,
            sol_amount=sol_amount,
            token_amount=token_amount,
            is_buy=is_buy,
            fee=fee,
            virtual_sol_reserves=state.effective_sol_reserves,
            virtual_token_reserves=state.effective_token_reserves,
            timestamp=next(self._sequence),
        )
        logger.debug(
            "%s %s %d tokens / %d lamports on %s",
            user, "buy" if is_buy else "sell", token_amount, sol_amount, state.mint,
        )
        if self.events is not None:
            # Committed trades stand even if the sink fails
            try:
                self.events.publish(event)
            except Exception:
                logger.exception("Event sink failed for %s trade #%d", state.mint, event.timestamp)
        return event

    def _acquire_lock(self, mint: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(mint)
            if lock is None:
                lock = self._locks[mint] = threading.Lock()
            self._lock_users[mint] = self._lock_users.get(mint, 0) + 1
            return lock

    def _release_lock(self, mint: str) -> None:
        with self._locks_guard:
            self._lock_users[mint] -= 1
            if self._lock_users[mint] == 0:
                del self._lock_users[mint]
                # Only curves that exist keep a lock
                if mint not in self.store:
                    del self._locks[mint]

    @contextmanager
    def _checkout_lock(self, mint: str) -> Iterator[None]:
        lock = self._acquire_lock(mint)
        try:
            with lock:
                yield
        finally:
            self._release_lock(mint)

    @contextmanager
    def _checkout(self, mint: str) -> Iterator[ReserveState]:
        """Exclusive access to one curve's current state for one operation."""
        with self._checkout_lock(mint):
            yield self.get_curve(mint)
