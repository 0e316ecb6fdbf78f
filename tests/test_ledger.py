"""Tests for the in-memory asset ledger."""

import pytest

from hook_amm.core.errors import (
    InsufficientBalance,
    InvalidAmount,
    TransferRejected,
    UnauthorizedMintAuthority,
)
from hook_amm.core.interfaces import NATIVE_ASSET
from hook_amm.exchange.ledger import InMemoryLedger


@pytest.fixture
def ledger() -> InMemoryLedger:
    ledger = InMemoryLedger()
    ledger.create_mint("TOK", "minter", supply=1_000)
    ledger.airdrop("alice", 500)
    return ledger


class TestMinting:
    """Mint authority and supply."""

    def test_create_mint_credits_authority(self, ledger):
        assert ledger.balance_of("TOK", "minter") == 1_000
        assert ledger.mint_authority("TOK") == "minter"
        assert ledger.total_supply("TOK") == 1_000

    def test_create_mint_to_holder(self):
        ledger = InMemoryLedger()
        ledger.create_mint("TOK", "minter", supply=10, holder="vault")
        assert ledger.balance_of("TOK", "vault") == 10
        assert ledger.balance_of("TOK", "minter") == 0

    def test_mint_requires_authority(self, ledger):
        with pytest.raises(UnauthorizedMintAuthority):
            ledger.mint_to("TOK", "alice", 1, authority="alice")

    def test_revoke(self, ledger):
        ledger.revoke_mint_authority("TOK", "minter")
        assert ledger.mint_authority("TOK") is None
        with pytest.raises(UnauthorizedMintAuthority):
            ledger.mint_to("TOK", "alice", 1, authority="minter")

    def test_revoke_requires_authority(self, ledger):
        with pytest.raises(UnauthorizedMintAuthority):
            ledger.revoke_mint_authority("TOK", "alice")
        assert ledger.mint_authority("TOK") == "minter"


class TestMove:
    """Plain transfers."""

    def test_move(self, ledger):
        ledger.move(NATIVE_ASSET, "alice", "bob", 200)
        assert ledger.balance_of(NATIVE_ASSET, "alice") == 300
        assert ledger.balance_of(NATIVE_ASSET, "bob") == 200

    def test_move_more_than_held(self, ledger):
        with pytest.raises(InsufficientBalance, match="alice holds 500"):
            ledger.move(NATIVE_ASSET, "alice", "bob", 501)
        assert ledger.balance_of(NATIVE_ASSET, "alice") == 500

    def test_zero_move_is_noop(self, ledger):
        ledger.move(NATIVE_ASSET, "nobody", "bob", 0)
        assert ledger.balance_of(NATIVE_ASSET, "bob") == 0

    def test_negative_move_rejected(self, ledger):
        with pytest.raises(InvalidAmount):
            ledger.move(NATIVE_ASSET, "alice", "bob", -1)


class TestTransferHooks:
    """Hook-aware transfer path."""

    def test_hook_sees_every_transfer(self, ledger):
        seen = []
        ledger.add_transfer_hook("TOK", lambda *args: seen.append(args) is None)
        ledger.move("TOK", "minter", "alice", 5)
        assert seen == [("TOK", "minter", "alice", 5)]
        assert ledger.balance_of("TOK", "alice") == 5

    def test_hook_veto(self, ledger):
        ledger.add_transfer_hook("TOK", lambda asset, src, dst, amount: amount < 100)
        with pytest.raises(TransferRejected):
            ledger.move("TOK", "minter", "alice", 100)
        assert ledger.balance_of("TOK", "minter") == 1_000

    def test_hooks_only_apply_to_their_asset(self, ledger):
        ledger.add_transfer_hook("TOK", lambda *args: False)
        ledger.move(NATIVE_ASSET, "alice", "bob", 1)
        assert ledger.balance_of(NATIVE_ASSET, "bob") == 1


class TestAtomic:
    """All-or-nothing units of work."""

    def test_commit(self, ledger):
        with ledger.atomic():
            ledger.move(NATIVE_ASSET, "alice", "bob", 100)
            ledger.move("TOK", "minter", "alice", 10)
        assert ledger.balance_of(NATIVE_ASSET, "bob") == 100
        assert ledger.balance_of("TOK", "alice") == 10

    def test_rollback_on_failure(self, ledger):
        with pytest.raises(InsufficientBalance):
            with ledger.atomic():
                ledger.move(NATIVE_ASSET, "alice", "bob", 100)
                ledger.move("TOK", "alice", "bob", 1)
        assert ledger.balance_of(NATIVE_ASSET, "alice") == 500
        assert ledger.balance_of(NATIVE_ASSET, "bob") == 0

    def test_rollback_restores_mint_authority(self, ledger):
        with pytest.raises(RuntimeError):
            with ledger.atomic():
                ledger.revoke_mint_authority("TOK", "minter")
                raise RuntimeError("abort")
        assert ledger.mint_authority("TOK") == "minter"

    def test_nested_failure_rolls_back_outer_unit(self, ledger):
        with pytest.raises(InsufficientBalance):
            with ledger.atomic():
                ledger.move(NATIVE_ASSET, "alice", "bob", 100)
                with ledger.atomic():
                    ledger.move(NATIVE_ASSET, "alice", "carol", 1_000)
        assert ledger.balance_of(NATIVE_ASSET, "alice") == 500
        assert ledger.balance_of(NATIVE_ASSET, "bob") == 0
