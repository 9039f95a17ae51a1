"""Tests for the share ledger and the access guard."""

import pytest

from yieldvault.engine.fixed_point import SCALE
from yieldvault.engine.guard import VaultGuard
from yieldvault.engine.ledger import ShareLedger
from yieldvault.exceptions import (
    InsufficientSharesError,
    InvalidAmountError,
    ReentrantCallError,
    UnauthorizedError,
    VaultPausedError,
)


class TestShareLedger:
    """Balance mutation and conservation."""

    def test_absent_holder_reads_zero(self):
        """Unknown holders have zero shares."""
        ledger = ShareLedger()
        assert ledger.shares_of("nobody") == 0
        assert ledger.total_shares == 0

    def test_mint_and_burn_keep_total(self):
        """Total shares track the sum of balances."""
        ledger = ShareLedger()
        ledger.mint("alice", 100)
        ledger.mint("bob", 50)
        ledger.mint("alice", 25)
        ledger.burn("bob", 20)

        assert ledger.shares_of("alice") == 125
        assert ledger.shares_of("bob") == 30
        assert ledger.total_shares == sum(shares for _, shares in ledger.holders()) == 155

    def test_burn_more_than_owned(self):
        """Over-burn raises and leaves the balance alone."""
        ledger = ShareLedger()
        ledger.mint("alice", 10)
        with pytest.raises(InsufficientSharesError) as exc_info:
            ledger.burn("alice", 11)
        assert exc_info.value.requested == 11
        assert exc_info.value.available == 10
        assert ledger.shares_of("alice") == 10

    def test_zero_balance_dropped(self):
        """Fully burned holders disappear from the ledger."""
        ledger = ShareLedger()
        ledger.mint("alice", 10)
        ledger.burn("alice", 10)
        assert len(ledger) == 0
        assert ledger.total_shares == 0

    def test_zero_mint_rejected(self):
        """Minting zero shares is refused."""
        with pytest.raises(InvalidAmountError):
            ShareLedger().mint("alice", 0)

    def test_snapshot_restore(self):
        """Restoring a snapshot undoes later mints and burns."""
        ledger = ShareLedger()
        ledger.mint("alice", 10)
        snap = ledger.snapshot()
        ledger.mint("bob", 5)
        ledger.burn("alice", 10)
        ledger.restore(snap)
        assert dict(ledger.holders()) == {"alice": 10}
        assert ledger.total_shares == 10


class TestConversions:
    """Floor conversions in both directions."""

    def test_one_to_one(self):
        """At rate SCALE shares and assets convert one to one."""
        assert ShareLedger.to_shares(10 * SCALE, SCALE) == 10 * SCALE
        assert ShareLedger.to_assets(10 * SCALE, SCALE) == 10 * SCALE

    def test_floor_against_holder(self):
        """Both conversions round down."""
        rate = 3 * SCALE // 2
        assert ShareLedger.to_shares(2, rate) == 1   # 1.33 floored
        assert ShareLedger.to_assets(1, rate) == 1   # 1.5 floored


class TestVaultGuard:
    """Owner check, pause gate, execution latch."""

    def test_owner_check(self):
        """Only the owner passes require_owner."""
        guard = VaultGuard(owner="owner")
        guard.require_owner("owner", "op")
        with pytest.raises(UnauthorizedError):
            guard.require_owner("mallory", "op")

    def test_pause_gate(self):
        """Paused guard rejects gated operations."""
        guard = VaultGuard(owner="owner", paused=True)
        with pytest.raises(VaultPausedError):
            guard.require_not_paused("deposit")

    def test_nested_lock_rejected(self):
        """Entering the lock twice raises ReentrantCallError."""
        guard = VaultGuard(owner="owner")
        with guard.locked("withdraw"):
            assert guard.entered
            with pytest.raises(ReentrantCallError) as exc_info:
                with guard.locked("deposit"):
                    pass
            assert exc_info.value.active == "withdraw"
        assert not guard.entered

    def test_lock_released_on_error(self):
        """Lock is released when the body raises."""
        guard = VaultGuard(owner="owner")
        with pytest.raises(RuntimeError):
            with guard.locked("deposit"):
                raise RuntimeError("boom")
        with guard.locked("deposit"):
            pass
