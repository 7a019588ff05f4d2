"""
Deposit/Rate Engine Unit Tests.
"""

import pytest

from src.config.models import RateMode
from src.core.exceptions import (
    ErrorCode,
    NoSharesError,
    TransferFailure,
    ValidationError,
)
from src.share_ledger.core.rate_engine import DepositRateEngine
from src.share_ledger.core.share_registry import ShareRegistry
from src.share_ledger.models.records import Collection, LedgerState


class TestDeposit:
    """Test deposits and rate derivation."""

    def test_first_deposit_sets_floor_rate(self, engine):
        """Test rate is floor(deposit / total_shares)."""
        record = engine.deposit(900)

        assert record.allocation_per_share == 10
        assert record.total_shares == 90
        assert engine.balance == 900
        assert record.remainder == 0

    def test_remainder_stays_in_pool(self, engine):
        """Test integer division dust remains in the balance."""
        record = engine.deposit(95)

        assert engine.allocation_per_share == 1
        assert engine.balance == 95
        assert record.remainder == 5

    def test_no_shares_rejected(self):
        """Test deposit with zero total shares fails."""
        engine = DepositRateEngine(ShareRegistry())

        with pytest.raises(NoSharesError) as exc_info:
            engine.deposit(100)

        assert exc_info.value.code == ErrorCode.NO_SHARES
        assert engine.balance == 0

    def test_zero_weight_registry_rejected(self):
        """Test zero-weight records alone do not allow deposits."""
        registry = ShareRegistry()
        registry.register(Collection.SECONDARY, [(1, 0)])

        with pytest.raises(NoSharesError):
            DepositRateEngine(registry).deposit(100)

    @pytest.mark.parametrize("amount", [0, -5, 1.5, True])
    def test_invalid_amount_rejected(self, engine, amount):
        with pytest.raises(ValidationError) as exc_info:
            engine.deposit(amount)

        assert exc_info.value.code == ErrorCode.INVALID_AMOUNT
        assert engine.balance == 0


class TestRateModes:
    """Test recompute and accumulate rate derivation."""

    def test_recompute_uses_balance_after_payouts(self, funded_engine):
        """Test a later deposit recomputes from the remaining balance."""
        funded_engine.debit(100)

        funded_engine.deposit(90)

        # (800 + 90) // 90
        assert funded_engine.allocation_per_share == 9
        assert funded_engine.balance == 890

    def test_recompute_second_deposit_on_full_pool(self, funded_engine):
        funded_engine.deposit(900)

        assert funded_engine.allocation_per_share == 20

    def test_accumulate_adds_increment(self, share_registry):
        """Test accumulate mode adds amount // total_shares to the rate."""
        engine = DepositRateEngine(share_registry, rate_mode=RateMode.ACCUMULATE)
        engine.deposit(900)
        engine.debit(100)

        engine.deposit(90)

        assert engine.allocation_per_share == 11
        assert engine.balance == 890
        assert engine.rate_mode == RateMode.ACCUMULATE


class TestBalance:
    """Test balance bookkeeping."""

    def test_ensure_covered_raises_on_overdraw(self, funded_engine):
        with pytest.raises(TransferFailure) as exc_info:
            funded_engine.ensure_covered(901, "0xholder")

        assert exc_info.value.code == ErrorCode.INSUFFICIENT_BALANCE
        assert exc_info.value.amount == 901
        assert exc_info.value.recipient == "0xholder"

    def test_debit_reduces_balance(self, funded_engine):
        assert funded_engine.debit(300) == 600

    def test_drain_empties_pool_and_keeps_rate(self, funded_engine):
        """Test drain returns the balance and leaves the rate."""
        assert funded_engine.drain() == 900
        assert funded_engine.balance == 0
        assert funded_engine.allocation_per_share == 10

    def test_snapshot_and_load(self, funded_engine, share_registry):
        """Test scalar state survives a snapshot and load."""
        state = funded_engine.snapshot()
        assert state == LedgerState(total_shares=90, allocation_per_share=10, balance=900)

        restored = DepositRateEngine(share_registry)
        restored.load(state)

        assert restored.allocation_per_share == 10
        assert restored.balance == 900
