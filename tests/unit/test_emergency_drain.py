"""
Emergency Drain Unit Tests.
"""

import pytest

from src.core.exceptions import ErrorCode, TransferFailure
from src.share_ledger.core.emergency import EmergencyDrain
from src.share_ledger.models.records import Collection, WithdrawalState
from tests.mocks import MockNotifier


class TestEmergencyDrain:
    """Test sweeping the pool."""

    @pytest.mark.asyncio
    async def test_drain_moves_whole_balance(self, emergency, transfer, funded_engine):
        """Test the full balance goes to the recipient and the rate stays."""
        record = await emergency.drain("0xadmin")

        assert record.amount == 900
        assert record.outstanding_records == 6
        assert transfer.total_paid_to("0xadmin") == 900
        assert funded_engine.balance == 0
        assert funded_engine.allocation_per_share == 10

    @pytest.mark.asyncio
    async def test_drain_keeps_records(self, emergency, share_registry):
        await emergency.drain("0xadmin")

        assert share_registry.outstanding_count() == 6
        assert share_registry.state_of(Collection.PRIMARY, 1001) == WithdrawalState.REGISTERED

    @pytest.mark.asyncio
    async def test_withdraw_after_drain_fails(self, emergency, machine, primary_registry):
        """Test outstanding entitlements cannot be paid from a drained pool."""
        await emergency.drain("0xadmin")

        with pytest.raises(TransferFailure) as exc_info:
            await machine.withdraw(Collection.PRIMARY, 1001, "0xholder", primary_registry)

        assert exc_info.value.code == ErrorCode.INSUFFICIENT_BALANCE

    @pytest.mark.asyncio
    async def test_drain_sends_warning(self, emergency, notifier):
        await emergency.drain("0xadmin")

        message = notifier.get_last_message()
        assert message["level"] == "warning"
        assert message["title"] == "Emergency Drain"
        assert "900" in message["message"]

    @pytest.mark.asyncio
    async def test_notifier_failure_does_not_fail_drain(
        self, share_registry, funded_engine, transfer
    ):
        drain = EmergencyDrain(share_registry, funded_engine, transfer, MockNotifier(fail=True))

        record = await drain.drain("0xadmin")

        assert record.amount == 900
        assert funded_engine.balance == 0

    @pytest.mark.asyncio
    async def test_empty_pool_drains_zero(self, emergency, transfer, funded_engine):
        funded_engine.drain()

        record = await emergency.drain("0xadmin")

        assert record.amount == 0
        assert transfer.call_count == 0

    @pytest.mark.asyncio
    async def test_transfer_failure_keeps_balance(self, emergency, transfer, funded_engine):
        transfer.fail = True

        with pytest.raises(TransferFailure):
            await emergency.drain("0xadmin")

        assert funded_engine.balance == 900

    @pytest.mark.asyncio
    async def test_before_transfer_gets_swept_amount(self, emergency, transfer):
        calls = []

        await emergency.drain("0xadmin", before_transfer=lambda p, a: calls.append((list(p), a)))

        assert calls == [([], 900)]
        assert transfer.call_count == 1
