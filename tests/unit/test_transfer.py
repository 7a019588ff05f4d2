"""
Value Transfer Helper Unit Tests.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.core.exceptions import ErrorCode, TransferFailure
from src.share_ledger.core.transfer import pay_out


class TestPayOut:
    """Test pay_out wrapping of the transfer primitive."""

    @pytest.mark.asyncio
    async def test_pays_amount(self):
        transfer = MagicMock()
        transfer.pay = AsyncMock()

        await pay_out(transfer, 100, "0xholder")

        transfer.pay.assert_awaited_once_with(100, "0xholder")

    @pytest.mark.asyncio
    async def test_zero_amount_skipped(self):
        transfer = MagicMock()
        transfer.pay = AsyncMock()

        await pay_out(transfer, 0, "0xholder")

        transfer.pay.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_foreign_error_wrapped(self):
        """Test collaborator errors become TransferFailure with the cause chained."""
        transfer = MagicMock()
        transfer.pay = AsyncMock(side_effect=ConnectionError("node unreachable"))

        with pytest.raises(TransferFailure) as exc_info:
            await pay_out(transfer, 100, "0xholder")

        assert exc_info.value.code == ErrorCode.TRANSFER_FAILED
        assert exc_info.value.amount == 100
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @pytest.mark.asyncio
    async def test_ledger_error_passes_through(self):
        original = TransferFailure("vault paused", code=ErrorCode.INSUFFICIENT_BALANCE)
        transfer = MagicMock()
        transfer.pay = AsyncMock(side_effect=original)

        with pytest.raises(TransferFailure) as exc_info:
            await pay_out(transfer, 100, "0xholder")

        assert exc_info.value is original
