"""
Emergency Drain.

Administrative escape hatch that sweeps the whole undistributed balance.
"""

from typing import Optional

from src.core import get_logger

from ..models.records import DrainRecord
from ..protocols import NotifierProtocol, ValueTransferProtocol
from .rate_engine import DepositRateEngine
from .share_registry import ShareRegistry
from .transfer import pay_out
from .withdrawal import BeforeTransfer

logger = get_logger(__name__)


class EmergencyDrain:
    """
    Transfers the entire pool balance to the administrator.

    Outstanding share records keep their entitlement on paper but the pool
    no longer holds the value, so later withdrawals fail with
    TransferFailure until new deposits arrive. Records and the rate are not
    modified.
    """

    def __init__(
        self,
        registry: ShareRegistry,
        engine: DepositRateEngine,
        transfer: ValueTransferProtocol,
        notifier: Optional[NotifierProtocol] = None,
    ):
        self._registry = registry
        self._engine = engine
        self._transfer = transfer
        self._notifier = notifier

    async def drain(
        self,
        recipient: str,
        before_transfer: Optional[BeforeTransfer] = None,
    ) -> DrainRecord:
        """
        Sweep the pool to ``recipient``.

        Args:
            recipient: Identity receiving the balance
            before_transfer: Hook run with no payouts and the swept amount
                just before the transfer

        Returns:
            DrainRecord with the amount moved

        Raises:
            TransferFailure: If the transfer fails; the balance is kept
        """
        amount = self._engine.balance
        outstanding = self._registry.outstanding_count()

        if before_transfer:
            before_transfer([], amount)
        await pay_out(self._transfer, amount, recipient)
        self._engine.drain()

        logger.warning(
            f"Emergency drain: {amount} to {recipient} "
            f"({outstanding} share records still outstanding)"
        )

        if self._notifier:
            try:
                await self._notifier.send_warning(
                    "Emergency Drain",
                    f"Pool drained to {recipient}.\n"
                    f"Amount: {amount}\n"
                    f"Outstanding records: {outstanding}",
                )
            except Exception as e:
                logger.warning(f"Failed to send drain notification: {e}")

        return DrainRecord(
            recipient=recipient,
            amount=amount,
            outstanding_records=outstanding,
        )
