"""
Batch Withdrawal Coordinator.

Withdraws several assets across both collections as one all-or-nothing
unit with a single summed transfer.
"""

from typing import Optional, Sequence

from src.core import get_logger
from src.core.exceptions import AlreadyWithdrawnError, LedgerError

from ..models.records import BatchWithdrawal, Collection
from ..protocols import ValueTransferProtocol
from .rate_engine import DepositRateEngine
from .share_registry import ShareRegistry
from .transfer import pay_out
from .withdrawal import BeforeTransfer, WithdrawalStateMachine

logger = get_logger(__name__)


class BatchWithdrawalCoordinator:
    """
    All-or-nothing batch withdrawal.

    Lifecycle of a batch:
    - Plan: validate every id and compute its payout (nothing mutated)
    - Execute: one transfer of the summed payout
    - Commit: mark every record withdrawn and debit the pool

    A failed transfer marks the batch FAILED and leaves every record as it
    was, so no rollback step is needed.

    Example:
        >>> coordinator = BatchWithdrawalCoordinator(registry, engine, machine, transfer)
        >>> batch = await coordinator.withdraw_batch([1002, 1003], [2001, 2003], "0xadmin")
        >>> batch.total_amount
        600
    """

    def __init__(
        self,
        registry: ShareRegistry,
        engine: DepositRateEngine,
        machine: WithdrawalStateMachine,
        transfer: ValueTransferProtocol,
    ):
        self._registry = registry
        self._engine = engine
        self._machine = machine
        self._transfer = transfer

    def plan(
        self,
        primary_ids: Sequence[int],
        secondary_ids: Sequence[int],
        recipient: str,
    ) -> BatchWithdrawal:
        """
        Validate every id and build a PENDING batch.

        An id listed twice in the same collection is treated as already
        withdrawn, since paying it twice would break exactly-once.

        Raises:
            NotRegisteredError: If any id has no record
            AlreadyWithdrawnError: If any id was paid or is repeated
        """
        batch = BatchWithdrawal(recipient=recipient)

        for collection, asset_ids in (
            (Collection.PRIMARY, primary_ids),
            (Collection.SECONDARY, secondary_ids),
        ):
            seen = set()
            for asset_id in asset_ids:
                if asset_id in seen:
                    raise AlreadyWithdrawnError(
                        f"{collection.value} asset {asset_id} listed twice in batch",
                        details={"collection": collection.value, "asset_id": asset_id},
                    )
                seen.add(asset_id)
                batch.add_payout(self._machine.quote(collection, asset_id, recipient))

        return batch

    async def execute(
        self,
        batch: BatchWithdrawal,
        before_transfer: Optional[BeforeTransfer] = None,
    ) -> BatchWithdrawal:
        """
        Pay and commit a planned batch.

        Args:
            batch: PENDING batch from plan()
            before_transfer: Hook run with every payout and the total just
                before the transfer; an error from it fails the batch

        Returns:
            The COMMITTED batch

        Raises:
            TransferFailure: If the summed payout cannot be made; the batch
                is marked FAILED and no record changes
        """
        if not batch.is_pending:
            logger.warning(f"Batch {batch.transaction_id[:8]} not in pending state")
            return batch

        batch.mark_executing()
        total = batch.total_amount

        try:
            self._engine.ensure_covered(total, batch.recipient)
            if before_transfer:
                before_transfer(batch.payouts, total)
            await pay_out(self._transfer, total, batch.recipient)
        except LedgerError as e:
            batch.mark_failed(str(e))
            logger.warning(f"Batch {batch.transaction_id[:8]} failed: {e}")
            raise

        for payout in batch.payouts:
            self._registry.mark_withdrawn(payout.collection, payout.asset_id)
        self._engine.debit(total)
        batch.mark_committed()

        logger.info(
            f"Batch {batch.transaction_id[:8]} committed: "
            f"{batch.asset_count} assets, {total} to {batch.recipient}"
        )
        return batch

    async def withdraw_batch(
        self,
        primary_ids: Sequence[int],
        secondary_ids: Sequence[int],
        recipient: str,
        before_transfer: Optional[BeforeTransfer] = None,
    ) -> BatchWithdrawal:
        """Plan and execute in one call."""
        batch = self.plan(primary_ids, secondary_ids, recipient)
        return await self.execute(batch, before_transfer)
