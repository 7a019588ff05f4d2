"""
Withdrawal State Machine.

Single-asset withdrawal with exactly-once payout and current-holder
authorization.
"""

from typing import Callable, Optional, Sequence

from src.core import get_logger
from src.core.exceptions import (
    AlreadyWithdrawnError,
    AuthorizationError,
    ErrorCode,
)

from ..models.records import Collection, PayoutRecord, WithdrawalState
from ..protocols import AssetRegistryProtocol, ValueTransferProtocol
from .rate_engine import DepositRateEngine
from .share_registry import ShareRegistry
from .transfer import pay_out

logger = get_logger(__name__)

# Called with the payouts and their total just before value moves
BeforeTransfer = Callable[[Sequence[PayoutRecord], int], None]


class WithdrawalStateMachine:
    """
    Drives an asset from REGISTERED to WITHDRAWN.

    The withdrawn flag is set only after the transfer succeeds; a failed
    transfer leaves the record and the pool untouched. No transition leaves
    WITHDRAWN.

    Example:
        >>> machine = WithdrawalStateMachine(registry, engine, transfer)
        >>> payout = await machine.withdraw(
        ...     Collection.PRIMARY, 1001, caller="0xholder", asset_registry=primary
        ... )
        >>> payout.amount
        100
    """

    def __init__(
        self,
        registry: ShareRegistry,
        engine: DepositRateEngine,
        transfer: ValueTransferProtocol,
    ):
        self._registry = registry
        self._engine = engine
        self._transfer = transfer

    def state_of(self, collection: Collection, asset_id: int) -> WithdrawalState:
        return self._registry.state_of(collection, asset_id)

    def quote(self, collection: Collection, asset_id: int, recipient: str = "") -> PayoutRecord:
        """
        Compute the payout of a registered, unwithdrawn asset.

        Args:
            collection: Asset collection
            asset_id: Asset identifier
            recipient: Identity that would receive the payout

        Returns:
            PayoutRecord at the current rate

        Raises:
            NotRegisteredError: If the asset has no record
            AlreadyWithdrawnError: If the asset was already paid
        """
        record = self._registry.require(collection, asset_id)
        if record.withdrawn:
            raise AlreadyWithdrawnError(
                f"{collection.value} asset {asset_id} already withdrawn",
                details={"collection": collection.value, "asset_id": asset_id},
            )

        return PayoutRecord(
            collection=collection,
            asset_id=asset_id,
            shares=record.shares,
            allocation_per_share=self._engine.allocation_per_share,
            recipient=recipient,
        )

    async def withdraw(
        self,
        collection: Collection,
        asset_id: int,
        caller: str,
        asset_registry: AssetRegistryProtocol,
        before_transfer: Optional[BeforeTransfer] = None,
    ) -> PayoutRecord:
        """
        Withdraw the payout of one asset to its current holder.

        Args:
            collection: Asset collection
            asset_id: Asset identifier
            caller: Identity requesting the withdrawal
            asset_registry: Ownership registry of the collection
            before_transfer: Hook run once the payout is known and covered;
                an error from it aborts the withdrawal before any transfer

        Returns:
            PayoutRecord of the completed payout

        Raises:
            NotFoundError: If the asset does not exist
            AuthorizationError: If caller is not the current holder
            NotRegisteredError: If the asset has no record
            AlreadyWithdrawnError: If the asset was already paid
            TransferFailure: If the payout cannot be made
        """
        holder = await asset_registry.owner_of(asset_id)
        if caller != holder:
            raise AuthorizationError(
                f"Caller is not the holder of {collection.value} asset {asset_id}",
                code=ErrorCode.NOT_OWNER,
                details={"collection": collection.value, "asset_id": asset_id},
            )

        payout = self.quote(collection, asset_id, recipient=caller)

        self._engine.ensure_covered(payout.amount, caller)
        if before_transfer:
            before_transfer([payout], payout.amount)
        await pay_out(self._transfer, payout.amount, caller)

        self._registry.mark_withdrawn(collection, asset_id)
        self._engine.debit(payout.amount)

        logger.info(
            f"Withdrawn {collection.value} asset {asset_id}: "
            f"{payout.amount} to {caller}"
        )
        return payout
