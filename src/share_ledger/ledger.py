"""
Share Ledger.

Public entry point of the share-weighted value-distribution ledger:
registration, deposits, single and batch withdrawals and the emergency
drain, each authorized and serialized under one lock.
"""

import asyncio
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from src.config.models import LedgerConfig
from src.core import get_logger, set_log_level
from src.core.exceptions import (
    AuthorizationError,
    CountMismatchError,
    ErrorCode,
    LedgerConfigError,
    NotFoundError,
    StorageError,
    TransferFailure,
    ValidationError,
)

from .core.batch import BatchWithdrawalCoordinator
from .core.emergency import EmergencyDrain
from .core.rate_engine import DepositRateEngine
from .core.share_registry import ShareRegistry
from .core.withdrawal import WithdrawalStateMachine
from .models.records import (
    BatchWithdrawal,
    Collection,
    DepositRecord,
    DrainRecord,
    PayoutRecord,
    ShareRecord,
    WithdrawalState,
)
from .protocols import (
    AssetRegistryProtocol,
    NotifierProtocol,
    ValueTransferProtocol,
)
from .storage.repository import LedgerRepository

logger = get_logger(__name__)


def to_collection(value: Collection | str) -> Collection:
    """Accept a Collection or its string value."""
    if isinstance(value, Collection):
        return value
    try:
        return Collection(value)
    except ValueError as e:
        raise ValidationError(
            f"Unknown collection: {value!r}",
            code=ErrorCode.INVALID_COLLECTION,
        ) from e


class ShareLedger:
    """
    Share-weighted value-distribution ledger.

    Every mutating operation holds a single asyncio.Lock for its full
    duration, including awaited registry and transfer calls, and either
    completes or raises with no state changed.

    Example:
        >>> ledger = ShareLedger(
        ...     LedgerConfig(administrator="0xadmin"),
        ...     transfer=vault,
        ...     primary_registry=primary,
        ...     secondary_registry=secondary,
        ... )
        >>> await ledger.register_primary([1001, 1002, 1003], 3, caller="0xadmin")
        >>> await secondary.register([2001, 2002], [10, 20], 2)  # registrar calls in
        >>> await ledger.deposit_fund(900, caller="0xadmin")
        >>> payout = await ledger.withdraw("primary", 1001, caller="0xholder")
    """

    def __init__(
        self,
        config: LedgerConfig,
        transfer: ValueTransferProtocol,
        primary_registry: Optional[AssetRegistryProtocol] = None,
        secondary_registry: Optional[AssetRegistryProtocol] = None,
        repository: Optional[LedgerRepository] = None,
        notifier: Optional[NotifierProtocol] = None,
    ):
        """
        Initialize ShareLedger.

        Args:
            config: Ledger configuration
            transfer: Value transfer primitive paying out of the pool
            primary_registry: Primary collection registry (or bind later)
            secondary_registry: Secondary collection registry (or bind later)
            repository: State persistence; created from config.db_path if omitted.
                Stored state is restored before the ledger is used.
            notifier: Optional notifier for drain warnings
        """
        set_log_level(config.log_level)

        self._config = config
        self._transfer = transfer
        self._asset_registries: Dict[Collection, Optional[AssetRegistryProtocol]] = {
            Collection.PRIMARY: primary_registry,
            Collection.SECONDARY: secondary_registry,
        }

        self._lock = asyncio.Lock()

        self._registry = ShareRegistry(max_total_shares=config.max_total_shares)
        self._engine = DepositRateEngine(self._registry, rate_mode=config.rate_mode)
        self._machine = WithdrawalStateMachine(self._registry, self._engine, transfer)
        self._batch = BatchWithdrawalCoordinator(
            self._registry, self._engine, self._machine, transfer
        )
        self._drain = EmergencyDrain(self._registry, self._engine, transfer, notifier)

        if repository is None and config.db_path:
            repository = LedgerRepository(config.db_path)
        self._repository = repository
        if self._repository:
            self._repository.initialize()
            self.restore()

        logger.info(
            f"ShareLedger initialized (administrator: {config.administrator}, "
            f"rate mode: {config.rate_mode.value})"
        )

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def config(self) -> LedgerConfig:
        return self._config

    @property
    def administrator(self) -> str:
        return self._config.administrator

    @property
    def secondary_registrar(self) -> Optional[str]:
        """Identity allowed to register secondary assets, once bound."""
        registry = self._asset_registries[Collection.SECONDARY]
        return registry.address if registry else None

    @property
    def share_registry(self) -> ShareRegistry:
        return self._registry

    @property
    def rate_engine(self) -> DepositRateEngine:
        return self._engine

    @property
    def total_shares(self) -> int:
        return self._registry.total_shares

    @property
    def allocation_per_share(self) -> int:
        return self._engine.allocation_per_share

    @property
    def balance(self) -> int:
        """Undistributed pool balance."""
        return self._engine.balance

    # =========================================================================
    # Collaborator Bindings
    # =========================================================================

    def set_main_contract_address(self, registry: AssetRegistryProtocol, caller: str) -> None:
        """
        Bind the primary collection registry. Allowed once.

        Raises:
            AuthorizationError: If caller is not the administrator
            LedgerConfigError: If a primary registry is already bound
        """
        self._bind(Collection.PRIMARY, registry, caller)

    def set_secondary_contract_address(self, registry: AssetRegistryProtocol, caller: str) -> None:
        """
        Bind the secondary collection registry. Allowed once.

        The registry's address becomes the secondary registrar identity.

        Raises:
            AuthorizationError: If caller is not the administrator
            LedgerConfigError: If a secondary registry is already bound
        """
        self._bind(Collection.SECONDARY, registry, caller)

    def _bind(self, collection: Collection, registry: AssetRegistryProtocol, caller: str) -> None:
        self._require_admin(caller)
        if self._asset_registries[collection] is not None:
            raise LedgerConfigError(
                f"{collection.value} registry already bound",
                code=ErrorCode.ALREADY_CONFIGURED,
            )
        self._asset_registries[collection] = registry
        logger.info(f"Bound {collection.value} registry at {registry.address}")

    def _asset_registry(self, collection: Collection) -> AssetRegistryProtocol:
        registry = self._asset_registries[collection]
        if registry is None:
            raise LedgerConfigError(
                f"{collection.value} registry not bound",
                code=ErrorCode.NOT_CONFIGURED,
            )
        return registry

    # =========================================================================
    # Guards
    # =========================================================================

    def _require_admin(self, caller: str) -> None:
        if caller != self._config.administrator:
            logger.warning(f"Rejected non-administrator caller {caller}")
            raise AuthorizationError(
                "Caller is not the administrator",
                code=ErrorCode.CALLER_NOT_ADMIN,
                details={"caller": caller},
            )

    @staticmethod
    def _check_count(items: Sequence[Any], expected: int, label: str) -> None:
        if len(items) != expected:
            raise CountMismatchError(
                f"{label}: expected {expected} entries, got {len(items)}",
                expected=expected,
                actual=len(items),
            )

    async def _require_new_assets(
        self,
        registry: AssetRegistryProtocol,
        collection: Collection,
        asset_ids: Iterable[int],
        code: str,
    ) -> None:
        """Each id in turn must exist, then be neither registered nor repeated."""
        seen: set = set()
        for asset_id in asset_ids:
            if not await registry.exists(asset_id):
                raise NotFoundError(
                    f"{collection.value} asset {asset_id} does not exist",
                    code=code,
                    details={"collection": collection.value, "asset_id": asset_id},
                )
            self._registry.check_unregistered(collection, [asset_id], seen)

    # =========================================================================
    # Registration
    # =========================================================================

    async def register_primary(
        self,
        asset_ids: Sequence[int],
        expected_count: int,
        caller: str,
    ) -> int:
        """
        Register primary assets at the fixed base share weight.

        Args:
            asset_ids: Asset ids to register
            expected_count: Must equal len(asset_ids)
            caller: Must be the administrator

        Returns:
            Number of shares added

        Raises:
            AuthorizationError: Caller is not the administrator
            CountMismatchError: expected_count mismatch
            NotFoundError: An id does not exist (code INVALID_ASSET)
            AlreadyRegisteredError: An id is registered or repeated
            ShareOverflowError: The total share counter would overflow
        """
        async with self._lock:
            self._require_admin(caller)
            asset_ids = list(asset_ids)
            self._check_count(asset_ids, expected_count, "register_primary")

            registry = self._asset_registry(Collection.PRIMARY)
            await self._require_new_assets(
                registry, Collection.PRIMARY, asset_ids, ErrorCode.INVALID_ASSET
            )

            base = self._config.primary_base_shares
            added = self._registry.register(
                Collection.PRIMARY, [(asset_id, base) for asset_id in asset_ids]
            )
            self._persist(self._records_for(Collection.PRIMARY, asset_ids))
            return added

    async def register_secondary(
        self,
        asset_ids: Sequence[int],
        shares: Sequence[int],
        expected_count: int,
        caller: str,
    ) -> int:
        """
        Register secondary assets with their paired share weights.

        Args:
            asset_ids: Asset ids to register
            shares: Share weight per id, same length as asset_ids
            expected_count: Must equal len(asset_ids)
            caller: Must be the secondary registrar

        Returns:
            Number of shares added

        Raises:
            AuthorizationError: Caller is not the secondary registrar
            CountMismatchError: Length or count mismatch
            NotFoundError: An id does not exist (code ASSET_NOT_FOUND)
            AlreadyRegisteredError: An id is registered or repeated
            ValidationError: A share weight is negative or not an integer
            ShareOverflowError: The total share counter would overflow
        """
        async with self._lock:
            registry = self._asset_registry(Collection.SECONDARY)
            if caller != registry.address:
                logger.warning(f"Rejected secondary registration from {caller}")
                raise AuthorizationError(
                    "Only the secondary registrar may register secondary assets",
                    code=ErrorCode.ONLY_SECONDARY_REGISTRAR,
                    details={"caller": caller},
                )

            asset_ids = list(asset_ids)
            shares = list(shares)
            self._check_count(asset_ids, expected_count, "register_secondary")
            self._check_count(shares, len(asset_ids), "register_secondary shares")

            await self._require_new_assets(
                registry, Collection.SECONDARY, asset_ids, ErrorCode.ASSET_NOT_FOUND
            )

            added = self._registry.register(
                Collection.SECONDARY, list(zip(asset_ids, shares))
            )
            self._persist(self._records_for(Collection.SECONDARY, asset_ids))
            return added

    # =========================================================================
    # Deposits
    # =========================================================================

    async def deposit_fund(self, amount: int, caller: str) -> DepositRecord:
        """
        Deposit value into the pool and derive the new rate.

        Raises:
            AuthorizationError: Caller is not the administrator
            ValidationError: amount is not a positive integer
            NoSharesError: No shares registered
        """
        async with self._lock:
            self._require_admin(caller)
            record = self._engine.deposit(amount)
            self._persist([])
            return record

    # =========================================================================
    # Withdrawals
    # =========================================================================

    async def withdraw(
        self,
        collection: Collection | str,
        asset_id: int,
        caller: str,
    ) -> PayoutRecord:
        """
        Withdraw an asset's payout to its current holder.

        Raises:
            NotFoundError: Asset does not exist
            AuthorizationError: Caller is not the current holder
            NotRegisteredError: Asset not registered
            AlreadyWithdrawnError: Asset already paid
            TransferFailure: Payout could not be made
            StorageError: The withdrawal could not be recorded; nothing was paid
        """
        collection = to_collection(collection)
        async with self._lock:
            registry = self._asset_registry(collection)
            try:
                return await self._machine.withdraw(
                    collection, asset_id, caller, registry, before_transfer=self._write_ahead
                )
            except TransferFailure:
                self._roll_back([(collection, asset_id)])
                raise

    async def withdraw_batch(
        self,
        primary_ids: Sequence[int],
        secondary_ids: Sequence[int],
        primary_count: int,
        secondary_count: int,
        caller: str,
    ) -> BatchWithdrawal:
        """
        Withdraw several assets at once to the administrator.

        Either every listed asset is paid in one transfer and marked
        withdrawn, or nothing changes.

        Raises:
            AuthorizationError: Caller is not the administrator
            CountMismatchError: A count does not match its list
            NotRegisteredError: An id is not registered
            AlreadyWithdrawnError: An id was already paid or is repeated
            TransferFailure: The summed payout could not be made
            StorageError: The batch could not be recorded; nothing was paid
        """
        async with self._lock:
            self._require_admin(caller)
            primary_ids = list(primary_ids)
            secondary_ids = list(secondary_ids)
            self._check_count(primary_ids, primary_count, "withdraw_batch primary")
            self._check_count(secondary_ids, secondary_count, "withdraw_batch secondary")

            batch = self._batch.plan(primary_ids, secondary_ids, caller)
            try:
                return await self._batch.execute(batch, before_transfer=self._write_ahead)
            except TransferFailure:
                self._roll_back([(p.collection, p.asset_id) for p in batch.payouts])
                raise

    async def emergency_withdraw(self, caller: str) -> DrainRecord:
        """
        Sweep the whole pool balance to the administrator.

        Raises:
            AuthorizationError: Caller is not the administrator
            TransferFailure: The sweep could not be made
            StorageError: The sweep could not be recorded; nothing was moved
        """
        async with self._lock:
            self._require_admin(caller)
            try:
                return await self._drain.drain(
                    self._config.administrator, before_transfer=self._write_ahead
                )
            except TransferFailure:
                self._roll_back([])
                raise

    # =========================================================================
    # Queries
    # =========================================================================

    def shares_of(self, collection: Collection | str, asset_id: int) -> int:
        """Share weight of an asset (0 if unregistered)."""
        return self._registry.shares_of(to_collection(collection), asset_id)

    def state_of(self, collection: Collection | str, asset_id: int) -> WithdrawalState:
        return self._registry.state_of(to_collection(collection), asset_id)

    def quote(self, collection: Collection | str, asset_id: int) -> int:
        """
        Payout the asset would receive if withdrawn now.

        Raises:
            NotRegisteredError: Asset not registered
            AlreadyWithdrawnError: Asset already paid
        """
        return self._machine.quote(to_collection(collection), asset_id).amount

    def records(
        self,
        collection: Optional[Collection | str] = None,
        withdrawn: Optional[bool] = None,
    ) -> List[ShareRecord]:
        return self._registry.records(
            to_collection(collection) if collection else None, withdrawn
        )

    def get_status(self) -> Dict[str, Any]:
        """
        Get ledger status.

        Returns:
            Dictionary with current status
        """
        return {
            "administrator": self._config.administrator,
            "rate_mode": self._config.rate_mode.value,
            "total_shares": self._registry.total_shares,
            "allocation_per_share": self._engine.allocation_per_share,
            "balance": self._engine.balance,
            "primary_records": self._registry.count(Collection.PRIMARY),
            "secondary_records": self._registry.count(Collection.SECONDARY),
            "outstanding_records": self._registry.outstanding_count(),
            "primary_registry": self._bound_address(Collection.PRIMARY),
            "secondary_registry": self._bound_address(Collection.SECONDARY),
            "persistent": self._repository is not None,
        }

    def _bound_address(self, collection: Collection) -> Optional[str]:
        registry = self._asset_registries[collection]
        return registry.address if registry else None

    # =========================================================================
    # Persistence
    # =========================================================================

    def restore(self) -> bool:
        """
        Load persisted state into the ledger.

        Returns:
            True if state was found and loaded
        """
        if not self._repository:
            return False

        state = self._repository.load_state()
        if state is None:
            return False

        self._registry.load(self._repository.load_records(), state.total_shares)
        self._engine.load(state)
        logger.info(
            f"Ledger restored: {state.total_shares} shares, "
            f"rate {state.allocation_per_share}, balance {state.balance}"
        )
        return True

    def _records_for(self, collection: Collection, asset_ids: Iterable[int]) -> List[ShareRecord]:
        return [self._registry.require(collection, asset_id) for asset_id in asset_ids]

    def _persist(self, records: List[ShareRecord]) -> None:
        """Save registration and deposit bookkeeping; failures are logged."""
        if not self._repository:
            return
        try:
            self._repository.save(records, self._engine.snapshot())
        except Exception as e:
            logger.warning(f"Failed to persist ledger state: {e}")

    def _write_ahead(self, payouts: Sequence[PayoutRecord], amount: int) -> None:
        """
        Store the post-payout state before value moves.

        The records are saved as withdrawn and the balance as debited, so a
        restart after the transfer can never pay them again.

        Raises:
            StorageError: If the state cannot be written
        """
        if not self._repository:
            return

        records = []
        for payout in payouts:
            record = replace(self._registry.require(payout.collection, payout.asset_id))
            record.mark_withdrawn()
            records.append(record)
        state = replace(self._engine.snapshot(), balance=self._engine.balance - amount)

        try:
            self._repository.save(records, state)
        except Exception as e:
            logger.error(f"Failed to record payout of {amount}: {e}")
            raise StorageError(
                f"Failed to record payout before transfer: {e}",
                details={"amount": amount, "assets": len(records)},
            ) from e

    def _roll_back(self, keys: Iterable[Tuple[Collection, int]]) -> None:
        """Rewrite the unchanged in-memory state after a failed transfer."""
        if not self._repository:
            return
        try:
            self._repository.save(
                [self._registry.require(c, asset_id) for c, asset_id in keys],
                self._engine.snapshot(),
            )
        except Exception as e:
            # Stored records stay withdrawn; they are never paid twice
            logger.error(f"Failed to roll back payout record: {e}")
