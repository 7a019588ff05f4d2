"""
Share Registry.

Stores per-asset share weights and withdrawal flags for both collections
and maintains the running total share counter.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from src.core import get_logger
from src.core.exceptions import (
    AlreadyRegisteredError,
    ErrorCode,
    NotRegisteredError,
    ShareOverflowError,
    ValidationError,
)

from ..models.records import Collection, ShareRecord, WithdrawalState

logger = get_logger(__name__)

MAX_UINT256 = 2 ** 256 - 1


class ShareRegistry:
    """
    Share records keyed by (collection, asset_id).

    Records are created once and never deleted; the only mutation is
    marking a record withdrawn. ``total_shares`` is updated incrementally
    on every registration and never recomputed from the records.

    Example:
        >>> registry = ShareRegistry()
        >>> registry.register(Collection.PRIMARY, [(1001, 10), (1002, 10)])
        20
        >>> registry.shares_of(Collection.PRIMARY, 1001)
        10
    """

    def __init__(self, max_total_shares: int = MAX_UINT256):
        """
        Initialize ShareRegistry.

        Args:
            max_total_shares: Upper bound of the total share counter
        """
        self._max_total_shares = max_total_shares
        self._records: Dict[Collection, Dict[int, ShareRecord]] = {
            collection: {} for collection in Collection
        }
        self._total_shares: int = 0

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def total_shares(self) -> int:
        """Sum of all registered shares across both collections."""
        return self._total_shares

    @property
    def max_total_shares(self) -> int:
        return self._max_total_shares

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, collection: Collection, asset_id: int) -> Optional[ShareRecord]:
        """Get the record of an asset, or None if unregistered."""
        return self._records[collection].get(asset_id)

    def require(self, collection: Collection, asset_id: int) -> ShareRecord:
        """
        Get the record of an asset.

        Raises:
            NotRegisteredError: If the asset has no record
        """
        record = self.get(collection, asset_id)
        if record is None:
            raise NotRegisteredError(
                f"{collection.value} asset {asset_id} is not registered",
                details={"collection": collection.value, "asset_id": asset_id},
            )
        return record

    def is_registered(self, collection: Collection, asset_id: int) -> bool:
        return asset_id in self._records[collection]

    def shares_of(self, collection: Collection, asset_id: int) -> int:
        """Share weight of an asset (0 if unregistered)."""
        record = self.get(collection, asset_id)
        return record.shares if record else 0

    def state_of(self, collection: Collection, asset_id: int) -> WithdrawalState:
        record = self.get(collection, asset_id)
        if record is None:
            return WithdrawalState.UNREGISTERED
        return record.state

    def records(
        self,
        collection: Optional[Collection] = None,
        withdrawn: Optional[bool] = None,
    ) -> List[ShareRecord]:
        """
        List records, optionally filtered.

        Args:
            collection: Only this collection
            withdrawn: Only withdrawn (True) or outstanding (False) records

        Returns:
            Records ordered by collection, then asset id
        """
        collections = [collection] if collection else list(Collection)
        result = []
        for c in collections:
            for asset_id in sorted(self._records[c]):
                record = self._records[c][asset_id]
                if withdrawn is None or record.withdrawn == withdrawn:
                    result.append(record)
        return result

    def count(self, collection: Optional[Collection] = None) -> int:
        if collection:
            return len(self._records[collection])
        return sum(len(r) for r in self._records.values())

    def outstanding_count(self) -> int:
        """Number of registered records not yet withdrawn."""
        return len(self.records(withdrawn=False))

    # =========================================================================
    # Registration
    # =========================================================================

    def check_unregistered(
        self,
        collection: Collection,
        asset_ids: Iterable[int],
        seen: Optional[Set[int]] = None,
    ) -> None:
        """
        Ensure none of the ids is registered and none repeats.

        Pass ``seen`` to carry repeat detection across calls; checked ids
        are added to it.

        Raises:
            AlreadyRegisteredError: On an existing record or a repeated id
        """
        seen = set() if seen is None else seen
        for asset_id in asset_ids:
            if asset_id in seen or self.is_registered(collection, asset_id):
                raise AlreadyRegisteredError(
                    f"{collection.value} asset {asset_id} is already registered",
                    details={"collection": collection.value, "asset_id": asset_id},
                )
            seen.add(asset_id)

    def register(
        self,
        collection: Collection,
        entries: Sequence[Tuple[int, int]],
    ) -> int:
        """
        Register assets with their share weights.

        Every entry is validated before any record is stored, so a failure
        leaves the registry untouched.

        Args:
            collection: Target collection
            entries: (asset_id, shares) pairs

        Returns:
            Number of shares added

        Raises:
            ValidationError: If a share weight is not a non-negative integer
            AlreadyRegisteredError: If an id is registered or repeated
            ShareOverflowError: If the total share counter would overflow
        """
        for asset_id, shares in entries:
            if isinstance(shares, bool) or not isinstance(shares, int) or shares < 0:
                raise ValidationError(
                    f"Invalid share weight {shares!r} for asset {asset_id}",
                    code=ErrorCode.INVALID_SHARES,
                    details={"collection": collection.value, "asset_id": asset_id},
                )

        self.check_unregistered(collection, [asset_id for asset_id, _ in entries])

        added = sum(shares for _, shares in entries)
        new_total = self._total_shares + added
        if new_total > self._max_total_shares:
            raise ShareOverflowError(
                f"Registering {added} shares would overflow the total share counter",
                details={"total_shares": self._total_shares, "added": added},
            )

        records = self._records[collection]
        for asset_id, shares in entries:
            records[asset_id] = ShareRecord(
                collection=collection,
                asset_id=asset_id,
                shares=shares,
            )
            logger.debug(f"Registered {collection.value} asset {asset_id}: {shares} shares")

        self._total_shares = new_total
        logger.info(
            f"Registered {len(entries)} {collection.value} assets "
            f"(+{added} shares, total: {new_total})"
        )
        return added

    def mark_withdrawn(self, collection: Collection, asset_id: int) -> ShareRecord:
        """Mark a record withdrawn. Callers check the state first."""
        record = self.require(collection, asset_id)
        record.mark_withdrawn()
        return record

    # =========================================================================
    # Restore
    # =========================================================================

    def load(self, records: Iterable[ShareRecord], total_shares: int) -> None:
        """
        Replace the registry contents with persisted state.

        The stored counter is trusted as-is.

        Args:
            records: Persisted records
            total_shares: Persisted total share counter
        """
        self._records = {collection: {} for collection in Collection}
        for record in records:
            self._records[record.collection][record.asset_id] = record
        self._total_shares = total_shares
        logger.info(
            f"Loaded {self.count()} share records (total shares: {total_shares})"
        )
