"""
Share Ledger Record Models.

Data models for share records, rate state, and the results of deposits,
withdrawals, batch withdrawals and emergency drains.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
import uuid


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    return value


class Collection(str, Enum):
    """The two disjoint asset collections."""

    PRIMARY = "primary"
    SECONDARY = "secondary"


class WithdrawalState(Enum):
    """
    Per-asset withdrawal state.

    Lifecycle: UNREGISTERED -> REGISTERED -> WITHDRAWN (terminal)
    """

    UNREGISTERED = "unregistered"
    REGISTERED = "registered"
    WITHDRAWN = "withdrawn"


class TransactionStatus(Enum):
    """
    Status of a batch withdrawal.

    Lifecycle: PENDING -> EXECUTING -> COMMITTED or FAILED
    """

    PENDING = "pending"          # Planned, nothing paid
    EXECUTING = "executing"      # Transfer in progress
    COMMITTED = "committed"      # Paid and every record marked withdrawn
    FAILED = "failed"            # Transfer failed, no record touched


@dataclass
class ShareRecord:
    """
    Share weight and withdrawal flag of one registered asset.

    Attributes:
        collection: Collection the asset belongs to
        asset_id: Asset identifier within the collection
        shares: Share weight
        withdrawn: Whether the payout has been made
        registered_at: When the asset was registered
        withdrawn_at: When the payout was made
    """

    collection: Collection
    asset_id: int
    shares: int
    withdrawn: bool = False
    registered_at: datetime = field(default_factory=_utcnow)
    withdrawn_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if isinstance(self.collection, str):
            self.collection = Collection(self.collection)

    @property
    def state(self) -> WithdrawalState:
        """Current withdrawal state."""
        if self.withdrawn:
            return WithdrawalState.WITHDRAWN
        return WithdrawalState.REGISTERED

    def mark_withdrawn(self) -> None:
        """Move to the terminal WITHDRAWN state."""
        self.withdrawn = True
        self.withdrawn_at = _utcnow()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "collection": self.collection.value,
            "asset_id": self.asset_id,
            "shares": self.shares,
            "withdrawn": self.withdrawn,
            "registered_at": self.registered_at.isoformat(),
            "withdrawn_at": self.withdrawn_at.isoformat() if self.withdrawn_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ShareRecord":
        """Create from dictionary."""
        return cls(
            collection=Collection(data["collection"]),
            asset_id=int(data["asset_id"]),
            shares=int(data["shares"]),
            withdrawn=bool(data.get("withdrawn", False)),
            registered_at=_parse_timestamp(data.get("registered_at")) or _utcnow(),
            withdrawn_at=_parse_timestamp(data.get("withdrawn_at")),
        )


@dataclass
class LedgerState:
    """
    Scalar ledger state persisted alongside the share records.

    Attributes:
        total_shares: Running sum of registered shares
        allocation_per_share: Current payout per share
        balance: Undistributed pool balance
    """

    total_shares: int = 0
    allocation_per_share: int = 0
    balance: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total_shares": self.total_shares,
            "allocation_per_share": self.allocation_per_share,
            "balance": self.balance,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LedgerState":
        """Create from dictionary."""
        return cls(
            total_shares=int(data.get("total_shares", 0)),
            allocation_per_share=int(data.get("allocation_per_share", 0)),
            balance=int(data.get("balance", 0)),
        )


@dataclass
class DepositRecord:
    """Outcome of a deposit."""

    amount: int
    total_shares: int
    allocation_per_share: int
    balance: int
    timestamp: datetime = field(default_factory=_utcnow)

    @property
    def remainder(self) -> int:
        """Part of the balance not covered by the current rate."""
        return self.balance - self.allocation_per_share * self.total_shares

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "amount": self.amount,
            "total_shares": self.total_shares,
            "allocation_per_share": self.allocation_per_share,
            "balance": self.balance,
            "remainder": self.remainder,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class PayoutRecord:
    """
    Payout owed to (or made for) one asset.

    Attributes:
        collection: Collection of the asset
        asset_id: Asset identifier
        shares: Share weight used
        allocation_per_share: Rate used
        recipient: Identity receiving the value
    """

    collection: Collection
    asset_id: int
    shares: int
    allocation_per_share: int
    recipient: str = ""
    timestamp: datetime = field(default_factory=_utcnow)

    @property
    def amount(self) -> int:
        """Payout amount."""
        return self.shares * self.allocation_per_share

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "collection": self.collection.value,
            "asset_id": self.asset_id,
            "shares": self.shares,
            "allocation_per_share": self.allocation_per_share,
            "amount": self.amount,
            "recipient": self.recipient,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class BatchWithdrawal:
    """
    All-or-nothing withdrawal over several assets.

    The summed payout is transferred once; records are only marked withdrawn
    after that transfer succeeds.

    Attributes:
        transaction_id: Unique identifier
        recipient: Identity receiving the summed payout
        status: Current status
        payouts: Planned payouts, one per asset
        created_at: When the batch was planned
        completed_at: When the batch committed or failed
        error_message: Failure reason
    """

    recipient: str
    transaction_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: TransactionStatus = TransactionStatus.PENDING
    payouts: List[PayoutRecord] = field(default_factory=list)
    created_at: datetime = field(default_factory=_utcnow)
    completed_at: Optional[datetime] = None
    error_message: Optional[str] = None

    @property
    def total_amount(self) -> int:
        """Sum of all planned payouts."""
        return sum(p.amount for p in self.payouts)

    @property
    def asset_count(self) -> int:
        return len(self.payouts)

    @property
    def is_pending(self) -> bool:
        return self.status == TransactionStatus.PENDING

    @property
    def is_completed(self) -> bool:
        return self.status in (TransactionStatus.COMMITTED, TransactionStatus.FAILED)

    @property
    def is_successful(self) -> bool:
        return self.status == TransactionStatus.COMMITTED

    def add_payout(self, payout: PayoutRecord) -> None:
        self.payouts.append(payout)

    def mark_executing(self) -> None:
        self.status = TransactionStatus.EXECUTING

    def mark_committed(self) -> None:
        self.status = TransactionStatus.COMMITTED
        self.completed_at = _utcnow()

    def mark_failed(self, error: str) -> None:
        self.status = TransactionStatus.FAILED
        self.completed_at = _utcnow()
        self.error_message = error

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "transaction_id": self.transaction_id,
            "recipient": self.recipient,
            "status": self.status.value,
            "payouts": [p.to_dict() for p in self.payouts],
            "total_amount": self.total_amount,
            "created_at": self.created_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "error_message": self.error_message,
        }


@dataclass
class DrainRecord:
    """Outcome of an emergency drain."""

    recipient: str
    amount: int
    outstanding_records: int = 0
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "recipient": self.recipient,
            "amount": self.amount,
            "outstanding_records": self.outstanding_records,
            "timestamp": self.timestamp.isoformat(),
        }
