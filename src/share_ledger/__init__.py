"""
Share Ledger Module.

Share-weighted value distribution across two asset collections. Deposited
value is divided by the registered share weights and each asset's holder
may withdraw its payout exactly once.

Includes:
- ShareLedger: Authorized, serialized entry point
- Batch withdrawals committed all-or-nothing
- SQLite persistence and a read-only CLI
"""

from .cli import LedgerCLI, main
from .core import (
    MAX_UINT256,
    BatchWithdrawalCoordinator,
    DepositRateEngine,
    EmergencyDrain,
    ShareRegistry,
    WithdrawalStateMachine,
)
from .ledger import ShareLedger, to_collection
from .models.records import (
    BatchWithdrawal,
    Collection,
    DepositRecord,
    DrainRecord,
    LedgerState,
    PayoutRecord,
    ShareRecord,
    TransactionStatus,
    WithdrawalState,
)
from .protocols import AssetRegistryProtocol, NotifierProtocol, ValueTransferProtocol
from .storage.repository import LedgerRepository

__all__ = [
    # Ledger
    "ShareLedger",
    "to_collection",
    # CLI
    "LedgerCLI",
    "main",
    # Core
    "ShareRegistry",
    "MAX_UINT256",
    "DepositRateEngine",
    "WithdrawalStateMachine",
    "BatchWithdrawalCoordinator",
    "EmergencyDrain",
    # Models
    "Collection",
    "WithdrawalState",
    "TransactionStatus",
    "ShareRecord",
    "LedgerState",
    "DepositRecord",
    "PayoutRecord",
    "BatchWithdrawal",
    "DrainRecord",
    # Protocols
    "AssetRegistryProtocol",
    "ValueTransferProtocol",
    "NotifierProtocol",
    # Storage
    "LedgerRepository",
]
