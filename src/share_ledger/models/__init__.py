"""Share Ledger Models."""

from .records import (
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

__all__ = [
    "Collection",
    "WithdrawalState",
    "TransactionStatus",
    "ShareRecord",
    "LedgerState",
    "DepositRecord",
    "PayoutRecord",
    "BatchWithdrawal",
    "DrainRecord",
]
