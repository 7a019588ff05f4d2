"""
Core module for the Share Ledger.

Provides logging utilities and the exception hierarchy.
"""

from .exceptions import (
    AlreadyRegisteredError,
    AlreadyWithdrawnError,
    AuthorizationError,
    CountMismatchError,
    ErrorCode,
    LedgerConfigError,
    LedgerError,
    NoSharesError,
    NotFoundError,
    NotRegisteredError,
    RegistrationError,
    ShareOverflowError,
    StorageError,
    TransferFailure,
    ValidationError,
    WithdrawalError,
)
from .logger import get_logger, set_log_level, setup_logger

__all__ = [
    # Logging
    "setup_logger",
    "get_logger",
    "set_log_level",
    # Exceptions
    "ErrorCode",
    "LedgerError",
    "AuthorizationError",
    "NotFoundError",
    "RegistrationError",
    "AlreadyRegisteredError",
    "CountMismatchError",
    "ShareOverflowError",
    "WithdrawalError",
    "NotRegisteredError",
    "AlreadyWithdrawnError",
    "NoSharesError",
    "TransferFailure",
    "ValidationError",
    "LedgerConfigError",
    "StorageError",
]
