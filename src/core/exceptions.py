"""
Custom exceptions for the Share Ledger.

Exception hierarchy:
    LedgerError (base)
    ├── AuthorizationError
    ├── NotFoundError
    ├── RegistrationError
    │   ├── AlreadyRegisteredError
    │   ├── CountMismatchError
    │   └── ShareOverflowError
    ├── WithdrawalError
    │   ├── NotRegisteredError
    │   └── AlreadyWithdrawnError
    ├── NoSharesError
    ├── TransferFailure
    ├── ValidationError
    └── LedgerConfigError

Every class has a stable ``default_code`` so callers can tell causes apart
without parsing messages. A raise site may pass a more specific ``code``.
"""

from typing import Any


class ErrorCode:
    """Stable reason codes carried by LedgerError.code."""

    CALLER_NOT_ADMIN = "CALLER_NOT_ADMIN"
    NOT_OWNER = "NOT_OWNER"
    ONLY_SECONDARY_REGISTRAR = "ONLY_SECONDARY_REGISTRAR"
    INVALID_ASSET = "INVALID_ASSET"
    ASSET_NOT_FOUND = "ASSET_NOT_FOUND"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    NOT_REGISTERED = "NOT_REGISTERED"
    ALREADY_WITHDRAWN = "ALREADY_WITHDRAWN"
    NO_SHARES = "NO_SHARES"
    INVALID_COUNT = "INVALID_COUNT"
    TRANSFER_FAILED = "TRANSFER_FAILED"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    SHARE_OVERFLOW = "SHARE_OVERFLOW"
    INVALID_SHARES = "INVALID_SHARES"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_COLLECTION = "INVALID_COLLECTION"
    ALREADY_CONFIGURED = "ALREADY_CONFIGURED"
    NOT_CONFIGURED = "NOT_CONFIGURED"
    CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"
    CONFIG_PARSE_ERROR = "CONFIG_PARSE_ERROR"
    CONFIG_INVALID = "CONFIG_INVALID"
    STORAGE_FAILED = "STORAGE_FAILED"


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    default_message = "Ledger error occurred"
    default_code: str | None = None

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.code:
            parts.append(f"[{self.code}]")
        if self.details:
            parts.append(f"Details: {self.details}")
        return " ".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"details={self.details!r})"
        )


class AuthorizationError(LedgerError):
    """Caller is not the administrator, the current holder, or the secondary registrar."""

    default_message = "Caller is not authorized"
    default_code = ErrorCode.CALLER_NOT_ADMIN


class NotFoundError(LedgerError):
    """Asset id does not exist in the asset registry."""

    default_message = "Asset not found"
    default_code = ErrorCode.ASSET_NOT_FOUND


# Registration errors
class RegistrationError(LedgerError):
    """Base exception for registration failures."""

    default_message = "Registration failed"


class AlreadyRegisteredError(RegistrationError):
    """Asset id already has a share record in its collection."""

    default_message = "Asset already registered"
    default_code = ErrorCode.ALREADY_REGISTERED


class CountMismatchError(RegistrationError):
    """Declared count does not match the number of ids supplied."""

    default_message = "Invalid count"
    default_code = ErrorCode.INVALID_COUNT

    def __init__(
        self,
        message: str | None = None,
        expected: int | None = None,
        actual: int | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = dict(details or {})
        if expected is not None:
            details.setdefault("expected", expected)
        if actual is not None:
            details.setdefault("actual", actual)
        super().__init__(message, code, details)
        self.expected = expected
        self.actual = actual


class ShareOverflowError(RegistrationError):
    """Registration would overflow the fixed-width total share counter."""

    default_message = "Total shares overflow"
    default_code = ErrorCode.SHARE_OVERFLOW


# Withdrawal errors
class WithdrawalError(LedgerError):
    """Base exception for withdrawal failures."""

    default_message = "Withdrawal failed"


class NotRegisteredError(WithdrawalError):
    """Asset id has no share record in the requested collection."""

    default_message = "Asset not registered"
    default_code = ErrorCode.NOT_REGISTERED


class AlreadyWithdrawnError(WithdrawalError):
    """Asset id already received its payout."""

    default_message = "Already withdrawn"
    default_code = ErrorCode.ALREADY_WITHDRAWN


class NoSharesError(LedgerError):
    """Deposit attempted while no shares are registered."""

    default_message = "No shares registered"
    default_code = ErrorCode.NO_SHARES


class TransferFailure(LedgerError):
    """Value transfer primitive declined or the pool cannot cover the amount."""

    default_message = "Value transfer failed"
    default_code = ErrorCode.TRANSFER_FAILED

    def __init__(
        self,
        message: str | None = None,
        amount: int | None = None,
        recipient: str | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)
        self.amount = amount
        self.recipient = recipient

    def __str__(self) -> str:
        base = super().__str__()
        parts = [base]
        if self.amount is not None:
            parts.append(f"amount={self.amount}")
        if self.recipient:
            parts.append(f"recipient={self.recipient}")
        return " ".join(parts)


class ValidationError(LedgerError):
    """Input value is malformed (negative shares, non-positive deposit)."""

    default_message = "Validation failed"


class LedgerConfigError(LedgerError):
    """Collaborator binding is missing or was already set."""

    default_message = "Ledger configuration error"
    default_code = ErrorCode.NOT_CONFIGURED


class StorageError(LedgerError):
    """Ledger state could not be written before a payout."""

    default_message = "Storage error"
    default_code = ErrorCode.STORAGE_FAILED
