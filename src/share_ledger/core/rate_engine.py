"""
Deposit/Rate Engine.

Holds the undistributed pool balance and derives allocation_per_share
from the registered shares on every deposit.
"""

from src.config.models import RateMode
from src.core import get_logger
from src.core.exceptions import (
    ErrorCode,
    NoSharesError,
    TransferFailure,
    ValidationError,
)

from ..models.records import DepositRecord, LedgerState
from .share_registry import ShareRegistry

logger = get_logger(__name__)


class DepositRateEngine:
    """
    Pool balance and per-share rate.

    In RECOMPUTE mode every deposit overwrites the rate with
    ``balance // total_shares``, using the balance after the deposit. Assets
    already withdrawn never receive a second payout even though their shares
    still count in the divisor. ACCUMULATE mode instead adds
    ``amount // total_shares`` to the previous rate.

    Integer division remainders stay in the balance and are only recoverable
    by an emergency drain.

    Example:
        >>> engine = DepositRateEngine(registry)  # registry holds 90 shares
        >>> engine.deposit(900).allocation_per_share
        10
    """

    def __init__(
        self,
        registry: ShareRegistry,
        rate_mode: RateMode = RateMode.RECOMPUTE,
    ):
        """
        Initialize DepositRateEngine.

        Args:
            registry: Share registry providing total_shares
            rate_mode: Rate derivation mode
        """
        self._registry = registry
        self._rate_mode = rate_mode
        self._balance: int = 0
        self._allocation_per_share: int = 0

    @property
    def balance(self) -> int:
        """Undistributed pool balance."""
        return self._balance

    @property
    def allocation_per_share(self) -> int:
        return self._allocation_per_share

    @property
    def rate_mode(self) -> RateMode:
        return self._rate_mode

    def deposit(self, amount: int) -> DepositRecord:
        """
        Add value to the pool and derive the new rate.

        Args:
            amount: Positive integer amount

        Returns:
            DepositRecord with the resulting rate and balance

        Raises:
            ValidationError: If amount is not a positive integer
            NoSharesError: If no shares are registered
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise ValidationError(
                f"Deposit amount must be a positive integer, got {amount!r}",
                code=ErrorCode.INVALID_AMOUNT,
            )

        total_shares = self._registry.total_shares
        if total_shares == 0:
            raise NoSharesError("Cannot deposit while no shares are registered")

        self._balance += amount
        if self._rate_mode == RateMode.ACCUMULATE:
            self._allocation_per_share += amount // total_shares
        else:
            self._allocation_per_share = self._balance // total_shares

        logger.info(
            f"Deposit of {amount}: allocation per share {self._allocation_per_share} "
            f"over {total_shares} shares (balance: {self._balance})"
        )

        return DepositRecord(
            amount=amount,
            total_shares=total_shares,
            allocation_per_share=self._allocation_per_share,
            balance=self._balance,
        )

    def ensure_covered(self, amount: int, recipient: str = "") -> None:
        """
        Check the pool can cover a payout.

        Raises:
            TransferFailure: If amount exceeds the balance
        """
        if amount > self._balance:
            raise TransferFailure(
                f"Pool balance {self._balance} cannot cover payout",
                amount=amount,
                recipient=recipient or None,
                code=ErrorCode.INSUFFICIENT_BALANCE,
            )

    def debit(self, amount: int) -> int:
        """
        Remove a completed payout from the pool.

        Returns:
            Remaining balance
        """
        self.ensure_covered(amount)
        self._balance -= amount
        return self._balance

    def drain(self) -> int:
        """
        Empty the pool. The rate is left unchanged.

        Returns:
            Amount removed
        """
        amount = self._balance
        self._balance = 0
        return amount

    def snapshot(self) -> LedgerState:
        """Scalar state for persistence."""
        return LedgerState(
            total_shares=self._registry.total_shares,
            allocation_per_share=self._allocation_per_share,
            balance=self._balance,
        )

    def load(self, state: LedgerState) -> None:
        """Restore rate and balance from persisted state."""
        self._allocation_per_share = state.allocation_per_share
        self._balance = state.balance
