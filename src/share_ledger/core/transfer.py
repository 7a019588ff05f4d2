"""
Value transfer helper shared by withdrawals and drains.
"""

from src.core import get_logger
from src.core.exceptions import LedgerError, TransferFailure

from ..protocols import ValueTransferProtocol

logger = get_logger(__name__)


async def pay_out(transfer: ValueTransferProtocol, amount: int, recipient: str) -> None:
    """
    Pay through the transfer primitive.

    Zero amounts are not sent. Any error other than a LedgerError is
    wrapped in TransferFailure.

    Raises:
        TransferFailure: If the primitive declines the payment
    """
    if amount <= 0:
        return

    try:
        await transfer.pay(amount, recipient)
    except LedgerError:
        raise
    except Exception as e:
        logger.error(f"Transfer of {amount} to {recipient} failed: {e}")
        raise TransferFailure(
            f"Transfer declined: {e}",
            amount=amount,
            recipient=recipient,
        ) from e

    logger.debug(f"Transferred {amount} to {recipient}")
