"""
Share Ledger Core Components.

Share registry, rate engine, withdrawal state machine, batch coordinator
and emergency drain.
"""

from .batch import BatchWithdrawalCoordinator
from .emergency import EmergencyDrain
from .rate_engine import DepositRateEngine
from .share_registry import MAX_UINT256, ShareRegistry
from .transfer import pay_out
from .withdrawal import WithdrawalStateMachine

__all__ = [
    "ShareRegistry",
    "MAX_UINT256",
    "DepositRateEngine",
    "WithdrawalStateMachine",
    "BatchWithdrawalCoordinator",
    "EmergencyDrain",
    "pay_out",
]
