# Configuration models
from .base import BaseConfig
from .ledger import LedgerConfig, RateMode

__all__ = [
    "BaseConfig",
    "LedgerConfig",
    "RateMode",
]
