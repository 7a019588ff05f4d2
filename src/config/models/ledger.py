"""
Ledger Configuration Model.

Administrative identity, share weighting and rate derivation settings.
"""

from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from .base import BaseConfig


class RateMode(str, Enum):
    """
    How a deposit updates allocation_per_share.

    RECOMPUTE overwrites the rate with floor(balance / total_shares) on every
    deposit. ACCUMULATE adds floor(amount / total_shares) to the previous rate.
    """

    RECOMPUTE = "recompute"
    ACCUMULATE = "accumulate"


class LedgerConfig(BaseConfig):
    """
    Share ledger configuration.

    Example:
        >>> config = LedgerConfig(administrator="0xadmin")
        >>> config.primary_base_shares
        10
        >>> config.max_total_shares == 2**256 - 1
        True
    """

    administrator: str = Field(
        ...,
        min_length=1,
        description="Identity allowed to register, deposit and drain",
    )
    primary_base_shares: int = Field(
        default=10,
        ge=0,
        description="Share weight assigned to every primary asset",
    )
    share_counter_bits: int = Field(
        default=256,
        ge=8,
        le=256,
        description="Width of the total share counter",
    )
    rate_mode: RateMode = Field(
        default=RateMode.RECOMPUTE,
        description="Deposit rate derivation (recompute or accumulate)",
    )
    db_path: Optional[str] = Field(
        default=None,
        description="SQLite file for ledger state; in-memory only when unset",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level applied on startup",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return level

    @field_validator("db_path")
    @classmethod
    def empty_db_path_is_none(cls, v: Optional[str]) -> Optional[str]:
        # ${LEDGER_DB:} substitutes to an empty string
        return v or None

    @property
    def max_total_shares(self) -> int:
        """Largest value the total share counter may hold."""
        return 2 ** self.share_counter_bits - 1
