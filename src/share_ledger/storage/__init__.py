"""
Share Ledger Storage.

Persistence layer for share records and ledger state.
"""

from .repository import DEFAULT_DB_PATH, LedgerRepository

__all__ = ["LedgerRepository", "DEFAULT_DB_PATH"]
