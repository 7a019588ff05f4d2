"""
Ledger Repository.

SQLite-based storage for share records and scalar ledger state.
"""

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator, Iterable, List, Optional

from src.core import get_logger

from ..models.records import Collection, LedgerState, ShareRecord

logger = get_logger(__name__)

DEFAULT_DB_PATH = "data/share_ledger.db"

# Integers are stored as TEXT so 256-bit values survive
STATE_KEYS = ("total_shares", "allocation_per_share", "balance")

UPSERT_RECORD_SQL = """
    INSERT OR REPLACE INTO share_records
    (collection, asset_id, shares, withdrawn, registered_at, withdrawn_at)
    VALUES (?, ?, ?, ?, ?, ?)
"""

UPSERT_STATE_SQL = (
    "INSERT OR REPLACE INTO ledger_state (key, value, updated_at) VALUES (?, ?, ?)"
)


class LedgerRepository:
    """
    SQLite repository for ledger state.

    Example:
        >>> repo = LedgerRepository("data/share_ledger.db")
        >>> repo.initialize()
        >>> repo.save_records(records)
        >>> repo.save_state(LedgerState(total_shares=90))
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        """
        Initialize repository.

        Args:
            db_path: Path to SQLite database file
        """
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialized = False

    @property
    def db_path(self) -> Path:
        return self._db_path

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(str(self._db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def initialize(self) -> None:
        """Initialize database schema."""
        if self._initialized:
            return

        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS share_records (
                    collection TEXT NOT NULL,
                    asset_id TEXT NOT NULL,
                    shares TEXT NOT NULL,
                    withdrawn INTEGER NOT NULL,
                    registered_at TEXT NOT NULL,
                    withdrawn_at TEXT,
                    PRIMARY KEY (collection, asset_id)
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS ledger_state (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_share_records_withdrawn
                ON share_records(withdrawn)
            """)

        self._initialized = True
        logger.info(f"LedgerRepository initialized: {self._db_path}")

    # =========================================================================
    # Share Records
    # =========================================================================

    def save_records(self, records: Iterable[ShareRecord]) -> None:
        """
        Insert or update share records.

        Args:
            records: Records to save
        """
        rows = [self._record_row(r) for r in records]
        if not rows:
            return

        with self._get_connection() as conn:
            conn.executemany(UPSERT_RECORD_SQL, rows)
        logger.debug(f"Saved {len(rows)} share records")

    def get_record(self, collection: Collection, asset_id: int) -> Optional[ShareRecord]:
        """
        Get a share record.

        Returns:
            ShareRecord if found
        """
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM share_records WHERE collection = ? AND asset_id = ?",
                (collection.value, str(asset_id)),
            ).fetchone()
        return self._row_to_record(row) if row else None

    def load_records(
        self,
        collection: Optional[Collection] = None,
        withdrawn: Optional[bool] = None,
        limit: Optional[int] = None,
    ) -> List[ShareRecord]:
        """
        Load share records with optional filters.

        Args:
            collection: Only this collection
            withdrawn: Only withdrawn (True) or outstanding (False)
            limit: Maximum records to return

        Returns:
            Records ordered by collection, then asset id
        """
        query = "SELECT * FROM share_records WHERE 1=1"
        params: list = []

        if collection:
            query += " AND collection = ?"
            params.append(collection.value)
        if withdrawn is not None:
            query += " AND withdrawn = ?"
            params.append(1 if withdrawn else 0)

        # asset_id is TEXT; order numerically
        query += " ORDER BY collection, LENGTH(asset_id), asset_id"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        with self._get_connection() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_record(row) for row in rows]

    def count_records(
        self,
        collection: Optional[Collection] = None,
        withdrawn: Optional[bool] = None,
    ) -> int:
        """Count share records with optional filters."""
        query = "SELECT COUNT(*) FROM share_records WHERE 1=1"
        params: list = []

        if collection:
            query += " AND collection = ?"
            params.append(collection.value)
        if withdrawn is not None:
            query += " AND withdrawn = ?"
            params.append(1 if withdrawn else 0)

        with self._get_connection() as conn:
            return conn.execute(query, params).fetchone()[0]

    # =========================================================================
    # Ledger State
    # =========================================================================

    def save_state(self, state: LedgerState) -> None:
        """Save scalar ledger state."""
        with self._get_connection() as conn:
            conn.executemany(UPSERT_STATE_SQL, self._state_rows(state))

    def load_state(self) -> Optional[LedgerState]:
        """
        Load scalar ledger state.

        Returns:
            LedgerState, or None if nothing was saved yet
        """
        with self._get_connection() as conn:
            rows = conn.execute("SELECT key, value FROM ledger_state").fetchall()
        if not rows:
            return None
        return LedgerState.from_dict({row["key"]: row["value"] for row in rows})

    def save(self, records: Iterable[ShareRecord], state: LedgerState) -> None:
        """Save changed records and the scalar state in one transaction."""
        rows = [self._record_row(r) for r in records]
        with self._get_connection() as conn:
            if rows:
                conn.executemany(UPSERT_RECORD_SQL, rows)
            conn.executemany(UPSERT_STATE_SQL, self._state_rows(state))

    # =========================================================================
    # Helpers
    # =========================================================================

    def _record_row(self, record: ShareRecord) -> tuple:
        return (
            record.collection.value,
            str(record.asset_id),
            str(record.shares),
            1 if record.withdrawn else 0,
            record.registered_at.isoformat(),
            record.withdrawn_at.isoformat() if record.withdrawn_at else None,
        )

    def _state_rows(self, state: LedgerState) -> List[tuple]:
        now = datetime.now(timezone.utc).isoformat()
        values = state.to_dict()
        return [(key, str(values[key]), now) for key in STATE_KEYS]

    def _row_to_record(self, row: sqlite3.Row) -> ShareRecord:
        return ShareRecord(
            collection=Collection(row["collection"]),
            asset_id=int(row["asset_id"]),
            shares=int(row["shares"]),
            withdrawn=bool(row["withdrawn"]),
            registered_at=datetime.fromisoformat(row["registered_at"]),
            withdrawn_at=(
                datetime.fromisoformat(row["withdrawn_at"])
                if row["withdrawn_at"]
                else None
            ),
        )
