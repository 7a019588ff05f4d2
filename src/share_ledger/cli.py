"""
Share Ledger CLI.

Command-line interface for inspecting persisted ledger state.
"""

import argparse
import asyncio
import sys
from typing import Any, Dict, List, Optional

from src.config import load_config
from src.core import get_logger, set_log_level
from src.core.exceptions import AlreadyWithdrawnError, NotRegisteredError

from .ledger import to_collection
from .models.records import Collection, LedgerState, ShareRecord
from .storage.repository import DEFAULT_DB_PATH, LedgerRepository

logger = get_logger(__name__)


class LedgerCLI:
    """
    Command-line interface for the Share Ledger.

    Reads the state a running ledger persisted; it never mutates it.

    Example:
        >>> cli = LedgerCLI(repository)
        >>> await cli.run(["status"])
        >>> await cli.run(["records", "--collection", "primary", "--pending"])
    """

    def __init__(self, repository: Optional[LedgerRepository] = None):
        """
        Initialize CLI.

        Args:
            repository: LedgerRepository instance; resolved from --db or
                --config when omitted
        """
        self._repository = repository
        self._parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create argument parser."""
        parser = argparse.ArgumentParser(
            prog="share-ledger",
            description="Share Ledger CLI for inspecting distribution state",
        )
        parser.add_argument(
            "--config", "-c",
            type=str,
            help="Path to configuration file (uses its db_path)",
        )
        parser.add_argument(
            "--db",
            type=str,
            help=f"Path to ledger database (default: {DEFAULT_DB_PATH})",
        )
        subparsers = parser.add_subparsers(dest="command", help="Available commands")

        # status command
        subparsers.add_parser("status", help="Show ledger totals")

        # shares command
        shares_parser = subparsers.add_parser("shares", help="Show the shares of an asset")
        shares_parser.add_argument("collection", choices=[c.value for c in Collection])
        shares_parser.add_argument("asset_id", type=int, help="Asset id")

        # quote command
        quote_parser = subparsers.add_parser(
            "quote",
            help="Show the payout an asset would receive now",
        )
        quote_parser.add_argument("collection", choices=[c.value for c in Collection])
        quote_parser.add_argument("asset_id", type=int, help="Asset id")

        # records command
        records_parser = subparsers.add_parser("records", help="List share records")
        records_parser.add_argument(
            "--collection",
            choices=[c.value for c in Collection],
            help="Filter by collection",
        )
        records_parser.add_argument(
            "--pending",
            action="store_true",
            help="Only records not yet withdrawn",
        )
        records_parser.add_argument(
            "--limit", "-l",
            type=int,
            default=50,
            help="Maximum records to show (default: 50)",
        )

        return parser

    async def run(self, args: List[str]) -> int:
        """
        Run CLI command.

        Args:
            args: Command-line arguments

        Returns:
            Exit code (0 for success)
        """
        if not args:
            self._parser.print_help()
            return 0

        parsed = self._parser.parse_args(args)

        if not parsed.command:
            self._parser.print_help()
            return 0

        try:
            if self._repository is None:
                self._repository = self._open_repository(parsed)

            handler = getattr(self, f"_cmd_{parsed.command}", None)
            if handler:
                return await handler(parsed)
            else:
                print(f"Unknown command: {parsed.command}")
                return 1
        except Exception as e:
            print(f"Error: {e}")
            logger.error(f"CLI error: {e}")
            return 1

    def _open_repository(self, args: argparse.Namespace) -> LedgerRepository:
        db_path = args.db
        if args.config:
            config = load_config(args.config)
            set_log_level(config.log_level)
            db_path = db_path or config.db_path

        repository = LedgerRepository(db_path or DEFAULT_DB_PATH)
        repository.initialize()
        return repository

    def _load_state(self) -> LedgerState:
        return self._repository.load_state() or LedgerState()

    # =========================================================================
    # Command Handlers
    # =========================================================================

    async def _cmd_status(self, args: argparse.Namespace) -> int:
        """Handle status command."""
        state = self._load_state()
        status = {
            **state.to_dict(),
            "primary_records": self._repository.count_records(Collection.PRIMARY),
            "secondary_records": self._repository.count_records(Collection.SECONDARY),
            "outstanding_records": self._repository.count_records(withdrawn=False),
            "db_path": str(self._repository.db_path),
        }
        self._print_status(status)
        return 0

    async def _cmd_shares(self, args: argparse.Namespace) -> int:
        """Handle shares command."""
        collection = to_collection(args.collection)
        record = self._repository.get_record(collection, args.asset_id)

        if record is None:
            print(f"{collection.value} asset {args.asset_id}: 0 shares (unregistered)")
        else:
            print(
                f"{collection.value} asset {args.asset_id}: "
                f"{record.shares} shares ({record.state.value})"
            )
        return 0

    async def _cmd_quote(self, args: argparse.Namespace) -> int:
        """Handle quote command."""
        collection = to_collection(args.collection)
        record = self._repository.get_record(collection, args.asset_id)

        if record is None:
            raise NotRegisteredError(
                f"{collection.value} asset {args.asset_id} is not registered"
            )
        if record.withdrawn:
            raise AlreadyWithdrawnError(
                f"{collection.value} asset {args.asset_id} already withdrawn"
            )

        rate = self._load_state().allocation_per_share
        print(
            f"{collection.value} asset {args.asset_id}: "
            f"{record.shares * rate} ({record.shares} shares x {rate})"
        )
        return 0

    async def _cmd_records(self, args: argparse.Namespace) -> int:
        """Handle records command."""
        records = self._repository.load_records(
            collection=to_collection(args.collection) if args.collection else None,
            withdrawn=False if args.pending else None,
            limit=args.limit,
        )

        if not records:
            print("No share records found")
            return 0

        self._print_records(records)
        return 0

    # =========================================================================
    # Output Formatting
    # =========================================================================

    def _print_status(self, status: Dict[str, Any]) -> None:
        """Print status."""
        print("\n=== Share Ledger Status ===")
        print(f"Database:             {status['db_path']}")
        print(f"Total Shares:         {status['total_shares']}")
        print(f"Allocation Per Share: {status['allocation_per_share']}")
        print(f"Pool Balance:         {status['balance']}")
        print(f"Primary Records:      {status['primary_records']}")
        print(f"Secondary Records:    {status['secondary_records']}")
        print(f"Outstanding Records:  {status['outstanding_records']}")

    def _print_records(self, records: List[ShareRecord]) -> None:
        """Print share records."""
        print("\n=== Share Records ===")
        print(f"{'Collection':<10} {'Asset ID':>10} {'Shares':>12} {'State':<12} {'Registered':<17}")
        print("-" * 65)

        for record in records:
            registered = record.registered_at.strftime("%Y-%m-%d %H:%M")
            print(
                f"{record.collection.value:<10} {record.asset_id:>10} "
                f"{record.shares:>12} {record.state.value:<12} {registered:<17}"
            )


async def run_cli(args: Optional[List[str]] = None) -> int:
    """
    Async entry point for CLI.

    Args:
        args: Command-line arguments (defaults to sys.argv)

    Returns:
        Exit code
    """
    if args is None:
        args = sys.argv[1:]

    cli = LedgerCLI()
    return await cli.run(args)


def main(args: Optional[List[str]] = None) -> int:
    """Console script entry point."""
    return asyncio.run(run_cli(args))


if __name__ == "__main__":
    sys.exit(main())
