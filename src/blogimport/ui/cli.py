# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from collections import Counter
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from blogimport.app import import_snapshot_file, migrate
from blogimport.config import configure_logging
from blogimport.domain.errors import ImportRejected

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from blogimport.domain.importer import ImportResult

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import blog export files")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--log-sql",
        action="store_true",
        help="Log every SQL statement sent to the database",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    importer = subparsers.add_parser("import", help="Import an export file")
    importer.add_argument("path", type=Path, help="Path to the JSON export")
    importer.add_argument(
        "--acting-user-email",
        type=str,
        help="Email of the destination user recorded as importer (defaults to the owner)",
    )
    importer.add_argument(
        "--database-uri",
        type=str,
        help="SQLAlchemy database URI (defaults to DATABASE_URI or the data dir)",
    )

    migrate_parser = subparsers.add_parser("migrate", help="Upgrade the database schema")
    migrate_parser.add_argument(
        "--database-uri",
        type=str,
        help="SQLAlchemy database URI (defaults to DATABASE_URI or the data dir)",
    )

    return parser.parse_args(list(argv))


def _print_summary(result: ImportResult) -> None:
    print("Import finished.")
    for table, rows in result.data.items():
        print(f"  {table}: {len(rows)}")
    if not result.problems:
        return
    by_help = Counter(problem.help for problem in result.problems)
    print(f"{len(result.problems)} problem(s):")
    for help_name, count in sorted(by_help.items()):
        print(f"  {help_name}: {count}")
    for problem in result.problems:
        print(f"  [{problem.help}] {problem.message}")
        if problem.context:
            log.debug("Problem context: %s", problem.context)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(
        level=logging.DEBUG if parsed_args.verbose else logging.INFO,
        log_sql=parsed_args.log_sql,
    )

    try:
        if parsed_args.command == "import":
            result = import_snapshot_file(
                parsed_args.path,
                acting_user_email=parsed_args.acting_user_email,
                database_uri=parsed_args.database_uri,
            )
            _print_summary(result)
        elif parsed_args.command == "migrate":
            migrate(database_uri=parsed_args.database_uri)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except ImportRejected as rejected:
        print(f"Import rejected with {len(rejected.errors)} error(s):", file=sys.stderr)
        for error in rejected.errors:
            print(f"  {error.message}", file=sys.stderr)
        sys.exit(1)
    except Exception:
        log.exception("Fatal error during import")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
