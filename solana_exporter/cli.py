"""Command-line entry point: export a wallet's history to CSV."""

import asyncio
import sys
from argparse import ArgumentParser, ArgumentTypeError, Namespace

from solders.pubkey import Pubkey

from solana_exporter.errors import InvalidAddressError, LedgerInitializationError
from solana_exporter.helpers.config import (
    get_log_level,
    get_output_path,
    get_solana_rpc_url,
)
from solana_exporter.helpers.http import create_http_client
from solana_exporter.helpers.logging import LOG_LEVELS, get_logger, set_log_level
from solana_exporter.helpers.rpc import SolanaRPCClient
from solana_exporter.history.exporter import write_records_csv
from solana_exporter.history.models import TransactionRecord
from solana_exporter.history.orchestrator import BatchOrchestrator


logger = get_logger(__name__)

USAGE_HINT = "Usage: solana-exporter -a <Solana Wallet Address> [-l LIMIT]"


def positive_int(value: str) -> int:
    """argparse type for strictly positive integers."""
    try:
        number = int(value)
    except ValueError as e:
        msg = f"{value!r} is not an integer"
        raise ArgumentTypeError(msg) from e
    if number <= 0:
        msg = f"{value!r} must be a positive integer"
        raise ArgumentTypeError(msg)
    return number


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="solana-exporter",
        description="Exports Solana transaction history to CSV",
    )
    parser.add_argument(
        "-a",
        "--address",
        help="The Solana wallet address to export transactions for",
    )
    parser.add_argument(
        "-l",
        "--limit",
        type=positive_int,
        default=0,
        help="Process at most this many signatures, newest first (default: all)",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output CSV file (default: EXPORT_OUTPUT or transactions.csv)",
    )
    parser.add_argument(
        "--rpc-url",
        default=None,
        help="Solana JSON-RPC endpoint (default: SOLANA_RPC_URL or mainnet-beta)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=sorted(LOG_LEVELS),
        default=None,
        help="Logging level (default: LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Do not render a progress bar",
    )
    return parser


def validate_address(address: str | None) -> str:
    """Check that ``address`` is a base58 encoded 32-byte public key.

    Raises:
        InvalidAddressError: If the address is missing or invalid
    """
    if not address:
        msg = "Missing required parameter `-a` or `--address`."
        raise InvalidAddressError(msg)
    try:
        return str(Pubkey.from_string(address))
    except ValueError as e:
        msg = f"Invalid Solana address: {address}"
        raise InvalidAddressError(msg) from e


async def export_history(
    address: str,
    *,
    rpc_url: str,
    operation_limit: int = 0,
    show_progress: bool = True,
) -> list[TransactionRecord]:
    """Export the history of ``address`` over one shared HTTP client.

    Raises:
        LedgerInitializationError: If the signatures cannot be listed
    """
    rpc_client = SolanaRPCClient(rpc_url)
    async with create_http_client() as client:
        orchestrator = BatchOrchestrator(
            rpc_client, client, address, show_progress=show_progress
        )
        return await orchestrator.export(operation_limit)


def run(args: Namespace) -> int:
    """Run an export for parsed arguments and return the exit code."""
    try:
        address = validate_address(args.address)
    except InvalidAddressError as e:
        logger.error("Error: %s", e)
        logger.error(USAGE_HINT)
        return 1

    rpc_url = get_solana_rpc_url(args.rpc_url)
    output = get_output_path(args.output)
    logger.info("Fetching transaction history for address: %s", address)

    try:
        records = asyncio.run(
            export_history(
                address,
                rpc_url=rpc_url,
                operation_limit=args.limit,
                show_progress=not args.no_progress,
            )
        )
    except LedgerInitializationError as e:
        logger.error("Error: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.error("Operation cancelled by user")
        return 1

    write_records_csv(records, output)
    logger.info("Export completed: %d records", len(records))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    set_log_level(get_log_level(args.log_level))
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
