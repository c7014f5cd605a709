"""
Events Sync - CLI.

============================================================
USAGE
============================================================
events-sync sync --from-block 16000000 --to-block 16000010
events-sync sync --from-block 15000000 --to-block 15001000 --backfill
events-sync sync --from-block N --to-block M --kinds seaport-order-filled
events-sync unsync --block 16000005 --block-hash 0xabc...

Configuration is read from the environment (see SyncConfig.from_env).

============================================================
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from core.exceptions import ConfigurationError, EventsSyncError
from events_sync.config import SyncConfig
from events_sync.orchestrator import create_orchestrator
from onchain_adapters.providers.json_rpc import JsonRpcChainDataSource
from storage.database import Database
from storage.event_store import EventStore


logger = logging.getLogger("events_sync")


def setup_logging(level: str = "INFO", log_format: str = "text") -> None:
    if log_format == "json":
        fmt = json.dumps({
            "timestamp": "%(asctime)s",
            "level": "%(levelname)s",
            "logger": "%(name)s",
            "message": "%(message)s",
        })
    else:
        fmt = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=fmt, force=True)


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="events-sync",
        description="NFT marketplace on-chain events indexer",
    )

    logging_group = parser.add_argument_group("Logging Options")
    logging_group.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="INFO",
        help="Logging level (default: INFO)",
    )
    logging_group.add_argument(
        "--log-format",
        type=str,
        choices=["json", "text"],
        default="text",
        help="Logging format (default: text)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Sync a block range")
    sync.add_argument("--from-block", type=int, required=True, metavar="N")
    sync.add_argument("--to-block", type=int, required=True, metavar="N")
    sync.add_argument(
        "--backfill",
        action="store_true",
        help="Historical mode: no header pre-warming, no reorg re-checks",
    )
    sync.add_argument("--kinds", nargs="+", metavar="KIND", help="Only sync these event kinds")
    sync.add_argument("--address", type=str, metavar="0x..", help="Sync every log of one contract")

    unsync = subparsers.add_parser("unsync", help="Remove the records of an orphaned block")
    unsync.add_argument("--block", type=int, required=True, metavar="N")
    unsync.add_argument("--block-hash", type=str, required=True, metavar="0x..")

    return parser


def validate_args(args: argparse.Namespace) -> List[str]:
    errors = []

    if args.command == "sync":
        if args.from_block < 0:
            errors.append("--from-block must not be negative")
        if args.to_block < args.from_block:
            errors.append("--to-block must not be before --from-block")
        if args.kinds and args.address:
            errors.append("--kinds and --address are mutually exclusive")

    if args.command == "unsync" and not args.block_hash.startswith("0x"):
        errors.append("--block-hash must be 0x-prefixed")

    return errors


# ============================================================
# MAIN ENTRY POINT
# ============================================================

async def async_main(args: argparse.Namespace, config: SyncConfig) -> int:
    database = Database(config.database_url)
    database.create_all()

    async with JsonRpcChainDataSource(config.rpc_url) as chain_data:
        orchestrator = create_orchestrator(config, chain_data, EventStore(database))

        try:
            if args.command == "sync":
                result = await orchestrator.sync_events(
                    args.from_block,
                    args.to_block,
                    backfill=args.backfill,
                    kinds=args.kinds,
                    address=args.address,
                )
                print(json.dumps(result.to_dict(), indent=2))
            else:
                removed = await orchestrator.unsync_events(args.block, args.block_hash)
                print(json.dumps(removed, indent=2))
        except EventsSyncError as e:
            logger.error(f"Fatal error: {e.to_log_format()}")
            return 1
        finally:
            database.dispose()

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level, args.log_format)

    errors = validate_args(args)
    if errors:
        for error in errors:
            print(f"Error: {error}", file=sys.stderr)
        return 1

    try:
        config = SyncConfig.from_env()
        config_errors = config.validate()
        if not config.rpc_url:
            config_errors.append("RPC_URL is not set")
        if config_errors:
            raise ConfigurationError("; ".join(config_errors))
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        return asyncio.run(async_main(args, config))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
