"""Maintenance entry point for purging expired token records.

Meant to be run by an external scheduler, e.g. a cron entry::

    */15 * * * * tokenledger-purge
"""
import argparse
import sys
from typing import List, Optional

from tokenledger.config import resolve_store_config, settings
from tokenledger.errors import ConfigurationError, StoreError
from tokenledger.store import TokenStore
from tokenledger.utils.logger import logger


def purge_expired_tokens(store: TokenStore, now: Optional[int] = None) -> int:
    """Purge expired records from ``store`` and log how many were removed."""
    removed = store.purge_expired(now)
    logger.info(
        f"Purged {removed} expired token records",
        extra={"count": removed, "action": "purge_tokens"},
    )
    return removed


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="tokenledger-purge",
        description="Delete token records whose expiry has passed.",
    )
    parser.add_argument(
        "--now",
        type=int,
        default=None,
        help="Epoch seconds to compare expiry against (default: current time)",
    )
    args = parser.parse_args(argv)

    try:
        store = TokenStore(resolve_store_config(settings))
    except ConfigurationError as exc:
        logger.error(f"Configuration error: {exc}")
        return 2

    try:
        removed = purge_expired_tokens(store, args.now)
    except StoreError as exc:
        logger.error(f"Purge failed: {exc}")
        return 1

    print(removed)
    return 0


if __name__ == "__main__":
    sys.exit(main())
