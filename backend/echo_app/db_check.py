"""Console entry point that verifies the MongoDB cluster is reachable."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .core.config import settings
from .core.logging import configure_logging
from .services.database import DatabaseSettings, DatabaseStartupError, connect, ping_once

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Check connectivity to the configured MongoDB cluster")
    parser.add_argument(
        "--handle",
        action="store_true",
        help="Open a database handle instead of a one-shot ping",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(settings.LOG_LEVEL)

    db_settings = DatabaseSettings.from_env()
    try:
        if args.handle:
            with connect(db_settings) as handle:
                logger.info("Database '%s' ready (ping %.1f ms)", handle.name, handle.ping_ms)
        else:
            ping_ms = ping_once(db_settings)
            logger.info("Ping succeeded in %.1f ms", ping_ms)
    except DatabaseStartupError as exc:
        logger.error("Database check failed (%s): %s", exc.reason.value, exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
