"""
Command line entry point.

Usage:
    currency-tracker -c BTC ETH DOGE --etfs AMUNDI.PA [--fail-on-publish-error]

Credentials are read from the environment or a .env file in the working
directory: CMC_PRO_API_KEY, EOD_TOKEN, SHEET_ID, GOOGLE_SERVICE_ACCOUNT_FILE.
"""

import argparse
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import ValidationError

from . import __version__
from .config import load_settings
from .errors import TrackerError
from .logging_config import get_logger, setup_logging
from .pipeline import run_pipeline
from .startup_validation import validate_startup

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_PUBLISH_FAILED = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="currency-tracker",
        description="Fetch crypto and ETF prices and write them to a Google Sheet",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-c", "--currencies", nargs="+", metavar="SYMBOL",
        help="Currencies to query, e.g. BTC ETH DOGE (default: CRYPTO_SYMBOLS)",
    )
    parser.add_argument("--etfs", metavar="TICKER", help="ETF ticker to fetch (default: ETF_TICKER)")
    parser.add_argument("--sheet-id", help="Destination spreadsheet ID (default: SHEET_ID)")
    parser.add_argument("--credentials", help="Service account JSON file (default: GOOGLE_SERVICE_ACCOUNT_FILE)")
    parser.add_argument(
        "--fail-on-publish-error", action="store_true", default=None,
        help="Exit non-zero when a sheet update fails",
    )
    parser.add_argument("--skip-validation", action="store_true", help="Skip startup validation")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR (default: LOG_LEVEL or INFO)")
    parser.add_argument("--json-logs", action="store_true", default=None, help="Log as JSON lines")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    load_dotenv(find_dotenv(usecwd=True))
    setup_logging(json_format=args.json_logs, level=args.log_level)

    try:
        settings = load_settings(
            CRYPTO_SYMBOLS=" ".join(args.currencies) if args.currencies else None,
            ETF_TICKER=args.etfs,
            SHEET_ID=args.sheet_id,
            GOOGLE_SERVICE_ACCOUNT_FILE=args.credentials,
            FAIL_ON_PUBLISH_ERROR=args.fail_on_publish_error,
        )
    except ValidationError as e:
        logger.error("Invalid configuration: %s", e)
        return EXIT_FATAL

    logger.debug("Querying the following currencies: %s", settings.crypto_symbols)

    try:
        if not args.skip_validation:
            validate_startup(settings)
        report = run_pipeline(settings)
    except TrackerError as e:
        logger.error("%s", e)
        return EXIT_FATAL

    if not report.ok:
        logger.warning(
            "%d of %d sheet updates failed",
            len(report.failures), len(report.failures) + len(report.updated_ranges)
        )
        if settings.FAIL_ON_PUBLISH_ERROR:
            return EXIT_PUBLISH_FAILED

    return EXIT_OK
