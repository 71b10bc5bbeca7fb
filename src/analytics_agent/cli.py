#!/usr/bin/env python3
"""
Analytics Agent - command line entry point

Usage:
    analytics-agent [options]

Examples:
    analytics-agent --spreadsheet-id 1AbC... --credentials credentials.json
    analytics-agent --config harness.yaml --headed --log-level DEBUG
    analytics-agent --har session.har --match-scope run
"""

import argparse
import asyncio
import json
import logging
import sqlite3
import sys
from typing import List, Optional

from .config import HarnessConfig, MATCH_SCOPES
from .errors import ConfigurationError
from .orchestrator import AnalyticsVerificationOrchestrator
from .sheets.google_sheets import GoogleSheetsClient
from .storage.audit_store import AuditStore
from .utils.env_loader import load_env_file
from .utils.helpers import setup_logging

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Verify analytics tracking values listed in a spreadsheet",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --spreadsheet-id 1AbC... --credentials credentials.json
  %(prog)s --config harness.yaml --headed --log-level DEBUG
  %(prog)s --har session.har --match-scope run
        """
    )

    parser.add_argument("--config", help="Path to a JSON or YAML configuration file")
    parser.add_argument("--env-file", default=".env", help="Path to .env file (default: .env)")
    parser.add_argument("--spreadsheet-id", help="Google spreadsheet id")
    parser.add_argument("--credentials", help="Service account key file")
    parser.add_argument("--range", dest="read_range", help="Source range (default: Sheet1!A:F)")
    parser.add_argument("--db", dest="database_path", help="SQLite audit database path")
    parser.add_argument("--no-audit", action="store_true", help="Skip audit table persistence")
    parser.add_argument("--match-scope", choices=MATCH_SCOPES,
                        help="Match each row against its own captures (row) or the whole run (run)")
    parser.add_argument("--capture-timeout", type=float, help="Seconds to wait for captures per row")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument("--har", help="Reconcile against a HAR export instead of driving a browser")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )
    parser.add_argument("--print-config", action="store_true", help="Print the effective configuration and exit")
    return parser


def resolve_config(args: argparse.Namespace) -> HarnessConfig:
    """File, then environment, then command line"""
    load_env_file(args.env_file)

    config = HarnessConfig.load_from_file(args.config) if args.config else HarnessConfig()
    config = HarnessConfig.load_from_env(config)

    if args.spreadsheet_id:
        config.sheet.spreadsheet_id = args.spreadsheet_id
    if args.credentials:
        config.sheet.credentials_file = args.credentials
    if args.read_range:
        config.sheet.read_range = args.read_range
    if args.database_path:
        config.audit.database_path = args.database_path
    if args.no_audit:
        config.audit.enabled = False
    if args.match_scope:
        config.capture.match_scope = args.match_scope
    if args.capture_timeout is not None:
        config.capture.capture_timeout = args.capture_timeout
    if args.headed:
        config.playwright.headless = False
    if args.log_level:
        config.output.log_level = args.log_level

    return config


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = resolve_config(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Aborting run: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    if args.print_config:
        print(json.dumps(config.get_summary(), indent=2))
        return EXIT_OK

    setup_logging(config.output.log_level, log_dir=config.output.log_directory)
    logger = logging.getLogger("analytics_agent")

    try:
        config.require_valid()

        sheet_client = GoogleSheetsClient(config.sheet.spreadsheet_id, config.sheet.credentials_file)
        audit_store = None
        if config.audit.enabled:
            audit_store = AuditStore(config.audit.database_path, config.audit.timezone)
            audit_store.ensure_schema()
    except (ConfigurationError, sqlite3.Error) as e:
        logger.critical(f"Aborting run: {e}")
        return EXIT_CONFIG_ERROR

    logger.info(f"Configuration: {config.get_summary()}")
    orchestrator = AnalyticsVerificationOrchestrator(config, sheet_client, audit_store)

    try:
        if args.har:
            summary = orchestrator.run_offline(args.har)
        else:
            summary = asyncio.run(orchestrator.run())
    except (ConfigurationError, FileNotFoundError) as e:
        logger.critical(f"Aborting run: {e}")
        return EXIT_CONFIG_ERROR
    finally:
        if audit_store:
            audit_store.close()

    logger.info(f"Run summary: {summary.get_summary()}")
    return EXIT_OK if summary.failed == 0 else EXIT_FAILURES


if __name__ == "__main__":
    sys.exit(main())
