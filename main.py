#!/usr/bin/env python3
"""
Analytics Agent - Main Entry Point

Reads analytics test cases from a Google Sheet, replays each row's actions in
Playwright, captures the analytics hits the page sends, and writes Pass/Fail
back to the sheet and to the audit database.

Usage:
    python main.py [options]

Examples:
    python main.py --spreadsheet-id 1AbC... --credentials credentials.json
    python main.py --config harness.yaml --headed
    python main.py --har session.har --match-scope run
"""

import sys
from pathlib import Path

# Add src directory to Python path for imports
sys.path.insert(0, str(Path(__file__).parent / "src"))

from analytics_agent.cli import main

if __name__ == "__main__":
    sys.exit(main())
