#!/usr/bin/env python3
"""
Configuration management for the analytics verification harness
"""

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import ConfigurationError
from .models.test_case import CANONICAL_COLUMNS

MATCH_SCOPES = ["row", "run"]


@dataclass
class SheetConfig:
    """Source spreadsheet location and layout"""
    spreadsheet_id: str = ""
    credentials_file: str = "credentials.json"
    read_range: str = "Sheet1!A:F"
    sheet_name: str = "Sheet1"
    status_column: str = "F"
    has_header: bool = True
    columns: List[str] = field(default_factory=lambda: list(CANONICAL_COLUMNS))

    @property
    def header_offset(self) -> int:
        return 1 if self.has_header else 0


@dataclass
class CaptureConfig:
    """Network capture and matching settings"""
    method: str = "POST"
    url_pattern: str = "*://*analytics.google.com/g/collect*"
    required_params: List[str] = field(
        default_factory=lambda: ["ep.Action", "ep.Category", "ep.Label"]
    )
    include_row_field: bool = True
    capture_timeout: float = 10.0  # seconds to wait for the first capture of a row
    quiet_period: float = 2.0  # stop draining after this long without a new capture
    poll_interval: float = 0.1
    match_scope: str = "row"  # row | run


@dataclass
class ActionConfig:
    """Action script execution settings"""
    settle_delay: float = 1.0  # seconds after every step
    row_delay: float = 0.5  # seconds between rows
    element_timeout: int = 10000  # ms
    ignorable_page_errors: List[str] = field(
        default_factory=lambda: ["digitalData.event is undefined"]
    )


@dataclass
class PlaywrightConfig:
    """Configuration for Playwright browser automation"""
    headless: bool = True
    browser_type: str = "chromium"  # chromium, firefox, webkit
    timeout: int = 30000
    wait_until: str = "load"
    base_url: Optional[str] = None
    user_agent: Optional[str] = None
    viewport: Dict[str, int] = field(default_factory=lambda: {"width": 1920, "height": 1080})


@dataclass
class AuditConfig:
    """Audit table storage"""
    enabled: bool = True
    database_path: str = "data/analytics_audit.db"
    timezone: str = "UTC"


@dataclass
class OutputConfig:
    """Configuration for output and logging"""
    output_directory: str = "./results"
    log_level: str = "INFO"
    log_directory: str = "logs"
    save_summary: bool = True
    json_indent: int = 2


@dataclass
class HarnessConfig:
    """Main configuration class combining all sub-configurations"""
    sheet: SheetConfig = field(default_factory=SheetConfig)
    capture: CaptureConfig = field(default_factory=CaptureConfig)
    actions: ActionConfig = field(default_factory=ActionConfig)
    playwright: PlaywrightConfig = field(default_factory=PlaywrightConfig)
    audit: AuditConfig = field(default_factory=AuditConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @classmethod
    def load_from_env(cls, base: Optional['HarnessConfig'] = None) -> 'HarnessConfig':
        """Load configuration from environment variables, on top of `base` if given"""
        config = base or cls()

        # Sheet configuration
        if os.getenv('SPREADSHEET_ID'):
            config.sheet.spreadsheet_id = os.getenv('SPREADSHEET_ID')
        if os.getenv('GOOGLE_CREDENTIALS_FILE'):
            config.sheet.credentials_file = os.getenv('GOOGLE_CREDENTIALS_FILE')
        if os.getenv('SHEET_RANGE'):
            config.sheet.read_range = os.getenv('SHEET_RANGE')
        if os.getenv('SHEET_NAME'):
            config.sheet.sheet_name = os.getenv('SHEET_NAME')
        if os.getenv('STATUS_COLUMN'):
            config.sheet.status_column = os.getenv('STATUS_COLUMN').upper()

        # Audit configuration
        if os.getenv('AUDIT_DB_PATH'):
            config.audit.database_path = os.getenv('AUDIT_DB_PATH')
        if os.getenv('AUDIT_TIMEZONE'):
            config.audit.timezone = os.getenv('AUDIT_TIMEZONE')

        # Capture configuration
        if os.getenv('CAPTURE_TIMEOUT'):
            config.capture.capture_timeout = float(os.getenv('CAPTURE_TIMEOUT'))
        if os.getenv('CAPTURE_URL_PATTERN'):
            config.capture.url_pattern = os.getenv('CAPTURE_URL_PATTERN')
        if os.getenv('MATCH_SCOPE'):
            config.capture.match_scope = os.getenv('MATCH_SCOPE').lower()

        # Playwright configuration
        if os.getenv('PLAYWRIGHT_HEADLESS'):
            config.playwright.headless = os.getenv('PLAYWRIGHT_HEADLESS').lower() == 'true'
        if os.getenv('PLAYWRIGHT_BROWSER'):
            config.playwright.browser_type = os.getenv('PLAYWRIGHT_BROWSER')
        if os.getenv('BASE_URL'):
            config.playwright.base_url = os.getenv('BASE_URL')

        # Output configuration
        if os.getenv('OUTPUT_DIRECTORY'):
            config.output.output_directory = os.getenv('OUTPUT_DIRECTORY')
        if os.getenv('LOG_LEVEL'):
            config.output.log_level = os.getenv('LOG_LEVEL')

        return config

    @classmethod
    def load_from_file(cls, config_file: str) -> 'HarnessConfig':
        """Load configuration from JSON/YAML file"""
        config_path = Path(config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_file}")

        with open(config_path, 'r') as f:
            if config_path.suffix.lower() in ['.json']:
                data = json.load(f)
            elif config_path.suffix.lower() in ['.yml', '.yaml']:
                import yaml
                data = yaml.safe_load(f) or {}
            else:
                raise ValueError(f"Unsupported configuration file format: {config_path.suffix}")

        config = cls()
        for section in ('sheet', 'capture', 'actions', 'playwright', 'audit', 'output'):
            if section not in data:
                continue
            target = getattr(config, section)
            for key, value in data[section].items():
                if hasattr(target, key):
                    setattr(target, key, value)

        return config

    def save_to_file(self, config_file: str) -> None:
        """Save configuration to JSON file"""
        config_path = Path(config_file)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, 'w') as f:
            json.dump(asdict(self), f, indent=self.output.json_indent, default=str)

    def validate(self, require_sheet: bool = True) -> List[str]:
        """Validate configuration and return list of issues"""
        issues = []

        if require_sheet:
            if not self.sheet.spreadsheet_id:
                issues.append("Spreadsheet id is not set (SPREADSHEET_ID)")
            if not Path(self.sheet.credentials_file).is_file():
                issues.append(f"Credentials file not found: {self.sheet.credentials_file}")

        if not self.sheet.status_column.isalpha():
            issues.append(f"Invalid status column: {self.sheet.status_column}")

        for required in ('url', 'fieldname', 'value'):
            if required not in [c.lower() for c in self.sheet.columns]:
                issues.append(f"Column layout is missing '{required}'")

        if self.audit.enabled and not self.audit.database_path:
            issues.append("Audit database path is empty (AUDIT_DB_PATH)")

        try:
            ZoneInfo(self.audit.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            issues.append(f"Unknown time zone: {self.audit.timezone}")

        if self.capture.capture_timeout <= 0:
            issues.append("Capture timeout must be positive")
        if self.capture.quiet_period < 0:
            issues.append("Capture quiet period cannot be negative")
        if self.capture.match_scope not in MATCH_SCOPES:
            issues.append(f"Invalid match scope: {self.capture.match_scope}")
        if not self.capture.required_params and not self.capture.include_row_field:
            issues.append("No required parameters configured for the capture filter")

        if self.playwright.timeout <= 0:
            issues.append("Playwright timeout must be positive")
        valid_browsers = ["chromium", "firefox", "webkit"]
        if self.playwright.browser_type not in valid_browsers:
            issues.append(f"Invalid browser type: {self.playwright.browser_type}")

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.output.log_level.upper() not in valid_log_levels:
            issues.append(f"Invalid log level: {self.output.log_level}")

        return issues

    def require_valid(self, require_sheet: bool = True) -> None:
        """Raise ConfigurationError when validate() reports anything"""
        issues = self.validate(require_sheet=require_sheet)
        if issues:
            raise ConfigurationError("Invalid configuration", issues)

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of the current configuration"""
        return {
            'spreadsheet_id': self.sheet.spreadsheet_id,
            'read_range': self.sheet.read_range,
            'status_column': self.sheet.status_column,
            'capture_pattern': f"{self.capture.method} {self.capture.url_pattern}",
            'required_params': list(self.capture.required_params),
            'match_scope': self.capture.match_scope,
            'browser_type': self.playwright.browser_type,
            'headless': self.playwright.headless,
            'audit_database': self.audit.database_path if self.audit.enabled else None,
            'audit_timezone': self.audit.timezone,
            'output_directory': self.output.output_directory,
            'log_level': self.output.log_level
        }
