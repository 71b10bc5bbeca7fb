"""
Google Sheets v4 client for reading test cases and writing statuses
"""
import logging
from pathlib import Path
from typing import Any, List, Optional

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ..errors import ConfigurationError, WriteBackError

SCOPES = ['https://www.googleapis.com/auth/spreadsheets']


class GoogleSheetsClient:
    """SheetClient backed by a service account"""

    def __init__(self, spreadsheet_id: str, credentials_file: str,
                 service: Optional[Any] = None):
        self.spreadsheet_id = spreadsheet_id
        self.credentials_file = credentials_file
        self.logger = logging.getLogger(self.__class__.__name__)
        self._service = service

    def _authorize(self):
        key_path = Path(self.credentials_file)
        if not key_path.is_file():
            raise ConfigurationError(f"Service account key not found: {self.credentials_file}")
        try:
            return service_account.Credentials.from_service_account_file(str(key_path), scopes=SCOPES)
        except (ValueError, OSError) as e:
            raise ConfigurationError(f"Unusable service account key {self.credentials_file}: {e}") from e

    @property
    def service(self):
        if self._service is None:
            credentials = self._authorize()
            self._service = build('sheets', 'v4', credentials=credentials, cache_discovery=False)
        return self._service

    def read_range(self, range_name: str) -> List[List[str]]:
        result = self.service.spreadsheets().values().get(
            spreadsheetId=self.spreadsheet_id,
            range=range_name,
        ).execute()

        rows = result.get('values', [])
        self.logger.info(f"Fetched {len(rows)} rows from {range_name}")
        return rows

    def write_range(self, range_name: str, values: List[List[str]]) -> None:
        try:
            result = self.service.spreadsheets().values().update(
                spreadsheetId=self.spreadsheet_id,
                range=range_name,
                valueInputOption='RAW',
                body={'values': values},
            ).execute()
        except HttpError as e:
            raise WriteBackError(f"Update of {range_name} failed: {e}") from e

        self.logger.debug(f"Updated {result.get('updatedCells', 0)} cells in {range_name}")
