"""
Spreadsheet client interface and test case loading
"""
import logging
from typing import List, Protocol

from ..config import SheetConfig
from ..models.test_case import TestCase

logger = logging.getLogger(__name__)


class SheetClient(Protocol):
    """What the harness needs from a spreadsheet backend"""

    def read_range(self, range_name: str) -> List[List[str]]: ...

    def write_range(self, range_name: str, values: List[List[str]]) -> None: ...


def status_cell(config: SheetConfig, row_index: int) -> str:
    """A1 address of a row's status cell, e.g. Sheet1!F2 for the first data row"""
    return f"{config.sheet_name}!{config.status_column}{row_index + 1 + config.header_offset}"


def load_test_cases(client: SheetClient, config: SheetConfig) -> List[TestCase]:
    """Read the configured range and adapt every data row to a TestCase"""
    rows = client.read_range(config.read_range) or []
    if not rows:
        logger.info("No data found.")
        return []

    data_rows = rows[1:] if config.has_header else rows

    test_cases = []
    for row_index, row in enumerate(data_rows):
        if not any(str(cell).strip() for cell in row):
            # Row positions must stay aligned with the sheet, so blanks keep their index
            continue
        test_cases.append(TestCase.from_row(row, row_index, config.columns))

    logger.info(f"Loaded {len(test_cases)} test cases from {config.read_range}")
    return test_cases
