"""
Spreadsheet access: the client interface, test case loading and the Google Sheets client
"""

from .base import SheetClient, load_test_cases, status_cell

__all__ = ['SheetClient', 'load_test_cases', 'status_cell']
