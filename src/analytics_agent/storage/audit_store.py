"""
Audit Store using SQLite

Append-only trail of every processed test case. Re-running the harness adds
rows; nothing is updated in place.
"""

import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from ..errors import AuditStoreError
from ..models.test_case import TestCase
from ..models.verdict import AuditRecord


class AuditStore:
    """
    SQLite-backed analytics_data table
    """

    TABLE = "analytics_data"

    def __init__(self, db_path: str = "data/analytics_audit.db", timezone: str = "UTC"):
        """
        Initialize audit storage

        Args:
            db_path: Path to SQLite database file (":memory:" for tests)
            timezone: Named time zone used for created_at
        """
        self.db_path = db_path
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.tz = ZoneInfo(timezone)
        self._local = threading.local()
        self._schema_ready = False

    @contextmanager
    def _get_connection(self):
        """Get thread-local database connection"""
        if not hasattr(self._local, 'conn'):
            self._local.conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._local.conn.row_factory = sqlite3.Row
        try:
            yield self._local.conn
        except Exception:
            self._local.conn.rollback()
            raise

    def ensure_schema(self) -> None:
        """Create the audit table if it does not exist yet"""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f'''
                CREATE TABLE IF NOT EXISTS {self.TABLE} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    analytic_id TEXT,
                    url TEXT,
                    fieldname TEXT,
                    value TEXT,
                    action TEXT,
                    status TEXT,
                    created_at TEXT
                )
            ''')
            cursor.execute(f'''
                CREATE INDEX IF NOT EXISTS idx_{self.TABLE}_analytic_id
                ON {self.TABLE}(analytic_id)
            ''')
            conn.commit()
        self._schema_ready = True

    def now(self) -> str:
        return datetime.now(self.tz).isoformat(timespec='seconds')

    def build_record(self, test_case: TestCase) -> AuditRecord:
        """Audit record for a case, stamped with the current time"""
        return AuditRecord(
            analytic_id=test_case.id,
            url=test_case.url,
            fieldname=test_case.field_name,
            value=test_case.expected_value,
            action=test_case.action_script,
            status=test_case.status,
            created_at=self.now(),
        )

    def insert_record(self, record: AuditRecord) -> int:
        """Append one record; returns its primary key"""
        if not self._schema_ready:
            self.ensure_schema()

        try:
            with self._get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(f'''
                    INSERT INTO {self.TABLE}
                    (analytic_id, url, fieldname, value, action, status, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                ''', (record.analytic_id, record.url, record.fieldname, record.value,
                      record.action, record.status, record.created_at))
                conn.commit()
                return cursor.lastrowid
        except sqlite3.Error as e:
            raise AuditStoreError(f"Insert for {record.analytic_id} failed: {e}") from e

    def fetch_records(self, analytic_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """Audit rows in insertion order, optionally for one test case id"""
        if not self._schema_ready:
            self.ensure_schema()

        with self._get_connection() as conn:
            cursor = conn.cursor()
            if analytic_id is None:
                cursor.execute(f'SELECT * FROM {self.TABLE} ORDER BY id')
            else:
                cursor.execute(f'SELECT * FROM {self.TABLE} WHERE analytic_id = ? ORDER BY id',
                               (analytic_id,))
            return [dict(row) for row in cursor.fetchall()]

    def count(self) -> int:
        if not self._schema_ready:
            self.ensure_schema()

        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f'SELECT COUNT(*) FROM {self.TABLE}')
            return cursor.fetchone()[0]

    def close(self):
        """Close database connection"""
        if hasattr(self._local, 'conn'):
            self._local.conn.close()
            del self._local.conn
