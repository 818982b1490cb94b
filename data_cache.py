"""
Reference Data Cache Module
SQLite-backed key/value store shielding the economic-indicator and company
fundamentals APIs from redundant, rate-limited calls.

The cache does not judge freshness: payloads carry their own date field and the
calling services decide when an entry has expired.
"""

import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from datetime import date, datetime
from typing import Dict, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

COUNTRIES = "countries"
COMPANIES = "companies"
NAMESPACES = (COUNTRIES, COMPANIES)

COUNTRY_DATA_EXPIRATION_MONTHS = 12   # one year after the year-end of the data
COMPANY_DATA_EXPIRATION_MONTHS = 3    # one quarter after the latest report


# ==================== FRESHNESS HELPERS ====================

def months_between(start: date, end: date) -> int:
    """
    Whole calendar months from start to end.

    A month only counts once its day-of-month has been reached, so
    2024-12-31 -> 2025-12-30 is 11 months and 2024-12-31 -> 2025-12-31 is 12.
    """
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if months > 0 and end.day < start.day:
        months -= 1
    elif months < 0 and end.day > start.day:
        months += 1
    return months


def is_expired(reference_date: date, max_age_months: int, today: Optional[date] = None) -> bool:
    """Return True once reference_date is max_age_months or more in the past."""
    today = today or date.today()
    return months_between(reference_date, today) >= max_age_months


# ==================== CACHE STORE ====================

class ReferenceDataCache:
    """SQLite-based cache for country and comparable company payloads"""

    def __init__(self, db_path: str = "cache/cached_data.db"):
        self.db_path = db_path
        self._lock = threading.RLock()
        self._key_locks: Dict[Tuple[str, str], threading.Lock] = {}
        self.init_database()

    def init_database(self):
        """Initialize SQLite database with one table per namespace"""
        directory = os.path.dirname(self.db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with self._lock:
            conn = sqlite3.connect(self.db_path)
            cursor = conn.cursor()
            for namespace in NAMESPACES:
                cursor.execute(f'''
                    CREATE TABLE IF NOT EXISTS {namespace} (
                        key TEXT PRIMARY KEY,
                        data TEXT,
                        last_updated TEXT
                    )
                ''')
            conn.commit()
            conn.close()
        logger.debug(f"Reference data cache ready at {self.db_path}")

    @staticmethod
    def _table(namespace: str) -> str:
        if namespace not in NAMESPACES:
            raise ValueError(f"Unknown cache namespace: {namespace!r}")
        return namespace

    @contextmanager
    def key_lock(self, namespace: str, key: str) -> Iterator[None]:
        """Hold a per-key lock across a check-fetch-store sequence."""
        table = self._table(namespace)
        with self._lock:
            lock = self._key_locks.setdefault((table, key), threading.Lock())
        with lock:
            yield

    def get(self, namespace: str, key: str) -> Optional[str]:
        """Retrieve a serialized payload, or None when absent"""
        table = self._table(namespace)
        with self._lock:
            conn = sqlite3.connect(self.db_path)
            cursor = conn.cursor()
            cursor.execute(f'SELECT data FROM {table} WHERE key = ?', (key,))
            result = cursor.fetchone()
            conn.close()

        if result:
            return result[0]
        return None

    def put(self, namespace: str, key: str, payload: str):
        """Store a serialized payload, committed immediately"""
        table = self._table(namespace)
        with self._lock:
            conn = sqlite3.connect(self.db_path)
            cursor = conn.cursor()
            cursor.execute(f'''
                INSERT OR REPLACE INTO {table} (key, data, last_updated)
                VALUES (?, ?, ?)
            ''', (key, payload, datetime.now().isoformat()))
            conn.commit()
            conn.close()

    def contains(self, namespace: str, key: str) -> bool:
        return self.get(namespace, key) is not None

    def delete(self, namespace: str, key: str) -> bool:
        """Remove an entry; returns True if something was deleted"""
        table = self._table(namespace)
        with self._lock:
            conn = sqlite3.connect(self.db_path)
            cursor = conn.cursor()
            cursor.execute(f'DELETE FROM {table} WHERE key = ?', (key,))
            deleted = cursor.rowcount > 0
            conn.commit()
            conn.close()
        return deleted

    def keys(self, namespace: str) -> List[str]:
        table = self._table(namespace)
        with self._lock:
            conn = sqlite3.connect(self.db_path)
            cursor = conn.cursor()
            cursor.execute(f'SELECT key FROM {table} ORDER BY key')
            rows = cursor.fetchall()
            conn.close()
        return [row[0] for row in rows]

    def clear(self, namespace: Optional[str] = None):
        """Empty one namespace, or every namespace when none is given"""
        tables = [self._table(namespace)] if namespace else list(NAMESPACES)
        with self._lock:
            conn = sqlite3.connect(self.db_path)
            cursor = conn.cursor()
            for table in tables:
                cursor.execute(f'DELETE FROM {table}')
            conn.commit()
            conn.close()
        logger.info(f"Cleared cache namespaces: {', '.join(tables)}")
