"""
SQLite token storage implementation.

Keeps the token pair in a small SQLite file so a session survives
process restarts.
"""
import sqlite3
import threading
from pathlib import Path
from datetime import datetime
from typing import Optional, Union

from .protocols import TokenStore
from .models import TokenPair

_SCHEMA = '''
CREATE TABLE IF NOT EXISTS tokens (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    access_token TEXT NOT NULL,
    refresh_token TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
'''


class SQLiteTokenStore(TokenStore):
    """
    SQLite-backed token store.

    The pair lives in a single row (``id = 1``); ``save`` replaces both
    tokens in one transaction, so a reader never sees a new access token
    next to an old refresh token. Calls are serialised by a lock.

    Example:
        >>> store = SQLiteTokenStore("my_account")     # my_account.session
        >>> store.save(TokenPair("access", "refresh"))
        >>> store.load().refresh_token
        'refresh'
    """

    EXTENSION = '.session'
    SCHEMA_VERSION = 1

    def __init__(
        self,
        name: Union[str, Path],
        base_path: Optional[Path] = None
    ):
        """
        Open (or create) a token store file.

        Args:
            name: Store name without extension, or a full path
            base_path: Directory for named stores (default: current directory)
        """
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None
        self._path = self._resolve_path(name, base_path)
        self._path.parent.mkdir(parents=True, exist_ok=True)

        with self._lock:
            conn = self._connection()
            with conn:
                conn.executescript(_SCHEMA)
                if conn.execute('PRAGMA user_version').fetchone()[0] == 0:
                    conn.execute(f'PRAGMA user_version = {self.SCHEMA_VERSION}')

    @classmethod
    def _resolve_path(cls, name: Union[str, Path], base_path: Optional[Path]) -> Path:
        if isinstance(name, Path) or str(name).endswith(cls.EXTENSION):
            return Path(name)
        filename = f"{name}{cls.EXTENSION}"
        return Path(base_path) / filename if base_path else Path(filename)

    @property
    def path(self) -> Path:
        return self._path

    def _connection(self) -> sqlite3.Connection:
        # Caller holds self._lock
        if self._conn is None:
            self._conn = sqlite3.connect(str(self._path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _fetch_row(self) -> Optional[sqlite3.Row]:
        with self._lock:
            return self._connection().execute(
                'SELECT access_token, refresh_token, updated_at FROM tokens WHERE id = 1'
            ).fetchone()

    def load(self) -> Optional[TokenPair]:
        """
        Load the stored pair.

        Returns:
            TokenPair, or None when nothing (or only one token) is stored
        """
        row = self._fetch_row()
        if row is None:
            return None
        return TokenPair.from_values(row['access_token'], row['refresh_token'])

    def save(self, pair: TokenPair) -> None:
        """Replace the stored pair atomically."""
        with self._lock:
            conn = self._connection()
            with conn:
                conn.execute(
                    'INSERT OR REPLACE INTO tokens '
                    '(id, access_token, refresh_token, updated_at) VALUES (1, ?, ?, ?)',
                    (pair.access_token, pair.refresh_token, datetime.now().isoformat())
                )

    def clear(self) -> None:
        """Remove the stored pair. Clearing an empty store is a no-op."""
        with self._lock:
            conn = self._connection()
            with conn:
                conn.execute('DELETE FROM tokens')

    def exists(self) -> bool:
        return self.load() is not None

    def updated_at(self) -> Optional[datetime]:
        """Time the stored pair was last written, or None."""
        row = self._fetch_row()
        return datetime.fromisoformat(row['updated_at']) if row else None

    def close(self) -> None:
        """Close the database connection; the file is kept."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def delete_file(self) -> None:
        """Close the store and delete its file."""
        self.close()
        if self._path.exists():
            self._path.unlink()

    def __enter__(self) -> 'SQLiteTokenStore':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __del__(self):
        try:
            self.close()
        except Exception:
            pass
