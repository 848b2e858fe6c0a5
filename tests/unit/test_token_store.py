"""
Unit tests for token storage.

Tests TokenPair, MemoryTokenStore and SQLiteTokenStore.
"""
import sqlite3
import tempfile
from pathlib import Path

import pytest

from authsession.core.tokens import (
    TokenStore,
    TokenPair,
    SQLiteTokenStore,
    MemoryTokenStore
)


class TestTokenPair:
    """Tests for TokenPair model."""

    def test_create_pair(self):
        pair = TokenPair("access", "refresh")

        assert pair.access_token == "access"
        assert pair.refresh_token == "refresh"

    def test_requires_both_tokens(self):
        """A pair never holds one token without the other."""
        with pytest.raises(ValueError):
            TokenPair("access", "")
        with pytest.raises(ValueError):
            TokenPair("", "refresh")

    def test_from_values_treats_missing_as_absent(self):
        assert TokenPair.from_values("access", None) is None
        assert TokenPair.from_values(None, "refresh") is None
        assert TokenPair.from_values("access", "refresh") == TokenPair("access", "refresh")

    def test_from_dict(self):
        pair = TokenPair.from_dict({'access_token': 'a', 'refresh_token': 'r'})

        assert pair == TokenPair('a', 'r')
        assert TokenPair.from_dict({'access_token': 'a'}) is None

    def test_with_access_token_keeps_refresh_token(self):
        pair = TokenPair("old", "refresh").with_access_token("new")

        assert pair == TokenPair("new", "refresh")

    def test_repr_hides_tokens(self):
        text = repr(TokenPair("secret-access", "secret-refresh"))

        assert "secret-access" not in text
        assert "secret-refresh" not in text

    def test_is_immutable(self):
        pair = TokenPair("access", "refresh")

        with pytest.raises(AttributeError):
            pair.access_token = "other"


class TestMemoryTokenStore:
    """Tests for MemoryTokenStore."""

    def test_implements_protocol(self):
        assert isinstance(MemoryTokenStore(), TokenStore)

    def test_round_trip(self):
        store = MemoryTokenStore()
        pair = TokenPair("access", "refresh")

        store.save(pair)

        assert store.load() == pair

    def test_clear(self):
        store = MemoryTokenStore(TokenPair("access", "refresh"))
        assert store.exists() is True

        store.clear()

        assert store.exists() is False
        assert store.load() is None

    def test_context_manager(self):
        with MemoryTokenStore() as store:
            store.save(TokenPair("access", "refresh"))
            assert store.exists() is True


class TestSQLiteTokenStore:
    """Tests for SQLiteTokenStore."""

    @pytest.fixture
    def temp_store(self):
        """Create a temporary store file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            store = SQLiteTokenStore("test_store", Path(tmpdir))
            yield store
            store.close()

    def test_implements_protocol(self, temp_store):
        assert isinstance(temp_store, TokenStore)

    def test_creates_store_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = SQLiteTokenStore("my_account", Path(tmpdir))

            assert (Path(tmpdir) / "my_account.session").exists()

            store.close()

    def test_round_trip(self, temp_store):
        pair = TokenPair("access-1", "refresh-1")

        temp_store.save(pair)

        assert temp_store.load() == pair

    def test_load_empty(self, temp_store):
        assert temp_store.load() is None
        assert temp_store.exists() is False

    def test_clear(self, temp_store):
        temp_store.save(TokenPair("access", "refresh"))

        temp_store.clear()

        assert temp_store.load() is None
        assert temp_store.updated_at() is None

    def test_overwrite(self, temp_store):
        """Saving replaces both tokens."""
        temp_store.save(TokenPair("access-1", "refresh-1"))
        temp_store.save(TokenPair("access-2", "refresh-2"))

        assert temp_store.load() == TokenPair("access-2", "refresh-2")

    def test_persistence(self):
        """Tokens survive closing and reopening the store."""
        with tempfile.TemporaryDirectory() as tmpdir:
            first = SQLiteTokenStore("persistent", Path(tmpdir))
            first.save(TokenPair("access", "refresh"))
            first.close()

            second = SQLiteTokenStore("persistent", Path(tmpdir))
            loaded = second.load()
            second.close()

            assert loaded == TokenPair("access", "refresh")

    def test_half_written_row_is_absent(self, temp_store):
        """A row missing either token loads as no session."""
        conn = sqlite3.connect(str(temp_store.path))
        conn.execute(
            "INSERT INTO tokens (id, access_token, refresh_token, updated_at) "
            "VALUES (1, 'access', '', '2024-01-01T12:00:00')"
        )
        conn.commit()
        conn.close()

        assert temp_store.load() is None

    def test_updated_at(self, temp_store):
        temp_store.save(TokenPair("access", "refresh"))

        assert temp_store.updated_at() is not None

    def test_delete_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = SQLiteTokenStore("doomed", Path(tmpdir))
            store.save(TokenPair("access", "refresh"))
            path = store.path

            store.delete_file()

            assert not path.exists()

    def test_custom_extension_path(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            full_path = Path(tmpdir) / "custom_name.session"
            store = SQLiteTokenStore(str(full_path))

            assert store.path == full_path

            store.close()

    def test_context_manager(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with SQLiteTokenStore("context_test", Path(tmpdir)) as store:
                store.save(TokenPair("access", "refresh"))
                assert store.exists() is True
