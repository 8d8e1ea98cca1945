"""Tests for database initialization."""

import sqlite3
from pathlib import Path

from src.storage.database import get_connection, initialize_database


def _tables(db_path: Path) -> list[str]:
    conn = sqlite3.connect(str(db_path))
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table' ORDER BY name")
    tables = [row[0] for row in cursor.fetchall()]
    conn.close()
    return tables


def _columns(db_path: Path, table: str) -> dict[str, str]:
    conn = sqlite3.connect(str(db_path))
    cursor = conn.execute(f"PRAGMA table_info({table})")
    columns = {row[1]: row[2] for row in cursor.fetchall()}
    conn.close()
    return columns


class TestInitializeDatabase:
    def test_creates_tables(self, tmp_path: Path) -> None:
        db_path = tmp_path / "test.db"
        initialize_database(db_path)

        tables = _tables(db_path)
        assert "categories" in tables
        assert "works" in tables
        assert "verses" in tables

    def test_idempotent(self, tmp_path: Path) -> None:
        db_path = tmp_path / "test.db"
        initialize_database(db_path)
        initialize_database(db_path)  # Should not raise

        assert "works" in _tables(db_path)

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        db_path = tmp_path / "nested" / "dir" / "test.db"
        initialize_database(db_path)
        assert db_path.exists()

    def test_works_table_schema(self, tmp_path: Path) -> None:
        db_path = tmp_path / "test.db"
        initialize_database(db_path)

        columns = _columns(db_path, "works")
        for name in ("id", "slug", "category_path", "en_title", "he_title",
                     "structure_type", "text_depth"):
            assert name in columns

    def test_verses_table_schema(self, tmp_path: Path) -> None:
        db_path = tmp_path / "test.db"
        initialize_database(db_path)

        columns = _columns(db_path, "verses")
        for name in ("ref", "root_category", "work_id", "source_text",
                     "translation_text", "c1", "c2", "c3", "c4", "c5"):
            assert name in columns

    def test_verse_identity_is_ref_and_root_category(self, tmp_path: Path) -> None:
        db_path = tmp_path / "test.db"
        initialize_database(db_path)

        conn = sqlite3.connect(str(db_path))
        pk = [row[1] for row in conn.execute("PRAGMA table_info(verses)") if row[5]]
        conn.close()
        assert sorted(pk) == ["ref", "root_category"]


class TestGetConnection:
    def test_returns_connection_with_row_factory(self, tmp_path: Path) -> None:
        db_path = tmp_path / "test.db"
        initialize_database(db_path)

        conn = get_connection(db_path)
        assert conn.row_factory == sqlite3.Row
        conn.close()

    def test_wal_mode_enabled(self, tmp_path: Path) -> None:
        db_path = tmp_path / "test.db"
        initialize_database(db_path)

        conn = get_connection(db_path)
        cursor = conn.execute("PRAGMA journal_mode")
        mode = cursor.fetchone()[0]
        conn.close()
        assert mode == "wal"
