"""SQLite database initialization and connection management."""

import sqlite3
from pathlib import Path


def get_connection(db_path: str | Path, timeout: float = 30.0) -> sqlite3.Connection:
    """Create a connection to the SQLite database.

    Args:
        db_path: Path to the SQLite database file.
        timeout: Seconds a write waits on a locked database before failing.

    Returns:
        A sqlite3 Connection with row_factory set to Row.
    """
    conn = sqlite3.connect(str(db_path), timeout=timeout, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


def initialize_database(db_path: str | Path) -> None:
    """Create the database schema if it doesn't exist.

    Args:
        db_path: Path to the SQLite database file.
    """
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = get_connection(db_path)
    try:
        conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS categories (
                path TEXT PRIMARY KEY,
                slug TEXT NOT NULL,
                en_title TEXT NOT NULL,
                he_title TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );

            CREATE TABLE IF NOT EXISTS works (
                id TEXT PRIMARY KEY,
                slug TEXT NOT NULL UNIQUE,
                category_path TEXT NOT NULL,
                en_title TEXT NOT NULL,
                he_title TEXT NOT NULL,
                structure_type TEXT NOT NULL,
                text_depth INTEGER NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );

            CREATE TABLE IF NOT EXISTS verses (
                ref TEXT NOT NULL,
                root_category TEXT NOT NULL,
                work_id TEXT NOT NULL REFERENCES works(id),
                source_text TEXT,
                translation_text TEXT,
                c1 INTEGER NOT NULL,
                c2 INTEGER,
                c3 INTEGER,
                c4 INTEGER,
                c5 INTEGER,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                PRIMARY KEY (ref, root_category)
            );

            CREATE INDEX IF NOT EXISTS idx_verses_work ON verses (work_id, c1, c2);
            """
        )
        conn.commit()
    finally:
        conn.close()
