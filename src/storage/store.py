"""Idempotent write and lookup operations over the corpus database."""

import logging
import sqlite3
from pathlib import Path
from uuid import uuid4

from src.models.verse import VerseRecord
from src.models.work import Category, StructureKind, Work
from src.storage.database import get_connection

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """A write or read rejected by the underlying database."""


class CorpusStore:
    """Category, work and verse persistence keyed on natural identities.

    Categories are keyed on their path, works on their slug and verses on
    ``(ref, root_category)``. Every write is an upsert so re-running an
    ingestion overwrites instead of duplicating.

    Args:
        conn: An open sqlite3 connection with the schema initialized.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    @classmethod
    def open(cls, db_path: str | Path, timeout: float = 30.0) -> "CorpusStore":
        return cls(get_connection(db_path, timeout=timeout))

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "CorpusStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ── Categories ───────────────────────────────────────────────────────

    def upsert_category(self, category: Category) -> None:
        """Insert a category unless one with the same path already exists."""
        try:
            with self._conn:
                self._conn.execute(
                    """
                    INSERT INTO categories (path, slug, en_title, he_title)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(path) DO NOTHING
                    """,
                    (category.path, category.slug, category.en_title, category.he_title),
                )
        except sqlite3.Error as e:
            raise StoreError(f"Category upsert failed for '{category.path}': {e}") from e

    def category_exists(self, path: str) -> bool:
        try:
            row = self._conn.execute(
                "SELECT 1 FROM categories WHERE path = ?", (path,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Category lookup failed for '{path}': {e}") from e
        return row is not None

    # ── Works ────────────────────────────────────────────────────────────

    def get_work(self, slug: str) -> Work | None:
        """Look up a registered work by slug."""
        try:
            row = self._conn.execute(
                """
                SELECT id, slug, category_path, en_title, he_title,
                       structure_type, text_depth
                FROM works WHERE slug = ?
                """,
                (slug,),
            ).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Work lookup failed for '{slug}': {e}") from e

        if row is None:
            return None
        return Work(
            id=row["id"],
            slug=row["slug"],
            category_path=row["category_path"],
            en_title=row["en_title"],
            he_title=row["he_title"],
            structure=StructureKind(row["structure_type"]),
            depth=row["text_depth"],
        )

    def upsert_work(
        self,
        slug: str,
        category_path: str,
        en_title: str,
        he_title: str,
        structure: StructureKind,
        depth: int,
    ) -> Work:
        """Insert or update a work by slug; the identifier is kept on update."""
        try:
            with self._conn:
                self._conn.execute(
                    """
                    INSERT INTO works (id, slug, category_path, en_title, he_title,
                                       structure_type, text_depth)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(slug) DO UPDATE SET
                        category_path = excluded.category_path,
                        en_title = excluded.en_title,
                        he_title = excluded.he_title,
                        structure_type = excluded.structure_type,
                        text_depth = excluded.text_depth,
                        updated_at = CURRENT_TIMESTAMP
                    """,
                    (str(uuid4()), slug, category_path, en_title, he_title,
                     structure.value, depth),
                )
        except sqlite3.Error as e:
            raise StoreError(f"Work upsert failed for '{slug}': {e}") from e

        work = self.get_work(slug)
        if work is None:
            raise StoreError(f"Work '{slug}' missing after upsert")
        return work

    # ── Verses ───────────────────────────────────────────────────────────

    def upsert_verses(self, records: list[VerseRecord]) -> int:
        """Write a batch of verses as one transaction.

        Returns:
            Number of records written.

        Raises:
            StoreError: If the batch was rejected; nothing from it is kept.
        """
        if not records:
            return 0

        rows = [
            (
                r.reference,
                r.root_category,
                r.work_id,
                r.source_text,
                r.translation_text,
                *(r.coordinate(i) for i in range(1, 6)),
            )
            for r in records
        ]
        try:
            with self._conn:
                self._conn.executemany(
                    """
                    INSERT INTO verses (ref, root_category, work_id, source_text,
                                        translation_text, c1, c2, c3, c4, c5)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(ref, root_category) DO UPDATE SET
                        work_id = excluded.work_id,
                        source_text = excluded.source_text,
                        translation_text = excluded.translation_text,
                        c1 = excluded.c1,
                        c2 = excluded.c2,
                        c3 = excluded.c3,
                        c4 = excluded.c4,
                        c5 = excluded.c5,
                        updated_at = CURRENT_TIMESTAMP
                    """,
                    rows,
                )
        except sqlite3.Error as e:
            raise StoreError(f"Verse batch of {len(rows)} rejected: {e}") from e
        return len(rows)

    def count_verses(self, work_id: str) -> int:
        row = self._conn.execute(
            "SELECT COUNT(*) FROM verses WHERE work_id = ?", (work_id,)
        ).fetchone()
        return row[0]

    def get_verse(self, ref: str, root_category: str) -> sqlite3.Row | None:
        return self._conn.execute(
            "SELECT * FROM verses WHERE ref = ? AND root_category = ?",
            (ref, root_category),
        ).fetchone()
