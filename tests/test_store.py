"""Tests for the corpus store's idempotent writes."""

from collections.abc import Iterator
from pathlib import Path

import pytest

from src.models.verse import VerseRecord
from src.models.work import Category, StructureKind
from src.storage.database import initialize_database
from src.storage.store import CorpusStore, StoreError


@pytest.fixture
def store(tmp_path: Path) -> Iterator[CorpusStore]:
    db_path = tmp_path / "corpus.db"
    initialize_database(db_path)
    with CorpusStore.open(db_path) as corpus_store:
        yield corpus_store


def _register_genesis(store: CorpusStore) -> str:
    work = store.upsert_work(
        slug="Genesis",
        category_path="Tanakh.Torah",
        en_title="Genesis",
        he_title="בראשית",
        structure=StructureKind.CHAPTER_VERSE,
        depth=2,
    )
    return work.id


def _verse(ref: str, work_id: str, en: str | None = "text") -> VerseRecord:
    coords = tuple(int(part) for part in ref.split(".")[1:])
    return VerseRecord(
        reference=ref,
        coordinates=coords,
        source_text="טקסט",
        translation_text=en,
        work_id=work_id,
        root_category="Tanakh",
    )


class TestCategories:
    def test_insert_and_exists(self, store: CorpusStore) -> None:
        store.upsert_category(Category(slug="Tanakh", path="Tanakh", en_title="Tanakh", he_title="Tanakh"))
        assert store.category_exists("Tanakh")
        assert not store.category_exists("Tanakh.Torah")

    def test_insert_is_idempotent(self, store: CorpusStore) -> None:
        category = Category(slug="Tanakh", path="Tanakh", en_title="Tanakh", he_title="Tanakh")
        store.upsert_category(category)
        store.upsert_category(category.model_copy(update={"en_title": "Changed"}))
        assert store.category_exists("Tanakh")


class TestWorks:
    def test_lookup_missing(self, store: CorpusStore) -> None:
        assert store.get_work("Genesis") is None

    def test_upsert_keeps_identifier(self, store: CorpusStore) -> None:
        first = _register_genesis(store)
        second = _register_genesis(store)
        assert first == second

    def test_upsert_updates_titles(self, store: CorpusStore) -> None:
        _register_genesis(store)
        work = store.upsert_work(
            slug="Genesis",
            category_path="Tanakh.Torah",
            en_title="Bereshit",
            he_title="בראשית",
            structure=StructureKind.CHAPTER_VERSE,
            depth=2,
        )
        assert work.en_title == "Bereshit"
        assert work.root_category == "Tanakh"


class TestVerses:
    def test_upsert_writes_rows(self, store: CorpusStore) -> None:
        work_id = _register_genesis(store)
        written = store.upsert_verses([_verse("Genesis.1.1", work_id), _verse("Genesis.1.2", work_id)])
        assert written == 2
        assert store.count_verses(work_id) == 2

    def test_reingest_overwrites(self, store: CorpusStore) -> None:
        work_id = _register_genesis(store)
        store.upsert_verses([_verse("Genesis.1.1", work_id, en="old")])
        store.upsert_verses([_verse("Genesis.1.1", work_id, en="new")])

        assert store.count_verses(work_id) == 1
        row = store.get_verse("Genesis.1.1", "Tanakh")
        assert row["translation_text"] == "new"
        assert (row["c1"], row["c2"], row["c3"]) == (1, 1, None)

    def test_empty_batch(self, store: CorpusStore) -> None:
        assert store.upsert_verses([]) == 0

    def test_rejected_batch_raises_store_error(self, store: CorpusStore) -> None:
        # No such work: the foreign key rejects the whole batch
        with pytest.raises(StoreError):
            store.upsert_verses([_verse("Genesis.1.1", "missing-work")])
        assert store.get_verse("Genesis.1.1", "Tanakh") is None
