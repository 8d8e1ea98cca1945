"""Tests for taxonomy and work registration."""

from collections.abc import Iterator
from pathlib import Path

import pytest

from src.ingestion.registrar import TaxonomyRegistrar
from src.models.tree import CorpusDocument
from src.models.work import Category, StructureKind, WorkDescriptor
from src.storage.database import get_connection, initialize_database
from src.storage.store import CorpusStore, StoreError

GENESIS = WorkDescriptor(
    slug="Genesis",
    sub_path="Tanakh/Torah/Genesis",
    structure=StructureKind.CHAPTER_VERSE,
    depth=2,
)


class RecordingStore(CorpusStore):
    """CorpusStore that logs category calls and can reject chosen writes."""

    def __init__(self, conn, reject_category: str | None = None,
                 reject_work: bool = False) -> None:
        super().__init__(conn)
        self.calls: list[tuple[str, str]] = []
        self._reject_category = reject_category
        self._reject_work = reject_work

    def upsert_category(self, category: Category) -> None:
        self.calls.append(("upsert", category.path))
        if category.path == self._reject_category:
            raise StoreError("rejected")
        super().upsert_category(category)

    def category_exists(self, path: str) -> bool:
        exists = super().category_exists(path)
        self.calls.append(("exists" if exists else "missing", path))
        return exists

    def upsert_work(self, **kwargs):  # type: ignore[override]
        self.calls.append(("work", kwargs["slug"]))
        if self._reject_work:
            raise StoreError("work rejected")
        return super().upsert_work(**kwargs)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    path = tmp_path / "corpus.db"
    initialize_database(path)
    return path


@pytest.fixture
def store(db_path: Path) -> Iterator[RecordingStore]:
    recording = RecordingStore(get_connection(db_path))
    yield recording
    recording.close()


def _doc(title: str | None = "Genesis", he_title: str | None = "בראשית") -> CorpusDocument:
    return CorpusDocument(title=title, he_title=he_title)


class TestRegister:
    def test_registers_new_work(self, store: RecordingStore) -> None:
        result = TaxonomyRegistrar(store).register("Genesis", GENESIS, _doc())

        assert result.ok
        assert result.created
        assert result.root_category == "Tanakh"
        work = store.get_work("Genesis")
        assert work is not None
        assert work.id == result.work_id
        assert work.category_path == "Tanakh.Torah"
        assert work.he_title == "בראשית"
        assert work.depth == 2

    def test_ancestors_confirmed_before_descendants(self, store: RecordingStore) -> None:
        TaxonomyRegistrar(store).register("Genesis", GENESIS, _doc())

        assert store.calls == [
            ("upsert", "Tanakh"),
            ("exists", "Tanakh"),
            ("upsert", "Tanakh.Torah"),
            ("exists", "Tanakh.Torah"),
            ("work", "Genesis"),
        ]

    def test_existing_work_skips_categories(self, store: RecordingStore) -> None:
        first = TaxonomyRegistrar(store).register("Genesis", GENESIS, _doc())
        store.calls.clear()

        second = TaxonomyRegistrar(store).register("Genesis", GENESIS, None)

        assert second.ok
        assert not second.created
        assert second.work_id == first.work_id
        assert second.root_category == "Tanakh"
        assert store.calls == []

    def test_titles_fall_back_to_translation_then_slug(self, store: RecordingStore) -> None:
        descriptor = WorkDescriptor(
            slug="Song_of_Songs",
            sub_path="Tanakh/Writings/Song of Songs",
            structure="chapter_verse",
            depth=2,
        )
        TaxonomyRegistrar(store).register("Song_of_Songs", descriptor, None, None)

        work = store.get_work("Song_of_Songs")
        assert work is not None
        assert work.en_title == "Song of Songs"
        assert work.he_title == "Song of Songs"

    def test_translation_title_used_when_source_lacks_it(self, store: RecordingStore) -> None:
        TaxonomyRegistrar(store).register(
            "Genesis", GENESIS, _doc(title=None, he_title=None), _doc()
        )
        work = store.get_work("Genesis")
        assert work is not None
        assert work.en_title == "Genesis"


class TestRegistrationFailures:
    def test_category_failure_aborts(self, db_path: Path) -> None:
        store = RecordingStore(get_connection(db_path), reject_category="Tanakh")
        result = TaxonomyRegistrar(store).register("Genesis", GENESIS, _doc())
        store.close()

        assert not result.ok
        assert result.error is not None
        assert result.error.stage == "category"
        assert result.error.path == "Tanakh"
        assert ("upsert", "Tanakh.Torah") not in store.calls
        assert ("work", "Genesis") not in store.calls

    def test_work_failure_aborts(self, db_path: Path) -> None:
        store = RecordingStore(get_connection(db_path), reject_work=True)
        result = TaxonomyRegistrar(store).register("Genesis", GENESIS, _doc())

        assert not result.ok
        assert result.error is not None
        assert result.error.stage == "work"
        assert store.get_work("Genesis") is None
        store.close()

    def test_sub_path_without_categories(self, store: RecordingStore) -> None:
        descriptor = WorkDescriptor(slug="Lone", sub_path="Lone", structure="chapter_verse", depth=2)
        result = TaxonomyRegistrar(store).register("Lone", descriptor, _doc())

        assert not result.ok
        assert result.error is not None
        assert result.error.stage == "category"
