"""Taxonomy and work auto-registration."""

import logging

from pydantic import BaseModel

from src.ingestion.errors import RegistrationError
from src.models.tree import CorpusDocument
from src.models.work import WorkDescriptor, categories_for, category_path_key, root_category_of
from src.storage.store import CorpusStore, StoreError

logger = logging.getLogger(__name__)


class RegistrationResult(BaseModel):
    """The registered identity of a work, or why it could not be established."""

    slug: str
    work_id: str | None = None
    root_category: str | None = None
    created: bool = False
    error: RegistrationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.work_id is not None


class TaxonomyRegistrar:
    """Ensures a work and every ancestor category exist before ingestion.

    Categories are created one at a time, shortest path first, and each is
    confirmed in the store before its child is written. Any rejected write
    aborts the registration; nothing further is attempted for that work.

    Args:
        store: The corpus store to register into.
    """

    def __init__(self, store: CorpusStore) -> None:
        self._store = store

    def register(
        self,
        slug: str,
        descriptor: WorkDescriptor,
        source_document: CorpusDocument | None,
        translation_document: CorpusDocument | None = None,
    ) -> RegistrationResult:
        """Resolve a registered work, registering it and its taxonomy if needed.

        Args:
            slug: Work slug.
            descriptor: Catalog descriptor for the work.
            source_document: Source-language document, used for display titles.
            translation_document: Fallback for titles the source lacks.

        Returns:
            A RegistrationResult carrying either the work id and root
            category, or a RegistrationError.
        """
        try:
            existing = self._store.get_work(slug)
        except StoreError as e:
            return self._failed(slug, "lookup", str(e))

        if existing is not None:
            logger.info("[%s] Already registered as %s", slug, existing.id)
            return RegistrationResult(
                slug=slug, work_id=existing.id, root_category=existing.root_category
            )

        categories = categories_for(descriptor)
        if not categories:
            return self._failed(
                slug, "category", f"sub-path '{descriptor.sub_path}' has no category segments"
            )

        category_path = category_path_key(descriptor.category_segments)
        logger.info("[%s] Registering under %s", slug, category_path)

        for category in categories:
            try:
                self._store.upsert_category(category)
                confirmed = self._store.category_exists(category.path)
            except StoreError as e:
                return self._failed(slug, "category", str(e), category.path)
            if not confirmed:
                return self._failed(
                    slug, "category", "category missing after upsert", category.path
                )
            logger.debug("[%s] Category ready: %s", slug, category.path)

        en_title, he_title = _titles(slug, source_document, translation_document)
        try:
            work = self._store.upsert_work(
                slug=slug,
                category_path=category_path,
                en_title=en_title,
                he_title=he_title,
                structure=descriptor.structure,
                depth=descriptor.depth,
            )
        except StoreError as e:
            return self._failed(slug, "work", str(e), category_path)

        logger.info("[%s] Registered work %s (%s)", slug, work.id, en_title)
        return RegistrationResult(
            slug=slug,
            work_id=work.id,
            root_category=root_category_of(category_path),
            created=True,
        )

    def _failed(
        self, slug: str, stage: str, reason: str, path: str | None = None
    ) -> RegistrationResult:
        error = RegistrationError(slug=slug, stage=stage, reason=reason, path=path)
        logger.error("[%s] %s", slug, error)
        return RegistrationResult(slug=slug, error=error)


def _titles(
    slug: str, *documents: CorpusDocument | None
) -> tuple[str, str]:
    """Pick display titles from the first document that has them."""
    en_title = next((d.title for d in documents if d and d.title), None)
    he_title = next((d.he_title for d in documents if d and d.he_title), None)
    en_title = en_title or slug.replace("_", " ")
    return en_title, he_title or en_title
