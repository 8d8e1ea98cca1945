"""Per-work ingestion orchestration and the catalog driver loop."""

import asyncio
import logging
from collections.abc import Iterable
from datetime import datetime

from src.catalog import WorkCatalog
from src.config import AppConfig, CorpusConfig
from src.ingestion.fetcher import CorpusFetcher, FetchResult, build_document_url, create_client
from src.ingestion.flattener import FlattenStats, flatten
from src.ingestion.registrar import TaxonomyRegistrar
from src.ingestion.session import DEFAULT_BATCH_SIZE, BatchPersistenceSession
from src.models.report import CatalogRunReport, WorkRunReport, WorkState
from src.models.tree import TextNode
from src.models.verse import VerseRecord
from src.storage.database import initialize_database
from src.storage.store import CorpusStore

logger = logging.getLogger(__name__)


class WorkOrchestrator:
    """Drives each work through fetch, registration, flattening and persistence.

    A work moves FETCHING -> REGISTERING -> FLATTENING -> COMPLETED, or to
    FAILED when a fetch exhausts its retries and no language document is
    usable, or when registration is rejected. Batch failures during
    persistence are counted but do not fail the work.

    Args:
        catalog: Works this orchestrator may sync.
        fetcher: Fetcher for corpus documents.
        store: Store for categories, works and verses.
        corpus_config: Corpus host settings used to build document URLs.
        batch_size: Records per persisted batch.
    """

    def __init__(
        self,
        catalog: WorkCatalog,
        fetcher: CorpusFetcher,
        store: CorpusStore,
        corpus_config: CorpusConfig,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        self._catalog = catalog
        self._fetcher = fetcher
        self._store = store
        self._corpus = corpus_config
        self._batch_size = batch_size
        self._registrar = TaxonomyRegistrar(store)

    async def sync_work(self, slug: str) -> WorkRunReport:
        """Run one work to COMPLETED or FAILED.

        Raises:
            KeyError: If slug is not in the catalog.
        """
        descriptor = self._catalog[slug]
        report = WorkRunReport(slug=slug)

        try:
            report.state = WorkState.FETCHING
            logger.info("[%s] Fetching %s", slug, descriptor.sub_path)
            source_url = build_document_url(
                self._corpus, descriptor.sub_path, self._corpus.source_language
            )
            translation_url = build_document_url(
                self._corpus, descriptor.sub_path, self._corpus.translation_language
            )
            source, translation = await asyncio.gather(
                self._fetcher.fetch(source_url),
                self._fetcher.fetch(translation_url),
            )
            results = (source, translation)
            if any(r.failed for r in results) and not any(r.ok for r in results):
                return self._fail(report, "no usable language document fetched")
            for result in results:
                if result.failed:
                    logger.warning("[%s] Continuing without %s", slug, result.url)

            # Store calls block, so they run off the event loop
            loop = asyncio.get_running_loop()

            report.state = WorkState.REGISTERING
            registration = await loop.run_in_executor(
                None,
                lambda: self._registrar.register(
                    slug, descriptor, source.document, translation.document
                ),
            )
            if not registration.ok:
                return self._fail(report, str(registration.error))
            report.work_id = registration.work_id

            report.state = WorkState.FLATTENING
            session = BatchPersistenceSession(self._store, slug, batch_size=self._batch_size)
            stats = FlattenStats()
            records = flatten(
                _tree(source),
                _tree(translation),
                descriptor.depth,
                slug,
                work_id=registration.work_id or "",
                root_category=registration.root_category or "",
                stats=stats,
            )
            await loop.run_in_executor(None, lambda: _persist(session, records))

            report.records_flushed = session.total
            report.records_written = session.written
            report.batch_count = session.batch_count
            report.failed_batches = session.failed_batches
            report.depth_mismatches = stats.depth_mismatches
            report.state = WorkState.COMPLETED
        except Exception as e:
            logger.exception("[%s] Unexpected error during %s", slug, report.state.value)
            return self._fail(report, f"{type(e).__name__}: {e}")

        report.finished_at = datetime.now()
        logger.info(
            "[%s] completed: %d records in %d batches (%d failed)",
            slug,
            report.records_written,
            report.batch_count,
            report.failed_batches,
        )
        return report

    async def sync_catalog(self, slugs: Iterable[str] | None = None) -> CatalogRunReport:
        """Sync works one after another; a failed work never stops the run.

        Args:
            slugs: Optional subset of slugs; defaults to the whole catalog.
        """
        catalog = self._catalog.subset(slugs) if slugs is not None else self._catalog
        run = CatalogRunReport()
        for slug in catalog:
            run.works.append(await self.sync_work(slug))

        logger.info(
            "Catalog run finished: %d works, %d records, %d failed",
            len(run.works),
            run.records_written,
            len(run.failed),
        )
        return run

    def _fail(self, report: WorkRunReport, reason: str) -> WorkRunReport:
        report.failed_at = report.state
        report.state = WorkState.FAILED
        report.error = reason
        report.finished_at = datetime.now()
        logger.error("[%s] failed at %s: %s", report.slug, report.failed_at.value, reason)
        return report


def _tree(result: FetchResult) -> TextNode | None:
    return result.document.tree if result.document is not None else None


def _persist(session: BatchPersistenceSession, records: Iterable[VerseRecord]) -> None:
    for record in records:
        session.add(record)
    session.flush()


async def run_catalog(
    config: AppConfig, catalog: WorkCatalog, slugs: Iterable[str] | None = None
) -> CatalogRunReport:
    """Open the store and HTTP client from config and sync the given works."""
    initialize_database(config.storage.sqlite_path)
    with CorpusStore.open(
        config.storage.sqlite_path, timeout=config.storage.busy_timeout_seconds
    ) as store:
        async with create_client(config.corpus) as client:
            orchestrator = WorkOrchestrator(
                catalog,
                CorpusFetcher.from_config(client, config.corpus),
                store,
                config.corpus,
                batch_size=config.ingestion.batch_size,
            )
            return await orchestrator.sync_catalog(slugs)
