"""Batched verse persistence for one work's ingestion run."""

import logging

import psutil
from pydantic import BaseModel

from src.models.verse import VerseRecord
from src.storage.store import CorpusStore, StoreError

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1000


class BatchOutcome(BaseModel):
    """Result of flushing one batch."""

    ordinal: int
    size: int
    ok: bool
    error: str | None = None


def resident_memory_mb() -> int:
    """Resident memory of this process in megabytes."""
    return psutil.Process().memory_info().rss // (1024 * 1024)


class BatchPersistenceSession:
    """Buffers verse records and writes them in idempotent batches.

    A batch is flushed automatically once it reaches ``batch_size``
    records. A batch the store rejects is logged and dropped; the session
    keeps accepting records so later batches still land. Call ``flush``
    once more after the last ``add`` to write the remainder.

    Args:
        store: Store the batches are written to.
        slug: Work slug, used in log lines.
        batch_size: Records per batch.
    """

    def __init__(
        self, store: CorpusStore, slug: str, batch_size: int = DEFAULT_BATCH_SIZE
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self._store = store
        self._slug = slug
        self._batch_size = batch_size
        self._buffer: list[VerseRecord] = []
        self._outcomes: list[BatchOutcome] = []
        self.total = 0
        self.written = 0

    @property
    def batch_count(self) -> int:
        return len(self._outcomes)

    @property
    def failed_batches(self) -> int:
        return sum(1 for outcome in self._outcomes if not outcome.ok)

    @property
    def outcomes(self) -> list[BatchOutcome]:
        return list(self._outcomes)

    @property
    def pending(self) -> int:
        return len(self._buffer)

    def add(self, record: VerseRecord) -> BatchOutcome | None:
        """Buffer a record, flushing if the batch is full."""
        self._buffer.append(record)
        if len(self._buffer) >= self._batch_size:
            return self.flush()
        return None

    def flush(self) -> BatchOutcome | None:
        """Write the buffered records as one batch.

        Returns:
            The batch outcome, or None if the buffer was empty.
        """
        if not self._buffer:
            return None

        batch, self._buffer = self._buffer, []
        ordinal = len(self._outcomes) + 1
        self.total += len(batch)

        try:
            self._store.upsert_verses(batch)
        except StoreError as e:
            outcome = BatchOutcome(ordinal=ordinal, size=len(batch), ok=False, error=str(e))
            logger.error("[%s] batch %d failed, %d records dropped: %s",
                         self._slug, ordinal, len(batch), e)
        else:
            outcome = BatchOutcome(ordinal=ordinal, size=len(batch), ok=True)
            self.written += len(batch)
            logger.info("[%s] batch %d | size %d | mem %dMB",
                        self._slug, ordinal, len(batch), resident_memory_mb())

        self._outcomes.append(outcome)
        return outcome
