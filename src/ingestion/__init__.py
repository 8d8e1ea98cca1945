"""Corpus ingestion: fetching, flattening, registration and persistence."""

from src.ingestion.fetcher import CorpusFetcher, FetchResult, FetchStatus
from src.ingestion.flattener import FlattenStats, flatten
from src.ingestion.orchestrator import WorkOrchestrator, run_catalog
from src.ingestion.registrar import RegistrationResult, TaxonomyRegistrar
from src.ingestion.session import BatchOutcome, BatchPersistenceSession

__all__ = [
    "BatchOutcome",
    "BatchPersistenceSession",
    "CorpusFetcher",
    "FetchResult",
    "FetchStatus",
    "FlattenStats",
    "RegistrationResult",
    "TaxonomyRegistrar",
    "WorkOrchestrator",
    "flatten",
    "run_catalog",
]
