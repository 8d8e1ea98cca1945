"""Run report models for per-work and catalog-wide ingestion."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class WorkState(str, Enum):
    """States of a single work's ingestion run."""

    PENDING = "pending"
    FETCHING = "fetching"
    REGISTERING = "registering"
    FLATTENING = "flattening"
    COMPLETED = "completed"
    FAILED = "failed"


class WorkRunReport(BaseModel):
    """Outcome of one work's ingestion run."""

    slug: str
    state: WorkState = WorkState.PENDING
    failed_at: WorkState | None = None
    error: str | None = None
    work_id: str | None = None
    records_flushed: int = 0
    records_written: int = 0
    batch_count: int = 0
    failed_batches: int = 0
    depth_mismatches: int = 0
    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: datetime | None = None

    @property
    def failed(self) -> bool:
        return self.state == WorkState.FAILED


class CatalogRunReport(BaseModel):
    """Aggregate of every work run in one catalog pass."""

    works: list[WorkRunReport] = Field(default_factory=list)

    @property
    def failed(self) -> list[str]:
        return [report.slug for report in self.works if report.failed]

    @property
    def records_written(self) -> int:
        return sum(report.records_written for report in self.works)

    @property
    def ok(self) -> bool:
        return not self.failed
