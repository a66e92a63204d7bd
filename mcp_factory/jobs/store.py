"""Job store interface with in-process and SQL implementations."""
from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from mcp_factory.core.errors import JobExistsError, JobNotFoundError
from mcp_factory.core.logging import job_context
from mcp_factory.db.models import PipelineJob
from mcp_factory.jobs.models import JobRecord

log = logging.getLogger(__name__)


class JobStore(ABC):
    """Registry of job id -> latest JobRecord snapshot.

    ``update`` replaces the whole record; there is no merge, so concurrent
    writers resolve as last-writer-wins.
    """

    # calls do I/O and must run off the event loop
    blocking = False

    @abstractmethod
    def create(self, job_id: str, record: JobRecord) -> None:
        ...

    @abstractmethod
    def update(self, job_id: str, record: JobRecord) -> None:
        ...

    @abstractmethod
    def get(self, job_id: str) -> Optional[JobRecord]:
        ...

    @abstractmethod
    def list(self, limit: int = 50) -> List[JobRecord]:
        """Most recently created records first."""
        ...


class InMemoryJobStore(JobStore):
    def __init__(self, max_records: Optional[int] = None):
        self._records: "OrderedDict[str, JobRecord]" = OrderedDict()
        self._lock = threading.Lock()
        self._max_records = max_records

    def create(self, job_id: str, record: JobRecord) -> None:
        with self._lock:
            if job_id in self._records:
                raise JobExistsError(f"Job already exists: {job_id}")
            self._records[job_id] = record
            self._evict()

    def update(self, job_id: str, record: JobRecord) -> None:
        with self._lock:
            if job_id not in self._records:
                raise JobNotFoundError(f"Job not found: {job_id}")
            self._records[job_id] = record

    def get(self, job_id: str) -> Optional[JobRecord]:
        with self._lock:
            return self._records.get(job_id)

    def list(self, limit: int = 50) -> List[JobRecord]:
        with self._lock:
            records = list(self._records.values())
        records.sort(key=lambda r: (r.created_at, r.id), reverse=True)
        return records[:max(limit, 0)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _evict(self) -> None:
        # Only terminal records are dropped; in-flight jobs always stay visible.
        if not self._max_records:
            return
        excess = len(self._records) - self._max_records
        if excess <= 0:
            return
        for job_id in [k for k, r in self._records.items() if r.is_terminal][:excess]:
            del self._records[job_id]
            log.debug("Evicted job record", extra=job_context(job_id))


class SqlJobStore(JobStore):
    """Durable store keeping each snapshot as a JSON row."""

    blocking = True

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory
        self._lock = threading.Lock()

    def create(self, job_id: str, record: JobRecord) -> None:
        with self._lock, self._session_factory() as db:
            if db.get(PipelineJob, job_id) is not None:
                raise JobExistsError(f"Job already exists: {job_id}")
            db.add(PipelineJob(
                id=job_id,
                created_at=record.created_at,
                status=record.status.value,
                payload=record.model_dump(mode="json"),
            ))
            db.commit()

    def update(self, job_id: str, record: JobRecord) -> None:
        with self._lock, self._session_factory() as db:
            row = db.get(PipelineJob, job_id)
            if row is None:
                raise JobNotFoundError(f"Job not found: {job_id}")
            row.status = record.status.value
            row.payload = record.model_dump(mode="json")
            db.commit()

    def get(self, job_id: str) -> Optional[JobRecord]:
        with self._session_factory() as db:
            row = db.get(PipelineJob, job_id)
            return self._to_record(row) if row else None

    def list(self, limit: int = 50) -> List[JobRecord]:
        with self._session_factory() as db:
            rows = db.scalars(
                select(PipelineJob)
                .order_by(PipelineJob.created_at.desc(), PipelineJob.id.desc())
                .limit(max(limit, 0))
            ).all()
            return [self._to_record(row) for row in rows]

    @staticmethod
    def _to_record(row: PipelineJob) -> JobRecord:
        return JobRecord.model_validate(row.payload)
