"""Job record snapshots for pipeline runs."""
import secrets
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from mcp_factory.core.workflow import STAGE_ORDER, JobStage, JobStatus


def generate_job_id() -> str:
    """Time-ordered id with a random suffix: ``job_<epoch-ms>_<8 hex>``."""
    return f"job_{int(time.time() * 1000)}_{secrets.token_hex(4)}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobRecord(BaseModel):
    """Immutable snapshot of one pipeline run.

    The engine never mutates a record; each transition produces a new value via
    ``model_copy(update=...)`` which is then written to the store whole.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_job_id)
    status: JobStatus = JobStatus.QUEUED
    current_stage: JobStage = STAGE_ORDER[0]
    description: str = ""
    options: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)
    completed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    stages_completed: Tuple[JobStage, ...] = ()
    result: Optional[Dict[str, Any]] = None
    errors: Optional[List[str]] = None
    warnings: List[str] = Field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status in (JobStatus.COMPLETE, JobStatus.FAILED)

    def started(self) -> "JobRecord":
        return self.model_copy(update={"status": JobStatus.RUNNING})

    def stage_finished(self, stage: JobStage, next_stage: JobStage) -> "JobRecord":
        """Record ``stage`` as done and point at ``next_stage`` (DONE completes nothing)."""
        return self.model_copy(update={
            "stages_completed": self.stages_completed + (stage,),
            "current_stage": next_stage,
        })

    def with_warnings(self, warnings: List[str]) -> "JobRecord":
        return self.model_copy(update={"warnings": list(self.warnings) + list(warnings)})

    def completed(self, result: Dict[str, Any]) -> "JobRecord":
        return self.model_copy(update={
            "status": JobStatus.COMPLETE,
            "current_stage": JobStage.DONE,
            "completed_at": utcnow(),
            "result": result,
            "errors": None,
        })

    def failed(self, message: str) -> "JobRecord":
        return self.model_copy(update={
            "status": JobStatus.FAILED,
            "failed_at": utcnow(),
            "errors": [message or "Unknown error"],
            "result": None,
        })

    def summary(self) -> Dict[str, Any]:
        """Short form used by job listings."""
        return {
            "job_id": self.id,
            "status": self.status.value,
            "stage": self.current_stage.value,
            "created_at": self.created_at,
            "result": {"name": self.result.get("name")} if self.result else None,
        }
