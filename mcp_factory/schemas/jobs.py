from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List
from datetime import datetime
from mcp_factory.jobs.models import JobRecord


class GenerateRequest(BaseModel):
    # Left optional so a missing description is reported as a 400, not a 422
    description: Optional[Any] = Field(None, examples=["weather lookup tool with forecast by city"])
    runtime: Optional[str] = None
    docker: bool = False


class GenerateResponse(BaseModel):
    job_id: str
    status: str


class JobResponse(BaseModel):
    job_id: str
    status: str
    stage: str
    created_at: datetime
    completed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    stages_completed: List[str] = []
    result: Optional[Dict[str, Any]] = None
    errors: Optional[List[str]] = None
    warnings: List[str] = []

    @classmethod
    def from_record(cls, job: JobRecord) -> "JobResponse":
        return cls(
            job_id=job.id,
            status=job.status.value,
            stage=job.current_stage.value,
            created_at=job.created_at,
            completed_at=job.completed_at,
            failed_at=job.failed_at,
            stages_completed=[s.value for s in job.stages_completed],
            result=job.result,
            errors=job.errors,
            warnings=job.warnings,
        )


class JobSummary(BaseModel):
    job_id: str
    status: str
    stage: str
    created_at: datetime
    result: Optional[Dict[str, Any]] = None


class JobListResponse(BaseModel):
    jobs: List[JobSummary]
    count: int


class ValidateRequest(BaseModel):
    server_dir: Optional[str] = None
    spec: Optional[Dict[str, Any]] = None
