from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple


class JobStage(str, Enum):
    INTERPRET = "interpret"
    GENERATE = "generate"
    VALIDATE = "validate"
    PACKAGE = "package"
    REGISTER = "register"
    DONE = "done"

    def __str__(self) -> str:
        return self.value


class JobStatus(str, Enum):
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


STAGE_ORDER: Tuple[JobStage, ...] = (
    JobStage.INTERPRET,
    JobStage.GENERATE,
    JobStage.VALIDATE,
    JobStage.PACKAGE,
    JobStage.REGISTER,
)

TERMINAL_STATUSES = frozenset({JobStatus.COMPLETE, JobStatus.FAILED})


def next_stage(stage: JobStage) -> JobStage:
    """Stage that follows ``stage`` in the pipeline, or DONE after the last one."""
    idx = STAGE_ORDER.index(stage)
    if idx + 1 < len(STAGE_ORDER):
        return STAGE_ORDER[idx + 1]
    return JobStage.DONE


def stage_index(name: str) -> int:
    """Position of a stage name in the canonical order; DONE sorts last."""
    stage = JobStage(name)
    if stage is JobStage.DONE:
        return len(STAGE_ORDER)
    return STAGE_ORDER.index(stage)


@dataclass(frozen=True)
class Finding:
    """One categorized issue reported by validation or compliance checks."""
    category: str
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class StageOutcome:
    stage: JobStage
    success: bool
    output: Any = None
    error: Optional[str] = None
    findings: List[Finding] = field(default_factory=list)
