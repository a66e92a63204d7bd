from __future__ import annotations
import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional
from mcp_factory.core.errors import StageError
from mcp_factory.core.logging import job_context
from mcp_factory.core.workflow import JobStage, StageOutcome

log = logging.getLogger(__name__)

StageCall = Callable[[], Awaitable[Any]]


class StageRunner:
    """Executes one collaborator call and normalizes its result.

    The runner never retries and never touches the job store; the engine
    decides what an outcome means for the job.
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    async def run(self, stage: JobStage, job, call: StageCall) -> StageOutcome:
        ctx = job_context(getattr(job, "id", "-"), stage)
        try:
            if self.timeout:
                output = await asyncio.wait_for(call(), timeout=self.timeout)
            else:
                output = await call()
        except asyncio.TimeoutError:
            log.warning("Stage timed out after %ss", self.timeout, extra=ctx)
            return StageOutcome(stage, False, error=f"Stage {stage} timed out after {self.timeout:g}s")
        except StageError as e:
            log.warning("Stage failed: %s", e, extra=ctx)
            return StageOutcome(stage, False, error=str(e), findings=list(e.findings))
        except Exception as e:
            log.warning("Stage raised %s: %s", type(e).__name__, e, exc_info=True, extra=ctx)
            return StageOutcome(stage, False, error=str(e) or type(e).__name__)
        return StageOutcome(stage, True, output=output)
