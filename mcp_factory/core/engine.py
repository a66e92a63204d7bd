from __future__ import annotations
import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional
from mcp_factory.agents.base import PipelineContext
from mcp_factory.agents.registry import AgentRegistry
from mcp_factory.core.errors import InputError, JobNotFoundError
from mcp_factory.core.logging import job_context
from mcp_factory.core.stage_runner import StageRunner
from mcp_factory.core.workflow import JobStage, StageOutcome, next_stage
from mcp_factory.jobs.models import JobRecord
from mcp_factory.jobs.store import JobStore

log = logging.getLogger(__name__)

INTERNAL_ERROR_PREFIX = "Internal error: "


class PipelineEngine:
    """Job state machine: queued -> running -> complete | failed.

    Each job runs in its own asyncio task; stages within a job are strictly
    sequential and every transition is written to the store as a new snapshot
    before the next stage starts.
    """

    def __init__(
        self,
        store: JobStore,
        agents: AgentRegistry,
        runner: Optional[StageRunner] = None,
        fatal_categories: Iterable[str] = (),
    ):
        self.store = store
        self.agents = agents
        self.runner = runner or StageRunner()
        self.fatal_categories = frozenset(fatal_categories)
        self._tasks: Dict[str, asyncio.Task] = {}

    async def submit(self, description: Any, options: Optional[Dict[str, Any]] = None) -> str:
        if not isinstance(description, str) or not description.strip():
            raise InputError("Missing or invalid description field")

        record = JobRecord(description=description, options=dict(options or {}))
        await self._store(self.store.create, record.id, record)
        log.info("Job queued", extra=job_context(record.id, record.current_stage))

        task = asyncio.create_task(self._run(record.id), name=f"pipeline-{record.id}")
        self._tasks[record.id] = task
        task.add_done_callback(lambda _t, job_id=record.id: self._tasks.pop(job_id, None))
        return record.id

    def get(self, job_id: str) -> Optional[JobRecord]:
        return self.store.get(job_id)

    def list(self, limit: int = 50) -> List[JobRecord]:
        return self.store.list(limit)

    async def wait(self, job_id: str) -> Optional[JobRecord]:
        """Block until the job's background task finishes, then return its record."""
        task = self._tasks.get(job_id)
        if task is not None:
            await asyncio.wait({task})
        return await self._store(self.store.get, job_id)

    async def shutdown(self) -> None:
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _run(self, job_id: str) -> None:
        try:
            record = await self._store(self.store.get, job_id)
            if record is None:
                raise JobNotFoundError(f"Job not found: {job_id}")
            ctx = PipelineContext(job_id=job_id, description=record.description, options=dict(record.options))
            await self._store(self.store.update, job_id, record.started())
            log.info("Starting workflow", extra=job_context(job_id, record.current_stage))

            while await self.advance(job_id, ctx):
                pass
        except asyncio.CancelledError:
            await self._fail(job_id, "Job cancelled before completion")
            raise
        except Exception as e:
            log.exception("Workflow failed", extra=job_context(job_id))
            await self._fail(job_id, f"{INTERNAL_ERROR_PREFIX}{e}")

    async def advance(self, job_id: str, ctx: PipelineContext) -> bool:
        """Run the job's current stage and persist the resulting snapshot.

        Returns True while there are more stages to run.
        """
        record = await self._store(self.store.get, job_id)
        if record is None:
            raise JobNotFoundError(f"Job not found: {job_id}")
        if record.is_terminal:
            return False

        stage = record.current_stage
        log_ctx = job_context(job_id, stage)
        log.info("Running stage", extra=log_ctx)

        agent = self.agents.get(stage)
        outcome = await self.runner.run(stage, record, lambda: agent.run(ctx))
        warnings = ctx.drain_warnings()

        if not outcome.success:
            if self.is_fatal(outcome):
                log.error("Stage failed: %s", outcome.error, extra=log_ctx)
                await self._store(self.store.update, job_id, record.with_warnings(warnings).failed(outcome.error))
                return False
            log.warning("Continuing despite %d non-fatal issues", len(outcome.findings), extra=log_ctx)
            warnings += [f.message for f in outcome.findings]

        following = next_stage(stage)
        updated = record.with_warnings(warnings).stage_finished(stage, following)
        if following is JobStage.DONE:
            updated = updated.completed(ctx.result())
            log.info("Workflow completed successfully", extra=job_context(job_id, following))
        await self._store(self.store.update, job_id, updated)
        return following is not JobStage.DONE

    def is_fatal(self, outcome: StageOutcome) -> bool:
        """Only validation failures made purely of non-fatal finding categories are tolerated."""
        if outcome.stage is not JobStage.VALIDATE or not outcome.findings:
            return True
        return any(f.category in self.fatal_categories for f in outcome.findings)

    async def _store(self, call, *args):
        if self.store.blocking:
            return await asyncio.to_thread(call, *args)
        return call(*args)

    async def _fail(self, job_id: str, message: str) -> None:
        try:
            record = await self._store(self.store.get, job_id)
            if record is None or record.is_terminal:
                return
            await self._store(self.store.update, job_id, record.failed(message))
        except Exception:
            log.exception("Could not record job failure", extra=job_context(job_id))
