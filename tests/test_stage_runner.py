"""Tests for StageRunner outcome normalization."""
import asyncio
import pytest
from mcp_factory.core.errors import ValidationFailed
from mcp_factory.core.stage_runner import StageRunner
from mcp_factory.core.workflow import Finding, JobStage


@pytest.mark.asyncio
async def test_success_wraps_output():
    async def call():
        return {"ok": True}

    outcome = await StageRunner().run(JobStage.GENERATE, None, call)

    assert outcome.success
    assert outcome.output == {"ok": True}
    assert outcome.error is None


@pytest.mark.asyncio
async def test_stage_error_keeps_findings():
    findings = [Finding("lint", "src/index.ts:1 - bad (rule)")]

    async def call():
        raise ValidationFailed("Validation failed: bad", findings=findings)

    outcome = await StageRunner().run(JobStage.VALIDATE, None, call)

    assert not outcome.success
    assert outcome.error == "Validation failed: bad"
    assert outcome.findings == findings


@pytest.mark.asyncio
async def test_unexpected_exception_becomes_failure():
    async def call():
        raise KeyError("spec")

    outcome = await StageRunner().run(JobStage.PACKAGE, None, call)

    assert not outcome.success
    assert "spec" in outcome.error
    assert outcome.findings == []


@pytest.mark.asyncio
async def test_timeout_becomes_failure():
    async def call():
        await asyncio.sleep(5)

    outcome = await StageRunner(timeout=0.01).run(JobStage.VALIDATE, None, call)

    assert not outcome.success
    assert "timed out" in outcome.error


@pytest.mark.asyncio
async def test_call_runs_exactly_once():
    calls = []

    async def call():
        calls.append(1)
        raise RuntimeError("flaky")

    await StageRunner().run(JobStage.REGISTER, None, call)

    assert calls == [1]
