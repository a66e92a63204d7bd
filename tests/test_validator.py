"""Tests for generated-server validation with a mocked tool invoker."""
import json
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock
import pytest
from mcp_factory.agents.base import PipelineContext
from mcp_factory.agents.impl_build import ValidateAgent
from mcp_factory.core.errors import ToolInvocationError, ValidationFailed
from mcp_factory.generators.mcp_gen.generator import generate_server
from mcp_factory.schemas.spec import ServerSpec
from mcp_factory.tools.invoker import ToolOutput
from mcp_factory.validation.validator import Validator

SPEC = ServerSpec.model_validate({
    "name": "weather",
    "description": "Weather lookups",
    "tools": [
        {"name": "get_weather", "description": "Current weather"},
        {"name": "get_forecast", "description": "Forecast"},
    ],
})


def _invoker(output=None, error=None):
    invoker = AsyncMock()
    if error is not None:
        invoker.invoke.side_effect = error
    else:
        invoker.invoke.return_value = output or ToolOutput(stdout="", stderr="", returncode=0)
    return invoker


def _with_tsc(server_dir: Path) -> None:
    bin_dir = server_dir / "node_modules" / ".bin"
    bin_dir.mkdir(parents=True)
    (bin_dir / "tsc").write_text("#!/bin/sh\n")


def _categories(findings):
    return [f.category for f in findings]


@pytest.mark.asyncio
async def test_missing_directory():
    result = await Validator(_invoker()).validate(Path("/nonexistent/mcp-weather"))

    assert not result.valid
    assert _categories(result.errors) == ["filesystem"]


@pytest.mark.asyncio
async def test_generated_server_without_node_modules_passes_with_warning():
    with tempfile.TemporaryDirectory() as temp_dir:
        server_dir = generate_server(SPEC, Path(temp_dir)).server_dir
        invoker = _invoker()

        result = await Validator(invoker).validate(server_dir)

    assert result.valid, result.to_dict()
    assert "toolchain" in _categories(result.warnings)
    invoker.invoke.assert_not_called()


@pytest.mark.asyncio
async def test_typescript_errors_are_parsed():
    tsc_output = (
        "src/index.ts(12,5): error TS2322: Type 'string' is not assignable to type 'number'.\n"
        "src/tools/get_weather.ts(3,1): error TS2304: Cannot find name 'foo'.\n"
    )
    with tempfile.TemporaryDirectory() as temp_dir:
        server_dir = generate_server(SPEC, Path(temp_dir)).server_dir
        _with_tsc(server_dir)
        invoker = _invoker(ToolOutput(stdout=tsc_output, stderr="", returncode=2))

        result = await Validator(invoker).validate(server_dir)

    assert not result.valid
    messages = [f.message for f in result.errors]
    assert "src/index.ts:12:5 - Type 'string' is not assignable to type 'number'." in messages
    assert "src/tools/get_weather.ts:3:1 - Cannot find name 'foo'." in messages
    assert set(_categories(result.errors)) == {"typescript"}


@pytest.mark.asyncio
async def test_tsc_timeout_is_a_typescript_error():
    with tempfile.TemporaryDirectory() as temp_dir:
        server_dir = generate_server(SPEC, Path(temp_dir)).server_dir
        _with_tsc(server_dir)
        invoker = _invoker(error=ToolInvocationError("Command timed out after 60s: tsc", timed_out=True))

        result = await Validator(invoker).validate(server_dir)

    assert _categories(result.errors) == ["typescript"]
    assert "timed out" in result.errors[0].message


@pytest.mark.asyncio
async def test_lint_severity_splits_errors_and_warnings():
    with tempfile.TemporaryDirectory() as temp_dir:
        server_dir = generate_server(SPEC, Path(temp_dir)).server_dir
        (server_dir / ".eslintrc.json").write_text("{}")
        eslint = [{
            "filePath": str(server_dir / "src" / "index.ts"),
            "messages": [
                {"line": 4, "message": "'x' is unused", "ruleId": "no-unused-vars", "severity": 2},
                {"line": 9, "message": "Prefer const", "ruleId": "prefer-const", "severity": 1},
            ],
        }]
        invoker = _invoker(ToolOutput(stdout=json.dumps(eslint), stderr="", returncode=1))

        result = await Validator(invoker).validate(server_dir)

    assert [f.message for f in result.errors] == ["src/index.ts:4 - 'x' is unused (no-unused-vars)"]
    assert "src/index.ts:9 - Prefer const (prefer-const)" in [f.message for f in result.warnings]
    assert _categories(result.errors) == ["lint"]


@pytest.mark.asyncio
async def test_protocol_violation_is_an_error():
    with tempfile.TemporaryDirectory() as temp_dir:
        server_dir = generate_server(SPEC, Path(temp_dir)).server_dir
        index = server_dir / "src" / "index.ts"
        index.write_text(index.read_text().replace("case 'get_forecast':", "case 'old_forecast':"))

        result = await Validator(_invoker()).validate(server_dir)

    messages = [f.message for f in result.errors]
    assert "Missing tool handler for 'get_forecast'" in messages
    assert "Handler for undeclared tool 'old_forecast'" in messages


@pytest.mark.asyncio
async def test_dependency_checks():
    with tempfile.TemporaryDirectory() as temp_dir:
        server_dir = generate_server(SPEC, Path(temp_dir)).server_dir
        pkg_path = server_dir / "package.json"
        pkg = json.loads(pkg_path.read_text())
        del pkg["dependencies"]["zod"]
        del pkg["devDependencies"]["typescript"]
        pkg["engines"]["node"] = ">=16.0.0"
        pkg_path.write_text(json.dumps(pkg))

        result = await Validator(_invoker()).validate(server_dir)

    assert [f.message for f in result.errors] == ["Missing required dependency: zod"]
    warnings = [f.message for f in result.warnings]
    assert "typescript not in devDependencies" in warnings
    assert "Node version >=16.0.0 may be too old for MCP SDK" in warnings


@pytest.mark.asyncio
async def test_validate_agent_raises_with_findings():
    with tempfile.TemporaryDirectory() as temp_dir:
        server_dir = Path(temp_dir) / "empty"
        server_dir.mkdir()
        ctx = PipelineContext(job_id="job_1", description="x", server_dir=server_dir)

        with pytest.raises(ValidationFailed) as exc_info:
            await ValidateAgent(Validator(_invoker())).run(ctx)

    categories = {f.category for f in exc_info.value.findings}
    assert {"typescript", "filesystem", "dependency"} <= categories
    assert str(exc_info.value).startswith("Validation failed: ")
