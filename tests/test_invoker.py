"""Tests for ToolInvoker using the running interpreter as the external tool."""
import sys
import tempfile
from pathlib import Path
import pytest
from mcp_factory.core.errors import ToolInvocationError
from mcp_factory.tools.invoker import ToolInvoker


@pytest.mark.asyncio
async def test_captures_output():
    with tempfile.TemporaryDirectory() as temp_dir:
        output = await ToolInvoker().invoke(
            [sys.executable, "-c", "import os; print(os.getcwd())"], cwd=Path(temp_dir)
        )

    assert output.returncode == 0
    assert Path(output.stdout).resolve() == Path(temp_dir).resolve()


@pytest.mark.asyncio
async def test_nonzero_exit_raises_with_output():
    script = "import sys; sys.stderr.write('bad things'); sys.exit(3)"
    with tempfile.TemporaryDirectory() as temp_dir:
        with pytest.raises(ToolInvocationError) as exc_info:
            await ToolInvoker().invoke([sys.executable, "-c", script], cwd=Path(temp_dir))

    assert exc_info.value.returncode == 3
    assert exc_info.value.stderr == "bad things"
    assert not exc_info.value.timed_out


@pytest.mark.asyncio
async def test_nonzero_exit_returned_when_unchecked():
    with tempfile.TemporaryDirectory() as temp_dir:
        output = await ToolInvoker().invoke(
            [sys.executable, "-c", "print('out'); raise SystemExit(2)"], cwd=Path(temp_dir), check=False
        )

    assert output.returncode == 2
    assert output.stdout == "out"


@pytest.mark.asyncio
async def test_timeout_kills_process():
    with tempfile.TemporaryDirectory() as temp_dir:
        with pytest.raises(ToolInvocationError) as exc_info:
            await ToolInvoker().invoke(
                [sys.executable, "-c", "import time; time.sleep(30)"], cwd=Path(temp_dir), timeout=0.5
            )

    assert exc_info.value.timed_out
    assert "timed out" in str(exc_info.value)


@pytest.mark.asyncio
async def test_missing_executable():
    with tempfile.TemporaryDirectory() as temp_dir:
        with pytest.raises(ToolInvocationError, match="Command failed"):
            await ToolInvoker().invoke(["definitely-not-a-real-tool-xyz"], cwd=Path(temp_dir))
