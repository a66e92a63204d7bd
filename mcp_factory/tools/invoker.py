"""Bounded invocation of external build and lint tools."""
from __future__ import annotations

import asyncio
import logging
import shlex
from asyncio.subprocess import PIPE
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from mcp_factory.core.errors import ToolInvocationError

log = logging.getLogger(__name__)


def _decode(data: Optional[bytes]) -> str:
    return (data or b"").decode("utf-8", errors="replace").strip()


@dataclass(frozen=True)
class ToolOutput:
    stdout: str
    stderr: str
    returncode: int


class ToolInvoker:
    """Runs a command in a working directory with a wall-clock timeout.

    Non-zero exit codes, missing executables and timeouts all raise
    ``ToolInvocationError`` carrying whatever output was captured.
    """

    def __init__(self, default_timeout: float = 120.0):
        self.default_timeout = default_timeout

    async def invoke(
        self,
        args: Sequence[str],
        cwd: Path,
        timeout: Optional[float] = None,
        check: bool = True,
    ) -> ToolOutput:
        command = shlex.join(args)
        timeout = timeout or self.default_timeout
        log.debug("Running %s in %s", command, cwd)

        try:
            proc = await asyncio.create_subprocess_exec(*args, cwd=str(cwd), stdout=PIPE, stderr=PIPE)
        except (FileNotFoundError, PermissionError) as e:
            raise ToolInvocationError(f"Command failed: {command}\n{e}", command=command) from e

        try:
            out, err = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError as e:
            proc.kill()
            await proc.wait()
            raise ToolInvocationError(
                f"Command timed out after {timeout:g}s: {command}",
                command=command,
                timed_out=True,
            ) from e

        result = ToolOutput(stdout=_decode(out), stderr=_decode(err), returncode=proc.returncode)
        if check and result.returncode != 0:
            raise ToolInvocationError(
                f"Command failed: {command}\n{result.stderr or result.stdout}",
                command=command,
                stdout=result.stdout,
                stderr=result.stderr,
                returncode=result.returncode,
            )
        return result
