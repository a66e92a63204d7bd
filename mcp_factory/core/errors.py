"""Exception hierarchy shared by the pipeline and its collaborators."""
from typing import Iterable, Optional

from mcp_factory.core.workflow import Finding


class FactoryError(Exception):
    """Base class for all errors raised by mcp_factory."""


class InputError(FactoryError):
    """A submission was rejected before any job was created."""


class StageError(FactoryError):
    """A collaborator failed while a pipeline stage was running.

    ``findings`` carries categorized issues (validation, compliance) so the
    engine can decide whether the failure is fatal without parsing messages.
    """

    def __init__(self, message: str, findings: Optional[Iterable[Finding]] = None):
        super().__init__(message)
        self.findings = list(findings or [])


class InterpretError(StageError):
    pass


class EmitError(StageError):
    pass


class ToolInvocationError(StageError):
    def __init__(
        self,
        message: str,
        command: str = "",
        stdout: str = "",
        stderr: str = "",
        returncode: Optional[int] = None,
        timed_out: bool = False,
    ):
        super().__init__(message)
        self.command = command
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode
        self.timed_out = timed_out


class ValidationFailed(StageError):
    pass


class PackagingError(StageError):
    pass


class RegistryError(StageError):
    pass


class JobExistsError(FactoryError):
    pass


class JobNotFoundError(FactoryError):
    pass
