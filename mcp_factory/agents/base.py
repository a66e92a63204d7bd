from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
from mcp_factory.core.workflow import JobStage
from mcp_factory.schemas.spec import ServerSpec


@dataclass
class PipelineContext:
    """Per-job working state handed from one stage's agent to the next.

    Owned by the job's own task; never shared between jobs or stored.
    """
    job_id: str
    description: str
    options: Dict[str, Any] = field(default_factory=dict)
    spec: Optional[ServerSpec] = None
    server_dir: Optional[Path] = None
    generated_files: List[str] = field(default_factory=list)
    validation: Any = None
    package: Any = None
    registration: Any = None
    warnings: List[str] = field(default_factory=list)

    def drain_warnings(self) -> List[str]:
        pending, self.warnings = self.warnings, []
        return pending

    def result(self) -> Dict[str, Any]:
        return {
            "name": self.spec.name if self.spec else None,
            "description": self.spec.description if self.spec else "",
            "spec": self.spec.model_dump() if self.spec else None,
            "server_dir": str(self.server_dir) if self.server_dir else None,
            "files": list(self.generated_files),
            "package_path": getattr(self.package, "package_path", None),
            "docker_image": getattr(self.package, "image_ref", None),
            "manifest": self.registration.to_dict() if self.registration else None,
        }


class BaseAgent:
    stage: JobStage

    async def run(self, ctx: PipelineContext) -> Any:
        raise NotImplementedError
