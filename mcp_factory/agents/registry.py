from dataclasses import dataclass
from pathlib import Path
from typing import Dict
from mcp_factory.core.workflow import JobStage
from mcp_factory.agents.base import BaseAgent
from mcp_factory.agents.impl_interpret import InterpretAgent
from mcp_factory.agents.impl_build import GenerateAgent, ValidateAgent, PackageAgent
from mcp_factory.agents.impl_register import RegisterAgent
from mcp_factory.interpreter.parser import SpecInterpreter
from mcp_factory.packaging.packager import Packager
from mcp_factory.registry.registry import ServerRegistry
from mcp_factory.validation.validator import Validator


@dataclass
class AgentRegistry:
    mapping: Dict[JobStage, BaseAgent]

    def get(self, stage: JobStage) -> BaseAgent:
        return self.mapping[stage]

    @staticmethod
    def default(
        interpreter: SpecInterpreter,
        validator: Validator,
        packager: Packager,
        registry: ServerRegistry,
        output_dir: Path,
    ) -> "AgentRegistry":
        return AgentRegistry(mapping={
            JobStage.INTERPRET: InterpretAgent(interpreter),
            JobStage.GENERATE: GenerateAgent(output_dir),
            JobStage.VALIDATE: ValidateAgent(validator),
            JobStage.PACKAGE: PackageAgent(packager),
            JobStage.REGISTER: RegisterAgent(registry),
        })
