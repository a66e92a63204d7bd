import asyncio
from pathlib import Path
from mcp_factory.agents.base import BaseAgent, PipelineContext
from mcp_factory.core.errors import ValidationFailed
from mcp_factory.core.workflow import JobStage
from mcp_factory.generators.mcp_gen.generator import generate_server
from mcp_factory.packaging.packager import Packager
from mcp_factory.validation.validator import Validator


class GenerateAgent(BaseAgent):
    stage = JobStage.GENERATE

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)

    async def run(self, ctx: PipelineContext):
        # <output_dir>/<name>/mcp-<name>
        out_root = self.output_dir / ctx.spec.name
        result = await asyncio.to_thread(generate_server, ctx.spec, out_root)
        ctx.server_dir = result.server_dir
        ctx.generated_files = result.files
        return result


class ValidateAgent(BaseAgent):
    stage = JobStage.VALIDATE

    def __init__(self, validator: Validator):
        self.validator = validator

    async def run(self, ctx: PipelineContext):
        result = await self.validator.validate(ctx.server_dir)
        ctx.validation = result
        ctx.warnings.extend(f.message for f in result.warnings)
        if not result.valid:
            raise ValidationFailed(
                f"Validation failed: {'; '.join(f.message for f in result.errors)}",
                findings=result.errors,
            )
        return result


class PackageAgent(BaseAgent):
    stage = JobStage.PACKAGE

    def __init__(self, packager: Packager):
        self.packager = packager

    async def run(self, ctx: PipelineContext):
        result = await self.packager.package(ctx.server_dir, docker=bool(ctx.options.get("docker")))
        ctx.package = result
        ctx.warnings.extend(result.warnings)
        return result
