import asyncio
from mcp_factory.agents.base import BaseAgent, PipelineContext
from mcp_factory.core.workflow import JobStage
from mcp_factory.registry.registry import ServerRegistry


class RegisterAgent(BaseAgent):
    stage = JobStage.REGISTER

    def __init__(self, registry: ServerRegistry):
        self.registry = registry

    async def run(self, ctx: PipelineContext):
        package = ctx.package
        manifest = {
            "name": ctx.spec.name,
            "version": ctx.spec.version,
            "description": ctx.spec.description,
            "spec": ctx.spec.model_dump(),
            "package_path": (package.package_path if package else None) or str(ctx.server_dir),
            "docker_image": package.image_ref if package else None,
            "claude_config": package.manifest.get("claude_config", {}) if package else {},
        }
        ctx.registration = await asyncio.to_thread(self.registry.register_or_update, manifest)
        return ctx.registration
