import logging
from pydantic import ValidationError
from mcp_factory.agents.base import BaseAgent, PipelineContext
from mcp_factory.core.errors import InterpretError
from mcp_factory.core.workflow import JobStage
from mcp_factory.interpreter.parser import SpecInterpreter
from mcp_factory.schemas.spec import ServerSpec, validate_spec

log = logging.getLogger(__name__)


class InterpretAgent(BaseAgent):
    stage = JobStage.INTERPRET

    def __init__(self, interpreter: SpecInterpreter):
        self.interpreter = interpreter

    async def run(self, ctx: PipelineContext):
        runtime = ctx.options.get("runtime")
        if ctx.options.get("input_format") == "yaml":
            raw = self.interpreter.parse_yaml(ctx.description, runtime)
        else:
            raw = await self.interpreter.interpret(ctx.description, runtime, validate=False)

        if not raw or not raw.get("name"):
            raise InterpretError("Parser failed to generate valid spec")
        errors = validate_spec(raw)
        if errors:
            raise InterpretError(f"Parser failed to generate valid spec: {', '.join(errors)}")
        try:
            ctx.spec = ServerSpec.model_validate(raw)
        except ValidationError as e:
            raise InterpretError(f"Parser failed to generate valid spec: {e}") from e

        log.info("Spec %s has %d tools", ctx.spec.name, len(ctx.spec.tools),
                 extra={"job_id": ctx.job_id, "stage": str(self.stage)})
        return ctx.spec
