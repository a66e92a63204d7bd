"""Wiring of the engine and its collaborators from Settings."""
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from mcp_factory.agents.registry import AgentRegistry
from mcp_factory.core.config import Settings
from mcp_factory.core.engine import PipelineEngine
from mcp_factory.core.stage_runner import StageRunner
from mcp_factory.db.session import build_engine, build_session_factory
from mcp_factory.interpreter.llm import AnthropicClient
from mcp_factory.interpreter.parser import SpecInterpreter
from mcp_factory.jobs.store import InMemoryJobStore, JobStore, SqlJobStore
from mcp_factory.packaging.packager import Packager
from mcp_factory.registry.registry import ServerRegistry
from mcp_factory.tools.invoker import ToolInvoker
from mcp_factory.validation.validator import Validator


@dataclass
class Services:
    settings: Settings
    registry: ServerRegistry
    store: JobStore
    validator: Validator
    packager: Packager
    interpreter: SpecInterpreter
    engine: PipelineEngine

    def init(self) -> None:
        """One-time startup: schema creation and output directories."""
        self.registry.init()
        for directory in (self.settings.output_dir, self.settings.packages_dir):
            Path(directory).mkdir(parents=True, exist_ok=True)


def build_services(settings: Settings) -> Services:
    db_engine = build_engine(settings.database_url)
    session_factory = build_session_factory(db_engine)
    registry = ServerRegistry(db_engine, session_factory)

    if settings.job_store == "database":
        store: JobStore = SqlJobStore(session_factory)
    else:
        store = InMemoryJobStore(max_records=settings.max_jobs)

    invoker = ToolInvoker()
    validator = Validator(
        invoker,
        tsc_timeout=settings.tsc_timeout,
        lint_timeout=settings.lint_timeout,
        install_timeout=settings.install_timeout,
        install_dependencies=settings.install_dependencies,
    )
    packager = Packager(
        invoker,
        packages_dir=Path(settings.packages_dir),
        enable_docker=settings.enable_docker,
        build_timeout=settings.build_timeout,
        pack_timeout=settings.pack_timeout,
        docker_timeout=settings.docker_timeout,
    )
    llm = None
    if settings.anthropic_api_key:
        llm = AnthropicClient(
            api_key=settings.anthropic_api_key,
            model=settings.anthropic_model,
            api_base=settings.anthropic_api_base,
            max_tokens=settings.anthropic_max_tokens,
            timeout=settings.llm_timeout,
        )
    interpreter = SpecInterpreter(llm, default_runtime=settings.default_runtime)

    agents = AgentRegistry.default(
        interpreter=interpreter,
        validator=validator,
        packager=packager,
        registry=registry,
        output_dir=Path(settings.output_dir),
    )
    engine = PipelineEngine(
        store=store,
        agents=agents,
        runner=StageRunner(timeout=settings.stage_timeout),
        fatal_categories=settings.fatal_issue_categories,
    )
    return Services(
        settings=settings,
        registry=registry,
        store=store,
        validator=validator,
        packager=packager,
        interpreter=interpreter,
        engine=engine,
    )
