"""Command line front-end for the MCP factory.

Exit codes: 0 success, 1 user/validation error, 2 unexpected internal error.
"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from mcp_factory.core.config import Settings, settings as default_settings
from mcp_factory.core.engine import INTERNAL_ERROR_PREFIX
from mcp_factory.core.errors import FactoryError, InputError, StageError
from mcp_factory.core.logging import configure_logging
from mcp_factory.core.services import Services, build_services
from mcp_factory.core.workflow import JobStatus

EXIT_OK = 0
EXIT_USER_ERROR = 1
EXIT_INTERNAL_ERROR = 2

log = logging.getLogger(__name__)


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, default=str))


async def _generate(services: Services, args) -> int:
    options = {"docker": args.docker}
    if args.runtime:
        options["runtime"] = args.runtime
    description = args.description
    if args.spec_file:
        try:
            description = Path(args.spec_file).read_text(encoding="utf-8")
        except OSError as e:
            raise InputError(f"Cannot read spec file: {e}") from e
        options["input_format"] = "yaml"

    job_id = await services.engine.submit(description, options)
    print(f"Created job: {job_id}", file=sys.stderr)
    job = await services.engine.wait(job_id)

    if args.json:
        _print_json(job.model_dump(mode="json"))
    elif job.status is JobStatus.COMPLETE:
        print(f"Complete: {job.result['name']}")
        print(f"  Server dir: {job.result['server_dir']}")
        print(f"  Package:    {job.result['package_path']}")
        print(f"  Stages:     {', '.join(s.value for s in job.stages_completed)}")
        for warning in job.warnings:
            print(f"  warning: {warning}")
    else:
        print(f"Failed at {job.current_stage.value}: {'; '.join(job.errors or [])}")
        print(f"  Stages completed: {', '.join(s.value for s in job.stages_completed) or '-'}")

    if job.status is JobStatus.COMPLETE:
        return EXIT_OK
    if any(error.startswith(INTERNAL_ERROR_PREFIX) for error in job.errors or []):
        return EXIT_INTERNAL_ERROR
    return EXIT_USER_ERROR


async def _validate(services: Services, args) -> int:
    result = await services.validator.validate(Path(args.server_dir))
    if args.json:
        _print_json(result.to_dict())
    else:
        print("=" * 50)
        print(f"Validation Results: {args.server_dir}")
        print("=" * 50)
        print("Validation PASSED" if result.valid else "Validation FAILED")
        for finding in result.errors:
            print(f"  error   [{finding.category}] {finding.message}")
        if args.verbose or not result.valid:
            for finding in result.warnings:
                print(f"  warning [{finding.category}] {finding.message}")
        print(f"Errors: {len(result.errors)}  Warnings: {len(result.warnings)}")
    return EXIT_OK if result.valid else EXIT_USER_ERROR


async def _package(services: Services, args) -> int:
    result = await services.packager.package(Path(args.server_dir), docker=args.docker)
    _print_json(result.manifest)
    for warning in result.warnings:
        print(f"warning: {warning}", file=sys.stderr)
    return EXIT_OK


def _servers(services: Services, args) -> int:
    registry = services.registry
    if args.servers_cmd == "list":
        _print_json(registry.enumerate(name=args.filter))
        return EXIT_OK
    if args.servers_cmd == "get":
        server = registry.find(args.name, args.version)
        if not server:
            print(f"Server '{args.name}' not found", file=sys.stderr)
            return EXIT_USER_ERROR
        _print_json(server)
        return EXIT_OK
    if args.servers_cmd == "remove":
        removed = registry.remove(args.name)
        _print_json({"removed": removed, "name": args.name})
        return EXIT_OK if removed else EXIT_USER_ERROR
    return EXIT_USER_ERROR


def _migrate(cfg: Settings) -> int:
    from alembic import command
    from alembic.config import Config

    alembic_cfg = Config("alembic.ini")
    alembic_cfg.set_main_option("sqlalchemy.url", cfg.database_url)
    command.upgrade(alembic_cfg, "head")
    log.info("Database migrations completed successfully")
    return EXIT_OK


def _serve(cfg: Settings) -> int:
    import uvicorn

    uvicorn.run("mcp_factory.main:create_app", factory=True, host=cfg.api_host, port=cfg.api_port)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="mcp-factory", description="Generate, package and register MCP servers")
    p.add_argument("--debug", action="store_true", help="debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("serve", help="run the HTTP API")
    sub.add_parser("migrate", help="apply database migrations")

    gen = sub.add_parser("generate", help="run the full pipeline for a description")
    gen.add_argument("description", nargs="?", default="")
    gen.add_argument("--runtime")
    gen.add_argument("--spec-file", help="pre-structured YAML spec instead of a description")
    gen.add_argument("--docker", action="store_true")
    gen.add_argument("--json", action="store_true")

    val = sub.add_parser("validate", help="validate a generated server directory")
    val.add_argument("server_dir")
    val.add_argument("--json", action="store_true")
    val.add_argument("--verbose", action="store_true")

    pkg = sub.add_parser("package", help="package a generated server directory")
    pkg.add_argument("server_dir")
    pkg.add_argument("--docker", action="store_true")

    servers = sub.add_parser("servers", help="query the server registry")
    servers_sub = servers.add_subparsers(dest="servers_cmd", required=True)
    lst = servers_sub.add_parser("list")
    lst.add_argument("filter", nargs="?")
    get = servers_sub.add_parser("get")
    get.add_argument("name")
    get.add_argument("version", nargs="?")
    rm = servers_sub.add_parser("remove")
    rm.add_argument("name")

    return p


def run(argv: Optional[Sequence[str]] = None, services: Optional[Services] = None) -> int:
    args = build_parser().parse_args(argv)
    if services is None:
        # embedding callers own their logging setup
        configure_logging(logging.DEBUG if args.debug else logging.WARNING, stream=sys.stderr)
    cfg = services.settings if services else default_settings

    try:
        if args.cmd == "serve":
            return _serve(cfg)
        if args.cmd == "migrate":
            return _migrate(cfg)

        services = services or build_services(cfg)
        services.init()
        if args.cmd == "generate":
            return asyncio.run(_generate(services, args))
        if args.cmd == "validate":
            return asyncio.run(_validate(services, args))
        if args.cmd == "package":
            return asyncio.run(_package(services, args))
        if args.cmd == "servers":
            return _servers(services, args)
    except (InputError, StageError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USER_ERROR
    except FactoryError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INTERNAL_ERROR
    except Exception as e:
        log.exception("Unexpected error")
        print(f"{INTERNAL_ERROR_PREFIX}{e}", file=sys.stderr)
        return EXIT_INTERNAL_ERROR
    return EXIT_USER_ERROR


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
