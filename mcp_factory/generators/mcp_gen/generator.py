"""Orchestrator for MCP server code generation."""
import logging
from pathlib import Path
from mcp_factory.generators.mcp_gen.types import EmitResult, GeneratedFile
from mcp_factory.generators.mcp_gen.render import (
    render_package_json,
    render_tsconfig,
    render_server_index,
    render_schemas,
    render_client,
    render_readme,
    render_dockerfile,
    render_claude_config,
)
from mcp_factory.generators.mcp_gen.render_tool import render_tool, render_resource
from mcp_factory.generators.mcp_gen.utils import server_dir_name
from mcp_factory.generators.mcp_gen.writer import write_files
from mcp_factory.schemas.spec import ServerSpec

log = logging.getLogger(__name__)


def generate_server(spec: ServerSpec, out_root: Path) -> EmitResult:
    """
    Generate a TypeScript MCP server for ``spec``.

    Args:
        spec: Validated server specification
        out_root: Directory that will contain ``mcp-<name>/``

    Returns:
        EmitResult with the server directory and relative file paths
    """
    server_dir = Path(out_root) / server_dir_name(spec.name)

    # Generate base files
    files = [
        GeneratedFile(path="package.json", content=render_package_json(spec)),
        GeneratedFile(path="tsconfig.json", content=render_tsconfig()),
        GeneratedFile(path="src/index.ts", content=render_server_index(spec)),
        GeneratedFile(path="src/schemas.ts", content=render_schemas(spec)),
        GeneratedFile(path="src/client.ts", content=render_client(spec)),
        GeneratedFile(path="README.md", content=render_readme(spec)),
        GeneratedFile(path="Dockerfile", content=render_dockerfile(spec)),
        GeneratedFile(path="claude_desktop_config.json", content=render_claude_config(spec)),
    ]

    # Generate tool and resource files
    for tool in spec.tools:
        files.append(GeneratedFile(path=f"src/tools/{tool.name}.ts", content=render_tool(tool, spec)))
    for resource in spec.resources:
        files.append(GeneratedFile(
            path=f"src/resources/{resource.name}.ts",
            content=render_resource(resource, spec),
        ))

    # Write files to disk
    write_files(files, server_dir)
    log.info("Generated %d files in %s", len(files), server_dir)

    return EmitResult(server_dir=server_dir, files=[f.path for f in files])
