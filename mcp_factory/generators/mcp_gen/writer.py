"""File writer for MCP server generation."""
from pathlib import Path
from typing import List
from mcp_factory.core.errors import EmitError
from mcp_factory.generators.mcp_gen.types import GeneratedFile


def write_files(files: List[GeneratedFile], out_dir: Path) -> None:
    """
    Write generated files to the output directory.

    Args:
        files: List of GeneratedFile objects to write
        out_dir: Base output directory path

    Raises:
        EmitError: if any file cannot be written
    """
    try:
        out_dir.mkdir(parents=True, exist_ok=True)

        for file in files:
            file_path = out_dir / file.path
            # Create parent directories if needed
            file_path.parent.mkdir(parents=True, exist_ok=True)
            # Write file content
            file_path.write_text(file.content, encoding="utf-8")
    except OSError as e:
        raise EmitError(f"Failed to write generated files to {out_dir}: {e}") from e
