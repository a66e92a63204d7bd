"""Dataclasses for MCP server generation."""
from dataclasses import dataclass, field
from pathlib import Path
from typing import List


@dataclass
class GeneratedFile:
    """Represents a generated file."""
    path: str  # Relative path from the server directory
    content: str  # File contents


@dataclass
class EmitResult:
    """Where a server was written and which files it contains."""
    server_dir: Path
    files: List[str] = field(default_factory=list)
