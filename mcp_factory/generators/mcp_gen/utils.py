"""Utility functions for MCP server generation."""
import re
from typing import Any


def to_pascal_case(name: str) -> str:
    """Convert snake_case or kebab-case to PascalCase."""
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[_\-]+", name) if part)


def ts_string(value: Any) -> str:
    """Render ``value`` as a single-quoted TypeScript string literal."""
    text = "" if value is None else str(value)
    text = text.replace("\\", "\\\\").replace("'", "\\'")
    text = text.replace("\r", "").replace("\n", "\\n")
    return f"'{text}'"


def uri_template_to_regex(template: str) -> str:
    """Convert ``proto://{param}/path`` into a regex body with named groups."""
    escaped = re.escape(template)
    # re.escape turns braces into \{ \}
    escaped = re.sub(r"\\\{(\w+)\\\}", r"(?<\1>[^/]+)", escaped)
    return escaped.replace("/", "\\/")


def server_dir_name(spec_name: str) -> str:
    return f"mcp-{spec_name}"
