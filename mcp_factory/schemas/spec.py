"""Structured MCP server specification produced by the interpreter."""
import re
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

SERVER_NAME_RE = re.compile(r"^[a-z][a-z0-9-]*$")
TOOL_NAME_RE = re.compile(r"^[a-z][a-z0-9_]*$")


class ParameterSpec(BaseModel):
    name: str
    type: Literal["string", "number", "boolean", "array", "object"] = "string"
    required: bool = False
    description: Optional[str] = None
    enum: Optional[List[str]] = None
    default: Any = None


class ToolSpec(BaseModel):
    name: str
    description: str
    parameters: List[ParameterSpec] = Field(default_factory=list)
    returns: Optional[str] = None


class ResourceSpec(BaseModel):
    name: str
    uri_template: str
    description: Optional[str] = None
    mime_type: str = "application/json"


class AuthSpec(BaseModel):
    type: Literal["none", "bearer", "api_key", "oauth2"] = "none"
    env_var: Optional[str] = None
    header_name: Optional[str] = None


class ServerSpec(BaseModel):
    name: str = Field(..., pattern=SERVER_NAME_RE.pattern)
    description: str = ""
    version: str = "1.0.0"
    runtime: str = "typescript"
    auth: AuthSpec = Field(default_factory=AuthSpec)
    tools: List[ToolSpec] = Field(..., min_length=1)
    resources: List[ResourceSpec] = Field(default_factory=list)


def validate_spec(spec: Dict[str, Any]) -> List[str]:
    """Return human-readable problems with a raw spec dict (empty when valid)."""
    errors = []

    if not spec.get("name"):
        errors.append("Missing required field: name")
    if not spec.get("description"):
        errors.append("Missing required field: description")
    tools = spec.get("tools") or []
    if not isinstance(tools, list):
        errors.append("tools must be a list")
        tools = []
    elif not tools:
        errors.append("At least one tool is required")

    name = spec.get("name")
    if name and not (isinstance(name, str) and SERVER_NAME_RE.match(name)):
        errors.append("Name must be kebab-case starting with letter")

    for i, tool in enumerate(tools):
        if not isinstance(tool, dict):
            errors.append(f"Tool {i}: must be an object")
            continue
        if not tool.get("name"):
            errors.append(f"Tool {i}: missing name")
        if not tool.get("description"):
            errors.append(f"Tool {i}: missing description")
        if tool.get("name") and not TOOL_NAME_RE.match(str(tool["name"])):
            errors.append(f"Tool {tool['name']}: must be snake_case")

    auth = spec.get("auth") or {}
    if not isinstance(auth, dict):
        errors.append("auth must be an object")
    elif auth.get("type", "none") != "none" and not auth.get("env_var"):
        errors.append('Auth requires env_var when type is not "none"')

    return errors
