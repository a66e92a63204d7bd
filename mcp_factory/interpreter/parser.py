"""Natural language -> structured MCP server spec."""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional, Protocol

import yaml

from mcp_factory.core.errors import InterpretError
from mcp_factory.schemas.spec import validate_spec

log = logging.getLogger(__name__)

EXTRACTION_PROMPT = """You are an MCP (Model Context Protocol) specification expert. Extract a structured specification from the user's description.

Output ONLY valid JSON matching this schema:
{
  "name": "kebab-case-name",
  "description": "One sentence description",
  "version": "1.0.0",
  "runtime": "typescript",
  "auth": {
    "type": "bearer|api_key|none",
    "env_var": "ENV_VAR_NAME"
  },
  "tools": [
    {
      "name": "snake_case_name",
      "description": "What this tool does",
      "parameters": [
        {
          "name": "param_name",
          "type": "string|number|boolean|array|object",
          "required": true,
          "description": "Parameter description",
          "enum": ["optional", "values"],
          "default": "optional_default"
        }
      ],
      "returns": "Description of return value"
    }
  ],
  "resources": [
    {
      "name": "resource_name",
      "uri_template": "protocol://{param}/path",
      "description": "What this resource provides",
      "mime_type": "application/json"
    }
  ]
}

Rules:
1. Infer auth type from API mentions (GitHub/Notion = bearer, etc.)
2. Generate sensible parameter types and names
3. Include common CRUD operations if implied
4. Resources are optional - only include if data retrieval is mentioned
5. Use snake_case for tool/resource names, kebab-case for package name"""

_FENCED_JSON_RE = re.compile(r"```json\s*([\s\S]*?)\s*```")
_FENCED_RE = re.compile(r"```\s*([\s\S]*?)\s*```")


class CompletionClient(Protocol):
    async def complete(self, prompt: str) -> str:
        ...


def extract_json(content: str) -> Dict[str, Any]:
    """Parse a JSON object out of an LLM reply, tolerating markdown fences."""
    match = _FENCED_JSON_RE.search(content) or _FENCED_RE.search(content)
    raw = match.group(1) if match else content
    try:
        data = json.loads(raw.strip())
    except json.JSONDecodeError as e:
        raise InterpretError(f"Failed to parse LLM response as JSON: {e}") from e
    if not isinstance(data, dict):
        raise InterpretError("Failed to parse LLM response as JSON: expected an object")
    return data


def apply_defaults(spec: Dict[str, Any], runtime: str) -> Dict[str, Any]:
    spec = dict(spec)
    spec["version"] = spec.get("version") or "1.0.0"
    spec["runtime"] = runtime
    spec["auth"] = spec.get("auth") or {"type": "none"}
    spec["resources"] = spec.get("resources") or []
    return spec


class SpecInterpreter:
    def __init__(self, client: Optional[CompletionClient], default_runtime: str = "typescript"):
        self.client = client
        self.default_runtime = default_runtime

    async def interpret(self, description: str, runtime: Optional[str] = None, validate: bool = True) -> Dict[str, Any]:
        if self.client is None:
            raise InterpretError("ANTHROPIC_API_KEY environment variable not set")
        runtime = runtime or self.default_runtime

        prompt = f"{EXTRACTION_PROMPT}\n\nUser Description:\n{description}\n\nPreferred runtime: {runtime}"
        content = await self.client.complete(prompt)
        spec = apply_defaults(extract_json(content), runtime)

        if validate:
            errors = validate_spec(spec)
            if errors:
                raise InterpretError(f"Spec validation failed: {', '.join(errors)}")

        tools = spec.get("tools")
        log.info("Interpreted spec %s with %d tools", spec.get("name"), len(tools) if isinstance(tools, list) else 0)
        return spec

    def parse_yaml(self, text: str, runtime: Optional[str] = None) -> Dict[str, Any]:
        """Accept a pre-structured YAML spec instead of free text."""
        try:
            spec = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise InterpretError(f"YAML spec could not be parsed: {e}") from e
        if not isinstance(spec, dict):
            raise InterpretError("YAML spec validation failed: document must be a mapping")
        spec = apply_defaults(spec, runtime or spec.get("runtime") or self.default_runtime)
        errors = validate_spec(spec)
        if errors:
            raise InterpretError(f"YAML spec validation failed: {', '.join(errors)}")
        return spec
