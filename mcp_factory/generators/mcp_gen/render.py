"""Simple string templates for MCP server generation (Jinja2-free)."""
import json
from mcp_factory.generators.mcp_gen.utils import server_dir_name, to_pascal_case, ts_string
from mcp_factory.schemas.spec import ServerSpec, ToolSpec


def render_package_json(spec: ServerSpec) -> str:
    """Generate package.json content."""
    return json.dumps({
        "name": server_dir_name(spec.name),
        "version": spec.version,
        "description": spec.description,
        "main": "dist/index.js",
        "types": "dist/index.d.ts",
        "scripts": {
            "build": "tsc",
            "start": "node dist/index.js",
            "dev": "ts-node src/index.ts",
            "test": "jest",
        },
        "dependencies": {
            "@modelcontextprotocol/sdk": "^1.0.0",
            "zod": "^3.22.0",
        },
        "devDependencies": {
            "@types/node": "^20.0.0",
            "typescript": "^5.3.0",
            "ts-node": "^10.9.0",
            "jest": "^29.0.0",
            "@types/jest": "^29.0.0",
        },
        "engines": {"node": ">=18.0.0"},
    }, indent=2) + "\n"


def render_tsconfig() -> str:
    """Generate tsconfig.json content."""
    return json.dumps({
        "compilerOptions": {
            "target": "ES2022",
            "module": "commonjs",
            "lib": ["ES2022"],
            "outDir": "./dist",
            "rootDir": "./src",
            "strict": True,
            "esModuleInterop": True,
            "skipLibCheck": True,
            "forceConsistentCasingInFileNames": True,
            "declaration": True,
        },
        "include": ["src/**/*"],
        "exclude": ["node_modules", "dist"],
    }, indent=2) + "\n"


def _render_tool_declaration(tool: ToolSpec) -> str:
    props = []
    for p in tool.parameters:
        prop = f"          {p.name}: {{ type: {ts_string(p.type)}"
        if p.description:
            prop += f", description: {ts_string(p.description)}"
        prop += " }"
        props.append(prop)
    required = ", ".join(ts_string(p.name) for p in tool.parameters if p.required)

    lines = [
        "    {",
        f"      name: {ts_string(tool.name)},",
        f"      description: {ts_string(tool.description)},",
        "      inputSchema: {",
        "        type: 'object',",
        "        properties: {",
    ]
    if props:
        lines.append(",\n".join(props))
    lines += [
        "        },",
        f"        required: [{required}]",
        "      }",
        "    }",
    ]
    return "\n".join(lines)


def render_server_index(spec: ServerSpec) -> str:
    """Generate src/index.ts: tool listing, call dispatch and stdio transport."""
    tool_imports = [f"import {{ {t.name}Tool }} from './tools/{t.name}';" for t in spec.tools]
    resource_imports = [f"import {{ {r.name}Resource }} from './resources/{r.name}';" for r in spec.resources]
    declarations = ",\n".join(_render_tool_declaration(t) for t in spec.tools)
    cases = "\n".join(
        f"    case {ts_string(t.name)}:\n      return {t.name}Tool(client, args);" for t in spec.tools
    )

    lines = [
        "import { Server } from '@modelcontextprotocol/sdk/server/index.js';",
        "import { StdioServerTransport } from '@modelcontextprotocol/sdk/server/stdio.js';",
        "import { CallToolRequestSchema, ListToolsRequestSchema } from '@modelcontextprotocol/sdk/types.js';",
        "import { ApiClient } from './client';",
        *tool_imports,
        *resource_imports,
        "",
        "const server = new Server(",
        f"  {{ name: {ts_string(server_dir_name(spec.name))}, version: {ts_string(spec.version)} }},",
        "  { capabilities: { tools: {}, resources: {} } }",
        ");",
        "",
        "// Initialize API client",
        "const client = new ApiClient();",
        "",
        "// List available tools",
        "server.setRequestHandler(ListToolsRequestSchema, async () => ({",
        "  tools: [",
        declarations,
        "  ]",
        "}));",
        "",
        "// Handle tool calls",
        "server.setRequestHandler(CallToolRequestSchema, async (request) => {",
        "  const { name, arguments: args } = request.params;",
        "",
        "  switch (name) {",
        cases,
        "    default:",
        "      throw new Error(`Unknown tool: ${name}`);",
        "  }",
        "});",
        "",
        "// Start server",
        "async function main() {",
        "  const transport = new StdioServerTransport();",
        "  await server.connect(transport);",
        "  console.error('MCP server running on stdio');",
        "}",
        "",
        "main().catch(console.error);",
        "",
    ]
    return "\n".join(lines)


def _zod_type(param) -> str:
    zod = {
        "number": "z.number()",
        "boolean": "z.boolean()",
        "array": "z.array(z.unknown())",
        "object": "z.record(z.unknown())",
    }.get(param.type, "z.string()")
    if param.enum:
        zod = f"z.enum([{', '.join(ts_string(e) for e in param.enum)}])"
    if not param.required:
        zod += ".optional()"
    if param.default is not None:
        zod += f".default({json.dumps(param.default)})"
    return zod


def render_schemas(spec: ServerSpec) -> str:
    """Generate src/schemas.ts with one zod schema per tool."""
    blocks = []
    for tool in spec.tools:
        props = ",\n".join(f"  {p.name}: {_zod_type(p)}" for p in tool.parameters)
        blocks.append(
            f"export const {tool.name}Schema = z.object({{\n{props}\n}});\n\n"
            f"export type {to_pascal_case(tool.name)}Input = z.infer<typeof {tool.name}Schema>;"
        )
    return "import { z } from 'zod';\n\n" + "\n\n".join(blocks) + "\n"


def render_client(spec: ServerSpec) -> str:
    """Generate src/client.ts with auth headers wired from the environment."""
    auth_setup = ""
    if spec.auth.type == "bearer" and spec.auth.env_var:
        auth_setup = f"this.headers['Authorization'] = `Bearer ${{process.env.{spec.auth.env_var}}}`;"
    elif spec.auth.type == "api_key" and spec.auth.env_var:
        header = spec.auth.header_name or "X-API-Key"
        auth_setup = f"this.headers[{ts_string(header)}] = process.env.{spec.auth.env_var} || '';"

    methods = []
    for verb, has_body in (("get", False), ("post", True), ("put", True), ("delete", False)):
        signature = "path: string, body: unknown" if has_body else "path: string"
        options = ["method: '%s'" % verb.upper(), "headers: this.headers"]
        if has_body:
            options.append("body: JSON.stringify(body)")
        methods.append(
            f"  async {verb}<T>({signature}): Promise<T> {{\n"
            f"    const res = await fetch(`${{this.baseUrl}}${{path}}`, {{ {', '.join(options)} }});\n"
            "    if (!res.ok) throw new Error(`API error: ${res.status}`);\n"
            "    return res.json() as Promise<T>;\n"
            "  }"
        )

    return (
        "export class ApiClient {\n"
        "  private baseUrl: string;\n"
        "  private headers: Record<string, string>;\n"
        "\n"
        "  constructor(baseUrl?: string) {\n"
        "    this.baseUrl = baseUrl || process.env.API_BASE_URL || '';\n"
        "    this.headers = { 'Content-Type': 'application/json' };\n"
        f"    {auth_setup}\n"
        "  }\n"
        "\n"
        + "\n\n".join(methods)
        + "\n}\n"
    )


def render_readme(spec: ServerSpec) -> str:
    """Generate README.md content."""
    env_var = spec.auth.env_var
    config = {
        "mcpServers": {
            spec.name: {
                "command": "node",
                "args": [f"/path/to/{server_dir_name(spec.name)}/dist/index.js"],
            }
        }
    }
    if env_var:
        config["mcpServers"][spec.name]["env"] = {env_var: "your-token-here"}

    tools = "\n".join(f"### {t.name}\n{t.description}\n" for t in spec.tools)
    resources = "\n".join(
        f"### {r.name}\nURI: `{r.uri_template}`\n{r.description or ''}" for r in spec.resources
    ) or "None"
    configuration = (
        f"Set the `{env_var}` environment variable with your API token."
        if env_var else "No authentication required."
    )

    return f"""# MCP {spec.name}

{spec.description}

## Installation

```bash
npm install
npm run build
```

## Configuration

{configuration}

## Claude Desktop Setup

Add to your Claude Desktop config (`claude_desktop_config.json`):

```json
{json.dumps(config, indent=2)}
```

## Available Tools

{tools}
## Resources

{resources}
"""


def render_dockerfile(spec: ServerSpec) -> str:
    """Generate Dockerfile content."""
    env_line = f'ENV {spec.auth.env_var}=""\n' if spec.auth.env_var else ""
    return (
        "FROM node:20-alpine\n"
        "WORKDIR /app\n"
        "COPY package*.json ./\n"
        "RUN npm ci --only=production\n"
        "COPY dist/ ./dist/\n"
        f"{env_line}"
        'CMD ["node", "dist/index.js"]\n'
    )


def render_claude_config(spec: ServerSpec) -> str:
    """Generate claude_desktop_config.json content."""
    entry = {
        "command": "node",
        "args": [f"/path/to/{server_dir_name(spec.name)}/dist/index.js"],
    }
    if spec.auth.env_var:
        entry["env"] = {spec.auth.env_var: "${" + spec.auth.env_var + "}"}
    return json.dumps({"mcpServers": {spec.name: entry}}, indent=2) + "\n"
