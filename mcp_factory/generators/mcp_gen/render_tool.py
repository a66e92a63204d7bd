"""Tool and resource rendering functions for MCP server generation."""
from mcp_factory.generators.mcp_gen.utils import to_pascal_case, ts_string, uri_template_to_regex
from mcp_factory.schemas.spec import ResourceSpec, ServerSpec, ToolSpec


def render_tool(tool: ToolSpec, spec: ServerSpec) -> str:
    """Generate src/tools/<tool>.ts: validates input and returns MCP text content."""
    params = ", ".join(p.name for p in tool.parameters)
    destructure = f"  const {{ {params} }} = input;\n" if params else "  void input;\n"
    return (
        "import { ApiClient } from '../client';\n"
        f"import {{ {tool.name}Schema, {to_pascal_case(tool.name)}Input }} from '../schemas';\n"
        "\n"
        f"export async function {tool.name}Tool(client: ApiClient, args: unknown) {{\n"
        f"  const input: {to_pascal_case(tool.name)}Input = {tool.name}Schema.parse(args);\n"
        f"{destructure}"
        "\n"
        "  return {\n"
        "    content: [\n"
        "      {\n"
        "        type: 'text',\n"
        f"        text: JSON.stringify({{ success: true, message: {ts_string(tool.name + ' executed')} }})\n"
        "      }\n"
        "    ]\n"
        "  };\n"
        "}\n"
    )


def render_resource(resource: ResourceSpec, spec: ServerSpec) -> str:
    """Generate src/resources/<resource>.ts: parses the URI template."""
    pattern = uri_template_to_regex(resource.uri_template)
    return (
        "import { ApiClient } from '../client';\n"
        "\n"
        f"export async function {resource.name}Resource(client: ApiClient, uri: string) {{\n"
        f"  // URI template: {resource.uri_template}\n"
        f"  const match = uri.match(/^{pattern}$/);\n"
        "  if (!match?.groups) throw new Error('Invalid URI format');\n"
        "\n"
        "  return {\n"
        "    contents: [\n"
        "      {\n"
        "        uri,\n"
        f"        mimeType: {ts_string(resource.mime_type)},\n"
        f"        text: JSON.stringify({{ resource: {ts_string(resource.name)}, params: match.groups }})\n"
        "      }\n"
        "    ]\n"
        "  };\n"
        "}\n"
    )
