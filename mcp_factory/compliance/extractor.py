"""Text-pattern extraction of tool names from generated MCP server source.

Not a parser: every pattern is anchored to a marker the
generator templates always emit, so formatting changes are tolerated and
anything outside those markers is simply not seen.
"""
import re
from typing import List, Optional, Tuple

LIST_TOOLS_MARKER = "ListToolsRequestSchema"
CALL_TOOL_MARKER = "CallToolRequestSchema"
DEFAULT_HANDLER_MARKER = "default"

_LIST_HANDLER_RE = re.compile(r"setRequestHandler\(\s*" + LIST_TOOLS_MARKER)
_TOOLS_ARRAY_RE = re.compile(r"tools\s*:\s*\[")
_TOOL_NAME_RE = re.compile(r"""name\s*:\s*['"]([^'"]+)['"]""")
_CASE_LABEL_RE = re.compile(r"""case\s*['"]([^'"]+)['"]\s*:""")
_NAME_COMPARE_RE = re.compile(
    r"""(?:request\.params\.name|\bname)\s*===?\s*['"]([^'"]+)['"]"""
)
_INPUT_SCHEMA_RE = re.compile(r"inputSchema\s*:\s*\{")
_TYPE_KEY_RE = re.compile(r"""(?:\btype|['"]type['"])\s*:""")

_PAIRS = {"[": "]", "{": "}"}


def _unique(names: List[str]) -> List[str]:
    seen = {}
    for name in names:
        seen.setdefault(name, None)
    return list(seen)


def find_block(text: str, open_pos: int) -> Optional[Tuple[int, int]]:
    """Return (start, end) of the bracketed block opening at ``open_pos``.

    ``start`` is just after the opening bracket and ``end`` is the index of the
    matching closer. Quoted strings are skipped so brackets inside tool
    descriptions do not unbalance the scan. Returns None if unterminated.
    """
    opener = text[open_pos]
    closer = _PAIRS[opener]
    depth = 0
    quote = None
    i = open_pos
    while i < len(text):
        ch = text[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
        elif ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return open_pos + 1, i
        i += 1
    return None


def has_list_marker(source: str) -> bool:
    return LIST_TOOLS_MARKER in source


def has_call_marker(source: str) -> bool:
    return CALL_TOOL_MARKER in source


def declared_region(source: str) -> Optional[str]:
    """Text of the first ``tools: [...]`` block following the listing marker."""
    handler = _LIST_HANDLER_RE.search(source)
    if handler:
        anchor = handler.end()
    else:
        anchor = source.find(LIST_TOOLS_MARKER)
        if anchor < 0:
            return None
    match = _TOOLS_ARRAY_RE.search(source, anchor)
    if not match:
        return None
    block = find_block(source, match.end() - 1)
    if block is None:
        return source[match.end():]
    start, end = block
    return source[start:end]


def extract_declared(source: str) -> List[str]:
    """Tool names declared in the capability listing, in order of appearance."""
    region = declared_region(source)
    if region is None:
        return []
    return _unique(_TOOL_NAME_RE.findall(region))


def extract_handled(source: str) -> List[str]:
    """Tool names dispatched by case labels or name comparisons."""
    found = []
    for regex in (_CASE_LABEL_RE, _NAME_COMPARE_RE):
        for match in regex.finditer(source):
            found.append((match.start(), match.group(1)))
    found.sort()
    return _unique([name for _, name in found])


def _strip_nested(body: str) -> str:
    """Drop the contents of nested brace/bracket blocks, keeping top-level text.

    Brackets inside quoted strings do not count towards nesting.
    """
    out = []
    depth = 0
    quote = None
    i = 0
    while i < len(body):
        ch = body[i]
        if quote:
            if ch == "\\":
                if depth == 0:
                    out.append(body[i:i + 2])
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
        elif ch in "{[":
            depth += 1
            i += 1
            continue
        elif ch in "}]":
            depth = max(depth - 1, 0)
            i += 1
            continue
        if depth == 0:
            out.append(ch)
        i += 1
    return "".join(out)


def extract_input_schemas(source: str) -> List[str]:
    """Bodies of every object literal assigned to an ``inputSchema:`` key."""
    bodies = []
    for match in _INPUT_SCHEMA_RE.finditer(source):
        block = find_block(source, match.end() - 1)
        if block is None:
            bodies.append(source[match.end():])
            continue
        start, end = block
        bodies.append(source[start:end])
    return bodies


def schema_has_type(body: str) -> bool:
    return _TYPE_KEY_RE.search(_strip_nested(body)) is not None


def has_transport(source: str) -> bool:
    return "server.connect" in source or ".run(" in source
