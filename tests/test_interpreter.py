"""Tests for the natural-language spec interpreter and the interpret stage."""
import json
from unittest.mock import AsyncMock, MagicMock
import httpx
import pytest
from mcp_factory.agents.base import PipelineContext
from mcp_factory.agents.impl_interpret import InterpretAgent
from mcp_factory.core.errors import InterpretError
from mcp_factory.interpreter.llm import AnthropicClient
from mcp_factory.interpreter.parser import SpecInterpreter, extract_json

WEATHER = {
    "name": "weather",
    "description": "Weather lookups",
    "tools": [
        {
            "name": "get_weather",
            "description": "Current weather for a city",
            "parameters": [{"name": "city", "type": "string", "required": True}],
        }
    ],
}


class FakeClient:
    def __init__(self, reply):
        self.reply = reply
        self.prompts = []

    async def complete(self, prompt):
        self.prompts.append(prompt)
        return self.reply


def test_extract_json_from_fenced_reply():
    reply = "Here you go:\n```json\n" + json.dumps(WEATHER) + "\n```\nEnjoy."

    assert extract_json(reply)["name"] == "weather"


def test_extract_json_rejects_garbage():
    with pytest.raises(InterpretError, match="Failed to parse LLM response as JSON"):
        extract_json("I cannot help with that")


@pytest.mark.asyncio
async def test_interpret_applies_defaults():
    client = FakeClient(json.dumps(WEATHER))
    interpreter = SpecInterpreter(client, default_runtime="typescript")

    spec = await interpreter.interpret("weather lookup tool")

    assert spec["version"] == "1.0.0"
    assert spec["runtime"] == "typescript"
    assert spec["auth"] == {"type": "none"}
    assert spec["resources"] == []
    assert "weather lookup tool" in client.prompts[0]


@pytest.mark.asyncio
async def test_interpret_reports_validation_errors():
    bad = dict(WEATHER, name="Weather_Tool")
    interpreter = SpecInterpreter(FakeClient(json.dumps(bad)))

    with pytest.raises(InterpretError, match="Name must be kebab-case"):
        await interpreter.interpret("weather lookup tool")


@pytest.mark.asyncio
async def test_interpret_without_client():
    with pytest.raises(InterpretError, match="ANTHROPIC_API_KEY"):
        await SpecInterpreter(None).interpret("weather lookup tool")


def test_parse_yaml_spec():
    text = """
name: weather
description: Weather lookups
tools:
  - name: get_weather
    description: Current weather
"""
    spec = SpecInterpreter(None).parse_yaml(text, runtime="typescript")

    assert spec["name"] == "weather"
    assert spec["tools"][0]["name"] == "get_weather"


def test_parse_yaml_rejects_non_mapping():
    with pytest.raises(InterpretError, match="must be a mapping"):
        SpecInterpreter(None).parse_yaml("- just\n- a list\n")


@pytest.mark.asyncio
async def test_interpret_agent_sets_spec():
    agent = InterpretAgent(SpecInterpreter(FakeClient(json.dumps(WEATHER))))
    ctx = PipelineContext(job_id="job_1", description="weather lookup tool")

    spec = await agent.run(ctx)

    assert ctx.spec is spec
    assert spec.name == "weather"
    assert spec.tools[0].parameters[0].required is True


@pytest.mark.asyncio
async def test_interpret_agent_rejects_nameless_spec():
    nameless = {k: v for k, v in WEATHER.items() if k != "name"}
    agent = InterpretAgent(SpecInterpreter(FakeClient(json.dumps(nameless))))
    ctx = PipelineContext(job_id="job_1", description="something vague")

    with pytest.raises(InterpretError, match="valid spec"):
        await agent.run(ctx)
    assert ctx.spec is None


@pytest.mark.asyncio
async def test_interpret_agent_uses_yaml_when_requested():
    interpreter = MagicMock()
    interpreter.parse_yaml.return_value = dict(WEATHER, version="2.0.0")
    interpreter.interpret = AsyncMock()
    agent = InterpretAgent(interpreter)
    ctx = PipelineContext(job_id="job_1", description="name: weather", options={"input_format": "yaml"})

    spec = await agent.run(ctx)

    assert spec.version == "2.0.0"
    interpreter.interpret.assert_not_called()


@pytest.mark.asyncio
async def test_anthropic_client_joins_text_blocks(monkeypatch):
    def handler(request):
        body = json.loads(request.content)
        assert request.headers["x-api-key"] == "sk-test"
        assert body["messages"][0]["content"] == "hello"
        return httpx.Response(200, json={"content": [
            {"type": "text", "text": "part one "},
            {"type": "tool_use", "id": "x"},
            {"type": "text", "text": "part two"},
        ]})

    transport = httpx.MockTransport(handler)
    original = httpx.AsyncClient
    monkeypatch.setattr(httpx, "AsyncClient", lambda *a, **kw: original(*a, transport=transport, **kw))

    client = AnthropicClient(api_key="sk-test", api_base="https://llm.test")
    assert await client.complete("hello") == "part one part two"


@pytest.mark.asyncio
async def test_anthropic_client_wraps_http_errors(monkeypatch):
    transport = httpx.MockTransport(lambda request: httpx.Response(529, json={"error": "overloaded"}))
    original = httpx.AsyncClient
    monkeypatch.setattr(httpx, "AsyncClient", lambda *a, **kw: original(*a, transport=transport, **kw))

    with pytest.raises(InterpretError, match="LLM request failed"):
        await AnthropicClient(api_key="sk-test", api_base="https://llm.test").complete("hello")


@pytest.mark.asyncio
@pytest.mark.parametrize("override", [{"auth": "bearer"}, {"tools": 3}])
async def test_interpret_agent_rejects_malformed_fields(override):
    agent = InterpretAgent(SpecInterpreter(FakeClient(json.dumps(dict(WEATHER, **override)))))
    ctx = PipelineContext(job_id="job_1", description="weather lookup tool")

    with pytest.raises(InterpretError, match="Parser failed to generate valid spec: .* must be"):
        await agent.run(ctx)
    assert ctx.spec is None
