"""Tests for the mcp-factory command line exit codes and output."""
import json
from unittest.mock import AsyncMock
import pytest
from mcp_factory.cli import EXIT_INTERNAL_ERROR, EXIT_OK, EXIT_USER_ERROR, build_parser, run
from mcp_factory.core.config import Settings
from mcp_factory.core.services import build_services
from mcp_factory.tools.invoker import ToolOutput

WEATHER_YAML = """
name: weather
description: Weather lookups
tools:
  - name: get_weather
    description: Current weather for a city
    parameters:
      - name: city
        type: string
        required: true
"""


@pytest.fixture
def services(tmp_path):
    settings = Settings(
        database_url=f"sqlite:///{tmp_path / 'factory.db'}",
        output_dir=str(tmp_path / "output"),
        packages_dir=str(tmp_path / "packages"),
        anthropic_api_key=None,
    )
    services = build_services(settings)
    invoker = AsyncMock()
    invoker.invoke.return_value = ToolOutput(stdout="", stderr="", returncode=0)
    services.packager.invoker = invoker
    yield services
    services.registry.engine.dispose()


def test_parser_requires_a_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_generate_from_yaml_spec(services, tmp_path, capsys):
    spec_file = tmp_path / "weather.yaml"
    spec_file.write_text(WEATHER_YAML)

    code = run(["generate", "--spec-file", str(spec_file), "--json"], services=services)

    assert code == EXIT_OK
    job = json.loads(capsys.readouterr().out)
    assert job["status"] == "complete"
    assert job["stages_completed"] == ["interpret", "generate", "validate", "package", "register"]
    assert services.registry.find("weather") is not None


def test_generate_without_api_key_fails(services, capsys):
    code = run(["generate", "weather lookup tool"], services=services)

    assert code == EXIT_USER_ERROR
    assert "Failed at interpret" in capsys.readouterr().out


def test_generate_with_empty_description(services, capsys):
    code = run(["generate"], services=services)

    assert code == EXIT_USER_ERROR
    assert "Missing or invalid description field" in capsys.readouterr().err


def test_generate_with_missing_spec_file(services, tmp_path, capsys):
    code = run(["generate", "--spec-file", str(tmp_path / "nope.yaml")], services=services)

    assert code == EXIT_USER_ERROR
    assert "Cannot read spec file" in capsys.readouterr().err


def test_generate_internal_job_failure_exits_2(services, capsys):
    services.engine.advance = AsyncMock(side_effect=RuntimeError("store offline"))

    code = run(["generate", "weather lookup tool", "--json"], services=services)

    assert code == EXIT_INTERNAL_ERROR
    job = json.loads(capsys.readouterr().out)
    assert job["status"] == "failed"
    assert job["errors"] == ["Internal error: store offline"]


def test_validate_missing_directory(services, tmp_path, capsys):
    code = run(["validate", str(tmp_path / "nope"), "--json"], services=services)

    assert code == EXIT_USER_ERROR
    assert json.loads(capsys.readouterr().out)["valid"] is False


def test_servers_get_and_remove(services, capsys):
    services.registry.init()
    services.registry.register_or_update({"name": "weather", "version": "1.0.0"})

    assert run(["servers", "get", "weather"], services=services) == EXIT_OK
    assert json.loads(capsys.readouterr().out)["name"] == "weather"

    assert run(["servers", "remove", "weather"], services=services) == EXIT_OK
    assert run(["servers", "get", "weather"], services=services) == EXIT_USER_ERROR
    assert run(["servers", "remove", "weather"], services=services) == EXIT_USER_ERROR


def test_package_error_is_a_user_error(services, tmp_path, capsys):
    code = run(["package", str(tmp_path)], services=services)

    assert code == EXIT_USER_ERROR
    assert "package.json not found" in capsys.readouterr().err


def test_unexpected_error_exits_2(services, tmp_path, capsys):
    services.packager.package = AsyncMock(side_effect=RuntimeError("disk on fire"))

    code = run(["package", str(tmp_path)], services=services)

    assert code == EXIT_INTERNAL_ERROR
    assert "disk on fire" in capsys.readouterr().err
