"""Tests for the SQLAlchemy-backed server registry."""
import re
import tempfile
from pathlib import Path
import pytest
from mcp_factory.core.errors import RegistryError
from mcp_factory.db.session import build_engine, build_session_factory
from mcp_factory.registry.registry import ServerRegistry


def _registry(temp_dir):
    engine = build_engine(f"sqlite:///{Path(temp_dir) / 'registry.db'}")
    registry = ServerRegistry(engine, build_session_factory(engine))
    registry.init()
    return registry


def _manifest(name="weather", version="1.0.0", **extra):
    return {
        "name": name,
        "version": version,
        "description": f"{name} server",
        "spec": {"name": name, "tools": []},
        "package_path": f"/packages/mcp-{name}-{version}.tgz",
        "claude_config": {f"mcp-{name}": {"command": "node"}},
        **extra,
    }


def test_register_then_update_same_name():
    with tempfile.TemporaryDirectory() as temp_dir:
        registry = _registry(temp_dir)

        first = registry.register_or_update(_manifest(version="1.0.0"))
        second = registry.register_or_update(_manifest(version="1.1.0"))

        assert first.action == "created"
        assert second.action == "updated"
        assert second.id == first.id
        assert re.fullmatch(r"mcp_\d+_[0-9a-f]{6}", first.id)

        servers = registry.enumerate(name="weather")
        assert len(servers) == 1
        assert servers[0]["version"] == "1.1.0"
        assert servers[0]["package_path"] == "/packages/mcp-weather-1.1.0.tgz"
        registry.engine.dispose()


def test_find_by_name_and_version():
    with tempfile.TemporaryDirectory() as temp_dir:
        registry = _registry(temp_dir)
        registry.register_or_update(_manifest(docker_image="mcp-weather:1.0.0"))

        found = registry.find("weather")
        assert found["docker_image"] == "mcp-weather:1.0.0"
        assert found["claude_config"] == {"mcp-weather": {"command": "node"}}
        assert registry.find("weather", "1.0.0") is not None
        assert registry.find("weather", "9.9.9") is None
        assert registry.find("unknown") is None
        registry.engine.dispose()


def test_enumerate_filters_and_limits():
    with tempfile.TemporaryDirectory() as temp_dir:
        registry = _registry(temp_dir)
        for name in ("weather", "weather-alerts", "github-issues"):
            registry.register_or_update(_manifest(name=name))

        assert len(registry.enumerate()) == 3
        assert {s["name"] for s in registry.enumerate(name="weather")} == {"weather", "weather-alerts"}
        assert len(registry.enumerate(limit=2)) == 2
        assert registry.enumerate(version="2.0.0") == []
        registry.engine.dispose()


def test_remove():
    with tempfile.TemporaryDirectory() as temp_dir:
        registry = _registry(temp_dir)
        registry.register_or_update(_manifest())

        assert registry.remove("weather") is True
        assert registry.remove("weather") is False
        assert registry.find("weather") is None
        registry.engine.dispose()


def test_name_is_required():
    with tempfile.TemporaryDirectory() as temp_dir:
        registry = _registry(temp_dir)

        with pytest.raises(RegistryError, match="name is required"):
            registry.register_or_update({"version": "1.0.0"})
        registry.engine.dispose()


def test_registry_requires_init():
    engine = build_engine("sqlite:///:memory:")
    registry = ServerRegistry(engine, build_session_factory(engine))

    with pytest.raises(RegistryError, match="before init"):
        registry.find("weather")
