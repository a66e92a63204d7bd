"""SQLAlchemy-backed registry of generated MCP servers."""
from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from mcp_factory.core.errors import RegistryError
from mcp_factory.db.models import McpServer
from mcp_factory.db.session import Base

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistrationResult:
    id: str
    name: str
    version: str
    action: str  # "created" or "updated"

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "version": self.version, "action": self.action}


def _server_to_dict(row: McpServer) -> Dict[str, Any]:
    return {
        "id": row.id,
        "name": row.name,
        "version": row.version,
        "description": row.description,
        "spec": row.spec or {},
        "package_path": row.package_path,
        "docker_image": row.docker_image,
        "claude_config": row.claude_config or {},
        "created_at": row.created_at.isoformat() if row.created_at else None,
        "updated_at": row.updated_at.isoformat() if row.updated_at else None,
    }


class ServerRegistry:
    """Upsert-by-name store of registered servers.

    ``init`` must be called once by whoever builds the registry before any
    other method is used.
    """

    def __init__(self, engine: Engine, session_factory: sessionmaker):
        self.engine = engine
        self._session_factory = session_factory
        self._initialized = False

    def init(self) -> None:
        Base.metadata.create_all(bind=self.engine)
        self._initialized = True
        log.info("Registry initialized at %s", self.engine.url.render_as_string(hide_password=True))

    @staticmethod
    def generate_id() -> str:
        return f"mcp_{int(time.time() * 1000)}_{secrets.token_hex(3)}"

    def _session(self):
        if not self._initialized:
            raise RegistryError("Registry used before init()")
        return self._session_factory()

    def register_or_update(self, manifest: Dict[str, Any]) -> RegistrationResult:
        name = manifest.get("name")
        if not name:
            raise RegistryError("Server name is required")
        version = manifest.get("version") or "1.0.0"
        values = {
            "version": version,
            "description": manifest.get("description") or "",
            "spec": manifest.get("spec") or {},
            "package_path": manifest.get("package_path"),
            "docker_image": manifest.get("docker_image"),
            "claude_config": manifest.get("claude_config") or {},
        }
        now = datetime.now(timezone.utc)

        try:
            with self._session() as db:
                existing = db.scalars(select(McpServer).where(McpServer.name == name)).first()
                if existing:
                    for key, value in values.items():
                        setattr(existing, key, value)
                    existing.updated_at = now
                    db.commit()
                    log.info("Updated: %s@%s", name, version)
                    return RegistrationResult(existing.id, name, version, "updated")

                server = McpServer(id=self.generate_id(), name=name, created_at=now, updated_at=now, **values)
                db.add(server)
                db.commit()
                log.info("Registered: %s@%s", name, version)
                return RegistrationResult(server.id, name, version, "created")
        except SQLAlchemyError as e:
            raise RegistryError(f"Registry write failed for {name}: {e}") from e

    def find(self, name: str, version: Optional[str] = None) -> Optional[Dict[str, Any]]:
        stmt = select(McpServer).where(McpServer.name == name)
        if version:
            stmt = stmt.where(McpServer.version == version)
        with self._session() as db:
            row = db.scalars(stmt.order_by(McpServer.updated_at.desc()).limit(1)).first()
            return _server_to_dict(row) if row else None

    def enumerate(
        self,
        name: Optional[str] = None,
        version: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        stmt = select(McpServer)
        if name:
            stmt = stmt.where(McpServer.name.like(f"%{name}%"))
        if version:
            stmt = stmt.where(McpServer.version == version)
        stmt = stmt.order_by(McpServer.updated_at.desc())
        if limit:
            stmt = stmt.limit(limit)
        with self._session() as db:
            return [_server_to_dict(row) for row in db.scalars(stmt).all()]

    def remove(self, name: str) -> bool:
        with self._session() as db:
            row = db.scalars(select(McpServer).where(McpServer.name == name)).first()
            if row is None:
                return False
            db.delete(row)
            db.commit()
        log.info("Removed: %s", name)
        return True
