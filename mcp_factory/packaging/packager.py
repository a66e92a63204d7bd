"""Builds, packs and optionally containerizes generated MCP servers."""
from __future__ import annotations

import json
import logging
import re
import shutil
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from mcp_factory.core.errors import PackagingError, ToolInvocationError
from mcp_factory.tools.invoker import ToolInvoker

log = logging.getLogger(__name__)


@dataclass
class PackageResult:
    package_path: Optional[str]
    image_ref: Optional[str]
    manifest: Dict[str, Any]
    manifest_path: Path
    steps: List[Dict[str, Any]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def _bare_name(pkg_name: str) -> str:
    return re.sub(r"^@.*/", "", pkg_name)


def _read_package_json(server_dir: Path) -> Dict[str, Any]:
    pkg_path = server_dir / "package.json"
    if not pkg_path.exists():
        raise PackagingError("Build failed: package.json not found")
    try:
        return json.loads(pkg_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise PackagingError(f"Build failed: package.json is not valid JSON: {e}") from e


class Packager:
    def __init__(
        self,
        invoker: ToolInvoker,
        packages_dir: Path,
        enable_docker: bool = False,
        build_timeout: float = 300.0,
        pack_timeout: float = 120.0,
        docker_timeout: float = 600.0,
    ):
        self.invoker = invoker
        self.packages_dir = Path(packages_dir)
        self.enable_docker = enable_docker
        self.build_timeout = build_timeout
        self.pack_timeout = pack_timeout
        self.docker_timeout = docker_timeout

    async def build(self, server_dir: Path, pkg: Dict[str, Any]) -> Path:
        """Compile the server unless ``dist/`` already has content; returns the output dir."""
        dist_dir = server_dir / "dist"
        if dist_dir.is_dir() and any(dist_dir.iterdir()):
            log.info("dist/ already exists with content, skipping build")
        elif (pkg.get("scripts") or {}).get("build"):
            try:
                await self.invoker.invoke(["npm", "run", "build"], cwd=server_dir, timeout=self.build_timeout)
            except ToolInvocationError as e:
                raise PackagingError(f"Build failed: {e}") from e
            log.info("TypeScript build completed")
        else:
            log.info("No build script found, skipping TypeScript compilation")

        for candidate in (dist_dir, server_dir / "build"):
            if candidate.is_dir():
                return candidate
        log.info("No dist/ or build/ directory - using src/ directly")
        return server_dir / "src"

    async def create_tarball(self, server_dir: Path) -> Path:
        output = await self.invoker.invoke(["npm", "pack"], cwd=server_dir, timeout=self.pack_timeout)
        tarball_name = output.stdout.splitlines()[-1].strip() if output.stdout else ""
        tarball = server_dir / tarball_name
        if not tarball_name or not tarball.exists():
            raise PackagingError(f"npm pack did not produce a tarball in {server_dir}")
        self.packages_dir.mkdir(parents=True, exist_ok=True)
        dest = self.packages_dir / tarball_name
        shutil.move(str(tarball), str(dest))
        log.info("Created tarball: %s", dest)
        return dest

    async def build_docker(self, server_dir: Path, pkg: Dict[str, Any]) -> str:
        name = re.sub(r"[^a-z0-9-]", "-", _bare_name(pkg["name"]).lower())
        image = f"{name}:{pkg.get('version') or '1.0.0'}"
        dockerfile = server_dir / "Dockerfile"
        if not dockerfile.exists():
            dockerfile.write_text(self.render_dockerfile(pkg), encoding="utf-8")
            log.info("Generated Dockerfile")
        await self.invoker.invoke(["docker", "build", "-t", image, "."], cwd=server_dir, timeout=self.docker_timeout)
        log.info("Built Docker image: %s", image)
        return image

    @staticmethod
    def render_dockerfile(pkg: Dict[str, Any]) -> str:
        main_file = pkg.get("main") or "dist/index.js"
        return (
            "FROM node:20-alpine\n"
            "WORKDIR /app\n"
            "COPY package*.json ./\n"
            "RUN npm ci --only=production\n"
            "COPY dist/ ./dist/\n"
            f'CMD ["node", "{main_file}"]\n'
        )

    @staticmethod
    def claude_config(server_dir: Path, pkg: Dict[str, Any]) -> Dict[str, Any]:
        return {
            _bare_name(pkg["name"]): {
                "command": "node",
                "args": [str(server_dir / (pkg.get("main") or "dist/index.js"))],
                "env": {},
            }
        }

    async def package(self, server_dir: Path, docker: bool = False) -> PackageResult:
        server_dir = Path(server_dir).resolve()
        log.info("Packaging %s", server_dir)
        pkg = _read_package_json(server_dir)
        if not pkg.get("name"):
            raise PackagingError("Build failed: package.json has no name")
        steps: List[Dict[str, Any]] = []
        warnings: List[str] = []

        output_dir = await self.build(server_dir, pkg)
        steps.append({"name": "build", "success": True, "output_dir": str(output_dir)})

        package_path = None
        try:
            package_path = str(await self.create_tarball(server_dir))
            steps.append({"name": "tarball", "success": True, "path": package_path})
        except (ToolInvocationError, PackagingError, OSError) as e:
            warnings.append(f"Tarball creation failed: {e}")
            steps.append({"name": "tarball", "success": False, "error": str(e)})

        image_ref = None
        if docker or self.enable_docker:
            try:
                image_ref = await self.build_docker(server_dir, pkg)
                steps.append({"name": "docker", "success": True, "image": image_ref})
            except ToolInvocationError as e:
                warnings.append(f"Docker build failed: {e}")
                steps.append({"name": "docker", "success": False, "error": str(e)})

        manifest = {
            "name": _bare_name(pkg["name"]),
            "version": pkg.get("version") or "1.0.0",
            "description": pkg.get("description") or "",
            "package": package_path,
            "docker": image_ref,
            "server_dir": str(server_dir),
            "claude_config": self.claude_config(server_dir, pkg),
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        manifest_path = server_dir / "manifest.json"
        manifest_path.write_text(json.dumps(manifest, indent=2), encoding="utf-8")
        log.info("Wrote manifest to %s", manifest_path)

        return PackageResult(
            package_path=package_path,
            image_ref=image_ref,
            manifest=manifest,
            manifest_path=manifest_path,
            steps=steps,
            warnings=warnings,
        )
