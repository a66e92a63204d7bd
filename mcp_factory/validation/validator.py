"""Validates a generated MCP server directory before packaging."""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from mcp_factory.compliance.checker import ComplianceChecker, PatternComplianceChecker
from mcp_factory.core.errors import ToolInvocationError
from mcp_factory.core.workflow import Finding
from mcp_factory.tools.invoker import ToolInvoker

log = logging.getLogger(__name__)

REQUIRED_DEPENDENCIES = ("@modelcontextprotocol/sdk", "zod")
ESLINT_CONFIGS = (".eslintrc", ".eslintrc.js", ".eslintrc.json", "eslint.config.js")

# src/index.ts(42,5): error TS2322: Type 'x' is not assignable ...
_TSC_ERROR_RE = re.compile(r"(.+?)\((\d+),(\d+)\):\s*error\s+TS\d+:\s*(.+)")
_NODE_MAJOR_RE = re.compile(r"^\D*(\d+)")


@dataclass
class ValidationResult:
    errors: List[Finding] = field(default_factory=list)
    warnings: List[Finding] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "errors": [{"type": f.category, "message": f.message} for f in self.errors],
            "warnings": [{"type": f.category, "message": f.message} for f in self.warnings],
        }


class Validator:
    def __init__(
        self,
        invoker: ToolInvoker,
        checker: Optional[ComplianceChecker] = None,
        tsc_timeout: float = 60.0,
        lint_timeout: float = 30.0,
        install_timeout: float = 300.0,
        install_dependencies: bool = False,
    ):
        self.invoker = invoker
        self.checker = checker or PatternComplianceChecker()
        self.tsc_timeout = tsc_timeout
        self.lint_timeout = lint_timeout
        self.install_timeout = install_timeout
        self.install_dependencies = install_dependencies

    async def validate(self, server_dir: Path) -> ValidationResult:
        server_dir = Path(server_dir)
        result = ValidationResult()

        if not server_dir.is_dir():
            result.errors.append(Finding("filesystem", f"Directory not found: {server_dir}"))
            return result

        await self.check_typescript(server_dir, result)
        await self.check_lint(server_dir, result)
        self.check_protocol(server_dir, result)
        self.check_dependencies(server_dir, result)

        log.info("Validated %s: %d errors, %d warnings", server_dir, len(result.errors), len(result.warnings))
        return result

    async def check_typescript(self, server_dir: Path, result: ValidationResult) -> None:
        if not (server_dir / "tsconfig.json").exists():
            result.errors.append(Finding("typescript", "tsconfig.json not found"))
            return

        if not (server_dir / "node_modules").exists():
            if not self.install_dependencies:
                result.warnings.append(Finding(
                    "toolchain", 'node_modules not found - run "npm install" first; TypeScript check skipped'
                ))
                return
            try:
                await self.invoker.invoke(["npm", "install"], cwd=server_dir, timeout=self.install_timeout)
            except ToolInvocationError as e:
                result.errors.append(Finding("toolchain", f"npm install failed: {e}"))
                return

        tsc = server_dir / "node_modules" / ".bin" / "tsc"
        if not tsc.exists():
            result.warnings.append(Finding(
                "toolchain", 'typescript not installed - run "npm install" first; TypeScript check skipped'
            ))
            return

        try:
            output = await self.invoker.invoke(
                [str(tsc), "--noEmit"], cwd=server_dir, timeout=self.tsc_timeout, check=False
            )
        except ToolInvocationError as e:
            result.errors.append(Finding("typescript", str(e)))
            return

        if output.returncode == 0:
            log.debug("TypeScript compilation passed")
            return

        text = output.stdout or output.stderr
        parsed = [
            Finding("typescript", f"{m.group(1)}:{m.group(2)}:{m.group(3)} - {m.group(4)}")
            for m in _TSC_ERROR_RE.finditer(text)
        ]
        result.errors.extend(parsed or [Finding("typescript", text or "TypeScript compilation failed")])

    async def check_lint(self, server_dir: Path, result: ValidationResult) -> None:
        if not any((server_dir / name).exists() for name in ESLINT_CONFIGS):
            log.debug("ESLint skipped (no config)")
            return

        try:
            output = await self.invoker.invoke(
                ["npx", "eslint", "src/", "--format", "json"],
                cwd=server_dir,
                timeout=self.lint_timeout,
                check=False,
            )
        except ToolInvocationError as e:
            result.warnings.append(Finding("lint", f"ESLint could not run: {e}"))
            return

        if not output.stdout.startswith("["):
            return
        try:
            lint_results = json.loads(output.stdout)
        except json.JSONDecodeError:
            result.warnings.append(Finding("lint", "ESLint output was not valid JSON"))
            return

        for file in lint_results:
            rel = file.get("filePath", "")
            try:
                rel = str(Path(rel).relative_to(server_dir))
            except ValueError:
                pass
            for msg in file.get("messages", []):
                finding = Finding("lint", f"{rel}:{msg.get('line', 0)} - {msg.get('message')} ({msg.get('ruleId')})")
                if msg.get("severity") == 2:
                    result.errors.append(finding)
                else:
                    result.warnings.append(finding)

    def check_protocol(self, server_dir: Path, result: ValidationResult) -> None:
        report = self.checker.check_file(server_dir / "src" / "index.ts")
        if report.compliant:
            result.warnings.extend(report.findings)
        else:
            result.errors.extend(report.findings)

    def check_dependencies(self, server_dir: Path, result: ValidationResult) -> None:
        pkg_path = server_dir / "package.json"
        if not pkg_path.exists():
            result.errors.append(Finding("dependency", "Missing required dependency: package.json"))
            return

        try:
            pkg = json.loads(pkg_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            result.errors.append(Finding("dependency", f"package.json is not valid JSON: {e}"))
            return

        deps = {**(pkg.get("dependencies") or {}), **(pkg.get("devDependencies") or {})}
        for dep in REQUIRED_DEPENDENCIES:
            if dep not in deps:
                result.errors.append(Finding("dependency", f"Missing required dependency: {dep}"))

        if "typescript" not in deps:
            result.warnings.append(Finding("dependency", "typescript not in devDependencies"))

        node_version = (pkg.get("engines") or {}).get("node")
        if node_version:
            match = _NODE_MAJOR_RE.match(node_version)
            if match and int(match.group(1)) < 18:
                result.warnings.append(Finding(
                    "compatibility", f"Node version {node_version} may be too old for MCP SDK"
                ))
