"""Static MCP protocol compliance checks over generated server source."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from mcp_factory.compliance import extractor
from mcp_factory.core.workflow import Finding

log = logging.getLogger(__name__)

# Categories that make a report non-compliant on their own.
STRUCTURAL_CATEGORIES = frozenset({"declaration", "coverage", "transport", "filesystem"})


@dataclass
class ComplianceReport:
    compliant: bool = True
    findings: List[Finding] = field(default_factory=list)

    @property
    def issues(self) -> List[str]:
        return [f.message for f in self.findings]

    def add(self, category: str, message: str) -> None:
        self.findings.append(Finding(category, message))
        if category in STRUCTURAL_CATEGORIES:
            self.compliant = False

    def to_dict(self) -> dict:
        return {"compliant": self.compliant, "issues": self.issues}


class ComplianceChecker(ABC):
    """Checks one in-memory source document for structural compliance."""

    @abstractmethod
    def check(self, source: str) -> ComplianceReport:
        raise NotImplementedError

    def check_file(self, path: Path) -> ComplianceReport:
        if not path.exists():
            report = ComplianceReport()
            report.add("filesystem", f"Missing {path.parent.name}/{path.name}")
            return report
        return self.check(path.read_text(encoding="utf-8"))


class PatternComplianceChecker(ComplianceChecker):
    """Regex-based checker for servers built from the generator templates."""

    def check(self, source: str) -> ComplianceReport:
        report = ComplianceReport()
        self._check_declarations(source, report)
        self._check_coverage(source, report)
        self._check_input_schemas(source, report)
        self._check_transport(source, report)
        if report.compliant:
            log.debug("Protocol compliance passed")
        return report

    def _check_declarations(self, source: str, report: ComplianceReport) -> None:
        if not extractor.has_list_marker(source):
            report.add("declaration", f"Missing {extractor.LIST_TOOLS_MARKER} handler")
        if not extractor.has_call_marker(source):
            report.add("declaration", f"Missing {extractor.CALL_TOOL_MARKER} handler")

    def _check_coverage(self, source: str, report: ComplianceReport) -> None:
        declared = extractor.extract_declared(source)
        handled = extractor.extract_handled(source)
        handled_set = set(handled)
        declared_set = set(declared)

        for tool in declared:
            if tool not in handled_set:
                report.add("coverage", f"Missing tool handler for '{tool}'")

        for tool in handled:
            if tool not in declared_set and tool != extractor.DEFAULT_HANDLER_MARKER:
                report.add("undeclared_handler", f"Handler for undeclared tool '{tool}'")

    def _check_input_schemas(self, source: str, report: ComplianceReport) -> None:
        for body in extractor.extract_input_schemas(source):
            if not extractor.schema_has_type(body):
                report.add("input_schema", 'inputSchema missing "type" property')

    def _check_transport(self, source: str, report: ComplianceReport) -> None:
        if not extractor.has_transport(source):
            report.add("transport", "Missing server connection/run call")


def check(source: str) -> ComplianceReport:
    """Run the default pattern checker over ``source``."""
    return PatternComplianceChecker().check(source)
