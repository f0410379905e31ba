"""Audit correlator: attribute yarn audit advisories to top-level dependencies.

``yarn audit --json`` prints one JSON object per line. Advisory records
look like::

    {"type": "auditAdvisory",
     "data": {"advisory": {"severity": "high",
                           "findings": [{"paths": ["left-pad>is-even"]}]}}}

Each path is a ``>``-delimited chain from a direct dependency down to the
vulnerable package. Only the head of the chain is used: it is looked up in
the runtime, peer and dev sets (in that order) and the advisory severity is
counted against it. Heads that are not declared (pruned, or transitive
only) are dropped.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import structlog

from package_scraper.core.process import run_command
from package_scraper.engines.project_scraper.models import (
    AuditMaps,
    AuditResult,
    Correlated,
    DependencySet,
    Failed,
)
from package_scraper.exceptions import AuditParseError

log = structlog.get_logger("package_scraper.audit")

CHAIN_SEPARATOR = ">"
SEVERITY_LEVELS = ("info", "low", "moderate", "high", "critical")
DEFAULT_AUDIT_LEVEL = "low"


def build_audit_command(level: str = DEFAULT_AUDIT_LEVEL) -> list[str]:
    return ["yarn", "audit", "--json", f"--level={level}"]


def _finding_paths(finding: Any) -> list[str]:
    if not isinstance(finding, dict):
        raise AuditParseError("finding is not an object")
    paths = finding.get("paths", [])
    if not isinstance(paths, list) or not all(isinstance(p, str) for p in paths):
        raise AuditParseError("finding 'paths' is not a list of strings")
    return paths


def _advisory(record: dict[str, Any]) -> tuple[str, list[Any]] | None:
    """Return (severity, findings) for an advisory record, None for other records."""
    data = record.get("data")
    if not isinstance(data, dict):
        return None
    advisory = data.get("advisory")
    if advisory is None:
        return None
    if not isinstance(advisory, dict):
        raise AuditParseError("advisory is not an object")
    severity = advisory.get("severity")
    if not isinstance(severity, str) or not severity:
        raise AuditParseError("advisory has no severity")
    findings = advisory.get("findings", [])
    if not isinstance(findings, list):
        raise AuditParseError("advisory 'findings' is not a list")
    return severity, findings


def correlate_audit(output: str, deps: DependencySet) -> AuditResult:
    """Correlate audit tool output against the (pruned) declared dependencies.

    Non-JSON and blank lines are skipped. Malformed advisories and findings
    are logged and skipped. If the output has content but not a single line
    parses as a JSON object, the whole stream is rejected with ``Failed``.
    """
    audit = AuditMaps()
    result = Correlated(audit=audit)
    content_lines = 0
    parsed_lines = 0

    for lineno, line in enumerate(output.splitlines(), 1):
        line = line.strip()
        if not line:
            continue
        content_lines += 1
        try:
            record = json.loads(line)
        except json.JSONDecodeError:
            log.debug("audit.non_json_line", lineno=lineno)
            continue
        if not isinstance(record, dict):
            continue
        parsed_lines += 1

        try:
            advisory = _advisory(record)
        except AuditParseError as exc:
            log.warning("audit.record_skipped", lineno=lineno, reason=str(exc))
            result.skipped_records += 1
            continue
        if advisory is None:
            continue

        severity, findings = advisory
        result.advisories += 1
        for finding in findings:
            try:
                paths = _finding_paths(finding)
            except AuditParseError as exc:
                log.warning("audit.finding_skipped", lineno=lineno, reason=str(exc))
                result.skipped_records += 1
                continue
            for path in paths:
                head = path.split(CHAIN_SEPARATOR)[0].strip()
                kind = deps.kind_of(head)
                if kind is None:
                    result.dropped += 1
                    log.debug("audit.finding_dropped", package=head, severity=severity)
                    continue
                audit.record(kind, head, severity)

    if content_lines and not parsed_lines:
        return Failed(reason=f"no JSON records in {content_lines} line(s) of audit output")
    return result


async def run_audit(
    project_path: Path,
    deps: DependencySet,
    *,
    command: list[str] | None = None,
) -> AuditResult:
    """Run the audit tool in *project_path* and correlate its findings."""
    cmd, *args = command or build_audit_command()
    output = await run_command(project_path, cmd, args)
    result = correlate_audit(output, deps)
    match result:
        case Correlated(advisories=advisories, dropped=dropped):
            log.debug(
                "audit.correlated",
                project_path=str(project_path),
                advisories=advisories,
                dropped=dropped,
            )
        case Failed(reason=reason):
            log.warning("audit.stream_failed", project_path=str(project_path), reason=reason)
    return result
