"""Data models for the group aggregator engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from package_scraper.engines.project_scraper.models import KINDS, AuditSeverityStats

LATEST_KEY = "_latest_"


@dataclass
class VersionUsage:
    """Which projects use which declared version of one package."""

    latest: str | None
    versions: dict[str, list[str]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {LATEST_KEY: self.latest}
        for version, projects in self.versions.items():
            out[version] = list(projects)
        return out


@dataclass
class VersionAuditBucket:
    projects: list[str]
    stats: AuditSeverityStats

    def to_dict(self) -> dict[str, Any]:
        return {"projects": list(self.projects), "stats": dict(self.stats)}


@dataclass
class VersionAudit:
    """Audit severities per declared version of one package, with the projects."""

    versions: dict[str, VersionAuditBucket] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {version: bucket.to_dict() for version, bucket in self.versions.items()}


@dataclass
class GroupReport:
    """Cross-project dependency usage and audit maps for one package group."""

    usage: dict[str, dict[str, VersionUsage]] = field(
        default_factory=lambda: {kind: {} for kind in KINDS}
    )
    audit: dict[str, dict[str, VersionAudit]] = field(
        default_factory=lambda: {kind: {} for kind in KINDS}
    )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for kind, (key, _) in KINDS.items():
            out[key] = {name: u.to_dict() for name, u in self.usage[kind].items()}
        for kind, (_, audit_key) in KINDS.items():
            out[audit_key] = {name: a.to_dict() for name, a in self.audit[kind].items()}
        return out


CombinedReport = dict[str, GroupReport]


def combined_to_dict(report: CombinedReport) -> dict[str, Any]:
    return {group: group_report.to_dict() for group, group_report in report.items()}
