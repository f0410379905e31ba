"""GroupAggregator: fold project reports into one cross-project GroupReport."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from package_scraper.engines.group_aggregator.latest import LatestVersionCache
from package_scraper.engines.group_aggregator.models import (
    GroupReport,
    VersionAudit,
    VersionAuditBucket,
    VersionUsage,
)
from package_scraper.engines.project_scraper.models import KINDS, ProjectReport

log = structlog.get_logger("package_scraper.aggregator")


class GroupAggregator:
    """Accumulator for one package group.

    Projects must be added in configuration order; bucket project lists keep
    that order. Each dependency kind is merged into its own map.
    """

    def __init__(self, latest: LatestVersionCache) -> None:
        self._latest = latest
        self._report = GroupReport()
        self.projects: list[str] = []

    def add_project(self, project: str, report: ProjectReport) -> None:
        for kind in KINDS:
            self._merge_usage(project, kind, report)
            self._merge_audit(project, kind, report)
        self.projects.append(project)

    def result(self) -> GroupReport:
        return self._report

    # ── internal ─────────────────────────────────────────────────────────

    def _merge_usage(self, project: str, kind: str, report: ProjectReport) -> None:
        usage = self._report.usage[kind]
        for name, version in report.dependencies.of_kind(kind).items():
            entry = usage.get(name)
            if entry is None:
                usage[name] = VersionUsage(
                    latest=self._latest.get(name),
                    versions={version: [project]},
                )
            elif version not in entry.versions:
                entry.versions[version] = [project]
            else:
                entry.versions[version].append(project)

    def _merge_audit(self, project: str, kind: str, report: ProjectReport) -> None:
        audits = self._report.audit[kind]
        declared = report.dependencies.of_kind(kind)
        for name, stats in report.audit.of_kind(kind).items():
            version = declared[name]
            entry = audits.setdefault(name, VersionAudit())
            bucket = entry.versions.get(version)
            if bucket is None:
                entry.versions[version] = VersionAuditBucket(
                    projects=[project], stats=dict(stats)
                )
            else:
                # Stats of the first project reporting this version are kept.
                bucket.projects.append(project)


def aggregate_group(
    projects: Iterable[tuple[str, ProjectReport]],
    latest: LatestVersionCache,
) -> GroupReport:
    """Fold ``(project name, report)`` pairs, in order, into a GroupReport."""
    aggregator = GroupAggregator(latest)
    for project, report in projects:
        aggregator.add_project(project, report)
    log.debug("aggregator.group_done", projects=aggregator.projects)
    return aggregator.result()
