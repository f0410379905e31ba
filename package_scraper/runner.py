"""ReportRunner: scrape every configured project and build the combined report."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from package_scraper.config import Project, ScraperSettings
from package_scraper.engines.group_aggregator.aggregator import aggregate_group
from package_scraper.engines.group_aggregator.latest import LatestVersionCache
from package_scraper.engines.group_aggregator.models import (
    CombinedReport,
    combined_to_dict,
)
from package_scraper.engines.project_scraper.models import ProjectReport
from package_scraper.engines.project_scraper.scraper import ProjectScraper
from package_scraper.exceptions import (
    AuditParseError,
    ManifestReadError,
    ProcessLaunchError,
)
from package_scraper.progress import ProgressTracker, ProjectProgress

log = structlog.get_logger("package_scraper.runner")

# Per-project failures: skipped by default, fatal with fail_fast.
PROJECT_ERRORS = (ManifestReadError, ProcessLaunchError, AuditParseError)


@dataclass
class RunResult:
    report: CombinedReport
    progress: ProgressTracker = field(default_factory=ProgressTracker)

    @property
    def failures(self) -> list[ProjectProgress]:
        return self.progress.failures


class ReportRunner:
    """Scrape projects one at a time, then aggregate each group."""

    def __init__(
        self,
        settings: ScraperSettings,
        latest: LatestVersionCache,
        scraper: ProjectScraper | None = None,
    ) -> None:
        self._settings = settings
        self._latest = latest
        self._scraper = scraper or ProjectScraper(
            usage_command=settings.usage_command,
            audit_command=settings.audit_command,
            prune=settings.prune,
        )

    async def run(self, groups: dict[str, list[Project]]) -> RunResult:
        """Run every group in configuration order.

        With ``fail_fast`` the first project failure propagates; otherwise
        the project is recorded as failed and left out of its group.
        """
        progress = ProgressTracker()
        combined: CombinedReport = {}

        for group, projects in groups.items():
            reports: list[tuple[str, ProjectReport]] = []
            for project in projects:
                report = await self._scrape_one(project, progress)
                if report is not None:
                    reports.append((project.name, report))

            # The latest-version lookup blocks; keep it off the event loop.
            combined[group] = await asyncio.to_thread(aggregate_group, reports, self._latest)
            log.info(
                "runner.group_aggregated",
                group=group,
                projects=len(reports),
                failed=len(projects) - len(reports),
            )

        return RunResult(report=combined, progress=progress)

    async def _scrape_one(
        self, project: Project, progress: ProgressTracker
    ) -> ProjectReport | None:
        progress.start(project.group, project.name)
        log.info(
            "runner.scrape_started",
            group=project.group,
            project=project.name,
            path=str(project.path),
        )
        try:
            report = await self._scraper.scrape(project.path)
        except PROJECT_ERRORS as exc:
            progress.fail(project.group, project.name, str(exc))
            log.error(
                "runner.scrape_failed",
                group=project.group,
                project=project.name,
                error=str(exc),
                exc_info=True,
            )
            if self._settings.fail_fast:
                raise
            return None

        progress.complete(project.group, project.name)
        return report


def write_report(path: Path, report: CombinedReport) -> None:
    """Write the combined report as two-space indented JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(combined_to_dict(report), indent=2) + "\n", encoding="utf-8")
    log.info("runner.report_written", path=str(path), groups=len(report))
