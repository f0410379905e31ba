"""ProjectScraper: manifest read, prune, audit for a single project."""

from __future__ import annotations

from pathlib import Path

import structlog

from package_scraper.engines.project_scraper.audit import build_audit_command, run_audit
from package_scraper.engines.project_scraper.manifest import read_manifest
from package_scraper.engines.project_scraper.models import (
    Failed,
    ProjectReport,
)
from package_scraper.engines.project_scraper.pruner import (
    DEFAULT_USAGE_COMMAND,
    prune_unused,
)
from package_scraper.exceptions import AuditParseError

log = structlog.get_logger("package_scraper.scraper")


class ProjectScraper:
    """Produce a :class:`ProjectReport` for one project directory.

    The three steps run strictly in sequence: the pruned dependency set is
    what audit findings are attributed against.
    """

    def __init__(
        self,
        *,
        usage_command: list[str] | None = None,
        audit_command: list[str] | None = None,
        prune: bool = True,
    ) -> None:
        self._usage_command = usage_command or list(DEFAULT_USAGE_COMMAND)
        self._audit_command = audit_command or build_audit_command()
        self._prune = prune

    async def scrape(self, project_path: Path) -> ProjectReport:
        """Scrape *project_path*.

        Raises ``ManifestReadError``, ``ProcessLaunchError`` or
        ``AuditParseError``; the caller decides whether to skip the project.
        """
        deps = read_manifest(project_path)
        log.debug(
            "scraper.manifest_read",
            project_path=str(project_path),
            runtime=len(deps.runtime),
            peer=len(deps.peer),
            dev=len(deps.dev),
        )

        if self._prune:
            pruned = await prune_unused(project_path, deps, command=self._usage_command)
            deps = pruned.dependencies

        result = await run_audit(project_path, deps, command=self._audit_command)
        if isinstance(result, Failed):
            raise AuditParseError(result.reason)

        return ProjectReport(dependencies=deps, audit=result.audit)