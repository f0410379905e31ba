"""Project scraper engine: declared deps, pruning and audit for one project."""

from package_scraper.engines.project_scraper.audit import correlate_audit, run_audit
from package_scraper.engines.project_scraper.manifest import read_manifest
from package_scraper.engines.project_scraper.models import (
    AuditMaps,
    DependencySet,
    ProjectReport,
)
from package_scraper.engines.project_scraper.pruner import prune_unused
from package_scraper.engines.project_scraper.scraper import ProjectScraper

__all__ = [
    "AuditMaps",
    "DependencySet",
    "ProjectReport",
    "ProjectScraper",
    "correlate_audit",
    "prune_unused",
    "read_manifest",
    "run_audit",
]
