"""CLI entry point: package-scraper.

Subcommands:
    package-scraper run                              # packages.json -> packageMap.json
    package-scraper run -c groups.json -o out.json   # explicit files
    package-scraper run --latest registry --level high
"""

from __future__ import annotations

import asyncio
import sys
import time
from pathlib import Path

import click

from package_scraper.config import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_OUTPUT_FILE,
    ScraperSettings,
    load_config,
)
from package_scraper.core.logging import setup_logging
from package_scraper.engines.group_aggregator.latest import (
    LatestVersionCache,
    LatestVersionLookup,
    NpmViewLookup,
    NullLookup,
    RegistryLookup,
)
from package_scraper.engines.project_scraper.audit import SEVERITY_LEVELS
from package_scraper.exceptions import ConfigParseError, ScraperError, SettingsError
from package_scraper.runner import ReportRunner, write_report

EXIT_PROJECTS_FAILED = 2


def _make_lookup(source: str) -> LatestVersionLookup:
    if source == "registry":
        return RegistryLookup()
    if source == "none":
        return NullLookup()
    return NpmViewLookup()


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """Package scraper: cross-project npm dependency usage and audit report."""
    setup_logging(verbose=verbose)


@main.command("run")
@click.option(
    "-c", "--config", "config_file",
    default=DEFAULT_CONFIG_FILE, show_default=True, help="Package group configuration",
)
@click.option(
    "-o", "--output", "output_file",
    default=DEFAULT_OUTPUT_FILE, show_default=True, help="Combined report path",
)
@click.option(
    "--level",
    type=click.Choice(SEVERITY_LEVELS),
    default=None,
    help="Minimum audit severity (default: low, or PACKAGE_SCRAPER_AUDIT_LEVEL)",
)
@click.option(
    "--latest",
    type=click.Choice(["npm", "registry", "none"]),
    default="npm", show_default=True,
    help="Where to look up the latest published version",
)
@click.option("--no-prune", is_flag=True, help="Do not run the unused-dependency checker")
@click.option("--fail-fast", is_flag=True, help="Abort on the first project that fails")
def run(
    config_file: str,
    output_file: str,
    level: str | None,
    latest: str,
    no_prune: bool,
    fail_fast: bool,
) -> None:
    """Scrape every configured project and write the combined report."""
    start = time.monotonic()

    try:
        groups = load_config(Path(config_file))
    except ConfigParseError as e:
        click.echo(f"Error: error parsing {config_file}: {e}", err=True)
        sys.exit(1)

    overrides: dict = {"prune": not no_prune, "fail_fast": fail_fast}
    if level is not None:
        overrides["audit_level"] = level
    try:
        settings = ScraperSettings(**overrides)
    except SettingsError as e:
        click.echo(f"Error: invalid settings: {e}", err=True)
        sys.exit(1)

    lookup = _make_lookup(latest)
    runner = ReportRunner(settings, LatestVersionCache(lookup))
    try:
        result = asyncio.run(runner.run(groups))
    except ScraperError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        if isinstance(lookup, RegistryLookup):
            lookup.close()

    click.echo("packageMap saving to file")
    try:
        write_report(Path(output_file), result.report)
    except OSError as e:
        click.echo(f"Error: cannot write {output_file}: {e}", err=True)
        sys.exit(1)
    click.echo(f"packageMap saved to {output_file}")

    summary = result.progress.get_summary()
    if summary["failed"]:
        click.echo(f"\n{summary['failed']} project(s) failed:")
        for p in summary["projects"]:
            if p["status"] == "failed":
                click.echo(f"  [!] {p['group']}/{p['project']}: {p['error']}")

    click.echo(
        f"{len(summary['projects'])} project(s) scraped "
        f"in {summary['total_duration']}s"
    )
    elapsed_ms = int((time.monotonic() - start) * 1000)
    click.echo(f"completed in {elapsed_ms}ms")

    if result.failures:
        sys.exit(EXIT_PROJECTS_FAILED)


if __name__ == "__main__":
    main()
