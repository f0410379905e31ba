"""Prune dependencies the usage checker (depcheck) reports as unused."""

from __future__ import annotations

import json
from pathlib import Path

import structlog

from package_scraper.core.process import run_command
from package_scraper.engines.project_scraper.models import (
    KINDS,
    DependencySet,
    PassThrough,
    Pruned,
    PruneResult,
)
from package_scraper.exceptions import PruneParseError

log = structlog.get_logger("package_scraper.scraper")

DEFAULT_USAGE_COMMAND = ["npx", "depcheck", "--json"]


def parse_unused(output: str) -> dict[str, list[str]]:
    """Parse depcheck output into manifest key -> unused names.

    Raises ``PruneParseError`` if the output is not a JSON object or a
    list has the wrong shape.
    """
    try:
        data = json.loads(output)
    except json.JSONDecodeError as exc:
        raise PruneParseError(f"invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise PruneParseError("top-level value is not an object")

    unused: dict[str, list[str]] = {}
    for key, _ in KINDS.values():
        names = data.get(key, [])
        if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
            raise PruneParseError(f"'{key}' is not a list of package names")
        unused[key] = names
    return unused


def apply_unused(deps: DependencySet, unused: dict[str, list[str]]) -> Pruned:
    """Return a pruned copy of *deps*; names that are not declared are ignored."""
    pruned = deps.copy()
    removed: list[tuple[str, str]] = []
    for kind, (key, _) in KINDS.items():
        declared = pruned.of_kind(kind)
        for name in unused.get(key, []):
            if declared.pop(name, None) is not None:
                removed.append((kind, name))
    return Pruned(dependencies=pruned, removed=removed)


async def prune_unused(
    project_path: Path,
    deps: DependencySet,
    *,
    command: list[str] | None = None,
) -> PruneResult:
    """Run the usage checker in *project_path* and drop what it reports unused.

    Unparsable checker output is not an error: the dependencies pass
    through untouched.
    """
    cmd, *args = command or DEFAULT_USAGE_COMMAND
    output = await run_command(project_path, cmd, args)

    try:
        unused = parse_unused(output)
    except PruneParseError as exc:
        log.warning("scraper.prune_skipped", project_path=str(project_path), reason=str(exc))
        return PassThrough(dependencies=deps, reason=str(exc))

    result = apply_unused(deps, unused)
    log.debug(
        "scraper.pruned",
        project_path=str(project_path),
        removed=[f"{kind}:{name}" for kind, name in result.removed],
    )
    return result
