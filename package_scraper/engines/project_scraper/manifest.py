"""Reader for a project's package.json dependency fields."""

from __future__ import annotations

import json
from pathlib import Path

from package_scraper.engines.project_scraper.models import KINDS, DependencySet
from package_scraper.exceptions import ManifestReadError

MANIFEST_NAME = "package.json"


def read_manifest(project_path: Path) -> DependencySet:
    """Read declared runtime, peer and dev dependencies of *project_path*.

    Absent fields default to empty. Raises ``ManifestReadError`` if the
    manifest is missing, is not valid JSON, or a field has the wrong shape.
    """
    path = project_path / MANIFEST_NAME
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ManifestReadError(str(path), exc.strerror or str(exc)) from exc
    except UnicodeDecodeError as exc:
        raise ManifestReadError(str(path), f"not valid UTF-8: {exc.reason}") from exc

    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ManifestReadError(str(path), f"invalid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise ManifestReadError(str(path), "top-level value is not an object")

    deps = DependencySet()
    for kind, (key, _) in KINDS.items():
        section = data.get(key)
        if section is None:
            continue
        if not isinstance(section, dict):
            raise ManifestReadError(str(path), f"'{key}' is not an object")
        for name, version in section.items():
            if not isinstance(version, str):
                raise ManifestReadError(
                    str(path), f"'{key}.{name}' has a non-string version"
                )
        deps.of_kind(kind).update(section)
    return deps
