"""Group configuration (packages.json) and run settings."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, ConfigDict, RootModel, ValidationError, field_validator

from package_scraper.engines.project_scraper.audit import (
    DEFAULT_AUDIT_LEVEL,
    SEVERITY_LEVELS,
    build_audit_command,
)
from package_scraper.engines.project_scraper.pruner import DEFAULT_USAGE_COMMAND
from package_scraper.exceptions import ConfigParseError, SettingsError

DEFAULT_CONFIG_FILE = "packages.json"
DEFAULT_OUTPUT_FILE = "packageMap.json"


class ProjectDescriptor(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    path: str

    @field_validator("name", "path")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v


class PackagesConfig(RootModel[dict[str, list[ProjectDescriptor]]]):
    """Group name -> ordered list of projects."""


@dataclass
class Project:
    group: str
    name: str
    path: Path


def resolve_project_path(raw: str, base_dir: Path) -> Path:
    """Relative paths are taken from the invocation directory."""
    path = Path(raw).expanduser()
    if path.is_absolute():
        return path
    return base_dir / path


def parse_config(text: str, base_dir: Path) -> dict[str, list[Project]]:
    """Parse packages.json content. Raises ``ConfigParseError``."""
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigParseError(f"invalid JSON: {exc}") from exc

    try:
        config = PackagesConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigParseError(f"invalid package groups: {exc}") from exc

    groups: dict[str, list[Project]] = {}
    for group, descriptors in config.root.items():
        seen: set[str] = set()
        projects: list[Project] = []
        for d in descriptors:
            if d.name in seen:
                raise ConfigParseError(f"duplicate project '{d.name}' in group '{group}'")
            seen.add(d.name)
            projects.append(
                Project(group=group, name=d.name, path=resolve_project_path(d.path, base_dir))
            )
        groups[group] = projects
    return groups


def load_config(path: Path, base_dir: Path | None = None) -> dict[str, list[Project]]:
    """Read and validate the group configuration file at *path*."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigParseError(f"cannot read {path}: {exc.strerror or exc}") from exc
    except UnicodeDecodeError as exc:
        raise ConfigParseError(f"{path} is not valid UTF-8: {exc.reason}") from exc
    return parse_config(text, base_dir or Path.cwd())


@dataclass
class ScraperSettings:
    """Tool commands and policies for one run."""

    audit_level: str = field(
        default_factory=lambda: os.environ.get(
            "PACKAGE_SCRAPER_AUDIT_LEVEL", DEFAULT_AUDIT_LEVEL
        ).lower()
    )
    usage_command: list[str] = field(default_factory=lambda: list(DEFAULT_USAGE_COMMAND))
    prune: bool = True
    fail_fast: bool = False

    def __post_init__(self) -> None:
        if self.audit_level not in SEVERITY_LEVELS:
            raise SettingsError(
                f"unknown audit level '{self.audit_level}', expected one of {SEVERITY_LEVELS}"
            )

    @property
    def audit_command(self) -> list[str]:
        return build_audit_command(self.audit_level)
