"""Data models for the project scraper engine."""

from __future__ import annotations

from dataclasses import dataclass, field

# (manifest key, audit report key) per dependency kind, in lookup priority order.
KINDS: dict[str, tuple[str, str]] = {
    "runtime": ("dependencies", "dependenciesAudit"),
    "peer": ("peerDependencies", "peerDependenciesAudit"),
    "dev": ("devDependencies", "devDependenciesAudit"),
}

AuditSeverityStats = dict[str, int]


@dataclass
class DependencySet:
    """Declared dependencies of one project, name -> version string per kind."""

    runtime: dict[str, str] = field(default_factory=dict)
    peer: dict[str, str] = field(default_factory=dict)
    dev: dict[str, str] = field(default_factory=dict)

    def of_kind(self, kind: str) -> dict[str, str]:
        return getattr(self, kind)

    def kind_of(self, name: str) -> str | None:
        """Return the first kind (runtime, peer, dev) declaring *name*."""
        for kind in KINDS:
            if name in self.of_kind(kind):
                return kind
        return None

    def copy(self) -> DependencySet:
        return DependencySet(
            runtime=dict(self.runtime),
            peer=dict(self.peer),
            dev=dict(self.dev),
        )


@dataclass
class AuditMaps:
    """Severity counts attributed to top-level packages, per kind."""

    runtime: dict[str, AuditSeverityStats] = field(default_factory=dict)
    peer: dict[str, AuditSeverityStats] = field(default_factory=dict)
    dev: dict[str, AuditSeverityStats] = field(default_factory=dict)

    def of_kind(self, kind: str) -> dict[str, AuditSeverityStats]:
        return getattr(self, kind)

    def record(self, kind: str, name: str, severity: str) -> None:
        stats = self.of_kind(kind).setdefault(name, {})
        stats[severity] = stats.get(severity, 0) + 1


@dataclass
class ProjectReport:
    """Pruned dependencies plus audit findings for one project."""

    dependencies: DependencySet
    audit: AuditMaps = field(default_factory=AuditMaps)


# ── prune result ─────────────────────────────────────────────────────────


@dataclass
class Pruned:
    """Usage checker output parsed; *removed* lists the (kind, name) pairs dropped."""

    dependencies: DependencySet
    removed: list[tuple[str, str]] = field(default_factory=list)


@dataclass
class PassThrough:
    """Usage checker output unusable; dependencies are untouched."""

    dependencies: DependencySet
    reason: str


PruneResult = Pruned | PassThrough


# ── audit result ─────────────────────────────────────────────────────────


@dataclass
class Correlated:
    audit: AuditMaps
    advisories: int = 0
    dropped: int = 0
    skipped_records: int = 0


@dataclass
class Failed:
    reason: str


AuditResult = Correlated | Failed
