"""Latest published version lookup for npm packages, cached per run."""

from __future__ import annotations

import os
import subprocess
from typing import Protocol, runtime_checkable
from urllib.parse import quote

import httpx
import structlog

from package_scraper.exceptions import LatestLookupError

log = structlog.get_logger("package_scraper.latest")

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"


@runtime_checkable
class LatestVersionLookup(Protocol):
    """Interface every latest-version source must satisfy (blocking)."""

    def latest(self, name: str) -> str: ...


class NpmViewLookup:
    """Ask the npm CLI: ``npm show <name> version``."""

    def __init__(self, npm: str = "npm", timeout: float | None = 60.0) -> None:
        self._npm = npm
        self._timeout = timeout

    def latest(self, name: str) -> str:
        try:
            result = subprocess.run(
                [self._npm, "show", name, "version"],
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise LatestLookupError(f"npm show failed: {exc}") from exc
        version = result.stdout.strip()
        if result.returncode != 0 or not version:
            raise LatestLookupError(
                f"npm show exited {result.returncode}: {result.stderr.strip()[:200]}"
            )
        return version


class RegistryLookup:
    """Query the registry directly: ``GET <registry>/<name>/latest``."""

    def __init__(
        self,
        registry_url: str | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        base = registry_url or os.environ.get(
            "PACKAGE_SCRAPER_REGISTRY_URL", DEFAULT_REGISTRY_URL
        )
        self._base = base.rstrip("/")
        self._client = client or httpx.Client(timeout=15.0)

    def close(self) -> None:
        self._client.close()

    def latest(self, name: str) -> str:
        # Scoped names keep their "@" but the slash must be escaped.
        url = f"{self._base}/{quote(name, safe='@')}/latest"
        try:
            resp = self._client.get(url)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise LatestLookupError(f"registry lookup failed: {exc}") from exc
        version = data.get("version") if isinstance(data, dict) else None
        if not isinstance(version, str) or not version:
            raise LatestLookupError("registry response has no version")
        return version


class NullLookup:
    """Lookup disabled: every package reports no latest version."""

    def latest(self, name: str) -> str:
        raise LatestLookupError("latest-version lookup disabled")


class LatestVersionCache:
    """At most one lookup per package name for the lifetime of the cache.

    Failures are cached too (as ``None``) so a broken package is not
    retried for every project that declares it.
    """

    def __init__(self, lookup: LatestVersionLookup) -> None:
        self._lookup = lookup
        self._cache: dict[str, str | None] = {}
        self.lookups = 0

    def __contains__(self, name: str) -> bool:
        return name in self._cache

    def get(self, name: str) -> str | None:
        if name in self._cache:
            return self._cache[name]
        self.lookups += 1
        try:
            version: str | None = self._lookup.latest(name)
        except LatestLookupError as exc:
            if not isinstance(self._lookup, NullLookup):
                log.warning("latest.lookup_failed", package=name, reason=str(exc))
            version = None
        else:
            log.debug("latest.resolved", package=name, version=version)
        self._cache[name] = version
        return version
