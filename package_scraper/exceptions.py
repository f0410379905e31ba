"""Custom exceptions for package-scraper."""


class ScraperError(Exception):
    """Base exception for all package-scraper errors."""


class ConfigParseError(ScraperError):
    """Raised when the group configuration cannot be read or validated."""


class ManifestReadError(ScraperError):
    """Raised when a project's package.json is missing or unparsable."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot read manifest {path}: {reason}")


class ProcessLaunchError(ScraperError):
    """Raised when an external command cannot be spawned."""

    def __init__(self, cmd: str, reason: str):
        self.cmd = cmd
        self.reason = reason
        super().__init__(f"failed to launch '{cmd}': {reason}")


class AuditParseError(ScraperError):
    """Raised when the audit tool's output cannot be correlated."""


class PruneParseError(ScraperError):
    """Raised when the usage checker's output is unparsable.

    Never escapes the pruner: it is turned into a pass-through result.
    """


class LatestLookupError(ScraperError):
    """Raised by a lookup when a package's latest version cannot be determined."""


class SettingsError(ScraperError):
    """Raised when a run setting (flag or environment variable) is invalid."""
