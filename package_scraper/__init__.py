"""package-scraper: cross-project npm dependency usage and audit report."""

__version__ = "0.1.0"
