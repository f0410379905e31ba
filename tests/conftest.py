"""Shared pytest fixtures for package-scraper tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def make_project(tmp_path):
    """Create ``tmp_path/<name>/package.json`` from a manifest dict."""

    def _make(name: str, manifest: dict) -> Path:
        path = tmp_path / name
        path.mkdir()
        (path / "package.json").write_text(json.dumps(manifest))
        return path

    return _make


class FakeTools:
    """Stand-in for ``run_command``: canned stdout per command name."""

    def __init__(self, outputs: dict[str, str] | None = None) -> None:
        self.outputs = dict(outputs or {})
        self.calls: list[tuple[str, str, list[str]]] = []

    async def __call__(self, cwd, cmd, args, **kwargs) -> str:
        self.calls.append((str(cwd), cmd, list(args)))
        out = self.outputs.get(cmd, "")
        if isinstance(out, dict):
            out = out.get(Path(cwd).name, "")
        if isinstance(out, Exception):
            raise out
        return out


@pytest.fixture
def fake_tools():
    return FakeTools


@pytest.fixture
def advisory():
    """Build one yarn audit advisory line."""

    def _line(severity: str, *paths: str) -> str:
        record = {
            "type": "auditAdvisory",
            "data": {"advisory": {"severity": severity, "findings": [{"paths": list(paths)}]}},
        }
        return json.dumps(record)

    return _line
