"""Tests for correlating yarn audit advisories to top-level dependencies."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from package_scraper.engines.project_scraper.audit import (
    build_audit_command,
    correlate_audit,
    run_audit,
)
from package_scraper.engines.project_scraper.models import Correlated, DependencySet, Failed

_RUN = "package_scraper.engines.project_scraper.audit.run_command"

_SUMMARY = json.dumps({"type": "auditSummary", "data": {"vulnerabilities": {"high": 1}}})


def _deps() -> DependencySet:
    return DependencySet(
        runtime={"left-pad": "1.0.0", "lodash": "^4.17.0"},
        peer={"react": ">=16"},
        dev={"jest": "29.0.0"},
    )


class TestCorrelateAudit:
    def test_single_high_on_runtime_dep(self, advisory):
        result = correlate_audit(advisory("high", "left-pad>is-even") + "\n", _deps())
        assert isinstance(result, Correlated)
        assert result.audit.runtime == {"left-pad": {"high": 1}}
        assert result.audit.peer == {}
        assert result.audit.dev == {}

    def test_counts_accumulate_per_severity(self, advisory):
        out = "\n".join(
            [
                advisory("high", "lodash>a"),
                advisory("high", "lodash>b>c"),
                advisory("low", "lodash"),
            ]
        )
        result = correlate_audit(out, _deps())
        assert result.audit.runtime["lodash"] == {"high": 2, "low": 1}

    def test_each_path_counts(self, advisory):
        result = correlate_audit(advisory("moderate", "jest>x>y", "jest>z>y"), _deps())
        assert result.audit.dev == {"jest": {"moderate": 2}}

    def test_attributed_to_peer_and_dev(self, advisory):
        out = "\n".join([advisory("critical", "react>scheduler"), advisory("low", "jest>babel")])
        result = correlate_audit(out, _deps())
        assert result.audit.peer == {"react": {"critical": 1}}
        assert result.audit.dev == {"jest": {"low": 1}}

    def test_runtime_wins_over_dev(self, advisory):
        deps = DependencySet(runtime={"x": "1"}, dev={"x": "2"})
        result = correlate_audit(advisory("high", "x>y"), deps)
        assert result.audit.runtime == {"x": {"high": 1}}
        assert result.audit.dev == {}

    def test_undeclared_head_dropped(self, advisory):
        result = correlate_audit(advisory("high", "transitive-only>is-even"), _deps())
        assert isinstance(result, Correlated)
        assert result.audit.runtime == {}
        assert result.audit.peer == {}
        assert result.audit.dev == {}
        assert result.dropped == 1

    def test_non_advisory_records_ignored(self):
        result = correlate_audit(_SUMMARY + "\n", _deps())
        assert isinstance(result, Correlated)
        assert result.advisories == 0

    def test_blank_and_garbage_lines_skipped(self, advisory):
        out = "\n\nwarning: something\n" + advisory("high", "left-pad") + "\n  \n"
        result = correlate_audit(out, _deps())
        assert isinstance(result, Correlated)
        assert result.audit.runtime == {"left-pad": {"high": 1}}

    def test_empty_output_has_no_findings(self):
        result = correlate_audit("", _deps())
        assert isinstance(result, Correlated)
        assert result.audit.runtime == {}

    def test_malformed_finding_skipped(self, advisory):
        record = {
            "type": "auditAdvisory",
            "data": {
                "advisory": {
                    "severity": "high",
                    "findings": [{"paths": "left-pad"}, {"paths": ["lodash>x"]}],
                }
            },
        }
        result = correlate_audit(json.dumps(record), _deps())
        assert isinstance(result, Correlated)
        assert result.audit.runtime == {"lodash": {"high": 1}}
        assert result.skipped_records == 1

    def test_advisory_without_severity_skipped(self, advisory):
        record = {"data": {"advisory": {"findings": [{"paths": ["left-pad"]}]}}}
        out = json.dumps(record) + "\n" + advisory("low", "lodash")
        result = correlate_audit(out, _deps())
        assert result.audit.runtime == {"lodash": {"low": 1}}
        assert result.skipped_records == 1

    def test_whole_stream_unparsable_fails(self):
        result = correlate_audit("error Couldn't find a lockfile\nInfo: run yarn install\n", _deps())
        assert isinstance(result, Failed)
        assert "2 line(s)" in result.reason


class TestRunAudit:
    def test_default_command(self):
        assert build_audit_command() == ["yarn", "audit", "--json", "--level=low"]
        assert build_audit_command("high")[-1] == "--level=high"

    @pytest.mark.anyio
    async def test_runs_yarn_and_correlates(self, tmp_path, fake_tools, advisory):
        tools = fake_tools({"yarn": advisory("high", "left-pad>is-even") + "\n" + _SUMMARY})
        with patch(_RUN, new=tools):
            result = await run_audit(tmp_path, _deps())
        assert isinstance(result, Correlated)
        assert result.audit.runtime == {"left-pad": {"high": 1}}
        assert tools.calls == [(str(tmp_path), "yarn", ["audit", "--json", "--level=low"])]
