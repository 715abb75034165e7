"""Tests for the HTML report and summary line."""

from __future__ import annotations

from redis_healthcheck.health.checks import CheckResult, Status
from redis_healthcheck.health.render import (
    build_html_report,
    overall_summary,
    summary_line,
)


def _results() -> list[CheckResult]:
    return [
        CheckResult(key="a", title="Connection & Latency", status=Status.OK,
                    summary="Reachable", details={"Host": "localhost", "Port": 6379}),
        CheckResult(key="b", title="Memory Usage", status=Status.WARNING,
                    summary="WARNING - high", details={"⚠ Warning": "<fragmented>"}),
        CheckResult(key="c", title="Key Health", status=Status.ERROR, summary=""),
        CheckResult(key="d", title="Eviction Policy", status=Status.OK, summary="noeviction"),
        CheckResult(key="e", title="Persistence", status=Status.OK, summary="Enabled"),
    ]


class TestHTMLReport:
    def test_style_and_group(self) -> None:
        html = build_html_report(_results())
        assert html.startswith("<style>")
        assert '<div class="redis-check-group">' in html
        assert html.endswith("</div>")

    def test_one_section_per_check(self) -> None:
        html = build_html_report(_results())
        assert html.count('class="redis-check-section ') == 5
        assert '<div class="redis-check-section warning">' in html
        assert '<div class="redis-check-title error">✗ Key Health</div>' in html
        assert "✓ Connection &amp; Latency" in html

    def test_detail_rows_escaped(self) -> None:
        html = build_html_report(_results())
        assert '<div class="redis-check-detail-label">Port:</div>' in html
        assert '<div class="redis-check-detail-value">6379</div>' in html
        assert "&lt;fragmented&gt;" in html
        assert "<fragmented>" not in html

    def test_empty_summary_omitted(self) -> None:
        html = build_html_report([CheckResult(key="c", title="Key Health", status=Status.OK)])
        assert "redis-check-summary\"" not in html
        assert "redis-check-details\"" not in html

    def test_no_results(self) -> None:
        html = build_html_report([])
        assert html.endswith('<div class="redis-check-group"></div>')


class TestSummary:
    def test_first_three_non_empty(self) -> None:
        assert overall_summary(_results()) == "Reachable | WARNING - high | noeviction"

    def test_headlines(self) -> None:
        results = _results()[:1]
        assert summary_line(Status.OK, results) == "Redis Health Status: HEALTHY ✓ - Reachable"
        assert summary_line(Status.WARNING, results).startswith("Redis Health Status: WARNINGS ⚠️ - ")
        assert summary_line(Status.ERROR, results).startswith("Redis Health Status: CRITICAL ⚠️ - ")
