"""HTML fragment and one-line summary for the status page."""

from __future__ import annotations

from collections.abc import Sequence
from html import escape

from .checks import CheckResult, Status

STATUS_ICONS = {
    Status.OK: "✓",
    Status.WARNING: "⚠",
    Status.ERROR: "✗",
}

STATUS_HEADLINES = {
    Status.OK: "HEALTHY ✓",
    Status.WARNING: "WARNINGS ⚠️",
    Status.ERROR: "CRITICAL ⚠️",
}

REPORT_STYLE = """<style>
  .redis-check-group { margin: 0; }
  .redis-check-section { margin: 10px 0; padding: 10px; border-left: 4px solid #ccc; background: #f9f9f9; }
  .redis-check-section.ok { border-left-color: #28a745; }
  .redis-check-section.warning { border-left-color: #ffc107; background: #fffbf0; }
  .redis-check-section.error { border-left-color: #dc3545; background: #fff5f5; }
  .redis-check-title { font-weight: bold; font-size: 1.1em; margin-bottom: 8px; }
  .redis-check-title.ok { color: #28a745; }
  .redis-check-title.warning { color: #ff9800; }
  .redis-check-title.error { color: #dc3545; }
  .redis-check-summary { font-size: 0.95em; margin-bottom: 8px; color: #555; }
  .redis-check-details { margin-left: 10px; }
  .redis-check-detail-row { display: flex; justify-content: space-between; padding: 4px 0; border-bottom: 1px solid #eee; }
  .redis-check-detail-row:last-child { border-bottom: none; }
  .redis-check-detail-label { font-weight: 500; color: #333; min-width: 200px; }
  .redis-check-detail-value { color: #666; text-align: right; }
</style>"""

SUMMARY_PARTS = 3


def build_html_report(results: Sequence[CheckResult]) -> str:
    parts = [REPORT_STYLE, '<div class="redis-check-group">']

    for result in results:
        status = escape(result.status.value)
        icon = STATUS_ICONS.get(result.status, "?")

        parts.append(f'<div class="redis-check-section {status}">')
        parts.append(f'<div class="redis-check-title {status}">{icon} {escape(result.title)}</div>')

        if result.summary:
            parts.append(f'<div class="redis-check-summary">{escape(result.summary)}</div>')

        if result.details:
            parts.append('<div class="redis-check-details">')
            for label, value in result.details.items():
                parts.append(
                    '<div class="redis-check-detail-row">'
                    f'<div class="redis-check-detail-label">{escape(str(label))}:</div>'
                    f'<div class="redis-check-detail-value">{escape(str(value))}</div>'
                    "</div>"
                )
            parts.append("</div>")

        parts.append("</div>")

    parts.append("</div>")
    return "".join(parts)


def overall_summary(results: Sequence[CheckResult]) -> str:
    """First few non-empty check summaries joined with `` | ``."""
    summaries = [r.summary for r in results if r.summary]
    return " | ".join(summaries[:SUMMARY_PARTS])


def summary_line(status: Status, results: Sequence[CheckResult]) -> str:
    return f"Redis Health Status: {STATUS_HEADLINES[status]} - {overall_summary(results)}"
