"""Read-only text rendering of normalized insights."""

from __future__ import annotations

from typing import Optional

from datalens.schemas import InsightsResult

_KNOWN_LEVELS = ("high", "medium", "low")


def format_file_size(size_bytes: int) -> str:
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{size_bytes / (1024 * 1024):.1f} MB"


def level_label(level: str) -> str:
    """Normalize importance/priority/severity values for display."""
    cleaned = (level or "").strip().lower()
    return cleaned if cleaned in _KNOWN_LEVELS else "n/a"


class InsightsPresenter:
    """Render an ``InsightsResult`` as markdown-flavoured plain text."""

    def render(self, insights: InsightsResult, *, report_url: Optional[str] = None) -> str:
        stats = insights.statistics
        lines: list[str] = [
            "# Data Insights",
            "",
            f"Rows: {stats.total_rows or '--'}    Columns: {stats.total_columns or '--'}",
        ]
        if report_url:
            lines.append(f"Report: {report_url}")
        if stats.key_metrics:
            lines.extend(["", "Key metrics: " + " | ".join(stats.key_metrics)])

        lines.extend(["", "## Executive Summary", "", insights.executive_summary or "(none)"])

        if insights.key_findings:
            lines.extend(["", f"## Key Findings ({len(insights.key_findings)})", ""])
            lines.extend(
                f"- [{level_label(item.importance)}] {item.finding}"
                for item in insights.key_findings
            )
        if insights.data_patterns:
            lines.extend(["", "## Data Patterns", ""])
            for pattern in insights.data_patterns:
                lines.append(f"- {pattern.pattern}")
                if pattern.details:
                    lines.append(f"  {pattern.details}")
        if insights.anomalies:
            lines.extend(["", "## Anomalies", ""])
            for anomaly in insights.anomalies:
                lines.append(f"- [{level_label(anomaly.severity)}] {anomaly.anomaly}")
                if anomaly.details:
                    lines.append(f"  {anomaly.details}")
        if insights.recommendations:
            lines.extend(["", "## Recommendations", ""])
            for index, item in enumerate(insights.recommendations, start=1):
                lines.append(f"{index}. [{level_label(item.priority)}] {item.recommendation}")
                if item.rationale:
                    lines.append(f"   {item.rationale}")

        return "\n".join(lines) + "\n"


__all__ = ["InsightsPresenter", "format_file_size", "level_label"]
