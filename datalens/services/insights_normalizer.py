"""
Normalize agent invocation responses into typed insights.

The agent output is model-generated and does not reliably follow the
requested schema, so decoding degrades field by field: a missing or
wrong-typed field falls back to its default without affecting its siblings,
and text that cannot be parsed as a JSON object becomes the executive summary.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, TypeVar

from datalens.core.errors import AnalysisFailedError
from datalens.schemas import (
    Anomaly,
    DataPattern,
    InsightsResult,
    KeyFinding,
    Recommendation,
    Statistics,
)

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_MESSAGE = "Analysis failed. Please try again."

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class NormalizedAnalysis:
    """Outcome of a successful agent invocation."""

    insights: InsightsResult
    report_url: Optional[str] = None
    session_id: Optional[str] = None


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _integer(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        cleaned = value.replace(",", "").replace("_", "").strip()
        if cleaned.isdigit():
            return int(cleaned)
    return 0


def _records(
    value: Any,
    build: Callable[[Mapping[str, Any]], T],
    primary_field: str,
) -> list[T]:
    """Decode a list of records, keeping bare strings as the primary text."""
    if not isinstance(value, list):
        return []
    decoded: list[T] = []
    for item in value:
        if isinstance(item, Mapping):
            decoded.append(build(item))
        elif isinstance(item, str) and item.strip():
            decoded.append(build({primary_field: item}))
    return decoded


def _key_finding(raw: Mapping[str, Any]) -> KeyFinding:
    return KeyFinding(finding=_text(raw.get("finding")), importance=_text(raw.get("importance")))


def _data_pattern(raw: Mapping[str, Any]) -> DataPattern:
    return DataPattern(pattern=_text(raw.get("pattern")), details=_text(raw.get("details")))


def _anomaly(raw: Mapping[str, Any]) -> Anomaly:
    return Anomaly(
        anomaly=_text(raw.get("anomaly")),
        severity=_text(raw.get("severity")),
        details=_text(raw.get("details")),
    )


def _recommendation(raw: Mapping[str, Any]) -> Recommendation:
    return Recommendation(
        recommendation=_text(raw.get("recommendation")),
        priority=_text(raw.get("priority")),
        rationale=_text(raw.get("rationale")),
    )


def _statistics(value: Any) -> Statistics:
    raw = _mapping(value)
    metrics = raw.get("key_metrics")
    key_metrics = (
        [text for text in (_text(item) for item in metrics) if text]
        if isinstance(metrics, list)
        else []
    )
    return Statistics(
        total_rows=_integer(raw.get("total_rows")),
        total_columns=_integer(raw.get("total_columns")),
        key_metrics=key_metrics,
    )


def decode_insights(payload: Mapping[str, Any]) -> InsightsResult:
    """Build an ``InsightsResult`` from an arbitrary mapping. Never raises."""
    return InsightsResult(
        executive_summary=_text(payload.get("executive_summary")),
        key_findings=_records(payload.get("key_findings"), _key_finding, "finding"),
        data_patterns=_records(payload.get("data_patterns"), _data_pattern, "pattern"),
        anomalies=_records(payload.get("anomalies"), _anomaly, "anomaly"),
        recommendations=_records(
            payload.get("recommendations"), _recommendation, "recommendation"
        ),
        statistics=_statistics(payload.get("statistics")),
    )


def _strip_code_fence(text: str) -> str:
    cleaned = text.strip()
    if not cleaned.startswith("```"):
        return cleaned
    lines = cleaned.splitlines()
    if lines and lines[0].startswith("```"):
        lines = lines[1:]
    if lines and lines[-1].strip() == "```":
        lines = lines[:-1]
    return "\n".join(lines)


def parse_result_text(text: str) -> InsightsResult:
    """Parse a JSON-encoded result, falling back to a summary-only result."""
    try:
        parsed = json.loads(_strip_code_fence(text))
    except (json.JSONDecodeError, ValueError):
        parsed = None
    if isinstance(parsed, Mapping):
        return decode_insights(parsed)
    logger.info("Agent result is not a JSON object; using it as the summary")
    return InsightsResult(executive_summary=text)


def extract_report_url(raw: Mapping[str, Any]) -> Optional[str]:
    """Return the first artifact's ``file_url`` when one is present."""
    artifacts = _mapping(raw.get("module_outputs")).get("artifact_files")
    if not isinstance(artifacts, list) or not artifacts:
        return None
    url = _mapping(artifacts[0]).get("file_url")
    return url if isinstance(url, str) and url else None


class InsightsNormalizer:
    """Turn an ``AgentInvokeResponse`` mapping into a ``NormalizedAnalysis``."""

    def normalize(self, raw: Any) -> NormalizedAnalysis:
        """Normalize ``raw`` or raise ``AnalysisFailedError``.

        A failed invocation never yields a partial ``InsightsResult``.
        """
        if not isinstance(raw, Mapping):
            raise AnalysisFailedError(DEFAULT_FAILURE_MESSAGE)

        response = _mapping(raw.get("response"))
        session_id = raw.get("session_id")
        if not isinstance(session_id, str) or not session_id:
            session_id = None

        if not raw.get("success"):
            message = (
                _text(raw.get("error"))
                or _text(response.get("message"))
                or DEFAULT_FAILURE_MESSAGE
            )
            raise AnalysisFailedError(message, details={"session_id": session_id})

        result = response.get("result")
        if isinstance(result, str):
            insights = parse_result_text(result)
        elif isinstance(result, Mapping):
            insights = decode_insights(result)
        else:
            insights = InsightsResult(executive_summary=_text(response.get("message")))

        return NormalizedAnalysis(
            insights=insights,
            report_url=extract_report_url(raw),
            session_id=session_id,
        )


__all__ = [
    "DEFAULT_FAILURE_MESSAGE",
    "InsightsNormalizer",
    "NormalizedAnalysis",
    "decode_insights",
    "extract_report_url",
    "parse_result_text",
]
