"""
Pydantic models for agent-generated insights and analysis requests.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class KeyFinding(BaseModel):
    model_config = ConfigDict(frozen=True)

    finding: str = ""
    importance: str = ""


class DataPattern(BaseModel):
    model_config = ConfigDict(frozen=True)

    pattern: str = ""
    details: str = ""


class Anomaly(BaseModel):
    model_config = ConfigDict(frozen=True)

    anomaly: str = ""
    severity: str = ""
    details: str = ""


class Recommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    recommendation: str = ""
    priority: str = ""
    rationale: str = ""


class Statistics(BaseModel):
    """Dataset-level figures reported by the agent."""

    model_config = ConfigDict(frozen=True)

    total_rows: int = 0
    total_columns: int = 0
    key_metrics: list[str] = Field(default_factory=list)


class InsightsResult(BaseModel):
    """Normalized insights rendered by the presenter."""

    model_config = ConfigDict(frozen=True)

    executive_summary: str = ""
    key_findings: list[KeyFinding] = Field(default_factory=list)
    data_patterns: list[DataPattern] = Field(default_factory=list)
    anomalies: list[Anomaly] = Field(default_factory=list)
    recommendations: list[Recommendation] = Field(default_factory=list)
    statistics: Statistics = Field(default_factory=Statistics)


class AnalyzeRequest(BaseModel):
    """Payload accepted by the analyze endpoint."""

    asset_ids: list[str] = Field(
        ..., min_length=1, description="Identifiers returned by a prior upload."
    )
    message: Optional[str] = Field(
        None, description="Optional override for the analysis instruction."
    )
    agent_id: Optional[str] = Field(
        None, description="Optional override for the configured agent."
    )
    session_id: Optional[str] = Field(
        None, description="Existing agent session to continue, if any."
    )


class AnalyzeResponse(BaseModel):
    """Envelope returned by the analyze endpoint."""

    success: bool
    insights: Optional[InsightsResult] = None
    report_url: Optional[str] = None
    session_id: Optional[str] = None
    error: Optional[str] = None


__all__ = [
    "AnalyzeRequest",
    "AnalyzeResponse",
    "Anomaly",
    "DataPattern",
    "InsightsResult",
    "KeyFinding",
    "Recommendation",
    "Statistics",
]
