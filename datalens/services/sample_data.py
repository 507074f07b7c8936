"""Static sample insights for demonstrating the results view without an upload."""

from datalens.schemas import (
    Anomaly,
    DataPattern,
    InsightsResult,
    KeyFinding,
    Recommendation,
    Statistics,
)

SAMPLE_INSIGHTS = InsightsResult(
    executive_summary=(
        "Analysis of 12,450 sales transactions across Q1-Q4 2024 reveals a "
        "**15.3% year-over-year revenue growth** driven primarily by the Enterprise "
        "segment. The West Coast region outperforms all others by 23%, while customer "
        "churn in the SMB segment has increased 8% quarter-over-quarter, warranting "
        'immediate attention. Product category "Analytics Suite" shows the highest '
        "margin at 72%."
    ),
    key_findings=[
        KeyFinding(
            finding="Enterprise segment revenue grew 22% YoY, contributing 58% of total revenue.",
            importance="high",
        ),
        KeyFinding(
            finding="Customer acquisition cost decreased by 12% due to improved marketing funnel efficiency.",
            importance="high",
        ),
        KeyFinding(
            finding="Average deal size increased from $34K to $41K across all segments.",
            importance="medium",
        ),
        KeyFinding(
            finding="Q3 showed seasonal dip of 7% which recovered fully in Q4.",
            importance="low",
        ),
        KeyFinding(
            finding="Top 10% of accounts generate 45% of total revenue, indicating concentration risk.",
            importance="high",
        ),
    ],
    data_patterns=[
        DataPattern(
            pattern="Seasonal Revenue Cycle",
            details=(
                "Revenue follows a predictable quarterly pattern with Q4 being the "
                "strongest (32% of annual) and Q3 the weakest (18% of annual)."
            ),
        ),
        DataPattern(
            pattern="Regional Growth Divergence",
            details=(
                "West Coast and Southeast regions are growing at 2x the rate of "
                "Midwest and Northeast."
            ),
        ),
        DataPattern(
            pattern="Product Mix Shift",
            details="Platform products now represent 64% of new bookings vs. 41% a year ago.",
        ),
    ],
    anomalies=[
        Anomaly(
            anomaly="Unusual spike in refund requests during Week 38",
            severity="high",
            details="Refund rate jumped to 4.2% from a baseline of 1.1% after a billing update.",
        ),
        Anomaly(
            anomaly="Three enterprise accounts with negative net revenue",
            severity="medium",
            details="Excessive credits and SLA penalties on accounts #4521, #4533 and #4598.",
        ),
    ],
    recommendations=[
        Recommendation(
            recommendation="Implement targeted retention program for SMB segment.",
            priority="high",
            rationale="The churn increase represents $2.1M annual revenue at risk.",
        ),
        Recommendation(
            recommendation="Expand West Coast sales team by 30%.",
            priority="high",
            rationale="Highest growth and win rate (34%) but capacity-limited sales cycle.",
        ),
        Recommendation(
            recommendation="Introduce tiered pricing for Analytics Suite.",
            priority="medium",
            rationale="A 72% margin leaves room for entry-level pricing in the mid-market.",
        ),
        Recommendation(
            recommendation="Automate quarterly business review process.",
            priority="low",
            rationale="Manual QBR preparation consumes 120 hours per quarter.",
        ),
    ],
    statistics=Statistics(
        total_rows=12450,
        total_columns=24,
        key_metrics=[
            "Total Revenue: $47.2M",
            "Avg Deal Size: $41K",
            "Win Rate: 28%",
            "Customer Count: 1,847",
            "Churn Rate: 5.3%",
        ],
    ),
)

__all__ = ["SAMPLE_INSIGHTS"]
