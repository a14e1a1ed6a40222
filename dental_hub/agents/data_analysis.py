"""KPI analysis agent: scores practice metrics against the goal table."""

from __future__ import annotations

import logging

from dental_hub.agents.scoring import score
from dental_hub.models import (
    DEFAULT_GOALS,
    KPIAnalysis,
    MetricGoalTable,
    MetricName,
    PracticeMetricSet,
    ScoredMetric,
)

logger = logging.getLogger(__name__)

TOP_PERFORMER_THRESHOLD = 95.0
IMPROVEMENT_THRESHOLD = 80.0


def format_amount(value: float) -> str:
    """Format a dollar amount with thousands separators and at most three
    decimals, trailing zeros dropped: 5000 -> '5,000', 1234.5 -> '1,234.5'."""
    return f"{value:,.3f}".rstrip("0").rstrip(".")


def _actuals(data: PracticeMetricSet) -> dict[MetricName, float]:
    return {
        MetricName.PRODUCTION: data.production,
        MetricName.COLLECTIONS: data.collections,
        MetricName.HYGIENE: data.hygiene,
        MetricName.NEW_PATIENTS: data.new_patients,
        MetricName.ACTIVE_PATIENTS: data.active_patients,
        MetricName.RECALL_CONFIRMATIONS: data.recalls.confirmed,
        MetricName.NO_SHOWS: data.appointments.no_shows,
        MetricName.CANCELLATIONS: data.appointments.cancellations,
    }


def identify_top_performers(metrics: dict[MetricName, ScoredMetric]) -> list[MetricName]:
    return [
        name for name, scored in metrics.items()
        if scored.performance >= TOP_PERFORMER_THRESHOLD
    ]


def identify_areas_for_improvement(
    metrics: dict[MetricName, ScoredMetric],
) -> list[MetricName]:
    """Metrics under 80% of goal.  The 80-95% band is left unflagged."""
    return [
        name for name, scored in metrics.items()
        if scored.performance < IMPROVEMENT_THRESHOLD
    ]


def generate_summary(
    metrics: dict[MetricName, ScoredMetric],
    top_performers: list[MetricName],
    areas_for_improvement: list[MetricName],
    timeframe: str,
) -> str:
    summary = f"Practice KPI Analysis ({timeframe}):\n\n"

    if top_performers:
        summary += f"Strong performance in: {', '.join(top_performers)}.\n\n"

    if areas_for_improvement:
        summary += f"Areas needing attention: {', '.join(areas_for_improvement)}.\n\n"

    for metric, label in (
        (MetricName.PRODUCTION, "Production"),
        (MetricName.HYGIENE, "Hygiene production"),
    ):
        scored = metrics.get(metric)
        if scored is None:
            continue
        summary += f"{label} is at {scored.performance:.1f}% of target "
        if scored.gap:
            summary += f"with a gap of ${format_amount(scored.gap)}.\n"
        else:
            summary += "(exceeding target).\n"

    return summary


class DataAnalysisAgent:
    """Analyzes practice data and identifies KPI patterns."""

    def __init__(self, goals: MetricGoalTable | None = None) -> None:
        self._goals = goals or DEFAULT_GOALS

    def score_metrics(self, data: PracticeMetricSet) -> dict[MetricName, ScoredMetric]:
        actuals = _actuals(data)
        return {
            metric: score(actuals[metric], self._goals.goal_for(metric))
            for metric in MetricName
        }

    async def analyze_kpi(self, data: PracticeMetricSet) -> KPIAnalysis:
        """Score every KPI in *data* and summarise the result."""
        metrics = self.score_metrics(data)
        top_performers = identify_top_performers(metrics)
        areas = identify_areas_for_improvement(metrics)
        logger.debug(
            "KPI analysis (%s): top=%s attention=%s",
            data.timeframe, top_performers, areas,
        )
        return KPIAnalysis(
            summary=generate_summary(metrics, top_performers, areas, data.timeframe),
            metrics=metrics,
            top_performers=top_performers,
            areas_for_improvement=areas,
        )
