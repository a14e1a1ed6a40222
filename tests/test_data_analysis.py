"""Tests for the KPI analysis agent."""

from __future__ import annotations

import pytest

from dental_hub.agents.data_analysis import (
    DataAnalysisAgent,
    format_amount,
    identify_areas_for_improvement,
    identify_top_performers,
)
from dental_hub.agents.data_retrieval import SNAPSHOT_METRICS
from dental_hub.agents.scoring import calculate_metric
from dental_hub.models import MetricName


class TestThresholds:
    def test_boundaries(self):
        metrics = {
            MetricName.PRODUCTION: calculate_metric(95, 100),
            MetricName.HYGIENE: calculate_metric(80, 100),
            MetricName.COLLECTIONS: calculate_metric(79.9, 100),
        }
        assert identify_top_performers(metrics) == [MetricName.PRODUCTION]
        assert identify_areas_for_improvement(metrics) == [MetricName.COLLECTIONS]

    def test_middle_band_is_in_neither_list(self):
        metrics = {MetricName.NEW_PATIENTS: calculate_metric(90, 100)}
        assert identify_top_performers(metrics) == []
        assert identify_areas_for_improvement(metrics) == []


class TestFormatAmount:
    def test_whole_amount_has_no_decimals(self):
        assert format_amount(5000.0) == "5,000"

    def test_fractional_amount_drops_trailing_zeros(self):
        assert format_amount(1234.5) == "1,234.5"

    def test_fractional_amount_rounds_to_three_places(self):
        assert format_amount(1234.5678) == "1,234.568"


@pytest.mark.asyncio
class TestAnalyzeKpi:
    async def test_snapshot_flags_only_no_shows(self):
        analysis = await DataAnalysisAgent().analyze_kpi(SNAPSHOT_METRICS)

        assert analysis.areas_for_improvement == [MetricName.NO_SHOWS]
        assert analysis.top_performers == [
            MetricName.PRODUCTION,
            MetricName.COLLECTIONS,
            MetricName.HYGIENE,
            MetricName.ACTIVE_PATIENTS,
        ]
        # 10 vs goal 8 is exactly 80%: not flagged
        assert analysis.metrics[MetricName.CANCELLATIONS].performance == pytest.approx(80)
        assert len(analysis.metrics) == len(MetricName)

    async def test_snapshot_summary(self):
        analysis = await DataAnalysisAgent().analyze_kpi(SNAPSHOT_METRICS)

        assert analysis.summary == (
            "Practice KPI Analysis (last 30 days):\n\n"
            "Strong performance in: production, collections, hygiene, activePatients.\n\n"
            "Areas needing attention: noShows.\n\n"
            "Production is at 96.8% of target with a gap of $5,000.\n"
            "Hygiene production is at 96.2% of target with a gap of $3,000.\n"
        )

    async def test_exceeding_production_target(self):
        data = SNAPSHOT_METRICS.model_copy(update={"production": 200000})
        analysis = await DataAnalysisAgent().analyze_kpi(data)
        assert "Production is at 129.0% of target (exceeding target).\n" in analysis.summary

    async def test_custom_goals_are_used(self):
        from dental_hub.config import load_goal_table

        goals = load_goal_table({"KPI_GOAL_PRODUCTION": "300000"})
        analysis = await DataAnalysisAgent(goals).analyze_kpi(SNAPSHOT_METRICS)
        assert MetricName.PRODUCTION in analysis.areas_for_improvement
