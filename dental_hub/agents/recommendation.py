"""Recommendation agent: turns flagged KPIs into canned action plans.

Each under-performing metric maps to one pre-authored recommendation.  The
text is static apart from the metric's performance and gap.  When the
analysis yields at most one specific recommendation a general "keep it up"
recommendation citing the strongest metric is appended.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from dental_hub.agents.data_analysis import format_amount
from dental_hub.models import KPIAnalysis, MetricName, Recommendation

logger = logging.getLogger(__name__)


def _production(analysis: KPIAnalysis) -> Recommendation:
    scored = analysis.metrics[MetricName.PRODUCTION]
    return Recommendation(
        category="production",
        title="Increase Overall Production",
        description=(
            f"Production is at {scored.performance:.1f}% of target "
            f"with a gap of ${format_amount(scored.gap)}."
        ),
        action_items=[
            "Review treatment presentation acceptance rate and enhance communication",
            "Schedule a team meeting to review production goals and strategies",
            "Identify incomplete treatment plans and schedule follow-up calls",
            "Consider adjusting fee schedule if it hasn't been updated recently",
        ],
        priority="high",
        impact="short-term",
        resources=["Treatment Presentation Guide", "Fee Schedule Analysis Tool"],
    )


def _hygiene(analysis: KPIAnalysis) -> Recommendation:
    scored = analysis.metrics[MetricName.HYGIENE]
    return Recommendation(
        category="hygiene",
        title="Boost Hygiene Department Production",
        description=(
            f"Hygiene production is at {scored.performance:.1f}% of target "
            f"with a gap of ${format_amount(scored.gap)}."
        ),
        action_items=[
            "Review hygiene schedule for open slots and optimize booking",
            "Implement a recall reactivation campaign for overdue patients",
            "Consider adding additional hygiene days if capacity is limited",
            "Ensure hygienists are performing thorough perio assessments",
        ],
        priority="high",
        impact="immediate",
        resources=[
            "Hygiene Department Optimization Guide",
            "Recall Reactivation Scripts",
        ],
    )


def _new_patients(analysis: KPIAnalysis) -> Recommendation:
    scored = analysis.metrics[MetricName.NEW_PATIENTS]
    return Recommendation(
        category="marketing",
        title="Increase New Patient Acquisition",
        description=f"New patient count is at {scored.performance:.1f}% of target.",
        action_items=[
            "Review marketing budget allocation and ROI by channel",
            "Enhance online presence through Google Business Profile optimization",
            "Implement a referral incentive program for existing patients",
            "Engage with local businesses for cross-promotion opportunities",
        ],
        priority="medium",
        impact="short-term",
        resources=[
            "Marketing Channel ROI Calculator",
            "Google Business Profile Optimization Guide",
            "Referral Program Templates",
        ],
    )


def _patient_retention(analysis: KPIAnalysis) -> Recommendation:
    scored = analysis.metrics[MetricName.ACTIVE_PATIENTS]
    return Recommendation(
        category="patient-retention",
        title="Enhance Patient Retention Strategy",
        description=f"Active patient count is at {scored.performance:.1f}% of target.",
        action_items=[
            "Implement systematic post-appointment follow-up calls",
            "Create a patient reactivation workflow for patients not seen in 12+ months",
            "Review patient experience and identify improvement opportunities",
            "Consider patient appreciation events or loyalty programs",
        ],
        priority="medium",
        impact="long-term",
        resources=[
            "Patient Reactivation Workflow",
            "Patient Experience Survey Template",
        ],
    )


def _recall(analysis: KPIAnalysis) -> Recommendation:
    scored = analysis.metrics[MetricName.RECALL_CONFIRMATIONS]
    return Recommendation(
        category="scheduling",
        title="Optimize Recall Confirmation Process",
        description=f"Recall confirmation rate is at {scored.performance:.1f}% of target.",
        action_items=[
            "Implement multi-channel recall reminders (text, email, phone)",
            "Set up automated recall confirmation system",
            "Train team on effective recall scripts and objection handling",
            "Analyze optimal timing for recall messages",
        ],
        priority="high",
        impact="immediate",
        resources=[
            "Recall Optimization Guide",
            "Multi-Channel Communication Templates",
        ],
    )


def _no_shows(analysis: KPIAnalysis) -> Recommendation:
    scored = analysis.metrics[MetricName.NO_SHOWS]
    return Recommendation(
        category="scheduling",
        title="Reduce Appointment No-Shows",
        description=(
            f"No-show rate is higher than target "
            f"({format_amount(scored.actual)} vs goal of {format_amount(scored.goal)})."
        ),
        action_items=[
            "Implement 48-hour and 24-hour appointment confirmations",
            "Create a clear no-show policy and communicate it to patients",
            "Consider implementing a small reservation fee for appointments",
            "Analyze no-show patterns (days, times, providers) to identify trends",
        ],
        priority="medium",
        impact="immediate",
        resources=["No-Show Policy Template", "Appointment Confirmation Workflow"],
    )


def _cancellations(analysis: KPIAnalysis) -> Recommendation:
    scored = analysis.metrics[MetricName.CANCELLATIONS]
    return Recommendation(
        category="scheduling",
        title="Reduce Last-Minute Cancellations",
        description=(
            f"Cancellation rate is higher than target "
            f"({format_amount(scored.actual)} vs goal of {format_amount(scored.goal)})."
        ),
        action_items=[
            "Reinforce the value of appointments during scheduling",
            "Create a cancellation policy requiring 24-48 hour notice",
            "Train front desk on handling cancellation calls and rebooking",
            "Implement a standby list to quickly fill cancelled appointments",
        ],
        priority="medium",
        impact="immediate",
        resources=["Cancellation Management Protocol", "Front Desk Training Guide"],
    )


def general_recommendation(analysis: KPIAnalysis) -> Recommendation:
    """Recommendation citing the strongest metric (first one wins a tie)."""
    top_area = "general"
    top_performance = 0.0
    for name, scored in analysis.metrics.items():
        if scored.performance > top_performance:
            top_performance = scored.performance
            top_area = name

    return Recommendation(
        category="general",
        title="Maintain Practice Excellence",
        description=(
            f"Overall practice performance is strong, with {top_area} being a "
            f"standout area at {top_performance:.1f}% of target."
        ),
        action_items=[
            "Conduct quarterly KPI review sessions with the full team",
            "Document successful strategies to replicate best practices",
            "Invest in team education and development to enhance skills",
            "Explore new service opportunities based on patient demographics",
        ],
        priority="low",
        impact="long-term",
        resources=["Quarterly KPI Review Template", "Team Development Resources"],
    )


RECOMMENDATION_BUILDERS: dict[MetricName, Callable[[KPIAnalysis], Recommendation]] = {
    MetricName.PRODUCTION: _production,
    MetricName.HYGIENE: _hygiene,
    MetricName.NEW_PATIENTS: _new_patients,
    MetricName.ACTIVE_PATIENTS: _patient_retention,
    MetricName.RECALL_CONFIRMATIONS: _recall,
    MetricName.NO_SHOWS: _no_shows,
    MetricName.CANCELLATIONS: _cancellations,
}

# Metrics that are scored but have no authored recommendation.
UNMAPPED_METRICS = frozenset({MetricName.COLLECTIONS})


class RecommendationAgent:
    """Generates targeted recommendations based on a KPI analysis."""

    async def generate_recommendations(self, analysis: KPIAnalysis) -> list[Recommendation]:
        recommendations: list[Recommendation] = []
        for area in analysis.areas_for_improvement:
            builder = RECOMMENDATION_BUILDERS.get(area)
            if builder is None:
                logger.debug("No recommendation authored for %s", area)
                continue
            recommendations.append(builder(analysis))

        if len(recommendations) <= 1:
            recommendations.append(general_recommendation(analysis))

        return recommendations
