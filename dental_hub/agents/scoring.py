"""Actual-vs-goal scoring for a single KPI."""

from __future__ import annotations

from dental_hub.models import MetricGoal, MetricStatus, ScoredMetric

# performance (percent of goal) at or above which a metric counts as on target
ON_TARGET_THRESHOLD = 95.0


def _status_for(performance: float) -> MetricStatus:
    if performance >= ON_TARGET_THRESHOLD:
        return MetricStatus.ON_TARGET
    return MetricStatus.BELOW_TARGET


def calculate_metric(actual: float, goal: float) -> ScoredMetric:
    """Score a metric where higher is better (production, new patients, ...)."""
    if goal <= 0:
        raise ValueError(f"goal must be greater than zero, got {goal}")
    performance = actual / goal * 100
    return ScoredMetric(
        actual=actual,
        goal=goal,
        performance=performance,
        status=_status_for(performance),
        gap=goal - actual if actual < goal else 0,
    )


def calculate_inverse_metric(actual: float, goal: float) -> ScoredMetric:
    """Score a metric where lower is better (no-shows, cancellations).

    Anything at or under the goal scores a flat 100%.
    """
    performance = 100.0 if actual <= goal else goal / actual * 100
    return ScoredMetric(
        actual=actual,
        goal=goal,
        performance=performance,
        status=_status_for(performance),
        gap=actual - goal if actual > goal else 0,
    )


def score(actual: float, goal: MetricGoal) -> ScoredMetric:
    """Score *actual* against *goal*, honouring the goal's polarity."""
    if goal.lower_is_better:
        return calculate_inverse_metric(actual, goal.target)
    return calculate_metric(actual, goal.target)
