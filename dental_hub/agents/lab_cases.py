"""Lab case manager agent.

Buckets pending lab cases into overdue / due soon, turns those plus every
case waiting for delivery into follow-up tasks for tomorrow, and tallies
the caseload by type, lab and status.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import UTC, date, datetime, time, timedelta

from dental_hub.agents.data_retrieval import DataRetrievalAgent, PracticeDataSource
from dental_hub.models import (
    CaseDistribution,
    LabCase,
    LabCaseAnalysis,
    LabCaseData,
    LabTask,
)

logger = logging.getLogger(__name__)

DUE_SOON_WINDOW = timedelta(days=7)


def _due_at(due: date) -> datetime:
    # Due dates are whole days; compare them as UTC midnight.
    return datetime.combine(due, time.min, tzinfo=UTC)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count > 1 else ''}"


def find_overdue(cases: list[LabCase], now: datetime) -> list[LabCase]:
    return [c for c in cases if c.due_date and _due_at(c.due_date) < now]


def find_due_soon(cases: list[LabCase], now: datetime) -> list[LabCase]:
    horizon = now + DUE_SOON_WINDOW
    return [
        c for c in cases
        if c.due_date and now <= _due_at(c.due_date) <= horizon
    ]


def count_by(cases: list[LabCase], field: str) -> dict[str, int]:
    """Tally *cases* by *field*, skipping cases where it is empty."""
    counts: Counter[str] = Counter()
    for case in cases:
        value = getattr(case, field)
        if value:
            counts[value] += 1
    return dict(counts)


def generate_summary(
    data: LabCaseData,
    overdue_count: int,
    due_soon_count: int,
    pending_tasks: list[LabTask],
) -> str:
    total = len(data.all_cases)
    summary = f"Lab Case Summary ({total} total cases):\n\n"
    summary += (
        f"{len(data.pending_cases)} cases pending, "
        f"{len(data.received_cases)} received and ready for delivery, "
        f"{len(data.completed_cases)} completed.\n\n"
    )

    if overdue_count > 0:
        summary += (
            f"ATTENTION: {_plural(overdue_count, 'overdue case')} "
            "requiring immediate follow-up.\n"
        )

    if due_soon_count > 0:
        summary += f"{_plural(due_soon_count, 'case')} due within the next 7 days.\n"

    if pending_tasks:
        summary += f"\n{_plural(len(pending_tasks), 'pending task')} that require attention.\n"
        high = sum(1 for t in pending_tasks if t.priority == "high")
        if high > 0:
            summary += f"  - {_plural(high, 'high priority task')}\n"

    return summary


class LabCaseManagerAgent:
    """Manages and analyzes dental lab cases."""

    def __init__(self, data_source: PracticeDataSource | None = None) -> None:
        self._data_source = data_source or DataRetrievalAgent()

    async def manage_lab_cases(self, query: str) -> LabCaseAnalysis:
        """Fetch the lab caseload for *query* and analyze it."""
        data = await self._data_source.fetch_lab_cases(query)
        logger.debug("Analyzing lab cases for query: %r", query)
        return self.analyze_lab_cases(data)

    def analyze_lab_cases(
        self, data: LabCaseData, now: datetime | None = None,
    ) -> LabCaseAnalysis:
        now = now or datetime.now(UTC)
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)
        tomorrow = (now + timedelta(days=1)).date()

        overdue = find_overdue(data.pending_cases, now)
        due_soon = find_due_soon(data.pending_cases, now)

        tasks: list[LabTask] = []
        for c in overdue:
            tasks.append(LabTask(
                case_id=c.id,
                task_type="call-lab",
                description=(
                    f"Follow up with {c.lab} about overdue case for "
                    f"{c.patient} ({c.case_type})"
                ),
                due_date=tomorrow,
                priority="high",
            ))
        for c in due_soon:
            tasks.append(LabTask(
                case_id=c.id,
                task_type="check-status",
                description=(
                    f"Check status of {c.case_type} for {c.patient} with "
                    f"{c.lab}, due {c.due_date.isoformat()}"
                ),
                due_date=tomorrow,
                priority="medium",
            ))
        for c in data.received_cases:
            tasks.append(LabTask(
                case_id=c.id,
                task_type="call-patient",
                description=(
                    f"Call {c.patient} to schedule appointment for "
                    f"{c.case_type} delivery"
                ),
                due_date=tomorrow,
                priority="medium",
            ))

        cases = data.all_cases
        distribution = CaseDistribution(
            by_type=count_by(cases, "case_type"),
            by_lab=count_by(cases, "lab"),
            by_status=count_by(cases, "status"),
        )

        logger.info(
            "Lab cases: %d overdue, %d due soon, %d tasks",
            len(overdue), len(due_soon), len(tasks),
        )
        return LabCaseAnalysis(
            summary=generate_summary(data, len(overdue), len(due_soon), tasks),
            overdue_count=len(overdue),
            due_soon_count=len(due_soon),
            pending_tasks=tasks,
            case_distribution=distribution,
        )
