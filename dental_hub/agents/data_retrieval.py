"""Data retrieval agent.

Supplies the practice metric set and the lab-case buckets the other agents
work on.  The practice-management integration is not wired up yet, so both
fetches return a fixed snapshot; the query is accepted (and logged) so that
callers already use the final signature.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Protocol

from dental_hub.models import (
    AppointmentData,
    LabCase,
    LabCaseData,
    PracticeMetricSet,
    ProcedureData,
    RecallData,
)

logger = logging.getLogger(__name__)


class PracticeDataSource(Protocol):
    """Anything that can answer the two data fetches the agents need."""

    async def fetch_data_for_analysis(self, query: str) -> PracticeMetricSet: ...

    async def fetch_lab_cases(self, query: str) -> LabCaseData: ...


SNAPSHOT_METRICS = PracticeMetricSet(
    timeframe="last 30 days",
    production=150000,
    collections=142500,
    hygiene=75000,
    new_patients=45,
    active_patients=1250,
    recalls=RecallData(sent=320, confirmed=185),
    appointments=AppointmentData(
        scheduled=420, completed=395, no_shows=15, cancellations=10,
    ),
    procedures=ProcedureData(
        restorative=210, preventive=375, prosthetic=28, surgical=15,
    ),
)


def _snapshot_lab_cases() -> LabCaseData:
    return LabCaseData(
        pending_cases=[
            LabCase(id="LC001", patient="John Smith", case_type="Crown",
                    lab="Acme Dental Lab", sent_date=date(2025, 2, 1),
                    due_date=date(2025, 2, 15), status="In Progress"),
            LabCase(id="LC002", patient="Maria Garcia", case_type="Bridge",
                    lab="Precision Dental", sent_date=date(2025, 2, 5),
                    due_date=date(2025, 2, 20), status="Pending Review"),
            LabCase(id="LC009", patient="David Miller", case_type="Crown",
                    lab="Acme Dental Lab", sent_date=date(2025, 2, 10),
                    due_date=date(2025, 2, 24), status="In Progress"),
            LabCase(id="LC010", patient="Lisa Wong", case_type="Veneer",
                    lab="Precision Dental", sent_date=date(2025, 2, 12),
                    due_date=date(2025, 2, 26), status="Pending Review"),
        ],
        received_cases=[
            LabCase(id="LC003", patient="Robert Johnson", case_type="Denture",
                    lab="Acme Dental Lab", sent_date=date(2025, 1, 15),
                    received_date=date(2025, 2, 1), status="Ready for Delivery"),
            LabCase(id="LC008", patient="Emma Smith", case_type="Night Guard",
                    lab="Acme Dental Lab", sent_date=date(2025, 1, 20),
                    received_date=date(2025, 2, 5), status="Ready for Delivery"),
        ],
        completed_cases=[
            LabCase(id="LC004", patient="Susan Williams", case_type="Veneer",
                    lab="Precision Dental", sent_date=date(2025, 1, 10),
                    completed_date=date(2025, 1, 31), status="Delivered"),
            LabCase(id="LC005", patient="James Brown", case_type="Implant",
                    lab="Advanced Implant Lab", sent_date=date(2025, 1, 5),
                    completed_date=date(2025, 1, 25), status="Delivered"),
            LabCase(id="LC006", patient="Jennifer Lee", case_type="Crown",
                    lab="Acme Dental Lab", sent_date=date(2025, 1, 8),
                    completed_date=date(2025, 1, 28), status="Delivered"),
            LabCase(id="LC007", patient="Michael Chen", case_type="Bridge",
                    lab="Precision Dental", sent_date=date(2025, 1, 12),
                    completed_date=date(2025, 2, 3), status="Delivered"),
        ],
    )


class DataRetrievalAgent:
    """Default :class:`PracticeDataSource` backed by the built-in snapshot."""

    async def fetch_data_for_analysis(self, query: str) -> PracticeMetricSet:
        logger.debug("Retrieving practice data for query: %r", query)
        return SNAPSHOT_METRICS

    async def fetch_lab_cases(self, query: str) -> LabCaseData:
        logger.debug("Retrieving lab case data for query: %r", query)
        return _snapshot_lab_cases()
