"""Domain models shared by the agents, the orchestrator and the API.

Everything here is transient: built fresh for one query and thrown away
with the response.  Nothing is persisted by this package.
"""

from __future__ import annotations

from datetime import date
from enum import StrEnum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ── Practice metrics ─────────────────────────────────────────────────


class RecallData(BaseModel):
    model_config = ConfigDict(frozen=True)

    sent: int = 0
    confirmed: int = 0


class AppointmentData(BaseModel):
    model_config = ConfigDict(frozen=True)

    scheduled: int = 0
    completed: int = 0
    no_shows: int = 0
    cancellations: int = 0


class ProcedureData(BaseModel):
    model_config = ConfigDict(frozen=True)

    restorative: int = 0
    preventive: int = 0
    prosthetic: int = 0
    surgical: int = 0


class PracticeMetricSet(BaseModel):
    """Raw practice numbers for one timeframe, as returned by the data source."""

    model_config = ConfigDict(frozen=True)

    timeframe: str
    production: float
    collections: float
    hygiene: float
    new_patients: int
    active_patients: int
    recalls: RecallData = Field(default_factory=RecallData)
    appointments: AppointmentData = Field(default_factory=AppointmentData)
    procedures: ProcedureData = Field(default_factory=ProcedureData)


class MetricName(StrEnum):
    """The KPIs the analyzer scores, in scoring order."""

    PRODUCTION = "production"
    COLLECTIONS = "collections"
    HYGIENE = "hygiene"
    NEW_PATIENTS = "newPatients"
    ACTIVE_PATIENTS = "activePatients"
    RECALL_CONFIRMATIONS = "recallConfirmations"
    NO_SHOWS = "noShows"
    CANCELLATIONS = "cancellations"


class MetricGoal(BaseModel):
    """Target for one KPI.

    Higher-is-better goals must be strictly positive (the scorer divides by
    them).  Lower-is-better goals may be zero, e.g. "no no-shows at all".
    """

    model_config = ConfigDict(frozen=True)

    target: float
    lower_is_better: bool = False

    @model_validator(mode="after")
    def _check_target(self) -> MetricGoal:
        if self.lower_is_better:
            if self.target < 0:
                raise ValueError("a lower-is-better goal cannot be negative")
        elif self.target <= 0:
            raise ValueError("a higher-is-better goal must be greater than zero")
        return self


class MetricGoalTable(BaseModel):
    """Goal per KPI.  Must cover every :class:`MetricName`."""

    model_config = ConfigDict(frozen=True)

    goals: dict[MetricName, MetricGoal]

    @model_validator(mode="after")
    def _check_complete(self) -> MetricGoalTable:
        missing = [m.value for m in MetricName if m not in self.goals]
        if missing:
            raise ValueError(f"goal table is missing: {', '.join(missing)}")
        return self

    def goal_for(self, metric: MetricName) -> MetricGoal:
        return self.goals[metric]


DEFAULT_GOALS = MetricGoalTable(
    goals={
        MetricName.PRODUCTION: MetricGoal(target=155000),
        MetricName.COLLECTIONS: MetricGoal(target=147500),
        MetricName.HYGIENE: MetricGoal(target=78000),
        MetricName.NEW_PATIENTS: MetricGoal(target=50),
        MetricName.ACTIVE_PATIENTS: MetricGoal(target=1300),
        MetricName.RECALL_CONFIRMATIONS: MetricGoal(target=200),
        MetricName.NO_SHOWS: MetricGoal(target=10, lower_is_better=True),
        MetricName.CANCELLATIONS: MetricGoal(target=8, lower_is_better=True),
    }
)


class MetricStatus(StrEnum):
    # ABOVE_TARGET is part of the vocabulary but the scorer never emits it.
    ABOVE_TARGET = "above-target"
    ON_TARGET = "on-target"
    BELOW_TARGET = "below-target"


class ScoredMetric(BaseModel):
    actual: float
    goal: float
    performance: float
    status: MetricStatus
    gap: float = 0


class KPIAnalysis(BaseModel):
    summary: str
    metrics: dict[MetricName, ScoredMetric]
    top_performers: list[MetricName] = Field(default_factory=list)
    areas_for_improvement: list[MetricName] = Field(default_factory=list)


# ── Recommendations ──────────────────────────────────────────────────

RecommendationCategory = Literal[
    "production", "hygiene", "scheduling", "patient-retention",
    "marketing", "team", "general",
]
Priority = Literal["high", "medium", "low"]
Impact = Literal["immediate", "short-term", "long-term"]


class Recommendation(BaseModel):
    category: RecommendationCategory
    title: str
    description: str
    action_items: list[str]
    priority: Priority
    impact: Impact
    resources: list[str] | None = None


# ── Lab cases ────────────────────────────────────────────────────────


class LabCaseStage(StrEnum):
    PENDING = "pending"
    RECEIVED = "received"
    COMPLETED = "completed"


class LabCase(BaseModel):
    id: str
    patient: str
    case_type: str
    lab: str
    sent_date: date
    due_date: date | None = None
    received_date: date | None = None
    completed_date: date | None = None
    status: str = ""
    # Stamped from the bucket the case arrives in when left unset.
    stage: LabCaseStage | None = None


class LabCaseData(BaseModel):
    """Lab cases partitioned by lifecycle stage.

    Each case is stamped with the stage of the bucket it was supplied in.
    A case listed under a different stage, or the same case id listed in
    two buckets, is rejected.
    """

    pending_cases: list[LabCase] = Field(default_factory=list)
    received_cases: list[LabCase] = Field(default_factory=list)
    completed_cases: list[LabCase] = Field(default_factory=list)

    @model_validator(mode="after")
    def _stamp_stages(self) -> LabCaseData:
        seen: dict[str, LabCaseStage] = {}
        buckets = (
            ("pending_cases", LabCaseStage.PENDING),
            ("received_cases", LabCaseStage.RECEIVED),
            ("completed_cases", LabCaseStage.COMPLETED),
        )
        for attr, stage in buckets:
            stamped: list[LabCase] = []
            for case in getattr(self, attr):
                if case.stage is not None and case.stage != stage:
                    raise ValueError(
                        f"lab case {case.id} is marked {case.stage} "
                        f"but was supplied as {stage}"
                    )
                if case.id in seen:
                    raise ValueError(
                        f"lab case {case.id} appears in both "
                        f"{seen[case.id]} and {stage}"
                    )
                seen[case.id] = stage
                stamped.append(
                    case if case.stage == stage
                    else case.model_copy(update={"stage": stage})
                )
            setattr(self, attr, stamped)
        return self

    @property
    def all_cases(self) -> list[LabCase]:
        return [*self.pending_cases, *self.received_cases, *self.completed_cases]


TaskType = Literal[
    "follow-up", "call-lab", "call-patient", "check-status", "reschedule", "other",
]


class LabTask(BaseModel):
    case_id: str
    task_type: TaskType
    description: str
    due_date: date
    priority: Priority
    assigned_to: str | None = None


class CaseDistribution(BaseModel):
    by_type: dict[str, int] = Field(default_factory=dict)
    by_lab: dict[str, int] = Field(default_factory=dict)
    by_status: dict[str, int] = Field(default_factory=dict)


class LabCaseAnalysis(BaseModel):
    summary: str
    overdue_count: int
    due_soon_count: int
    pending_tasks: list[LabTask] = Field(default_factory=list)
    case_distribution: CaseDistribution = Field(default_factory=CaseDistribution)


# ── Orchestrator response ────────────────────────────────────────────


class AgentId(StrEnum):
    LAB_CASE_MANAGER = "labCaseManager"
    DATA_ANALYSIS = "dataAnalysis"


class TextSection(BaseModel):
    type: Literal["text"] = "text"
    title: str
    content: str


class KpiAnalysisSection(BaseModel):
    type: Literal["kpi-analysis"] = "kpi-analysis"
    title: str = "KPI Analysis"
    content: KPIAnalysis


class RecommendationsSection(BaseModel):
    type: Literal["recommendations"] = "recommendations"
    title: str = "Recommendations"
    content: list[Recommendation]


class LabCasesSection(BaseModel):
    type: Literal["lab-cases"] = "lab-cases"
    title: str = "Lab Case Analysis"
    content: LabCaseAnalysis


class KnowledgeContextSection(BaseModel):
    type: Literal["deep-seek-context"] = "deep-seek-context"
    title: str = "Additional Context"
    content: str


ResponseSection = Annotated[
    Union[
        TextSection,
        KpiAnalysisSection,
        RecommendationsSection,
        LabCasesSection,
        KnowledgeContextSection,
    ],
    Field(discriminator="type"),
]


class OrchestratorResponse(BaseModel):
    answer: str
    sections: list[ResponseSection] = Field(default_factory=list)
    sources: list[str] | None = None
