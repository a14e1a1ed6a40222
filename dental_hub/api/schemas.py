"""Pydantic schemas for the FastAPI endpoints."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field

from dental_hub.models import KPIAnalysis, PracticeMetricSet, Recommendation
from dental_hub.sdr.campaigns import CampaignType
from dental_hub.sdr.manager import Appointment, Prospect, ProspectRecord


class ConsultRequest(BaseModel):
    """A practice-management question for the Head Brain."""

    query: str = Field(..., min_length=1, max_length=2000, description="The question to answer")


class KpiAnalysisRequest(BaseModel):
    """KPI scoring request.  Without metrics the current practice snapshot is used."""

    metrics: PracticeMetricSet | None = None


class KpiAnalysisResponse(BaseModel):
    analysis: KPIAnalysis
    recommendations: list[Recommendation]


class LabCasesRequest(BaseModel):
    query: str = Field("", max_length=2000)


class ProspectCreateRequest(BaseModel):
    prospect: Prospect
    campaign: CampaignType = CampaignType.LIST_VALIDATION


class ProspectResponse(BaseModel):
    """Where a prospect currently stands in the outreach flow."""

    id: str
    campaign: CampaignType
    stage: int
    tags: list[str]
    appointment: Appointment | None = None

    @classmethod
    def from_record(cls, record: ProspectRecord) -> ProspectResponse:
        return cls(
            id=record.data.id,
            campaign=record.current_campaign,
            stage=record.stage,
            tags=sorted(record.tags),
            appointment=record.data.appointment,
        )


class ProspectReplyRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000, description="The prospect's reply")


class PowerHourRequest(BaseModel):
    count: int = Field(25, ge=1, le=1000, description="Maximum prospects to move")


class NoShowCheckRequest(BaseModel):
    today: date | None = Field(None, description="Reference date; defaults to today")


class BatchResult(BaseModel):
    processed: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    service: str = "dental-hub-brain"
