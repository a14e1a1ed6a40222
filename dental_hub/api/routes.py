"""FastAPI route definitions for the DentalHub API."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request

from dental_hub.agents.data_analysis import DataAnalysisAgent
from dental_hub.agents.data_retrieval import DataRetrievalAgent
from dental_hub.agents.lab_cases import LabCaseManagerAgent
from dental_hub.agents.recommendation import RecommendationAgent
from dental_hub.api.schemas import (
    BatchResult,
    ConsultRequest,
    HealthResponse,
    KpiAnalysisRequest,
    KpiAnalysisResponse,
    LabCasesRequest,
    NoShowCheckRequest,
    PowerHourRequest,
    ProspectCreateRequest,
    ProspectReplyRequest,
    ProspectResponse,
)
from dental_hub.config import KPI_GOALS
from dental_hub.models import LabCaseAnalysis, OrchestratorResponse
from dental_hub.orchestrator import HeadBrainConsultant
from dental_hub.sdr.manager import CampaignManager, ResponseResult
from dental_hub.services.knowledge import KnowledgeRetriever

logger = logging.getLogger(__name__)

router = APIRouter()

_INTERNAL_ERROR = "An internal error occurred. Please try again."


def _get_knowledge(request: Request) -> KnowledgeRetriever:
    """Knowledge retriever created by the lifespan (see ``server.py``)."""
    knowledge = getattr(request.app.state, "knowledge", None)
    if knowledge is None:
        raise HTTPException(
            status_code=503,
            detail="The service is still starting up. Please try again in a moment.",
        )
    return knowledge


def _get_campaigns(request: Request) -> CampaignManager:
    campaigns = getattr(request.app.state, "campaigns", None)
    if campaigns is None:
        raise HTTPException(
            status_code=503,
            detail="The service is still starting up. Please try again in a moment.",
        )
    return campaigns


def _internal_error(request: Request, what: str, exc: Exception) -> HTTPException:
    # Full traceback goes to the log only; the client gets a generic message.
    request_id = getattr(request.state, "request_id", "?")
    logger.error("[%s] Error processing %s", request_id, what, exc_info=exc)
    return HTTPException(status_code=500, detail=_INTERNAL_ERROR)


# ── Endpoints ────────────────────────────────────────────────────────


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse()


@router.post("/consult", response_model=OrchestratorResponse)
async def consult(request: ConsultRequest, http_request: Request):
    """Ask the Head Brain a practice-management question.

    A fresh consultant is built per request; only the knowledge retriever
    (and its HTTP connection pool) is shared.  Pipeline failures come back
    as a normal response with an error section, not as a 5xx.
    """
    consultant = HeadBrainConsultant(knowledge=_get_knowledge(http_request), goals=KPI_GOALS)
    return await consultant.handle_query(request.query)


@router.post("/kpi-analysis", response_model=KpiAnalysisResponse)
async def kpi_analysis(request: KpiAnalysisRequest, http_request: Request):
    """Score KPIs against the configured goals and recommend next steps."""
    try:
        data = request.metrics or await DataRetrievalAgent().fetch_data_for_analysis("")
        analysis = await DataAnalysisAgent(KPI_GOALS).analyze_kpi(data)
        recommendations = await RecommendationAgent().generate_recommendations(analysis)
    except Exception as e:
        raise _internal_error(http_request, "KPI analysis", e) from e
    return KpiAnalysisResponse(analysis=analysis, recommendations=recommendations)


@router.post("/lab-cases", response_model=LabCaseAnalysis)
async def lab_cases(request: LabCasesRequest, http_request: Request):
    """Triage the current lab caseload."""
    try:
        return await LabCaseManagerAgent().manage_lab_cases(request.query)
    except Exception as e:
        raise _internal_error(http_request, "lab case analysis", e) from e


# ── SDR ──────────────────────────────────────────────────────────────


@router.post("/sdr/prospects", response_model=ProspectResponse, status_code=201)
async def add_prospect(request: ProspectCreateRequest, http_request: Request):
    campaigns = _get_campaigns(http_request)
    if not campaigns.add_prospect(request.prospect, request.campaign):
        raise HTTPException(status_code=400, detail=f"Unknown campaign: {request.campaign}")
    return ProspectResponse.from_record(campaigns.prospects[request.prospect.id])


@router.post("/sdr/prospects/{prospect_id}/responses", response_model=ResponseResult)
async def prospect_response(
    prospect_id: str, request: ProspectReplyRequest, http_request: Request,
):
    """Handle an inbound reply from a prospect and return the reply to send."""
    result = _get_campaigns(http_request).process_response(prospect_id, request.message)
    if result is None:
        raise HTTPException(status_code=404, detail=f"Unknown prospect: {prospect_id}")
    return result


@router.post("/sdr/power-hour", response_model=BatchResult)
async def power_hour(http_request: Request, request: PowerHourRequest | None = None):
    count = request.count if request else PowerHourRequest().count
    return BatchResult(processed=_get_campaigns(http_request).activate_power_hour(count))


@router.post("/sdr/no-shows", response_model=BatchResult)
async def no_shows(http_request: Request, request: NoShowCheckRequest | None = None):
    today = request.today if request else None
    return BatchResult(processed=_get_campaigns(http_request).check_no_shows(today))
