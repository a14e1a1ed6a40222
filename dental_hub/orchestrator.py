"""Head Brain consultant: the orchestrator behind every practice question.

Architecture:
  The consultant is a LangGraph StateGraph with five nodes:

    1. **retrieve**:       general knowledge-base context for the query
    2. **route**:          keyword routing over query + context
    3. **lab_cases**:      lab case manager agent
    4. **data_analysis**:  data retrieval → KPI analysis → recommendations
    5. **assemble**:       typed sections + templated answer

  Routing:
    retrieve → route → (lab?)      → lab_cases      ┐
                     → (analysis?) → data_analysis  ┴→ assemble → END

  Both agent nodes can be selected for the same query; they then run in the
  same graph step.  Sections are assembled in a fixed order, so the response
  does not depend on which agent finishes first.

  The graph is compiled without a checkpointer: every query is a single pass
  and nothing survives it.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable

from langgraph.graph import END, StateGraph
from typing_extensions import TypedDict

from dental_hub.agents.data_analysis import DataAnalysisAgent
from dental_hub.agents.data_retrieval import DataRetrievalAgent, PracticeDataSource
from dental_hub.agents.lab_cases import LabCaseManagerAgent
from dental_hub.agents.recommendation import RecommendationAgent
from dental_hub.agents.router import route_to_agents
from dental_hub.models import (
    AgentId,
    KnowledgeContextSection,
    KPIAnalysis,
    KpiAnalysisSection,
    LabCaseAnalysis,
    LabCasesSection,
    MetricGoalTable,
    OrchestratorResponse,
    Recommendation,
    RecommendationsSection,
    ResponseSection,
    TextSection,
)
from dental_hub.services.knowledge import KnowledgeRetriever
from dental_hub.services.metrics import metrics

logger = logging.getLogger(__name__)

GENERAL_CONTEXT_COUNT = 5
AGENT_CONTEXT_COUNT = 2
ERROR_ANSWER = (
    "Sorry, I encountered an error while processing your request. "
    "Please try again or rephrase your question."
)
KNOWLEDGE_SOURCE = "Knowledge Base"

# Knowledge-base agent scopes (as stored in the knowledge tables).
LAB_SCOPE = "lab-case-manager"
ANALYSIS_SCOPE = "data-analysis"
RECOMMENDATION_SCOPE = "recommendation"

_AGENT_NODES = {
    AgentId.LAB_CASE_MANAGER: "lab_cases",
    AgentId.DATA_ANALYSIS: "data_analysis",
}


# ── State schema ─────────────────────────────────────────────────────


class ConsultState(TypedDict, total=False):
    """State flowing through one consultation.

    Each agent node writes only its own keys, so the two agent nodes can
    run in the same step without a reducer.
    """

    query: str
    context: list[str]
    agents: list[AgentId]
    lab_analysis: LabCaseAnalysis
    kpi_analysis: KPIAnalysis
    recommendations: list[Recommendation]
    response: OrchestratorResponse


# ── Response assembly ────────────────────────────────────────────────


def build_sections(state: ConsultState) -> list[ResponseSection]:
    """Typed sections in their fixed order: lab, KPI, recommendations, context."""
    sections: list[ResponseSection] = []
    if "lab_analysis" in state:
        sections.append(LabCasesSection(content=state["lab_analysis"]))
    if "kpi_analysis" in state:
        sections.append(KpiAnalysisSection(content=state["kpi_analysis"]))
    if state.get("recommendations"):
        sections.append(RecommendationsSection(content=state["recommendations"]))
    if state.get("context"):
        sections.append(KnowledgeContextSection(content="\n\n".join(state["context"])))
    return sections


def generate_unified_response(query: str, sections: list[ResponseSection]) -> str:
    """Compose the natural-language answer from the section summaries."""
    by_type = {section.type: section for section in sections}

    response = f'Here\'s what I found regarding your query about "{query}":\n\n'

    kpi = by_type.get("kpi-analysis")
    if kpi is not None:
        response += f"{kpi.content.summary}\n\n"

    lab = by_type.get("lab-cases")
    if lab is not None:
        response += f"{lab.content.summary}\n\n"

    recs = by_type.get("recommendations")
    if recs is not None:
        recommendations = recs.content
        response += (
            f"Based on the analysis, here are {len(recommendations)} "
            "key recommendations:\n"
        )
        for index, rec in enumerate(recommendations[:3], start=1):
            response += f"{index}. {rec.title}: {rec.description}\n"
        if len(recommendations) > 3:
            response += f"...and {len(recommendations) - 3} more recommendations.\n"
        response += "\n"

    if "deep-seek-context" in by_type:
        response += (
            "I've also included additional context from our knowledge base "
            "that might be helpful.\n\n"
        )

    return response


def error_response(exc: Exception) -> OrchestratorResponse:
    return OrchestratorResponse(
        answer=ERROR_ANSWER,
        sections=[TextSection(title="Error", content=str(exc) or "Unknown error")],
    )


# ── Node helpers ─────────────────────────────────────────────────────


def _timed(
    name: str, node: Callable[[ConsultState], Awaitable[dict]],
) -> Callable[[ConsultState], Awaitable[dict]]:
    """Wrap a node so its latency is recorded under *name*."""

    async def wrapper(state: ConsultState) -> dict:
        t0 = time.perf_counter()
        try:
            return await node(state)
        finally:
            metrics.record_agent(name, (time.perf_counter() - t0) * 1000)

    return wrapper


def select_agent_nodes(state: ConsultState) -> list[str]:
    """Conditional edge: one node per routed agent."""
    return [_AGENT_NODES[agent] for agent in state["agents"]]


# ── Consultant ───────────────────────────────────────────────────────


class HeadBrainConsultant:
    """Coordinates the specialised agents to answer one practice question.

    The consultant holds only stateless agents and the compiled graph; all
    per-query data lives in the graph state of a single invocation.
    """

    def __init__(
        self,
        knowledge: KnowledgeRetriever | None = None,
        data_source: PracticeDataSource | None = None,
        goals: MetricGoalTable | None = None,
    ) -> None:
        self._knowledge = knowledge or KnowledgeRetriever()
        self._data_source = data_source or DataRetrievalAgent()
        self._analysis_agent = DataAnalysisAgent(goals)
        self._recommendation_agent = RecommendationAgent()
        self._lab_agent = LabCaseManagerAgent(self._data_source)
        self._graph = self._build_graph()

    # ── Nodes ────────────────────────────────────────────────────────

    async def _retrieve(self, state: ConsultState) -> dict:
        context = await self._knowledge.query_embeddings(
            state["query"], GENERAL_CONTEXT_COUNT,
        )
        return {"context": context}

    async def _route(self, state: ConsultState) -> dict:
        return {"agents": route_to_agents(state["query"], state.get("context", []))}

    async def _agent_knowledge(self, query: str, scope: str) -> None:
        # Scoped knowledge is looked up for visibility only; agents don't consume it yet.
        items = await self._knowledge.query_embeddings(
            query, AGENT_CONTEXT_COUNT, agent_id=scope,
        )
        if items:
            logger.info("Using %d %s-specific knowledge items", len(items), scope)

    async def _lab_cases(self, state: ConsultState) -> dict:
        query = state["query"]
        await self._agent_knowledge(query, LAB_SCOPE)
        return {"lab_analysis": await self._lab_agent.manage_lab_cases(query)}

    async def _data_analysis(self, state: ConsultState) -> dict:
        query = state["query"]
        await self._agent_knowledge(query, ANALYSIS_SCOPE)

        raw = await self._data_source.fetch_data_for_analysis(query)
        analysis = await self._analysis_agent.analyze_kpi(raw)
        update: dict = {"kpi_analysis": analysis}

        if analysis.areas_for_improvement:
            await self._agent_knowledge(query, RECOMMENDATION_SCOPE)
            update["recommendations"] = (
                await self._recommendation_agent.generate_recommendations(analysis)
            )
        return update

    async def _assemble(self, state: ConsultState) -> dict:
        sections = build_sections(state)
        return {
            "response": OrchestratorResponse(
                answer=generate_unified_response(state["query"], sections),
                sections=sections,
                sources=[KNOWLEDGE_SOURCE] if state.get("context") else None,
            )
        }

    # ── Graph assembly ───────────────────────────────────────────────

    def _build_graph(self):
        graph = StateGraph(ConsultState)

        graph.add_node("retrieve", _timed("retrieve", self._retrieve))
        graph.add_node("route", _timed("route", self._route))
        graph.add_node("lab_cases", _timed("lab_cases", self._lab_cases))
        graph.add_node("data_analysis", _timed("data_analysis", self._data_analysis))
        graph.add_node("assemble", _timed("assemble", self._assemble))

        graph.set_entry_point("retrieve")
        graph.add_edge("retrieve", "route")
        graph.add_conditional_edges(
            "route", select_agent_nodes, list(_AGENT_NODES.values()),
        )
        graph.add_edge("lab_cases", "assemble")
        graph.add_edge("data_analysis", "assemble")
        graph.add_edge("assemble", END)

        return graph.compile()

    # ── Public API ───────────────────────────────────────────────────

    async def handle_query(self, query: str) -> OrchestratorResponse:
        """Answer *query*.  Never raises: failures become an error response."""
        logger.info("Head Brain processing query: %r", query)
        try:
            final = await self._graph.ainvoke({"query": query})
            return final["response"]
        except Exception as exc:
            logger.exception("Error in HeadBrainConsultant")
            return error_response(exc)
