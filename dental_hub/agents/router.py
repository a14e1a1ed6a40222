"""Keyword router: decides which agents should answer a query.

The query is matched together with any knowledge-base context retrieved for
it, so a context passage about crowns can pull the lab agent into a query
that never mentions labs.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from dental_hub.models import AgentId

logger = logging.getLogger(__name__)

LAB_KEYWORDS = ("lab", "crown", "bridge", "denture", "implant", "case")

ANALYSIS_KEYWORDS = (
    "kpi", "metric", "analysis", "production", "hygiene", "patient",
    "appointment", "performance", "data", "report", "recommendation",
    "improve",
)

# Asking for advice needs the analysis agent (recommendations hang off it).
ADVICE_KEYWORDS = ("recommendation", "suggest", "advise")

DEFAULT_AGENT = AgentId.DATA_ANALYSIS


def _mentions(text: str, keywords: Iterable[str]) -> bool:
    return any(keyword in text for keyword in keywords)


def route_to_agents(query: str, context: Iterable[str] = ()) -> list[AgentId]:
    """Return the agents to invoke, lab first, never empty."""
    combined = " ".join([query, *context]).lower()

    agents: list[AgentId] = []
    if _mentions(combined, LAB_KEYWORDS):
        agents.append(AgentId.LAB_CASE_MANAGER)

    if _mentions(combined, ANALYSIS_KEYWORDS):
        agents.append(AgentId.DATA_ANALYSIS)

    if _mentions(combined, ADVICE_KEYWORDS) and AgentId.DATA_ANALYSIS not in agents:
        agents.append(AgentId.DATA_ANALYSIS)

    if not agents:
        agents.append(DEFAULT_AGENT)

    logger.info("Selected agents: %s", ", ".join(agents))
    return agents
