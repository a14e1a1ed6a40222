"""Tests for keyword routing."""

from __future__ import annotations

import pytest

from dental_hub.agents.router import route_to_agents
from dental_hub.models import AgentId


@pytest.mark.parametrize(
    ("query", "expected"),
    [
        ("Which crowns are overdue?", [AgentId.LAB_CASE_MANAGER]),
        ("How is our production this month?", [AgentId.DATA_ANALYSIS]),
        (
            "Any crown cases hurting production?",
            [AgentId.LAB_CASE_MANAGER, AgentId.DATA_ANALYSIS],
        ),
        ("Can you suggest something?", [AgentId.DATA_ANALYSIS]),
        ("Hello there", [AgentId.DATA_ANALYSIS]),
        ("what's our lab case status for crowns", [AgentId.LAB_CASE_MANAGER]),
        ("how is production trending", [AgentId.DATA_ANALYSIS]),
        ("hello", [AgentId.DATA_ANALYSIS]),
    ],
)
def test_route_by_query(query, expected):
    assert route_to_agents(query) == expected


def test_matching_is_case_insensitive():
    assert route_to_agents("LAB status") == [AgentId.LAB_CASE_MANAGER]


def test_context_can_add_an_agent():
    agents = route_to_agents("How is our production?", ["Crown remakes cost money."])
    assert agents == [AgentId.LAB_CASE_MANAGER, AgentId.DATA_ANALYSIS]


def test_advice_never_duplicates_analysis():
    agents = route_to_agents("What would you recommendation for hygiene?")
    assert agents.count(AgentId.DATA_ANALYSIS) == 1
