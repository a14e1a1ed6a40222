"""Shared test fixtures for the DentalHub test suite."""

from __future__ import annotations

import os
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest


def pytest_configure(config):
    """Set test environment variables BEFORE collection starts.

    This runs before any imports, so config.py won't fail on module load.
    """
    os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
    os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key-123")
    os.environ.setdefault("METRICS_ENABLED", "false")


@pytest.fixture
def mock_knowledge():
    """Knowledge retriever stand-in returning one neutral context passage."""
    knowledge = MagicMock()
    knowledge.query_embeddings = AsyncMock(return_value=["Keep the schedule full."])
    return knowledge


@pytest.fixture
def lab_case_factory():
    """Factory fixture for lab cases with sensible defaults."""
    from dental_hub.models import LabCase

    def _make(case_id: str, **overrides):
        fields = {
            "id": case_id,
            "patient": "Pat Doe",
            "case_type": "Crown",
            "lab": "Acme Dental Lab",
            "sent_date": date(2026, 10, 1),
            "status": "In Progress",
        }
        fields.update(overrides)
        return LabCase(**fields)

    return _make
