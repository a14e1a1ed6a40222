"""Knowledge retriever over the Supabase pgvector knowledge base.

The database embeds the question and runs the similarity search itself
(``search_knowledge_base`` / ``search_knowledge_for_agent``), so no
embedding model runs in this process.

Lookups never raise to the caller.  Internally each lookup produces a
:class:`KnowledgeLookup` that carries either rows or the error; the public
:meth:`KnowledgeRetriever.query_embeddings` then degrades errors and empty
results alike to :data:`FALLBACK_CONTEXT`, logging and counting the reason.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from dental_hub.services.metrics import metrics
from dental_hub.services.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

FALLBACK_CONTEXT: tuple[str, ...] = (
    "Dental practice KPIs should include production goals, collection rate, "
    "new patient numbers, and hygiene department metrics.",
    "Effective recall systems combine multiple communication channels and "
    "pre-scheduled appointments.",
    "Consider implementing a staff training program for treatment presentation "
    "to improve case acceptance rates.",
)


class KnowledgeLookupError(Exception):
    """A similarity search that could not be completed."""


@dataclass
class KnowledgeLookup:
    rows: list[dict[str, Any]] = field(default_factory=list)
    error: KnowledgeLookupError | None = None


class KnowledgeRetriever:
    """Vector similarity search with a static fallback."""

    def __init__(self, client: SupabaseClient | None = None) -> None:
        self._client = client or SupabaseClient()

    async def lookup(
        self, question: str, top_k: int, agent_id: str | None = None,
    ) -> KnowledgeLookup:
        """Run the similarity search, capturing any failure in the result."""
        try:
            if agent_id:
                rows = await self._client.search_knowledge_for_agent(question, agent_id, top_k)
            else:
                rows = await self._client.search_knowledge_base(question, top_k)
        except Exception as exc:
            return KnowledgeLookup(error=KnowledgeLookupError(str(exc)))
        return KnowledgeLookup(rows=rows or [])

    async def query_embeddings(
        self,
        question: str,
        top_k: int = 3,
        *,
        agent_id: str | None = None,
        bundle_id: str | None = None,
        category: str | None = None,
        include_metadata: bool = False,
    ) -> list[str]:
        """Return up to *top_k* context passages relevant to *question*.

        When *agent_id* is given the search is scoped to knowledge that agent
        may see, and the *bundle_id* / *category* / *include_metadata* options
        are not applied.
        """
        scope = agent_id or "general"
        logger.debug("Knowledge search (%s): %r", scope, question)
        result = await self.lookup(question, top_k, agent_id=agent_id)

        if result.error is not None:
            logger.error("Knowledge lookup failed (%s): %s", scope, result.error)
            metrics.record_fallback(scope, reason="error")
            return list(FALLBACK_CONTEXT)
        if not result.rows:
            logger.info("No knowledge found (%s)", scope)
            metrics.record_fallback(scope, reason="empty")
            return list(FALLBACK_CONTEXT)

        if agent_id:
            if bundle_id or category or include_metadata:
                logger.debug("Agent-scoped search ignores bundle/category/metadata options")
            return [row.get("content", "") for row in result.rows]

        rows = result.rows
        if bundle_id:
            rows = [r for r in rows if (r.get("metadata") or {}).get("bundle") == bundle_id]
        if category:
            rows = [r for r in rows if (r.get("metadata") or {}).get("category") == category]

        if include_metadata:
            return [
                f"[{(r.get('metadata') or {}).get('title') or 'Untitled'}] {r.get('content', '')}"
                for r in rows
            ]
        return [r.get("content", "") for r in rows]
