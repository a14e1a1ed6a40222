"""Async HTTP client for Supabase's PostgREST RPC endpoint.

Only the two similarity-search functions the knowledge retriever needs are
wrapped.  Each call is a single attempt: errors surface as
:class:`SupabaseAPIError` and the caller decides how to degrade.

Supabase docs: https://supabase.com/docs/guides/api/rest/client-libs
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from dental_hub.config import SUPABASE_ANON_KEY, SUPABASE_TIMEOUT_SECONDS, SUPABASE_URL
from dental_hub.services.metrics import metrics

logger = logging.getLogger(__name__)

SEARCH_KNOWLEDGE_BASE = "search_knowledge_base"
SEARCH_KNOWLEDGE_FOR_AGENT = "search_knowledge_for_agent"


class SupabaseAPIError(Exception):
    """Raised when a Supabase RPC call fails."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class SupabaseClient:
    """Thin wrapper around ``POST /rest/v1/rpc/<function>``.

    The underlying ``httpx.AsyncClient`` is created lazily so the client can
    be built at import / start-up time outside a running event loop.  Call
    :meth:`aclose` on shutdown.
    """

    def __init__(
        self,
        url: str | None = None,
        api_key: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._url = (url or SUPABASE_URL).rstrip("/")
        self._api_key = api_key or SUPABASE_ANON_KEY
        self._timeout = SUPABASE_TIMEOUT_SECONDS if timeout is None else timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=f"{self._url}/rest/v1",
                headers={
                    "apikey": self._api_key,
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json",
                },
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # ── Internal helpers ─────────────────────────────────────────────

    async def rpc(self, function: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        """Call a Postgres function and return its rows."""
        t0 = time.perf_counter()
        try:
            response = await self._get_client().post(f"/rpc/{function}", json=params)
        except httpx.HTTPError as exc:
            elapsed = (time.perf_counter() - t0) * 1000
            metrics.record_failure(
                "supabase", function, error_type=type(exc).__name__, latency_ms=elapsed,
            )
            raise SupabaseAPIError(f"Supabase RPC {function} failed: {exc}") from exc

        elapsed = (time.perf_counter() - t0) * 1000
        if response.status_code >= 400:
            kind = "Server" if response.status_code >= 500 else "Client"
            metrics.record_failure(
                "supabase", function,
                error_type=f"{response.status_code // 100}xx", latency_ms=elapsed,
            )
            raise SupabaseAPIError(
                f"{kind} error {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        metrics.record_success("supabase", function, latency_ms=elapsed)
        data = response.json()
        return data if isinstance(data, list) else []

    # ── Public API methods ───────────────────────────────────────────

    async def search_knowledge_base(
        self, query_text: str, match_count: int,
    ) -> list[dict[str, Any]]:
        return await self.rpc(
            SEARCH_KNOWLEDGE_BASE,
            {"query_text": query_text, "match_count": match_count},
        )

    async def search_knowledge_for_agent(
        self, query_text: str, agent_id: str, match_count: int,
    ) -> list[dict[str, Any]]:
        return await self.rpc(
            SEARCH_KNOWLEDGE_FOR_AGENT,
            {"query_text": query_text, "agent_id": agent_id, "match_count": match_count},
        )
