"""DentalHub Head Brain: a practice-management consultant for dental offices.

Architecture Overview
=====================

A practice question goes through a **LangGraph** pipeline
(``dental_hub/orchestrator.py``):

1. **retrieve**: general context from the Supabase knowledge base, falling
   back to three static passages when the lookup fails or finds nothing.

2. **route**: keyword routing over the question and that context picks the
   lab case manager, the data analysis agent, or both.

3. **agents**: the lab case manager triages overdue / due-soon cases and
   emits follow-up tasks; the data analysis agent scores the practice KPIs
   against their goals, and the recommendation agent turns the weak areas
   into action plans.

4. **assemble**: typed sections in a fixed order plus a templated answer.

Key Design Decisions
--------------------
- **No LLM in the loop**: scoring, routing and recommendations are
  deterministic.  The knowledge base does its own embedding and similarity
  search in Postgres (pgvector) behind two RPC functions.
- **Graceful degradation**: knowledge-base failures never fail a query;
  they are logged, counted in CloudWatch and replaced by the fallback.
- **Single pass**: the graph is compiled without a checkpointer and nothing
  survives a query.
- **SDR automation**: an in-memory campaign manager moves prospects
  through eight outreach campaigns and books consultation calls.
- **Dual Interface**: FastAPI server (production) + CLI loop (development).

Package Structure
-----------------
- ``dental_hub/orchestrator.py``: LangGraph StateGraph definition
- ``dental_hub/models.py``: pydantic domain models
- ``dental_hub/config.py``: configuration from environment variables
- ``dental_hub/agents/``: scoring, analysis, recommendations, lab cases, routing
- ``dental_hub/services/``: Supabase client, knowledge retriever, metrics
- ``dental_hub/sdr/``: outreach campaigns and the campaign manager
- ``dental_hub/api/``: FastAPI routes and request / response schemas
- ``dental_hub/server.py``: FastAPI application
- ``dental_hub/main.py``: CLI interface
"""
