"""CLI entry point for the DentalHub Head Brain.

A terminal loop for asking practice questions during development.  For
production, use the FastAPI server (dental_hub/server.py).

Usage:
    python -m dental_hub.main            # normal mode (quiet)
    python -m dental_hub.main --debug    # debug mode (shows RPC calls)
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from dental_hub.config import KPI_GOALS
from dental_hub.models import OrchestratorResponse
from dental_hub.orchestrator import HeadBrainConsultant
from dental_hub.services.knowledge import KnowledgeRetriever
from dental_hub.services.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


def _configure_logging(debug: bool = False) -> None:
    """WARNING by default, DEBUG when --debug is passed."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )
    if not debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("dental_hub").setLevel(logging.DEBUG if debug else logging.INFO)


def render(response: OrchestratorResponse) -> str:
    lines = [response.answer.rstrip()]
    if response.sources:
        lines.append(f"\n(Sources: {', '.join(response.sources)})")
    return "\n".join(lines)


async def _ask(consultant: HeadBrainConsultant, question: str) -> str:
    return render(await consultant.handle_query(question))


def main():
    """Run the interactive question loop."""
    parser = argparse.ArgumentParser(description="DentalHub Head Brain CLI")
    parser.add_argument(
        "--debug", action="store_true",
        help="Show all log messages including knowledge-base requests",
    )
    args = parser.parse_args()
    _configure_logging(debug=args.debug)

    print("\n" + "=" * 60)
    print("  DentalHub Head Brain - CLI")
    print("=" * 60)
    print("  Ask about KPIs, lab cases or practice performance.")
    print("  Type 'quit' to exit.")
    print("=" * 60 + "\n")

    supabase = SupabaseClient()
    consultant = HeadBrainConsultant(knowledge=KnowledgeRetriever(supabase), goals=KPI_GOALS)
    loop = asyncio.new_event_loop()

    try:
        while True:
            try:
                question = input("You: ").strip()
            except (KeyboardInterrupt, EOFError):
                print("\n\nGoodbye!")
                break

            if not question:
                continue
            if question.lower() in ("exit", "quit", "q"):
                print("\nGoodbye!")
                break

            # handle_query never raises; errors come back as an error answer.
            print(f"\nHead Brain: {loop.run_until_complete(_ask(consultant, question))}\n")
    finally:
        loop.run_until_complete(supabase.aclose())
        loop.close()


if __name__ == "__main__":
    main()
