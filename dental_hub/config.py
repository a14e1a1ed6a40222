"""Settings for the DentalHub practice brain, read once at import time.

Required secrets (the Supabase URL and key) come from the process
environment, which ``python-dotenv`` pre-populates from a local ``.env``.
On AWS, where ``AWS_EXECUTION_ENV`` is set, a secret missing from the
environment is read from SSM Parameter Store under ``/dental-hub/<NAME>``.

KPI goals default to the practice-wide targets below and can be overridden
per deployment with ``KPI_GOAL_<METRIC>`` variables, e.g.
``KPI_GOAL_PRODUCTION=160000`` or ``KPI_GOAL_NO_SHOWS=6``.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

from dental_hub.models import DEFAULT_GOALS, MetricGoal, MetricGoalTable, MetricName

load_dotenv()

logger = logging.getLogger(__name__)

SSM_PREFIX = "/dental-hub"
_PLACEHOLDER_PREFIX = "your_"  # left over from .env.example


# ── Secrets ─────────────────────────────────────────────────────────

def _from_ssm(name: str) -> str | None:
    """Read ``SSM_PREFIX/name``; ``None`` when unavailable."""
    if not os.getenv("AWS_EXECUTION_ENV"):
        return None
    import boto3  # noqa: PLC0415  only needed on AWS

    path = f"{SSM_PREFIX}/{name}"
    try:
        param = boto3.client("ssm").get_parameter(Name=path, WithDecryption=True)
    except Exception:
        logger.warning("Could not read %s from SSM Parameter Store", path)
        return None
    return param["Parameter"]["Value"] or None


def _secret(name: str) -> str:
    """Resolve a required secret; raises ``OSError`` naming where to set it."""
    value = os.getenv(name, "")
    if value.startswith(_PLACEHOLDER_PREFIX):
        value = ""
    value = value or _from_ssm(name)
    if not value:
        raise OSError(
            f"{name} is not configured: add it to .env or to "
            f"SSM Parameter Store at {SSM_PREFIX}/{name}"
        )
    return value


# ── KPI goals ───────────────────────────────────────────────────────

# MetricName.NEW_PATIENTS -> "KPI_GOAL_NEW_PATIENTS"
def _goal_env_name(metric: MetricName) -> str:
    return f"KPI_GOAL_{metric.name}"


def load_goal_table(environ: dict[str, str] | None = None) -> MetricGoalTable:
    """Build the goal table from the defaults plus any env overrides.

    Raises ``ValueError`` for a non-numeric override and pydantic's
    ``ValidationError`` for a goal the scorer cannot use (e.g. a zero
    production target).
    """
    env = os.environ if environ is None else environ
    goals: dict[MetricName, MetricGoal] = {}
    for metric, default in DEFAULT_GOALS.goals.items():
        raw = env.get(_goal_env_name(metric))
        if raw is None or not raw.strip():
            goals[metric] = default
            continue
        try:
            target = float(raw)
        except ValueError as exc:
            raise ValueError(
                f"{_goal_env_name(metric)} must be numeric, got {raw!r}"
            ) from exc
        logger.info("KPI goal override: %s = %s", metric.value, target)
        goals[metric] = MetricGoal(target=target, lower_is_better=default.lower_is_better)
    return MetricGoalTable(goals=goals)


# ── Supabase ────────────────────────────────────────────────────────
SUPABASE_URL: str = _secret("SUPABASE_URL").rstrip("/")
SUPABASE_ANON_KEY: str = _secret("SUPABASE_ANON_KEY")
SUPABASE_TIMEOUT_SECONDS: float = float(os.getenv("SUPABASE_TIMEOUT_SECONDS", "10"))

# ── Practice ────────────────────────────────────────────────────────
KPI_GOALS: MetricGoalTable = load_goal_table()
OFFICE_NAME: str = os.getenv("OFFICE_NAME", "Bright Smile Dental")

# ── Server ──────────────────────────────────────────────────────────
SERVER_HOST: str = os.getenv("SERVER_HOST", "0.0.0.0")
SERVER_PORT: int = int(os.getenv("SERVER_PORT", "8000"))
CORS_ORIGINS: list[str] = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:5173",
).split(",")
