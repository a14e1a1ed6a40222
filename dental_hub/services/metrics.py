"""Buffered CloudWatch metrics for the practice brain.

Three families of data points are published under the ``DentalHub``
namespace:

* ``Dependency/*``: count, latency and errors for every call to an
  external service (Supabase RPC).
* ``Knowledge/FallbackCount``: how often the knowledge retriever had to
  answer with its static fallback, by scope and reason.  The retriever never
  surfaces these failures to callers, so this metric is the only place they
  show up besides the logs.
* ``Agent/Latency``: wall time of each orchestrator node.

Data points are buffered under a lock and flushed by a daemon thread every
``FLUSH_INTERVAL_SECONDS``.  Unless ``METRICS_ENABLED=true`` nothing is buffered
or sent; points are only logged at DEBUG level.

Usage
-----
>>> from dental_hub.services.metrics import metrics
>>> metrics.record_success("supabase", "search_knowledge_base", latency_ms=42.0)
>>> metrics.record_fallback("general", reason="empty")
"""

from __future__ import annotations

import atexit
import logging
import os
import threading
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)

NAMESPACE = "DentalHub"
FLUSH_INTERVAL_SECONDS = 60
MAX_BATCH_SIZE = 1_000  # CloudWatch API limit per PutMetricData call


def _chunks(items: list, size: int):
    for start in range(0, len(items), size):
        yield items[start : start + size]


def _dims(**pairs: str) -> list[dict[str, str]]:
    return [{"Name": name, "Value": value} for name, value in pairs.items()]


class MetricsClient:
    """Batched CloudWatch metrics publisher.

    ``enabled`` defaults to the ``METRICS_ENABLED`` environment flag.  The
    boto3 CloudWatch client is created on first publish unless one is
    passed in.
    """

    def __init__(self, enabled: bool | None = None, cloudwatch=None) -> None:
        if enabled is None:
            enabled = os.getenv("METRICS_ENABLED", "false").strip().lower() in ("1", "true", "yes")
        self._enabled = enabled
        self._cw_client = cloudwatch
        self._buffer: list[dict[str, Any]] = []
        self._lock = threading.Lock()
        self._stop = threading.Event()
        if enabled:
            self._start_flush_thread()

    def _get_cw_client(self):
        if self._cw_client is None:
            import boto3  # noqa: PLC0415  only needed once publishing is on

            self._cw_client = boto3.client("cloudwatch")
        return self._cw_client

    # ── Dependency calls ─────────────────────────────────────────────

    def _latency(self, service: str, operation: str, latency_ms: float) -> None:
        self._put(
            "Dependency/Latency", _dims(Service=service, Operation=operation),
            latency_ms, unit="Milliseconds",
        )

    def record_success(self, service: str, operation: str, latency_ms: float) -> None:
        self._put("Dependency/RequestCount", _dims(Service=service, Status="success"), 1)
        self._latency(service, operation, latency_ms)
        logger.debug("Metric: %s.%s ok in %.1fms", service, operation, latency_ms)

    def record_failure(self, service: str, operation: str, error_type: str,
                       latency_ms: float = 0) -> None:
        """Count a failed call; latency is only recorded when it was measured."""
        self._put("Dependency/RequestCount", _dims(Service=service, Status="failure"), 1)
        self._put("Dependency/ErrorCount", _dims(Service=service, ErrorType=error_type), 1)
        if latency_ms > 0:
            self._latency(service, operation, latency_ms)
        logger.debug("Metric: %s.%s failed (%s) after %.1fms",
                     service, operation, error_type, latency_ms)

    # ── Pipeline ─────────────────────────────────────────────────────

    def record_fallback(self, scope: str, reason: str) -> None:
        """Record a knowledge lookup answered from the static fallback."""
        self._put("Knowledge/FallbackCount", _dims(Scope=scope, Reason=reason), 1)
        logger.debug("Metric: knowledge fallback scope=%s reason=%s", scope, reason)

    def record_agent(self, agent: str, latency_ms: float) -> None:
        """Record how long one orchestrator node took."""
        self._put("Agent/Latency", _dims(Agent=agent), latency_ms, unit="Milliseconds")
        logger.debug("Metric: agent %s latency=%.1fms", agent, latency_ms)

    def flush(self) -> int:
        """Publish everything buffered so far; returns the number of points sent.

        The buffer is drained even when publishing is disabled or fails.
        """
        with self._lock:
            batch, self._buffer = self._buffer, []

        if not batch:
            return 0
        if not self._enabled:
            logger.debug("Dropping %d metric points (METRICS_ENABLED is off)", len(batch))
            return 0

        sent = 0
        try:
            cw = self._get_cw_client()
            for chunk in _chunks(batch, MAX_BATCH_SIZE):
                cw.put_metric_data(Namespace=NAMESPACE, MetricData=chunk)
                sent += len(chunk)
        except Exception:
            logger.exception("CloudWatch publish failed after %d of %d points", sent, len(batch))
            return sent
        logger.info("Published %d metric points to %s", sent, NAMESPACE)
        return sent

    def close(self) -> None:
        """Stop the flush worker and publish what is left."""
        self._stop.set()
        self.flush()

    # ── Internal ──────────────────────────────────────────────────────

    def _put(self, name: str, dimensions: list[dict[str, str]], value: float,
             unit: str = "Count") -> None:
        if not self._enabled:
            logger.debug("Metric %s=%s %s", name, value, dimensions)
            return
        datum = dict(
            MetricName=name, Dimensions=dimensions, Value=value, Unit=unit,
            Timestamp=datetime.now(UTC),
        )
        with self._lock:
            self._buffer.append(datum)

    def _start_flush_thread(self) -> None:
        def _worker() -> None:
            # close() sets the event, which ends the wait early.
            while not self._stop.wait(FLUSH_INTERVAL_SECONDS):
                try:
                    self.flush()
                except Exception:
                    logger.exception("Metrics flush worker error")

        threading.Thread(target=_worker, daemon=True, name="dentalhub-metrics").start()
        atexit.register(self.close)
        logger.info("Publishing metrics to %s every %ds", NAMESPACE, FLUSH_INTERVAL_SECONDS)


metrics = MetricsClient()
