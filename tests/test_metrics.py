"""Tests for the CloudWatch metrics client."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from dental_hub.services.metrics import NAMESPACE, MetricsClient


def _make_client(*, enabled: bool = True) -> MetricsClient:
    with patch.dict("os.environ", {"METRICS_ENABLED": str(enabled).lower()}), \
            patch.object(MetricsClient, "_start_flush_thread"):
        return MetricsClient()


def _names(client: MetricsClient) -> list[str]:
    return [m["MetricName"] for m in client._buffer]


def _dims(datum: dict) -> dict[str, str]:
    return {d["Name"]: d["Value"] for d in datum["Dimensions"]}


class TestDependencyMetrics:
    def test_success_buffers_count_and_latency(self):
        client = _make_client()
        client.record_success("supabase", "search_knowledge_base", latency_ms=42.0)

        assert _names(client) == ["Dependency/RequestCount", "Dependency/Latency"]
        count, latency = client._buffer
        assert _dims(count) == {"Service": "supabase", "Status": "success"}
        assert latency["Unit"] == "Milliseconds"
        assert latency["Value"] == 42.0

    def test_failure_without_latency(self):
        client = _make_client()
        client.record_failure("supabase", "search_knowledge_base", error_type="ConnectError")

        assert _names(client) == ["Dependency/RequestCount", "Dependency/ErrorCount"]
        assert _dims(client._buffer[1])["ErrorType"] == "ConnectError"

    def test_failure_with_latency(self):
        client = _make_client()
        client.record_failure("supabase", "rpc", error_type="5xx", latency_ms=250.0)
        assert "Dependency/Latency" in _names(client)


class TestPipelineMetrics:
    def test_fallback_dimensions(self):
        client = _make_client()
        client.record_fallback("lab-case-manager", reason="empty")

        (datum,) = client._buffer
        assert datum["MetricName"] == "Knowledge/FallbackCount"
        assert _dims(datum) == {"Scope": "lab-case-manager", "Reason": "empty"}

    def test_agent_latency(self):
        client = _make_client()
        client.record_agent("data_analysis", 12.5)

        (datum,) = client._buffer
        assert datum["MetricName"] == "Agent/Latency"
        assert _dims(datum) == {"Agent": "data_analysis"}


class TestMetricsFlush:
    def test_disabled_client_never_buffers(self):
        client = _make_client(enabled=False)
        for _ in range(1_000):
            client.record_success("supabase", "rpc", latency_ms=1.0)
        client.record_fallback("general", reason="empty")
        client.record_agent("route", 1.0)

        assert client._buffer == []

    def test_disabled_flush_does_not_touch_boto3(self):
        client = _make_client(enabled=False)
        client.record_agent("route", 1.0)

        with patch("boto3.client") as mock_boto:
            assert client.flush() == 0

        mock_boto.assert_not_called()

    def test_enabled_flush_sends_to_namespace(self):
        client = _make_client()
        mock_cw = MagicMock()
        client._cw_client = mock_cw

        client.record_success("supabase", "rpc", latency_ms=5.0)
        client.record_fallback("general", reason="error")

        assert client.flush() == 3
        kwargs = mock_cw.put_metric_data.call_args.kwargs
        assert kwargs["Namespace"] == NAMESPACE == "DentalHub"
        assert len(kwargs["MetricData"]) == 3

    def test_cloudwatch_error_is_logged_not_raised(self):
        client = _make_client()
        client._cw_client = MagicMock()
        client._cw_client.put_metric_data.side_effect = RuntimeError("throttled")

        client.record_agent("assemble", 3.0)
        assert client.flush() == 0

    def test_empty_buffer_returns_zero(self):
        assert _make_client().flush() == 0

    def test_close_stops_worker_and_flushes(self):
        client = _make_client()
        client._cw_client = MagicMock()
        client.record_agent("route", 2.0)

        client.close()

        assert client._stop.is_set()
        client._cw_client.put_metric_data.assert_called_once()
