"""Schema Registry 呼び出しの OpenTelemetry メトリクス定義"""

from __future__ import annotations

from opentelemetry import metrics

_meter = metrics.get_meter("k1s0_schema_proxy", version="0.1.0")

registry_requests_total = _meter.create_counter(
    name="registry_requests_total",
    description="Total number of schema registry requests",
    unit="1",
)

registry_request_duration_seconds = _meter.create_histogram(
    name="registry_request_duration_seconds",
    description="Schema registry request duration in seconds",
    unit="s",
)

registry_errors_total = _meter.create_counter(
    name="registry_errors_total",
    description="Total number of schema registry transport errors",
    unit="1",
)
