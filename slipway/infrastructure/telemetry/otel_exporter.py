"""
OpenTelemetry Exporter for Slipway

Architectural Intent:
- One span per lifecycle step ("deploy:update", "deploy:publish", ...)
- Step durations recorded as a histogram, tagged with step name and outcome
- Exports over OTLP/gRPC to any compatible backend

Security:
- Endpoint defaults to empty string (must be explicitly configured)
- Non-localhost http:// endpoints rejected unless insecure=True
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import urlparse
import logging
import time

from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import MetricReader, PeriodicExportingMetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    SimpleSpanProcessor,
    SpanExporter,
)
from opentelemetry.trace import Span, Status, StatusCode

logger = logging.getLogger(__name__)

STEP_DURATION_METRIC = "slipway.step.duration_ms"


@dataclass
class OTELConfig:
    endpoint: str = ""
    service_name: str = "slipway"
    environment: str = "production"
    enable_traces: bool = True
    enable_metrics: bool = True
    insecure: bool = False

    def __post_init__(self) -> None:
        if self.endpoint:
            parsed = urlparse(self.endpoint)
            is_localhost = parsed.hostname in ("localhost", "127.0.0.1", "::1")
            if parsed.scheme == "http" and not is_localhost and not self.insecure:
                raise ValueError(
                    f"Non-localhost HTTP endpoint '{self.endpoint}' requires "
                    "insecure=True or use https://. "
                    "Set insecure=True to explicitly allow plaintext export."
                )


class OTELExporter:
    """
    Traces and times lifecycle steps.

    Every call is a no-op until `initialize` succeeds, so callers never
    need to check whether telemetry is enabled.
    """

    def __init__(self, config: OTELConfig):
        self.config = config
        self._initialized = False
        self._tracer: Any = None
        self._tracer_provider: Optional[TracerProvider] = None
        self._meter_provider: Optional[MeterProvider] = None
        self._step_duration: Any = None

    @property
    def enabled(self) -> bool:
        return self._initialized

    def initialize(
        self,
        span_exporter: Optional[SpanExporter] = None,
        metric_reader: Optional[MetricReader] = None,
    ) -> None:
        """Set up providers; explicit exporters/readers replace the OTLP ones."""
        if not self.config.endpoint and span_exporter is None and metric_reader is None:
            logger.info("OTEL endpoint not configured, telemetry disabled")
            return

        resource = Resource(
            attributes={
                SERVICE_NAME: self.config.service_name,
                "environment": self.config.environment,
            }
        )

        try:
            if self.config.enable_traces:
                if span_exporter is None:
                    processor = BatchSpanProcessor(
                        OTLPSpanExporter(
                            endpoint=self.config.endpoint, insecure=self.config.insecure
                        )
                    )
                else:
                    processor = SimpleSpanProcessor(span_exporter)
                self._tracer_provider = TracerProvider(resource=resource)
                self._tracer_provider.add_span_processor(processor)
                self._tracer = self._tracer_provider.get_tracer(__name__)

            if self.config.enable_metrics:
                reader = metric_reader or PeriodicExportingMetricReader(
                    OTLPMetricExporter(
                        endpoint=self.config.endpoint, insecure=self.config.insecure
                    )
                )
                self._meter_provider = MeterProvider(
                    resource=resource, metric_readers=[reader]
                )
                meter = self._meter_provider.get_meter(__name__)
                self._step_duration = meter.create_histogram(
                    STEP_DURATION_METRIC, unit="ms", description="Lifecycle step duration"
                )
        except Exception as e:
            logger.error("Failed to initialize OTEL: %s", e)
            return

        self._initialized = True

    def start_span(
        self, name: str, attributes: Optional[dict[str, str]] = None
    ) -> Optional[Span]:
        if not self._initialized or self._tracer is None:
            return None
        return self._tracer.start_span(name, attributes=attributes or {})

    def end_span(self, span: Optional[Span]) -> None:
        if span is not None:
            span.end()

    def record_step(self, name: str, duration_ms: float, success: bool) -> None:
        if not self._initialized or self._step_duration is None:
            return
        self._step_duration.record(
            duration_ms, attributes={"step": name, "success": str(success)}
        )

    async def traced(self, name: str, run: Callable[[], Awaitable[Any]]) -> Any:
        """Runs `run` inside a span named after the step; errors propagate."""
        span = self.start_span(name, {"slipway.step": name})
        started = time.monotonic()
        success = False
        try:
            result = await run()
            success = True
            return result
        except Exception as e:
            if span is not None:
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, str(e)))
            raise
        finally:
            self.record_step(name, (time.monotonic() - started) * 1000, success)
            self.end_span(span)

    def shutdown(self) -> None:
        """Flushes pending spans and metrics."""
        if not self._initialized:
            return
        if self._tracer_provider is not None:
            self._tracer_provider.shutdown()
        if self._meter_provider is not None:
            self._meter_provider.shutdown()
        self._initialized = False


class TracedTask:
    """Wraps a lifecycle step so each run is traced under its task name."""

    def __init__(self, name: str, task: Any, exporter: OTELExporter):
        self.name = name
        self.task = task
        self.exporter = exporter

    async def execute(self) -> Any:
        return await self.exporter.traced(self.name, self.task.execute)
