"""
Slipway Telemetry Infrastructure

Architectural Intent:
- OpenTelemetry traces and metrics for lifecycle steps
- Disabled unless an OTLP endpoint is configured
"""

from slipway.infrastructure.telemetry.otel_exporter import (
    OTELConfig,
    OTELExporter,
    TracedTask,
)

__all__ = [
    "OTELConfig",
    "OTELExporter",
    "TracedTask",
]
