"""Sabre Telemetry - OpenTelemetry instrumentation."""

from .tracing import TRACER_NAME, get_tracer, instrument_compile, instrument_render

__all__ = [
    "TRACER_NAME",
    "get_tracer",
    "instrument_compile",
    "instrument_render",
]
