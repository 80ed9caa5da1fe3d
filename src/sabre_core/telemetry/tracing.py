"""Sabre tracing - OpenTelemetry spans around compile and render.

Spans are no-ops unless the application installs an OpenTelemetry SDK
tracer provider, or passes its own tracer to the engine.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode, Tracer

TRACER_NAME = "sabre_core"


def get_tracer() -> Tracer:
    """Return the tracer used when the engine is not given one."""
    return trace.get_tracer(TRACER_NAME)


@contextmanager
def instrument_compile(
    key: str,
    tracer: Tracer | None = None,
    file_name: str | None = None,
) -> Iterator[dict[str, Any]]:
    """Span for one generate+compile cycle.

    Args:
        key: Cache key being compiled
        tracer: Tracer to use (defaults to get_tracer())
        file_name: File name handed to the generator

    Yields:
        Dictionary the caller may fill with extra span attributes
    """
    tracer = tracer or get_tracer()
    attributes: dict[str, Any] = {}

    with tracer.start_as_current_span(
        "template:compile", record_exception=False, set_status_on_exception=False
    ) as span:
        span.set_attribute("template.key", key)
        if file_name:
            span.set_attribute("template.file_name", file_name)
        try:
            yield attributes
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise
        else:
            span.set_status(Status(StatusCode.OK))
        finally:
            for name, value in attributes.items():
                span.set_attribute(name, value)


@contextmanager
def instrument_render(
    template_name: str | None,
    tracer: Tracer | None = None,
) -> Iterator[dict[str, Any]]:
    """Span for one render chain (a template and all of its layouts).

    Args:
        template_name: Logical name of the top-level template
        tracer: Tracer to use (defaults to get_tracer())

    Yields:
        Dictionary the caller may fill with extra span attributes
    """
    tracer = tracer or get_tracer()
    attributes: dict[str, Any] = {}

    with tracer.start_as_current_span(
        "template:render", record_exception=False, set_status_on_exception=False
    ) as span:
        span.set_attribute("template.name", template_name or "<anonymous>")
        try:
            yield attributes
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise
        else:
            span.set_status(Status(StatusCode.OK))
        finally:
            for name, value in attributes.items():
                span.set_attribute(name, value)
