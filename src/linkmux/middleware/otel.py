"""OpenTelemetry tracing and metrics middleware.

Creates a span and metrics for each route handler invocation.

Install with: uv add "linkmux[otel]"
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from linkmux.patterns import RouteParameters
    from linkmux.route import Handler
    from linkmux.router import Middleware

try:
    from opentelemetry import metrics, trace
    from opentelemetry.trace import SpanKind, TracerProvider
except ImportError as e:
    msg = (
        "OpenTelemetry middleware requires the 'otel' extra. "
        "Install with: uv add 'linkmux[otel]'"
    )
    raise ImportError(msg) from e

from linkmux.router import dispatch_url, matched_pattern

_DURATION_BUCKETS = (
    0.0005,
    0.001,
    0.005,
    0.01,
    0.025,
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
)


def otel(
    *,
    tracer_provider: TracerProvider | None = None,
    meter_provider: metrics.MeterProvider | None = None,
) -> Middleware:
    """Create OpenTelemetry tracing and metrics middleware.

    Each handler invocation gets an INTERNAL span named
    ``navigate <pattern>``. A url that falls through produces one span per
    declining handler. Only depends on ``opentelemetry-api``; users bring
    their own SDK and exporters.

    Metrics emitted:
        - ``linkmux.handler.duration`` (histogram, seconds)
        - ``linkmux.handler.invocations`` (counter)

    Args:
        tracer_provider: Optional TracerProvider. If None, uses the global provider.
        meter_provider: Optional MeterProvider. If None, uses the global provider.

    Returns:
        Middleware function that wraps handlers with tracing and metrics.

    Example:
        router.use(otel())
    """
    tracer = trace.get_tracer(
        "linkmux",
        tracer_provider=tracer_provider,
    )
    meter = metrics.get_meter(
        "linkmux",
        meter_provider=meter_provider,
    )
    duration_histogram = meter.create_histogram(
        "linkmux.handler.duration",
        unit="s",
        description="Duration of route handler invocations.",
        explicit_bucket_boundaries_advisory=_DURATION_BUCKETS,
    )
    invocations_counter = meter.create_counter(
        "linkmux.handler.invocations",
        unit="{invocation}",
        description="Number of route handler invocations.",
    )

    def middleware(handler: Handler) -> Handler:
        def traced_handler(parameters: RouteParameters) -> bool:
            # set by Router before middleware runs
            pattern = matched_pattern.get(parameters.matched_pattern)
            url = dispatch_url.get("")
            scheme, sep, _ = url.partition(":")

            attributes: dict[str, str | bool] = {"linkmux.route.pattern": pattern}
            if sep:
                attributes["url.scheme"] = scheme.lower()
            # query values are left out, they may carry user data
            for key, value in parameters.path_params.items():
                attributes[f"linkmux.route.param.{key}"] = value

            handled = False
            start = time.perf_counter()
            with tracer.start_as_current_span(
                f"navigate {pattern}",
                kind=SpanKind.INTERNAL,
                attributes=attributes,
                record_exception=True,
                set_status_on_exception=True,
            ) as span:
                try:
                    handled = bool(handler(parameters))
                finally:
                    duration = time.perf_counter() - start
                    span.set_attribute("linkmux.route.handled", handled)
                    metric_attrs = {
                        "linkmux.route.pattern": pattern,
                        "linkmux.route.handled": handled,
                    }
                    duration_histogram.record(duration, metric_attrs)
                    invocations_counter.add(1, metric_attrs)
            return handled

        return traced_handler

    return middleware
