from contextlib import contextmanager

from opentelemetry import trace

_tracer = trace.get_tracer(__name__)


@contextmanager
def trace_event(req):
    with _tracer.start_as_current_span("marketing_event") as span:
        span.set_attribute("event.id", str(req.data.event_id or ""))
        span.set_attribute("event.url", str(req.data.event_url or ""))
        yield span


@contextmanager
def trace_dispatch(destination: str):
    with _tracer.start_as_current_span("marketing_event.dispatch") as span:
        span.set_attribute("destination", destination)
        yield span
