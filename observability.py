import atexit
import os
from enum import Enum
from functools import lru_cache
import logging
from typing import Optional

from django.conf import settings
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider, Span, Status, StatusCode
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

logger = logging.getLogger(__name__)

# Global reference to the tracer provider for cleanup
_tracer_provider: Optional[TracerProvider] = None


class RelayService(str, Enum):
    """
    Service names reported in traces.
    """
    WEB = "conversion-relay-web"


def tracing_enabled() -> bool:
    release_env = os.getenv("RELAY_RELEASE_ENV", "local").lower()

    truthy = ("1", "true", "yes", "on")
    falsy = ("0", "false", "no", "off")

    user_flag = os.getenv("RELAY_ENABLE_TRACING", "").lower()

    # 1.  An explicit falsy flag always disables.
    if user_flag in falsy:
        logger.debug("OpenTelemetry: Tracing explicitly disabled via RELAY_ENABLE_TRACING")
        return False

    # 2.  Local/build environments need an explicit opt-in.
    if release_env in {"local", "build"} and user_flag not in truthy:
        logger.debug(
            "OpenTelemetry: %s environment detected with no explicit opt-in – tracing disabled",
            release_env,
        )
        return False

    return True


@lru_cache(maxsize=1)                    # make sure we initialize only once
def init_tracing(service_name: RelayService) -> None:
    """
    Initialize the OTEL tracer provider exactly once per process.

    Recommended environment variables:
    - OTEL_SPAN_PROCESSOR=simple                    # Use SimpleSpanProcessor (no threads)
    - OTEL_BSP_SCHEDULE_DELAY=500                   # Fast export (if using batch)
    - OTEL_BSP_EXPORT_TIMEOUT=5000                  # Short timeout (if using batch)
    """
    global _tracer_provider

    if not tracing_enabled():
        return

    res = Resource.create(
        {
            "service.name": service_name.value,
            "service.version": os.getenv("RELAY_VERSION", "dev"),
            "deployment.environment.name": os.getenv("RELAY_RELEASE_ENV", "local"),
        }
    )

    try:
        provider = TracerProvider(resource=res)
        exporter = OTLPSpanExporter(
            endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT,
            insecure=settings.OTEL_EXPORTER_OTLP_INSECURE,
        )

        processor_type = os.getenv("OTEL_SPAN_PROCESSOR", "batch").lower()
        if processor_type == "simple":
            span_processor = SimpleSpanProcessor(exporter)
        else:
            span_processor = BatchSpanProcessor(
                exporter,
                schedule_delay_millis=int(os.getenv("OTEL_BSP_SCHEDULE_DELAY", "500")),
                export_timeout_millis=int(os.getenv("OTEL_BSP_EXPORT_TIMEOUT", "5000")),
            )
        provider.add_span_processor(span_processor)
        trace.set_tracer_provider(provider)
        _tracer_provider = provider
        atexit.register(shutdown_tracing)
        logger.info("OpenTelemetry: %s span processor installed for %s", processor_type, service_name.value)

    except Exception as e:
        logger.error(f"Failed to initialize OTEL tracer: {e}")
        raise


def shutdown_tracing() -> None:
    global _tracer_provider

    if _tracer_provider is None:
        return
    try:
        _tracer_provider.force_flush(timeout_millis=3000)
        _tracer_provider.shutdown()
    except Exception as e:
        logger.error(f"OpenTelemetry: Error during tracer provider shutdown: {e}")
    finally:
        _tracer_provider = None


def mark_span_failed_with_exception(span: Span, exc: Exception, error_type: Optional[str] = None) -> None:
    """
    Mark a span as failed with an exception.

    This sets the span status to ERROR and records the exception.
    """
    try:
        if span.is_recording():
            message = str(exc)
            span.record_exception(exc)
            span.set_status(Status(StatusCode.ERROR, message))
            span.set_attribute("relay.error", True)
            span.set_attribute("error.type", error_type or type(exc).__name__)
            span.set_attribute("error.message", message)
    except Exception:  # best-effort, never fail caller due to telemetry
        pass
