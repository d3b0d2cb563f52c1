import contextvars
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

from observability import mark_span_failed_with_exception

from .planner import DestinationRequest
from .providers import DESTINATIONS
from .providers.base import classify_error
from .telemetry import trace_dispatch


SKIPPED_SENTINEL = "Event skipped"

SKIPPED = "skipped"
SUCCESS = "success"
FAILURE = "failure"

_logger = logging.getLogger(__name__)


@dataclass
class DispatchOutcome:
    destination: str
    status: str
    result: Any = None
    error: str | None = None
    error_type: str | None = None

    def as_response_value(self):
        if self.status == SKIPPED:
            return SKIPPED_SENTINEL
        if self.status == FAILURE:
            return {"error": self.error, "error_type": self.error_type}
        return self.result


def _dispatch_one(request: DestinationRequest, client, logger) -> DispatchOutcome:
    with trace_dispatch(request.destination) as span:
        try:
            result = client.send(request.payload, **request.credentials)
        except Exception as e:
            error_type = classify_error(e)
            span.set_attribute("outcome", FAILURE)
            mark_span_failed_with_exception(span, e, error_type)
            logger.warning(
                "Destination %s failed (%s): %s",
                request.destination,
                error_type,
                e,
                exc_info=True,
            )
            return DispatchOutcome(
                destination=request.destination,
                status=FAILURE,
                error=str(e),
                error_type=error_type,
            )
        span.set_attribute("outcome", SUCCESS)
        logger.info("Destination %s accepted event", request.destination)
        return DispatchOutcome(destination=request.destination, status=SUCCESS, result=result)


def run_fanout(requests: list[DestinationRequest], clients: dict, *, logger=None) -> dict[str, DispatchOutcome]:
    """
    Call every eligible destination concurrently and wait for all of them.

    A failing destination is captured as its own outcome and never cancels or
    alters its siblings. The returned dict is keyed by destination in
    response order, independent of completion order.
    """
    logger = logger or _logger
    outcomes: dict[str, DispatchOutcome] = {}
    live = []
    for request in requests:
        if request.skipped:
            logger.info("Destination %s skipped: %s", request.destination, request.reason)
            outcomes[request.destination] = DispatchOutcome(destination=request.destination, status=SKIPPED)
        else:
            logger.info("Destination %s calling", request.destination)
            live.append(request)

    if live:
        with ThreadPoolExecutor(max_workers=len(live)) as ex:
            futs = {
                request.destination: ex.submit(
                    contextvars.copy_context().run,
                    _dispatch_one,
                    request,
                    clients[request.destination],
                    logger,
                )
                for request in live
            }
        # Leaving the executor block waits for every branch.
        for destination, fut in futs.items():
            outcomes[destination] = fut.result()

    order = [d for d in DESTINATIONS if d in outcomes]
    order += [d for d in outcomes if d not in order]
    return {d: outcomes[d] for d in order}
