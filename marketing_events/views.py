import logging

from django.core.exceptions import RequestDataTooBig
from django.http import HttpResponse, JsonResponse, UnreadablePostError
from django.views.decorators.csrf import csrf_exempt
from opentelemetry import trace

from .providers import get_clients
from .relay import ConversionRelay
from .schema import INVALID_JSON

logger = logging.getLogger(__name__)
tracer = trace.get_tracer("marketing_events")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, referer",
}


def _with_cors(response):
    for header, value in CORS_HEADERS.items():
        response[header] = value
    return response


@csrf_exempt
@tracer.start_as_current_span("MARKETING conversion_event")
def conversion_event(request, path=""):
    """Accept one conversion event and relay it to Meta, GA4 and Google Ads."""
    logger.info("Conversion event request method: %s", request.method)

    if request.method == "OPTIONS":
        return _with_cors(HttpResponse(status=204))

    if request.method != "POST":
        logger.info("Rejected conversion event request method: %s", request.method)
        return _with_cors(HttpResponse("Wrong request method", status=405))

    try:
        raw_body = request.body
    except (RequestDataTooBig, UnreadablePostError) as e:
        logger.warning("Could not read conversion event body: %s", e)
        return _with_cors(HttpResponse(INVALID_JSON, status=400))

    result = ConversionRelay(clients=get_clients(), logger=logger).handle(raw_body, request.headers)
    if result.status != 200:
        return _with_cors(HttpResponse(result.body, status=result.status))
    return _with_cors(JsonResponse(result.body, status=200))
