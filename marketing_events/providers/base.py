import requests
from django.conf import settings


class DestinationError(Exception):
    error_type = "unexpected"

    def __init__(self, status: int, body: str):
        super().__init__(f"{status}: {body}")
        self.status = status
        self.body = body


class TemporaryError(DestinationError):
    error_type = "temporary"


class PermanentError(DestinationError):
    error_type = "permanent"


RETRYABLE_4XX = {408, 425, 429}


def classify_error(exc: BaseException) -> str:
    if isinstance(exc, DestinationError):
        return exc.error_type
    if isinstance(exc, requests.RequestException):
        return "transport"
    return "unexpected"


def post_json(url, json=None, params=None, headers=None, timeout=None):
    if timeout is None:
        timeout = getattr(settings, "MARKETING_EVENTS_HTTP_TIMEOUT", 6)
    response = requests.post(url, json=json, params=params, headers=headers, timeout=timeout)
    status = response.status_code
    if status >= 500 or status in RETRYABLE_4XX:
        raise TemporaryError(status, response.text)
    if status >= 400:
        raise PermanentError(status, response.text)
    return response.json() if response.content else {}
