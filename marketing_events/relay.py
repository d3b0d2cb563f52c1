import json
import logging
from dataclasses import dataclass

from .context import extract_client_context, extract_utms
from .exceptions import InvalidEventError
from .fanout import run_fanout
from .planner import DestinationCredentials, plan_dispatches
from .providers import get_clients
from .schema import INVALID_JSON, ConversionRequest, camelize_keys, derive_identity, validate_request
from .telemetry import trace_event


_logger = logging.getLogger(__name__)


def _reject_constant(name):
    raise ValueError(f"Unsupported JSON constant: {name}")


@dataclass
class RelayResponse:
    status: int
    body: dict | str


class ConversionRelay:
    """
    Normalizes one conversion event and fans it out to every eligible destination.

    Transport-agnostic: callers hand in the raw body and a case-insensitive
    header mapping and turn the returned ``RelayResponse`` into whatever their
    server speaks. Clients, credentials and the logger are injectable.
    """

    def __init__(self, clients=None, credentials: DestinationCredentials | None = None, logger=None, clock=None):
        self.clients = clients if clients is not None else get_clients()
        self.credentials = credentials
        self.logger = logger or _logger
        self.clock = clock

    def handle(self, raw_body, headers=None) -> RelayResponse:
        try:
            body = (
                json.loads(raw_body, parse_constant=_reject_constant)
                if isinstance(raw_body, (str, bytes, bytearray))
                else raw_body
            )
        except (ValueError, RecursionError) as e:
            self.logger.info("JSON parse error: %s", e)
            return RelayResponse(status=400, body=INVALID_JSON)

        try:
            outcomes = self.relay(body, headers)
        except InvalidEventError as e:
            self.logger.info("Rejected event: %s", e.message)
            return RelayResponse(status=400, body=e.message)

        return RelayResponse(
            status=200,
            body={destination: outcome.as_response_value() for destination, outcome in outcomes.items()},
        )

    def relay(self, body, headers=None):
        credentials = self.credentials or DestinationCredentials.from_settings()
        self.logger.debug("Destination credentials present: %s", credentials.presence())

        try:
            body = camelize_keys(body)
        except RecursionError:
            raise InvalidEventError(INVALID_JSON) from None
        req = ConversionRequest.from_payload(body)
        validate_request(req)

        with trace_event(req):
            client = extract_client_context(headers)
            identity = derive_identity(req.data.user_data)
            utms = extract_utms(req.data.event_url)
            self.logger.debug(
                "Derived fields: has_ip=%s has_ua=%s hashed=%s utms=%s",
                bool(client.client_ip),
                bool(client.user_agent),
                {k: bool(getattr(identity, k)) for k in ("fn", "ln", "em", "ph")},
                utms,
            )

            now = self.clock() if self.clock else None
            requests = plan_dispatches(req, identity, client, utms, credentials, now=now)
            outcomes = run_fanout(requests, self.clients, logger=self.logger)

        self.logger.info(
            "Relayed event %s: %s",
            req.data.event_id,
            {destination: outcome.status for destination, outcome in outcomes.items()},
        )
        return outcomes
