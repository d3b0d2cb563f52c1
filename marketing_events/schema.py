import hashlib
import re
from dataclasses import dataclass, field
from typing import Any

from .exceptions import InvalidEventError
from .names import parse_name


INVALID_JSON = "Invalid JSON"
MISSING_EVENT = "Event/conversion is missing"
MISSING_EVENT_ID = "Event ID is missing"
MISSING_EVENT_URL = "Event URL is missing"
MISSING_USER_ID = "User ID is missing"

_SNAKE_SEGMENT = re.compile(r"_([a-z])")


def _camelize_key(key):
    if not isinstance(key, str):
        return key
    return _SNAKE_SEGMENT.sub(lambda m: m.group(1).upper(), key)


def camelize_keys(value: Any) -> Any:
    """Rewrite every mapping key from ``snake_case`` to ``camelCase``, recursively."""
    if isinstance(value, (list, tuple)):
        return [camelize_keys(item) for item in value]
    if isinstance(value, dict):
        return {_camelize_key(k): camelize_keys(v) for k, v in value.items()}
    return value


def sha256_norm(s: Any) -> str | None:
    if not s:
        return None
    if not isinstance(s, str):
        s = str(s)
    return hashlib.sha256(s.strip().lower().encode("utf-8")).hexdigest()


def _object(value, default=None) -> dict:
    if value is None:
        return default if default is not None else {}
    if not isinstance(value, dict):
        raise InvalidEventError(INVALID_JSON)
    return value


def _text(payload: dict, key: str) -> str | None:
    value = payload.get(key)
    if value is not None and not isinstance(value, str):
        raise InvalidEventError(INVALID_JSON)
    return value


def _identifier(payload: dict, key: str) -> str | int | float | None:
    """Like ``_text``, but JSON numbers are accepted as-is (pixel ids, phone numbers)."""
    value = payload.get(key)
    if isinstance(value, bool) or (value is not None and not isinstance(value, (str, int, float))):
        raise InvalidEventError(INVALID_JSON)
    return value


@dataclass
class UserData:
    name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | int | float | None = None

    @classmethod
    def from_payload(cls, payload: dict) -> "UserData":
        return cls(
            name=_text(payload, "name"),
            first_name=_text(payload, "firstName"),
            last_name=_text(payload, "lastName"),
            email=_text(payload, "email"),
            phone=_identifier(payload, "phone"),
        )


@dataclass
class EventData:
    meta_event: str | None = None
    ga_event: str | None = None
    gads_conversion_label: str | None = None
    event_url: str | None = None
    event_id: str | int | float | None = None
    user_id: str | int | float | None = None
    user_data: UserData = field(default_factory=UserData)
    cookie_fbp: str | None = None
    cookie_fbc: str | None = None
    cookie_gclid: str | None = None

    @classmethod
    def from_payload(cls, payload: dict) -> "EventData":
        return cls(
            meta_event=_text(payload, "metaEvent"),
            ga_event=_text(payload, "gaEvent"),
            gads_conversion_label=_text(payload, "gadsConversionLabel"),
            event_url=_text(payload, "eventUrl"),
            event_id=_identifier(payload, "eventId"),
            user_id=_identifier(payload, "userId"),
            user_data=UserData.from_payload(_object(payload.get("userData"))),
            cookie_fbp=_text(payload, "cookieFbp"),
            cookie_fbc=_text(payload, "cookieFbc"),
            cookie_gclid=_text(payload, "cookieGclid"),
        )


@dataclass
class EventMeta:
    meta_pixel_id: str | int | float | None = None
    meta_test_code: str | None = None
    ga_measurement_id: str | None = None

    @classmethod
    def from_payload(cls, payload: dict) -> "EventMeta":
        return cls(
            meta_pixel_id=_identifier(payload, "metaPixelId"),
            meta_test_code=_text(payload, "metaTestCode"),
            ga_measurement_id=_text(payload, "gaMeasurementId"),
        )


@dataclass
class ConversionRequest:
    data: EventData
    meta: EventMeta

    @classmethod
    def from_payload(cls, body: Any) -> "ConversionRequest":
        """Build the typed request from an already camelized body.

        Raises ``InvalidEventError`` when the body, ``data``, ``meta`` or
        ``data.userData`` is not a JSON object.
        """
        if not isinstance(body, dict):
            raise InvalidEventError(INVALID_JSON)
        return cls(
            data=EventData.from_payload(_object(body.get("data"))),
            meta=EventMeta.from_payload(_object(body.get("meta"))),
        )


def validate_request(req: ConversionRequest) -> None:
    data = req.data
    if not data.meta_event and not data.ga_event and not data.gads_conversion_label:
        raise InvalidEventError(MISSING_EVENT)
    if not data.event_id:
        raise InvalidEventError(MISSING_EVENT_ID)
    if not data.event_url:
        raise InvalidEventError(MISSING_EVENT_URL)
    if not data.user_id:
        raise InvalidEventError(MISSING_USER_ID)


@dataclass
class DerivedIdentity:
    first_name: str | None = None
    last_name: str | None = None
    fn: str | None = None
    ln: str | None = None
    em: str | None = None
    ph: str | None = None


def derive_identity(user: UserData) -> DerivedIdentity:
    """Fill missing first/last names from the full name and hash all PII."""
    first_name = user.first_name
    last_name = user.last_name
    if user.name and (not first_name or not last_name):
        parsed = parse_name(user.name)
        first_name = first_name if first_name is not None else parsed.first_name
        last_name = last_name if last_name is not None else parsed.last_name

    return DerivedIdentity(
        first_name=first_name,
        last_name=last_name,
        fn=sha256_norm(first_name),
        ln=sha256_norm(last_name),
        em=sha256_norm(user.email),
        ph=sha256_norm(user.phone),
    )
