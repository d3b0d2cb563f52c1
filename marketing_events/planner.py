from dataclasses import dataclass, field
from datetime import datetime, timezone

from django.conf import settings

from .context import ClientContext
from .providers import GOOGLE_ADS, GOOGLE_ANALYTICS, META
from .schema import ConversionRequest, DerivedIdentity


GA_ENGAGEMENT_TIME_MSEC = 1
GADS_CONVERSION_VALUE = 1
GADS_CURRENCY_CODE = "BRL"


@dataclass
class DestinationCredentials:
    meta_access_token: str | None = None
    ga_secret_key: str | None = None
    gads_customer_id: str | None = None
    gads_access_token: str | None = None
    gads_developer_token: str | None = None

    @classmethod
    def from_settings(cls) -> "DestinationCredentials":
        def _value(name):
            return getattr(settings, name, None) or None

        return cls(
            meta_access_token=_value("META_ACCESS_TOKEN"),
            ga_secret_key=_value("GA_SECRET_KEY"),
            gads_customer_id=_value("GADS_CUSTOMER_ID"),
            gads_access_token=_value("GADS_ACCESS_TOKEN"),
            gads_developer_token=_value("GADS_DEVELOPER_TOKEN"),
        )

    def presence(self) -> dict[str, bool]:
        return {name: bool(value) for name, value in vars(self).items()}


@dataclass
class DestinationRequest:
    destination: str
    payload: dict | None = None
    credentials: dict = field(default_factory=dict)
    skipped: bool = False
    reason: str | None = None

    @classmethod
    def skip(cls, destination: str, reason: str) -> "DestinationRequest":
        return cls(destination=destination, skipped=True, reason=reason)


def _missing(**required) -> str | None:
    absent = [name for name, value in required.items() if not value]
    if absent:
        return "missing " + ", ".join(absent)
    return None


def _plan_meta(req, identity, client, utms, creds, now):
    data, meta = req.data, req.meta
    reason = _missing(
        meta_event=data.meta_event,
        meta_pixel_id=meta.meta_pixel_id,
        meta_access_token=creds.meta_access_token,
    )
    if reason:
        return DestinationRequest.skip(META, reason)

    payload = {
        "data": [{
            "event_name": data.meta_event,
            "event_id": data.event_id,
            "event_time": int(now.timestamp()),
            "action_source": "website",
            "event_source_url": data.event_url,
            "user_data": {
                "fn": identity.fn,
                "ln": identity.ln,
                "em": identity.em,
                "ph": identity.ph,
                "fbp": data.cookie_fbp,
                "fbc": data.cookie_fbc,
                "client_user_agent": client.user_agent,
                "client_ip_address": client.client_ip,
            },
            "custom_data": {
                "page_referrer": data.event_url,
                **utms,
            },
        }]
    }
    if meta.meta_test_code:
        payload["test_event_code"] = meta.meta_test_code

    return DestinationRequest(
        destination=META,
        payload=payload,
        credentials={"pixel_id": meta.meta_pixel_id, "access_token": creds.meta_access_token},
    )


def _plan_google_analytics(req, utms, creds):
    data, meta = req.data, req.meta
    reason = _missing(
        ga_event=data.ga_event,
        ga_measurement_id=meta.ga_measurement_id,
        ga_secret_key=creds.ga_secret_key,
    )
    if reason:
        return DestinationRequest.skip(GOOGLE_ANALYTICS, reason)

    payload = {
        "client_id": data.user_id,
        "events": [{
            "name": data.ga_event,
            "params": {
                "page_location": data.event_url,
                "page_referrer": data.event_url,
                "event_id": data.event_id,
                "engagement_time_msec": GA_ENGAGEMENT_TIME_MSEC,
                **utms,
            },
        }],
    }
    return DestinationRequest(
        destination=GOOGLE_ANALYTICS,
        payload=payload,
        credentials={"measurement_id": meta.ga_measurement_id, "api_secret": creds.ga_secret_key},
    )


def _plan_google_ads(req, identity, creds, now):
    data = req.data
    reason = _missing(
        cookie_gclid=data.cookie_gclid,
        gads_conversion_label=data.gads_conversion_label,
        gads_customer_id=creds.gads_customer_id,
        gads_access_token=creds.gads_access_token,
        gads_developer_token=creds.gads_developer_token,
    )
    if reason:
        return DestinationRequest.skip(GOOGLE_ADS, reason)

    user_identifiers = []
    if identity.em:
        user_identifiers.append({"hashedEmail": identity.em})
    if identity.ph:
        user_identifiers.append({"hashedPhoneNumber": identity.ph})

    payload = {
        "conversions": [{
            "conversionAction": (
                f"customers/{creds.gads_customer_id}/conversionActions/{data.gads_conversion_label}"
            ),
            "gclid": data.cookie_gclid,
            "conversionDateTime": now.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S+00:00"),
            "conversionValue": GADS_CONVERSION_VALUE,
            "currencyCode": GADS_CURRENCY_CODE,
            "orderId": data.event_id,
            "userIdentifiers": user_identifiers,
        }],
        "partialFailure": True,
    }
    return DestinationRequest(
        destination=GOOGLE_ADS,
        payload=payload,
        credentials={
            "customer_id": creds.gads_customer_id,
            "access_token": creds.gads_access_token,
            "developer_token": creds.gads_developer_token,
        },
    )


def plan_dispatches(
    req: ConversionRequest,
    identity: DerivedIdentity,
    client: ClientContext,
    utms: dict,
    credentials: DestinationCredentials,
    *,
    now: datetime | None = None,
) -> list[DestinationRequest]:
    """
    Decide, per destination, whether to dispatch and build its payload.

    Always returns one request per destination in response order; ineligible
    destinations come back with ``skipped=True`` and no payload. Every payload
    gets its own copy of the attribution params.
    """
    now = now or datetime.now(timezone.utc)
    return [
        _plan_meta(req, identity, client, dict(utms), credentials, now),
        _plan_google_analytics(req, dict(utms), credentials),
        _plan_google_ads(req, identity, credentials, now),
    ]
