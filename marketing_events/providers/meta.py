import logging

from django.conf import settings

from .base import post_json


logger = logging.getLogger(__name__)


class MetaCAPI:
    """Meta Conversions API client; one call per pixel."""

    def __init__(self, api_version: str | None = None):
        self.api_version = api_version or getattr(settings, "META_GRAPH_API_VERSION", "v20.0")

    def url_for(self, pixel_id: str) -> str:
        return f"https://graph.facebook.com/{self.api_version}/{pixel_id}/events"

    def send(self, payload: dict, pixel_id: str, access_token: str):
        events = payload.get("data") or []
        user_data = (events[0].get("user_data") or {}) if events else {}
        if user_data.get("fbc"):
            fbc_source = "cookie"
        else:
            fbc_source = "missing"
        logger.info(
            "Meta CAPI payload identifiers",
            extra={
                "event_name": events[0].get("event_name") if events else None,
                "event_id": events[0].get("event_id") if events else None,
                "fbc": user_data.get("fbc"),
                "fbp": user_data.get("fbp"),
                "fbc_source": fbc_source,
                "test_mode": bool(payload.get("test_event_code")),
            },
        )

        return post_json(self.url_for(pixel_id), json=payload, params={"access_token": access_token})
