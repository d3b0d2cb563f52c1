from django.conf import settings

from .base import post_json


class GoogleAdsConversionUpload:
    """Uploads offline click conversions through the Google Ads REST API."""

    def __init__(self, api_version: str | None = None):
        self.api_version = api_version or getattr(settings, "GOOGLE_ADS_API_VERSION", "v17")

    def url_for(self, customer_id: str) -> str:
        return f"https://googleads.googleapis.com/{self.api_version}/customers/{customer_id}:uploadClickConversions"

    def send(self, payload: dict, customer_id: str, access_token: str, developer_token: str):
        headers = {
            "Authorization": f"Bearer {access_token}",
            "developer-token": developer_token,
            "Content-Type": "application/json",
        }
        return post_json(self.url_for(customer_id), json=payload, headers=headers)
