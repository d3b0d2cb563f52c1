from .base import post_json


class GoogleAnalyticsMP:
    url = "https://www.google-analytics.com/mp/collect"

    def send(self, payload: dict, measurement_id: str, api_secret: str):
        return post_json(
            self.url,
            json=payload,
            params={
                "measurement_id": measurement_id,
                "api_secret": api_secret,
            },
            headers={"Content-Type": "application/json"},
        )
