from .google_ads import GoogleAdsConversionUpload
from .google_analytics import GoogleAnalyticsMP
from .meta import MetaCAPI


META = "Meta"
GOOGLE_ANALYTICS = "Google Analytics"
GOOGLE_ADS = "Google Ads"

# Response key order.
DESTINATIONS = (META, GOOGLE_ANALYTICS, GOOGLE_ADS)


def get_clients():
    return {
        META: MetaCAPI(),
        GOOGLE_ANALYTICS: GoogleAnalyticsMP(),
        GOOGLE_ADS: GoogleAdsConversionUpload(),
    }
