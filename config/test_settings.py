"""
Test settings: deterministic secrets, no tracing, no destination credentials.
"""
import os

# Set environment variables before importing settings
os.environ.setdefault("DJANGO_SECRET_KEY", "test-secret-key")
os.environ.setdefault("RELAY_RELEASE_ENV", "local")
os.environ.setdefault("RELAY_ENABLE_TRACING", "0")

from .settings import *

# Tests opt destinations in with override_settings.
META_ACCESS_TOKEN = ""
GA_SECRET_KEY = ""
GADS_CUSTOMER_ID = ""
GADS_ACCESS_TOKEN = ""
GADS_DEVELOPER_TOKEN = ""

LOGGING["root"]["level"] = "WARNING"
