"""
Conversion relay settings
"""

from pathlib import Path
import environ, os

LOG_LEVEL = os.getenv("DJANGO_LOG_LEVEL", "INFO")

BASE_DIR = Path(__file__).resolve().parent.parent
env = environ.Env(
    DEBUG=(bool, False),
)
# loads .env when running locally
env_file = BASE_DIR / ".env"
if env_file.exists():
    environ.Env.read_env(env_file)

# Local runs get a release env so tracing stays off unless opted in.
os.environ.setdefault("RELAY_RELEASE_ENV", "local")
RELEASE_ENV = os.getenv("RELAY_RELEASE_ENV", "local")

if RELEASE_ENV == "local":
    os.environ.setdefault("DEBUG", "1")
    os.environ.setdefault("DJANGO_SECRET_KEY", "dev-insecure")

# ────────── Core ──────────
DEBUG = env.bool("DEBUG", default=False)
SECRET_KEY = env("DJANGO_SECRET_KEY")
ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=["*"])

INSTALLED_APPS = [
    "config.apps.TracingInitialization",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

# Every path is served by the conversion endpoint, so no slash redirects.
APPEND_SLASH = False

ROOT_URLCONF = "config.urls"
WSGI_APPLICATION = "config.wsgi.application"
ASGI_APPLICATION = "config.asgi.application"

# Stateless service: no database.
DATABASES = {}

USE_TZ = True
TIME_ZONE = "UTC"

# ────────── Destinations ──────────
# A destination with any of its secrets missing is skipped, never an error.
META_ACCESS_TOKEN = env("META_ACCESS_TOKEN", default="")
META_GRAPH_API_VERSION = env("META_GRAPH_API_VERSION", default="v20.0")

GA_SECRET_KEY = env("GA_SECRET_KEY", default="")

GADS_CUSTOMER_ID = env("GADS_CUSTOMER_ID", default="")
GADS_ACCESS_TOKEN = env("GADS_ACCESS_TOKEN", default="")
GADS_DEVELOPER_TOKEN = env("GADS_DEVELOPER_TOKEN", default="")
GOOGLE_ADS_API_VERSION = env("GOOGLE_ADS_API_VERSION", default="v17")

# Per destination call; there are no retries.
MARKETING_EVENTS_HTTP_TIMEOUT = env.float("MARKETING_EVENTS_HTTP_TIMEOUT", default=6)

# OpenTelemetry Tracing
OTEL_EXPORTER_OTLP_ENDPOINT = env("OTEL_EXPORTER_OTLP_ENDPOINT", default="http://localhost:4317")
OTEL_EXPORTER_OTLP_INSECURE = env.bool("OTEL_EXPORTER_OTLP_INSECURE", default=False)

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,

    # ---------------- Handlers ----------------
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
            "stream": "ext://sys.stdout",  # default is stderr; explicit is nice
        },
    },

    # --------------- Formatters ---------------
    "formatters": {
        "verbose": {
            "format": "{asctime} [{levelname}] {name}: {message}",
            "style": "{",
        },
    },

    # --------------- Root logger --------------
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,              # affects everything that propagates up
    },

    # --------------- Other loggers -----------
    "loggers": {
        # Core Django (requests, system checks, etc.)
        "django": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,         # prevent double-logging
        },
        # Outbound HTTP chatter from destination calls
        "urllib3": {
            "handlers": ["console"],
            "level": "WARNING",
            "propagate": False,
        },
    },
}
