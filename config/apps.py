import logging

from django.apps import AppConfig
from observability import init_tracing, RelayService


logger = logging.getLogger(__name__)

class TracingInitialization(AppConfig):
    name = "config"          # the dotted-path of the package
    verbose_name = "Tracing Initialization"

    def ready(self):
        logger.info(f"Initializing OpenTelemetry for service: {RelayService.WEB.value}")
        init_tracing(RelayService.WEB)
