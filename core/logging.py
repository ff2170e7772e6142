import logging
import sys

import structlog

from core.settings import Settings


def get_log_renderer(environment: str):
    """Get log renderer based on environment"""
    # Use JSON format for tests and production
    if environment in ["test", "production"]:
        return structlog.processors.JSONRenderer()
    # Pretty printing for local development
    return structlog.dev.ConsoleRenderer(colors=True, sort_keys=False)


def configure_logging(settings: Settings):
    """
    Set up structlog on top of stdlib logging.

    Called by the host application. Root handlers that are already installed
    are kept; a stream handler is only added when the root logger has none.
    """
    shared_processors = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.ExceptionPrettyPrinter(),
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            get_log_renderer(settings.ENVIRONMENT),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    if not root_logger.handlers:
        if settings.ENVIRONMENT == "test":
            # In test mode, write to stdout for easier capture
            handler = logging.StreamHandler(sys.stdout)
        else:
            handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(handler)
    root_logger.setLevel(settings.LOG_LEVEL.upper())

    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)


# Gateway Event Log Names
class BusinessEvents:
    """Standard names for gateway event logs"""

    STRIPE_REQUEST = "stripe.request"
    STRIPE_RESPONSE = "stripe.response"
    STRIPE_TRANSPORT_ERROR = "stripe.transport_error"
    MISSING_PARAMETERS = "stripe.missing_parameters"
    INVOICE_STEP_FAILED = "stripe.invoice_step_failed"
