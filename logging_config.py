import logging
import os
import sys

import structlog
from structlog.contextvars import merge_contextvars


def add_app_and_env(logger, method_name, event_dict):
    event_dict["app"] = os.getenv("APP_NAME", "workout-tracker")
    event_dict["env"] = os.getenv("APP_ENV", "local")
    return event_dict


def configure_logging(level: str | None = None) -> None:
    log_level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, log_level_name, logging.INFO)
    app_env = os.getenv("APP_ENV", "local")
    is_dev = app_env in {"local", "dev"}

    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)

    shared_processors = [
        merge_contextvars,
        add_app_and_env,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        timestamper,
    ]

    renderer = structlog.dev.ConsoleRenderer() if is_dev else structlog.processors.JSONRenderer()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
        force=True,
    )

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
