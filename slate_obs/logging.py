"""
Structured Logging (structlog).

Every log line carries the event name plus key-value context. The request
middleware binds `request_id`; the agent router binds `project_id` and
`user_id` through `bind_tool_context()` so store, planner and executor
lines do not have to repeat them.
"""

import logging
import sys

import structlog

from slate_config.settings import Settings

# Wire-level chatter from client libraries; useful only when debugging them.
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "anthropic", "sqlalchemy.engine")


def _service_fields(service: str, environment: str):
    def add_service(logger, method_name, event_dict):
        event_dict.setdefault("service", service)
        event_dict.setdefault("environment", environment)
        return event_dict

    return add_service


def setup_logging(settings: Settings) -> None:
    """
    Configure structlog on top of stdlib logging.

    LOG_FORMAT=json renders one JSON object per line; `text` uses the
    structlog console renderer for local development.
    """
    level = settings.LOG_LEVEL.upper()
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, logging.getLevelName(level)))

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        _service_fields(settings.OTEL_SERVICE_NAME, settings.ENVIRONMENT),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def bind_tool_context(project_id: str, user_id: str) -> None:
    """Scope every following log line of this request to a project and user."""
    structlog.contextvars.bind_contextvars(project_id=project_id, user_id=user_id)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
