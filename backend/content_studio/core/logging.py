"""Structured logging: structlog over the stdlib logging tree.

JSON lines in production, ConsoleRenderer in debug. Uvicorn, SQLAlchemy and
the provider SDKs log through the same formatter. Every entry carries the
request's correlation id, and billing events that need manual reconciliation
are tagged with ``alert="billing_reconciliation"`` so log alerting can match
on one field.
"""

import logging
import logging.config

import structlog
from asgi_correlation_id.context import correlation_id

SERVICE_NAME = "content-studio"

# Events that leave balance and artifacts out of step
RECONCILIATION_EVENTS = frozenset({"debit_failed_reconciliation_required"})

# Third-party loggers that are noisy at INFO
QUIET_LOGGERS = ("uvicorn.access", "httpx", "sqlalchemy.engine", "anthropic", "openai")


def add_correlation_id(logger, method, event_dict):
    """Inject correlation_id from asgi-correlation-id context into every log entry."""
    cid = correlation_id.get(None)
    if cid:
        event_dict["correlation_id"] = cid
    return event_dict


def add_service_name(logger, method, event_dict):
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def tag_reconciliation_events(logger, method, event_dict):
    """Mark debit failures so they can be picked up for reconciliation."""
    if event_dict.get("event") in RECONCILIATION_EVENTS:
        event_dict["alert"] = "billing_reconciliation"
    return event_dict


def shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_service_name,
        add_correlation_id,
        tag_reconciliation_events,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]


def configure_structlog(log_level: str = "INFO", json_logs: bool = True) -> None:
    """Configure structlog and route stdlib logging through the same renderer.

    Must run before the first ``structlog.get_logger()`` call is used
    (``cache_logger_on_first_use`` freezes the chain).

    Args:
        log_level: Root log level ("DEBUG", "INFO", "WARNING", "ERROR")
        json_logs: JSON output when True, ConsoleRenderer otherwise
    """
    pre_chain = shared_processors()
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    renderer,
                ],
                "foreign_pre_chain": pre_chain,
            },
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "structured",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {"handlers": ["default"], "level": log_level},
        "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
    })

    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
