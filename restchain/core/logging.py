"""Structured logging configuration for the restchain runner."""

import logging

import structlog
from pythonjsonlogger.json import JsonFormatter

# LogRecord field -> key in JSON output
_JSON_RENAMES = {"message": "event", "levelname": "level", "name": "logger"}


def configure_logging(level: str = "INFO", json_output: bool = False) -> None:
    """
    Configure structured logging for the runner.

    With ``json_output`` structlog hands its event dict to stdlib logging as
    ``extra`` fields and python-json-logger writes one flat JSON object per
    line. Otherwise structlog renders console lines itself.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Whether to output JSON formatted logs
    """
    level = level.upper()
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    if json_output:
        formatter: logging.Formatter = JsonFormatter(
            "%(levelname)s %(name)s %(message)s",
            rename_fields=_JSON_RENAMES,
            timestamp=True,
        )
        renderer = structlog.stdlib.render_to_log_kwargs
    else:
        formatter = logging.Formatter("%(message)s")
        renderer = structlog.dev.ConsoleRenderer()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(max(root_logger.level, logging.INFO))

    # level, logger and timestamp come from the JSON formatter
    processors = []
    if not json_output:
        processors = [
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
        ]

    structlog.configure(
        processors=[
            *processors,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
