import logging
import sys

import structlog

from src.config import get_settings


def get_logger(name: str | None = None):
    """
    Get a logger with chef_analyze prefix.

    Args:
        name: Module name (typically __name__). If None, returns root chef_analyze logger.

    Returns:
        A structlog logger with chef_analyze prefix.
    """
    if name is None:
        return structlog.get_logger("chef_analyze")
    return structlog.get_logger(f"chef_analyze.{name}")


def setup_third_party_logging(debug_all: bool = False):
    """
    Hold every logger outside chef_analyze at WARNING.

    Signed Chef server requests are logged under chef_analyze at debug level;
    urllib3 and the other libraries only report warnings. DEBUG_ALL leaves all
    loggers untouched.

    Args:
        debug_all: Skip the adjustment when True.
    """

    if debug_all:
        return

    for log_name, _ in logging.Logger.manager.loggerDict.items():
        if log_name.startswith("chef_analyze"):
            continue
        logging.getLogger(log_name).setLevel(logging.WARNING)


def format_context(logger, method_name, event_dict):
    """Append bound context (cookbook, version, path, ...) to the event message"""
    excluded = {"level", "timestamp", "logger", "stack", "exc_info", "event"}
    context = " ".join(f"{k}={v}" for k, v in event_dict.items() if k not in excluded)

    event = event_dict.get("event", "")
    event_dict["event"] = f"{event} [{context}]" if context else event

    return event_dict


def setup_logging() -> None:
    """
    Route chef-analyze logging to stderr so stdout carries only the report.

    Environment variables:
        LOG_LEVEL: Level for the chef_analyze namespace (default INFO).
                   Per-stage progress of the cookbook engine is logged at DEBUG,
                   stage failures at WARNING.
        DEBUG_ALL: If "true", log DEBUG from every library, including the
                   HTTP connection pool used for Chef server requests.
    """
    settings = get_settings().logging

    # Root logger level - WARNING by default, DEBUG only if DEBUG_ALL is set
    root_level = "DEBUG" if settings.debug_all else "WARNING"
    logging.basicConfig(
        stream=sys.stderr,
        level=root_level,
        format="%(levelname)s:%(name)s: %(message)s",
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            format_context,
            structlog.stdlib.render_to_log_kwargs,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    setup_third_party_logging(settings.debug_all)

    logging.getLogger("chef_analyze").setLevel(settings.log_level)
