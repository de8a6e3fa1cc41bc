"""Structured logging setup for taxonpreview.

The preview engine logs through standard library loggers. configure_structlog
routes those records through a structlog ProcessorFormatter, so library messages
and structlog events share one renderer and one set of context fields. That
includes the ``subject`` the web routes and the CLI bind while resolving a name.

Output:
- Docker and production: JSON lines on stdout
- Development (TAXONPREVIEW_ENV=development): console renderer, unless
  TAXONPREVIEW_JSON_LOGS=true
"""

import logging
import os
import sys
from collections.abc import Callable
from typing import Any

import structlog

from taxonpreview.config.models import LoggingConfig, PreviewConfig

SERVICE_NAME = "taxonpreview"

# Transport libraries log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


def is_docker_environment() -> bool:
    """Check if running in a Docker container."""
    return os.path.exists("/.dockerenv") or os.environ.get("DOCKER_CONTAINER") == "true"


def is_development_environment() -> bool:
    return os.environ.get("TAXONPREVIEW_ENV", "production") == "development"


def get_deployment_environment() -> str:
    """Get deployment environment with 'production' fallback."""
    if is_docker_environment():
        return "docker"
    if is_development_environment():
        return "development"
    return "production"


def _add_static_context(extra_fields: dict[str, str]) -> Callable:
    """Processor adding fixed fields without overwriting values bound on the event."""

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        for key, value in extra_fields.items():
            event_dict.setdefault(key, value)
        return event_dict

    return processor


def use_json_output(logging_config: LoggingConfig) -> bool:
    """Decide between JSON and console rendering.

    An explicit ``json_logs`` setting wins. Otherwise JSON is used everywhere
    except development, where TAXONPREVIEW_JSON_LOGS=true opts back in.
    """
    if logging_config.json_logs is not None:
        return logging_config.json_logs
    if is_docker_environment() or not is_development_environment():
        return True
    return os.environ.get("TAXONPREVIEW_JSON_LOGS", "false").lower() == "true"


def shared_processors(config: PreviewConfig) -> list:
    """Processors applied to structlog events and standard library records alike."""
    extra_fields = {
        "service": SERVICE_NAME,
        "deployment": get_deployment_environment(),
        **config.logging.extra_fields,
    }

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        _add_static_context(extra_fields),
        structlog.processors.TimeStamper(fmt="ISO"),
    ]

    if config.logging.include_caller:
        processors.append(
            structlog.processors.CallsiteParameterAdder(
                {
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.LINENO,
                }
            )
        )

    return processors


def _renderer(config: PreviewConfig) -> Callable:
    if use_json_output(config.logging):
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def _log_level(config: PreviewConfig) -> int:
    return getattr(logging, config.logging.level.upper(), logging.INFO)


def _configure_handlers(config: PreviewConfig, processors: list) -> logging.Handler:
    """Replace root handlers with one stdout handler formatting through structlog."""
    log_level = _log_level(config)

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(config),
        ],
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    return handler


def configure_structlog(config: PreviewConfig) -> None:
    """Configure structlog and route standard library logging through it.

    Args:
        config: The PreviewConfig instance containing logging settings.
    """
    processors = shared_processors(config)

    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(_log_level(config)),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configure_handlers(config, processors)

    structlog.get_logger(__name__).info(
        "Structured logging configured",
        log_level=config.logging.level,
        environment=get_deployment_environment(),
        json_output=use_json_output(config.logging),
    )
