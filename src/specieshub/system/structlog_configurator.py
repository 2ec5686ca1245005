"""Structlog-based logging configuration for Species Hub.

This module provides structured logging configuration using structlog,
with git version tracking and deployment detection.

Supports different deployment targets:
- Docker: Uses stdout with JSON output
- Development: Human-readable console output unless JSON is requested
"""

import logging
import os
import subprocess
import sys
from collections.abc import Callable
from typing import Any

import structlog

from specieshub.config.models import SpeciesHubConfig


def is_docker_environment() -> bool:
    """Check if running in a Docker container."""
    return os.path.exists("/.dockerenv") or os.environ.get("DOCKER_CONTAINER") == "true"


def _git_output(*args: str) -> str:
    result = subprocess.run(["git", *args], capture_output=True, text=True, timeout=5)
    return result.stdout.strip() if result.returncode == 0 else "unknown"


def get_git_version() -> str:
    """Get the checked-out git branch and short commit as ``branch@commit``."""
    try:
        branch = _git_output("rev-parse", "--abbrev-ref", "HEAD")
        commit = _git_output("rev-parse", "--short=8", "HEAD")
    except (subprocess.SubprocessError, OSError):
        return "unknown"
    return f"{branch}@{commit}"


def get_deployment_environment() -> str:
    """Name the deployment: docker, or SPECIESHUB_ENV (development/production), or unknown."""
    if is_docker_environment():
        return "docker"
    environment = os.environ.get("SPECIESHUB_ENV", "")
    return environment if environment in {"development", "production"} else "unknown"


def _add_static_context(extra_fields: dict[str, str]) -> Callable:
    """Processor to add static context fields to all log entries."""

    def processor(
        logger: structlog.BoundLogger, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event_dict.update(extra_fields)
        return event_dict

    return processor


def _configure_processors(config: SpeciesHubConfig, is_docker: bool) -> list:
    """Configure structlog processors based on environment."""
    extra_fields = {
        "service": "specieshub",
        "version": get_git_version(),
        "deployment": get_deployment_environment(),
        **config.logging.extra_fields,
    }
    if config.site_name:
        extra_fields["site_name"] = config.site_name

    processors = [
        structlog.contextvars.merge_contextvars,
        _add_static_context(extra_fields),
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="ISO"),
    ]

    if config.logging.include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder())

    # Auto-detect: JSON for Docker, human-readable otherwise
    use_json = config.logging.json_logs
    if use_json is None:
        use_json = is_docker or os.environ.get("SPECIESHUB_JSON_LOGS", "false").lower() == "true"

    if use_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    return processors


def _configure_handlers(config: SpeciesHubConfig) -> None:
    """Route standard library logging to stdout at the configured level."""
    root_logger = logging.getLogger()
    log_level = getattr(logging, config.logging.level.upper(), logging.INFO)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(log_level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)


def configure_structlog(config: SpeciesHubConfig) -> None:
    """Configure structlog-based logging system.

    Args:
        config: The SpeciesHubConfig instance containing logging settings.
    """
    is_docker = is_docker_environment()

    structlog.configure(
        processors=_configure_processors(config, is_docker),
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, config.logging.level.upper(), logging.INFO)
        ),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configure_handlers(config)

    logger = structlog.get_logger(__name__)
    logger.info(
        "Structured logging configured",
        git_version=get_git_version(),
        log_level=config.logging.level,
        environment=get_deployment_environment(),
        json_output=config.logging.json_logs,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structlog logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured structlog BoundLogger instance
    """
    return structlog.get_logger(name)
