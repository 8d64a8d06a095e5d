"""
Unified Logger System.

JSON-only structured logging for formula builds and smoke tests. Every
record is one JSON object on stdout; the formula, version and phase of the
build that produced it travel in `customDimensions`.

Exports:
    ComponentType: Enum for component types
    LogContext: Build correlation fields
    JSONFormatter: Formatter emitting one JSON object per record
    LoggerFactory: Factory for creating loggers
    log_exceptions: Exception logging decorator
"""

from enum import Enum
from typing import Optional, Dict, Any
from datetime import datetime, timezone
from dataclasses import dataclass, asdict
import logging
import sys
import os
import json
import traceback
from functools import wraps


class ComponentType(Enum):
    """Build pipeline layers; the value prefixes the logger name."""
    FORMULA = "formula"              # Recipe definitions (install/test steps)
    RESOLVER = "resolver"            # Layout override resolution
    LINKER = "linker"                # Binary alias links
    DISAMBIGUATOR = "disambiguator"  # Artifact renames
    RUNNER = "runner"                # External command execution
    HARNESS = "harness"              # Smoke-test harness
    FETCHER = "fetcher"              # Source download and checksum
    SERVICE = "service"              # Orchestration services
    CLI = "cli"                      # Command line entry point


# Runner records every argv regardless of LOG_LEVEL
_ALWAYS_DEBUG = frozenset({ComponentType.RUNNER})


@dataclass(frozen=True)
class LogContext:
    """
    Correlation fields for one formula build.

    A build is identified by the formula name; the phase (install,
    post_install, test) narrows it down.
    """
    formula: Optional[str] = None  # e.g. "postgis@16"
    version: Optional[str] = None  # pkg_version, e.g. "3.4.2_2"
    phase: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line.

    Build logs end up in the Installer's log directory next to configure and
    make output, so they have to stay greppable.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'location': f"{record.module}.{record.funcName}:{record.lineno}",
        }

        dims = getattr(record, 'custom_dimensions', None)
        if dims:
            log_obj['customDimensions'] = dims

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            log_obj['exception'] = {
                'type': exc_type.__name__,
                'message': str(exc_value),
                'traceback': self.formatException(record.exc_info),
            }

        return json.dumps(log_obj, default=str)


class _ContextFilter(logging.Filter):
    """Merges component and build context into each record's custom dimensions."""

    def __init__(self, component_type: ComponentType, name: str, context: Optional[LogContext]):
        super().__init__()
        self.base = {'component_type': component_type.value, 'component_name': name}
        if context:
            self.base.update(context.to_dict())

    def filter(self, record: logging.LogRecord) -> bool:
        # Caller-supplied extra wins over the logger's context
        record.custom_dimensions = {**self.base, **(getattr(record, 'custom_dimensions', None) or {})}
        return True


def _configured_level(component_type: ComponentType) -> int:
    if component_type in _ALWAYS_DEBUG or os.getenv('DEBUG_MODE', '').lower() == 'true':
        return logging.DEBUG
    level = logging.getLevelName(os.getenv('LOG_LEVEL', 'INFO').upper())
    return level if isinstance(level, int) else logging.INFO


class LoggerFactory:
    """
    Factory for creating component loggers.

    Example:
        logger = LoggerFactory.create_logger(ComponentType.FORMULA, "PostgisAt16")
        logger.info("Running configure")
    """

    @classmethod
    def create_logger(
        cls,
        component_type: ComponentType,
        name: str,
        context: Optional[LogContext] = None,
    ) -> logging.Logger:
        """
        Create (or reconfigure) the logger `<component>.<name>`.

        Calling this again for the same name replaces the context rather than
        stacking a second handler or filter.
        """
        logger = logging.getLogger(f"{component_type.value}.{name}")
        level = _configured_level(component_type)
        logger.setLevel(level)

        if not any(isinstance(h.formatter, JSONFormatter) for h in logger.handlers):
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(JSONFormatter())
            logger.addHandler(handler)

        for existing in [f for f in logger.filters if isinstance(f, _ContextFilter)]:
            logger.removeFilter(existing)
        logger.addFilter(_ContextFilter(component_type, name, context))

        return logger

    @classmethod
    def create_with_context(
        cls,
        component_type: ComponentType,
        name: str,
        formula: Optional[str] = None,
        version: Optional[str] = None,
        phase: Optional[str] = None
    ) -> logging.Logger:
        """Create a logger carrying formula build context."""
        context = LogContext(formula=formula, version=version, phase=phase)
        return cls.create_logger(component_type, name, context if context.to_dict() else None)


def log_exceptions(component_type: Optional[ComponentType] = None,
                   component_name: Optional[str] = None,
                   logger: Optional[logging.Logger] = None):
    """
    Decorator that logs any exception escaping the wrapped function and
    re-raises it unchanged.

    Usage:
        @log_exceptions(logger=my_logger)
        @log_exceptions(ComponentType.SERVICE, "FormulaBuild")
        @log_exceptions()  # logger named after the function's module

    A failing external command (BuildError) additionally records its argv
    and exit status.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                log = logger or LoggerFactory.create_logger(
                    component_type or ComponentType.SERVICE,
                    component_name or func.__module__ or "unknown",
                )
                dims = {
                    'function_name': func.__qualname__,
                    'exception_type': type(e).__name__,
                    'exception_message': str(e),
                    'traceback': traceback.format_exc(),
                }
                for attr in ('args_list', 'returncode'):
                    if hasattr(e, attr):
                        dims[attr] = getattr(e, attr)
                log.error(f"Exception in {func.__qualname__}", exc_info=True,
                          extra={'custom_dimensions': dims})
                raise
        return wrapper
    return decorator
