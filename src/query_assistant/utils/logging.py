import inspect
import json
import logging
import sys
from typing import Any, Optional

import structlog

from query_assistant.config import AppConfig, get_settings
from query_assistant.config_constants import LogFormat
from query_assistant.utils.tracing import current_trace_id

_PACKAGE_PREFIX = "query_assistant."

_LEVEL_COLORS = {
    'DEBUG': '\033[36m',
    'INFO': '\033[32m',
    'WARNING': '\033[33m',
    'ERROR': '\033[31m',
    'CRITICAL': '\033[35m',
}
_RESET = '\033[0m'

_HEADER_FIELDS = {'timestamp', 'level', 'module', 'event', 'trace_id', 'logger'}

_logging_configured = False


def _add_trace_id(logger: Any, method_name: str, event_dict: structlog.types.EventDict) -> structlog.types.EventDict:
    """Attach the active workflow trace id unless the call site passed one."""
    if event_dict.get('trace_id') is None:
        trace_id = current_trace_id()
        if trace_id is not None:
            event_dict['trace_id'] = trace_id
        else:
            event_dict.pop('trace_id', None)
    return event_dict


def _add_module_info(logger: Any, method_name: str, event_dict: structlog.types.EventDict) -> structlog.types.EventDict:
    """Short module name, e.g. "services.workflow" for "query_assistant.services.workflow"."""
    logger_name = event_dict.get('logger', 'unknown')
    if logger_name.startswith(_PACKAGE_PREFIX):
        logger_name = logger_name[len(_PACKAGE_PREFIX):]
    event_dict['module'] = logger_name
    return event_dict


def _json_renderer(logger: Any, method_name: str, event_dict: structlog.types.EventDict) -> str:
    """One JSON object per line."""
    return json.dumps(event_dict, ensure_ascii=False, default=str)


def _console_renderer(logger: Any, method_name: str, event_dict: structlog.types.EventDict) -> str:
    """
    One colored line per event for interactive sessions:

        <time> [LEVEL] module: event (trace: abcd1234) | key=value, ...
    """
    level = event_dict.get('level', '').upper()
    color = _LEVEL_COLORS.get(level, '')

    line = (
        f"{event_dict.get('timestamp', '')} {color}[{level}]{_RESET} "
        f"{event_dict.get('module', '')}: {event_dict.get('event', '')}"
    )

    trace_id = event_dict.get('trace_id')
    if trace_id:
        line += f" (trace: {trace_id[:8]})"

    extras = [f"{key}={value}" for key, value in event_dict.items() if key not in _HEADER_FIELDS]
    if extras:
        line += f" | {', '.join(extras)}"
    return line


_RENDERERS = {
    LogFormat.JSON: _json_renderer,
    LogFormat.CONSOLE: _console_renderer,
}


def configure_logging(config: Optional[AppConfig] = None) -> None:
    """
    Configure structured logging for the console client.

    Log records go to stderr so they never interleave with the SQL, result
    tables and history the console prints on stdout. Safe to call more than
    once; only the first call takes effect.
    """
    global _logging_configured

    if _logging_configured:
        return
    _logging_configured = True

    app_config = config or get_settings().app

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, app_config.log_level.value),
        handlers=[logging.StreamHandler(sys.stderr)]
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            _add_trace_id,
            _add_module_info,
            _RENDERERS[app_config.log_format],
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_module_logger() -> structlog.stdlib.BoundLogger:
    """
    Logger named after the calling module.

    Usage:
        logger = get_module_logger()
        logger.info("History refreshed", entries=5)
    """
    frame = inspect.currentframe()
    try:
        caller = frame.f_back if frame is not None else None
        module_name = caller.f_globals.get('__name__', 'unknown') if caller is not None else 'unknown'
    finally:
        del frame
    return structlog.get_logger(module_name)
