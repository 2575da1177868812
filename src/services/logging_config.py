"""
Logging Configuration for the benefits wizard.

Provides structured logging with:
- JSON formatting for production
- Human-readable formatting for development
- Request and flow correlation through context variables
- Navigation events per flow
- Performance logging for outbound calls
"""

import inspect
import json
import logging
import sys
import time
from contextvars import ContextVar
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Callable, Dict, Optional

# Context variables for request tracking
request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
flow_id_var: ContextVar[Optional[str]] = ContextVar('flow_id', default=None)


class JsonFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Outputs logs as JSON objects for easy parsing by log aggregators.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        request_id = request_id_var.get()
        if request_id:
            log_data["request_id"] = request_id

        flow_id = flow_id_var.get()
        if flow_id:
            log_data["flow_id"] = flow_id

        if hasattr(record, 'extra_data'):
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ReadableFormatter(logging.Formatter):
    """
    Human-readable log formatter for development.

    Lines carry a short request id, and the flow id when a flow is loaded,
    so interleaved requests stay readable.
    """

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def _correlation(self) -> str:
        parts = []
        request_id = request_id_var.get()
        if request_id:
            parts.append(f"req={request_id[:8]}")
        flow_id = flow_id_var.get()
        if flow_id:
            parts.append(f"flow={flow_id[:8]}")
        return f" ({' '.join(parts)})" if parts else ""

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        timestamp = datetime.now().strftime('%H:%M:%S.%f')[:-3]

        message = (
            f"{timestamp} {color}{record.levelname:8s}{self.RESET} "
            f"[{record.name}]{self._correlation()} {record.getMessage()}"
        )

        # Correlation ids are already in the prefix
        extras = {
            k: v for k, v in getattr(record, 'extra_data', {}).items()
            if k not in ('request_id', 'flow_id')
        }
        if extras:
            message += " | " + ' | '.join(f"{k}={v}" for k, v in extras.items())

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that includes context in all log messages.
    """

    def process(self, msg: str, kwargs: Dict) -> tuple:
        """Add context to log message."""
        extra = kwargs.get('extra', {})

        if 'extra_data' not in extra:
            extra['extra_data'] = {}

        request_id = request_id_var.get()
        if request_id:
            extra['extra_data']['request_id'] = request_id

        flow_id = flow_id_var.get()
        if flow_id:
            extra['extra_data']['flow_id'] = flow_id

        extra['extra_data'].update({k: v for k, v in self.extra.items() if v is not None})

        kwargs['extra'] = extra
        return msg, kwargs


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON formatted logs
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    root_logger.handlers.clear()

    formatter = JsonFormatter() if json_output else ReadableFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Set levels for noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str, **extra) -> ContextLogger:
    """
    Get a context-aware logger.

    Args:
        name: Logger name (typically __name__)
        **extra: Additional context to include in all logs

    Returns:
        ContextLogger instance
    """
    base_logger = logging.getLogger(name)
    return ContextLogger(base_logger, extra)


class FlowLogger:
    """
    Logger for wizard navigation events.

    Records which steps were saved or rejected and where the user was sent
    next, tagged with the flow name. Field values are never logged, only
    field names.
    """

    def __init__(self, flow: str):
        self.flow = flow
        self.logger = get_logger("wizard.flow", flow=flow)

    def step_saved(self, step: str, next_route: str) -> None:
        self.logger.info(
            f"Step saved: {step}",
            extra={'extra_data': {'step': step, 'next_route': next_route}}
        )

    def step_rejected(self, step: str, fields) -> None:
        self.logger.info(
            f"Step rejected: {step}",
            extra={'extra_data': {'step': step, 'fields': sorted(fields)}}
        )

    def redirected(self, reason: str, route: str) -> None:
        self.logger.info(
            f"Redirected: {reason}",
            extra={'extra_data': {'reason': reason, 'route': route}}
        )

    def submitted(self) -> None:
        self.logger.info(f"{self.flow} flow submitted")


def log_performance(name: Optional[str] = None) -> Callable:
    """
    Decorator to log coroutine performance.

    Args:
        name: Optional name override for the log entry
    """
    def decorator(func: Callable) -> Callable:
        func_name = name or func.__name__

        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"log_performance expects a coroutine function, got {func_name}")

        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            logger = get_logger("performance")
            start = time.time()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                duration_ms = int((time.time() - start) * 1000)
                logger.error(
                    f"{func_name} failed",
                    extra={'extra_data': {
                        'duration_ms': duration_ms,
                        'error': str(e),
                    }}
                )
                raise
            duration_ms = int((time.time() - start) * 1000)
            logger.info(
                f"{func_name} completed",
                extra={'extra_data': {'duration_ms': duration_ms}}
            )
            return result

        return wrapper

    return decorator
