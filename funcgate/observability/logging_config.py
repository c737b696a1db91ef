"""
Centralized logging configuration with structured JSON logging.

Provides consistent logging across the gateway with:
- JSON structured output (python-json-logger)
- Correlation ID tracking
- Optional rotating log files
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional
from pythonjsonlogger.json import JsonFormatter

from .context import get_correlation_id


class CorrelationIdFilter(logging.Filter):
    """
    Logging filter that adds correlation ID to log records.

    Injects the current correlation ID from context into every record
    so that pipeline faults can be traced back to their request.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        correlation_id = get_correlation_id()
        record.correlation_id = correlation_id if correlation_id else 'none'
        return True


class GatewayJsonFormatter(JsonFormatter):
    """
    JSON formatter for structured gateway logs.

    Renames the standard fields to the names used across the gateway
    (``level``, ``component``) and keeps ``source`` / ``fault`` extras
    emitted by the fault interceptor.
    """

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        if not log_record.get('timestamp'):
            log_record['timestamp'] = self.formatTime(record, self.datefmt)

        log_record['level'] = record.levelname
        log_record['component'] = record.name

        if not log_record.get('correlation_id'):
            log_record['correlation_id'] = getattr(record, 'correlation_id', 'none')


def setup_logging(
    log_level: str = 'INFO',
    log_format: str = 'json',
    log_dir: Optional[str] = None,
    enable_console: bool = True
) -> None:
    """
    Setup centralized logging configuration.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format ('json' or 'text')
        log_dir: Directory for rotating log files; file logging is off when None
        enable_console: Whether to log to stdout

    Example:
        setup_logging(log_level='DEBUG', log_format='json')
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    correlation_filter = CorrelationIdFilter()

    if log_format == 'json':
        formatter = GatewayJsonFormatter(
            '%(timestamp)s %(level)s %(component)s %(correlation_id)s %(message)s',
            datefmt='%Y-%m-%dT%H:%M:%S%z'
        )
    else:
        formatter = logging.Formatter(
            '%(asctime)s [%(correlation_id)s] %(levelname)-8s [%(name)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(formatter)
        console_handler.addFilter(correlation_filter)
        root_logger.addHandler(console_handler)

    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)

        main_file_handler = logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, 'gateway.log'),
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=7
        )
        main_file_handler.setLevel(numeric_level)
        main_file_handler.setFormatter(formatter)
        main_file_handler.addFilter(correlation_filter)
        root_logger.addHandler(main_file_handler)

        # Faults are WARNING records, keep them in their own file too
        fault_file_handler = logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, 'faults.log'),
            maxBytes=10 * 1024 * 1024,
            backupCount=7
        )
        fault_file_handler.setLevel(logging.WARNING)
        fault_file_handler.setFormatter(formatter)
        fault_file_handler.addFilter(correlation_filter)
        root_logger.addHandler(fault_file_handler)

    logging.getLogger('werkzeug').setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(
        "Logging initialized",
        extra={
            'log_level': log_level,
            'log_format': log_format,
            'log_dir': log_dir,
            'console_enabled': enable_console
        }
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a component.

    Args:
        name: Logger name (typically __name__ or component name)

    Returns:
        Logger instance

    Example:
        logger = get_logger(__name__)
        logger.info("Chain built", extra={'middleware_count': 2})
    """
    return logging.getLogger(name)
