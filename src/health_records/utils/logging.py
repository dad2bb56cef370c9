# ============================================================================
# src/health_records/utils/logging.py
# ============================================================================
"""
Logging configuration and utilities for the health records service.
"""

import functools
import inspect
import json
import logging
import sys
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    format_json: bool = False
) -> None:
    """
    Setup logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for logging
        format_json: Whether to use JSON format
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if format_json:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        handlers=handlers,
        force=True
    )


class JsonFormatter(logging.Formatter):
    """JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        # Report id travels on records emitted inside the pipeline
        report_id = getattr(record, 'report_id', None)
        if report_id:
            log_data['report_id'] = report_id

        return json.dumps(log_data)


@contextmanager
def log_stage(logger: logging.Logger, operation: str):
    """
    Log how long a block took, and how long it ran before failing.

    Usage:
        with log_stage(self.logger, "text extraction"):
            text = await extractor.extract(data, mime_type)
    """
    start = time.perf_counter()
    try:
        yield
    except Exception as e:
        logger.error(f"{operation} failed after {time.perf_counter() - start:.3f}s: {e}")
        raise
    logger.info(f"{operation} completed in {time.perf_counter() - start:.3f}s")


def log_performance(logger: logging.Logger, operation: str):
    """
    Decorator to log operation performance. Works on sync and async callables.

    Args:
        logger: Logger instance
        operation: Operation name
    """
    def decorator(func):
        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                with log_stage(logger, operation):
                    return await func(*args, **kwargs)
            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with log_stage(logger, operation):
                return func(*args, **kwargs)
        return wrapper
    return decorator
