"""
Centralized Logging and Security Filtering
==========================================

This module provides the logging infrastructure for the blog admin client.
It centralizes all diagnostic output while ensuring that credentials (login
passwords and bearer tokens) never reach the log files.

Key Features:
-------------
- Sensitive Data Masking: Automatic redaction of passwords and tokens using
  regex and recursive dictionary filtering.
- API Instrumentation: A decorator and helpers for logging REST
  requests/responses with timing and outcome tracking.
- Contextual Logging: Timestamps, module origin, and line numbers.

Author: Blog Admin Project
"""

import json
import logging
import re
import sys
import time
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from blogadmin.core.config import APP_NAME


# Project root is two levels up from this file: utils -> blogadmin -> root
PROJECT_ROOT = Path(__file__).parent.parent.parent
LOG_DIR = PROJECT_ROOT / "logs"
LOG_FILE_NAME = "blogadmin.log"

# Sensitive field patterns to mask
SENSITIVE_FIELDS = {
    'password', 'passwd', 'pwd', 'secret', 'token', 'authorization', 'credentials'
}

# Regex patterns for sensitive data in strings
SENSITIVE_PATTERNS = [
    (re.compile(r'(Bearer\s+[a-zA-Z0-9\-._~+/]+=*)'), 'Bearer ***'),
    (re.compile(r'(eyJ[a-zA-Z0-9_\-]+\.[a-zA-Z0-9_\-]+\.[a-zA-Z0-9_\-]+)'), '***'),  # JWTs
    (re.compile(r'("(?:token|password)"\s*:\s*")[^"]*(")'), r'\1***\2'),  # JSON bodies
]


class SensitiveDataFilter(logging.Filter):
    """
    Filtering hook that redacts credentials before a record is emitted.

    Attached to both file and console handlers. It scans the message and its
    arguments for bearer tokens, JWTs and password fields and replaces them
    with masks.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = _mask_string(record.msg)

        if record.args:
            if isinstance(record.args, dict):
                record.args = mask_sensitive_data(record.args)
            elif isinstance(record.args, tuple):
                record.args = tuple(
                    mask_sensitive_data(arg) if isinstance(arg, (dict, str)) else arg
                    for arg in record.args
                )

        return True


def _mask_string(text: str) -> str:
    for pattern, replacement in SENSITIVE_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def mask_sensitive_data(data: Any, mask_value: str = "***") -> Any:
    """
    Recursively redact sensitive fields from nested data structures.

    Keys that look like credentials are masked; tokens keep their last four
    characters so two sessions can still be told apart in the log.

    Args:
        data: The dict, list, tuple or string to scrub.
        mask_value: Replacement text for masked content.

    Returns:
        A copy of the input with sensitive values masked.
    """
    if isinstance(data, dict):
        masked = {}
        for key, value in data.items():
            key_lower = str(key).lower()

            if any(sensitive in key_lower for sensitive in SENSITIVE_FIELDS):
                if 'token' in key_lower and isinstance(value, str) and len(value) > 4:
                    masked[key] = f"{mask_value}{value[-4:]}"
                else:
                    masked[key] = mask_value
            else:
                masked[key] = mask_sensitive_data(value, mask_value)
        return masked

    elif isinstance(data, (list, tuple)):
        return type(data)(mask_sensitive_data(item, mask_value) for item in data)

    elif isinstance(data, str):
        return _mask_string(data)

    else:
        return data


def setup_logging(
    log_level: int = logging.DEBUG,
    console_level: int = logging.INFO,
    log_format: Optional[str] = None,
    log_dir: Optional[Path] = None
) -> Path:
    """
    Initialize application-wide logging.

    - Root Logger: set to DEBUG so handlers decide what to keep.
    - File Handler: detailed log in ``<log_dir>/blogadmin.log``, overwritten
      on each run.
    - Console Handler: human-readable INFO output on stdout.

    Args:
        log_level: Granularity for the log file.
        console_level: Granularity for the terminal output.
        log_format: Optional custom formatting string.
        log_dir: Directory for the log file (defaults to ``<project>/logs``).

    Returns:
        Path: The path of the log file.
    """
    log_dir = Path(log_dir) if log_dir is not None else LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    if log_format is None:
        log_format = (
            '%(asctime)s - %(name)s - %(levelname)s - '
            '[%(filename)s:%(lineno)d] - %(message)s'
        )
    formatter = logging.Formatter(log_format, datefmt='%Y-%m-%d %H:%M:%S')

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    file_handler.addFilter(SensitiveDataFilter())
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(SensitiveDataFilter())
    root_logger.addHandler(console_handler)

    # urllib3 logs every connection at DEBUG; keep it out of the file
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    logging.info("=" * 80)
    logging.info(f"{APP_NAME} Started - Log file: {log_file}")
    logging.info("=" * 80)

    return log_file


def shutdown_logging():
    """Flush all handlers. Call before application exit."""
    logging.info("Shutting down logging system...")
    for handler in logging.root.handlers:
        handler.flush()


def log_config(config_name: str, config_data: Dict[str, Any], logger: Optional[logging.Logger] = None):
    """
    Log configuration settings with sensitive data masked.

    Args:
        config_name: Name of the configuration being logged
        config_data: Dictionary of configuration settings
        logger: Optional logger instance
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    masked_config = mask_sensitive_data(config_data)

    logger.info(f"Configuration: {config_name}")
    logger.debug(f"{config_name} details: {json.dumps(masked_config, indent=2, default=str)}")


def log_api_call(func: Optional[Callable] = None, *, api_name: str = "API"):
    """
    Decorator for timing and logging API operations.

    The wrapped function may either raise or return a ``Result``; a returned
    result whose ``ok`` is False is logged as FAILED with its error kind.

    Args:
        func: The API function to be instrumented.
        api_name: Context label for the log entry (e.g. 'Users').
    """
    def decorator(f: Callable) -> Callable:
        @wraps(f)
        def wrapper(*args, **kwargs):
            logger = logging.getLogger(f.__module__)
            func_name = f.__name__

            logger.debug(f"{api_name} call: {func_name} - kwargs: {mask_sensitive_data(kwargs)}")

            start_time = time.time()
            status = "SUCCESS"
            try:
                result = f(*args, **kwargs)
                if getattr(result, "ok", True) is False:
                    status = f"FAILED ({result.kind.value})"
                return result
            except Exception as e:
                status = "FAILED"
                logger.error(
                    f"{api_name} {func_name} failed: {type(e).__name__}: {str(e)}",
                    exc_info=True
                )
                raise
            finally:
                elapsed = time.time() - start_time
                logger.info(
                    f"{api_name} {func_name} completed - Status: {status}, "
                    f"Duration: {elapsed:.3f}s"
                )

        return wrapper

    # Handle both @log_api_call and @log_api_call(api_name="...")
    if func is None:
        return decorator
    return decorator(func)


def log_api_request(
    logger: logging.Logger,
    method: str,
    endpoint: str,
    headers: Optional[Dict] = None,
    data: Optional[Any] = None
):
    """Log an outgoing API request with masked sensitive data."""
    logger.debug(f"API Request: {method} {endpoint}")

    if headers:
        logger.debug(f"Request headers: {mask_sensitive_data(headers)}")

    if data:
        masked_data = mask_sensitive_data(data)
        logger.debug(f"Request body: {json.dumps(masked_data, default=str)}")


def log_api_response(
    logger: logging.Logger,
    status_code: int,
    body: Optional[str] = None,
    elapsed_time: Optional[float] = None
):
    """
    Log an API response with timing information.

    Large bodies are truncated so a full user list does not flood the log.
    """
    timing_info = f" ({elapsed_time:.3f}s)" if elapsed_time else ""
    logger.debug(f"API Response: {status_code}{timing_info}")

    if body:
        text = _mask_string(body)
        if len(text) > 1000:
            text = text[:1000] + "... (truncated)"
        logger.debug(f"Response body: {text}")
