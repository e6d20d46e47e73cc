"""
Centralized Logging and Credential Masking
==========================================

Logging setup for the SEO Vision engine. The engine handles several provider
API keys per call, so every handler carries a filter that redacts keys and
bearer tokens before anything is written to disk or terminal.

Key Features:
-------------
- Sensitive Data Masking: regex redaction of provider keys (``sk-``, ``gsk_``,
  ``AIza``), bearer tokens, and recursive masking of credential-like dict keys.
- File + Console Output: DEBUG detail to ``logs/seo_vision.log``, INFO to stdout.
- API Instrumentation: helpers that log outgoing requests and responses with
  masked headers and timing.
"""

import json
import logging
import re
import sys
from pathlib import Path
from typing import Any, Dict, Optional

# Project root is two levels up from this file: utils -> src -> project root
PROJECT_ROOT = Path(__file__).parent.parent.parent
LOG_DIR = PROJECT_ROOT / "logs"
LOG_FILE_NAME = "seo_vision.log"

# Dict keys whose values are always masked
SENSITIVE_FIELDS = {
    'password', 'secret', 'token', 'api_key', 'apikey',
    'auth', 'authorization', 'credentials', 'keys', 'x-goog-api-key'
}

# Regex patterns for sensitive data in strings
SENSITIVE_PATTERNS = [
    (re.compile(r'(Bearer\s+)[A-Za-z0-9\-._~+/]+=*'), r'\1***'),
    (re.compile(r'\b(sk-(?:or-)?[A-Za-z0-9\-_]{16,})'), lambda m: f"***{m.group(1)[-4:]}"),
    (re.compile(r'\b(gsk_[A-Za-z0-9]{16,})'), lambda m: f"***{m.group(1)[-4:]}"),
    (re.compile(r'\b(AIza[A-Za-z0-9\-_]{30,})'), lambda m: f"***{m.group(1)[-4:]}"),
]


def _mask_string(text: str) -> str:
    for pattern, replacement in SENSITIVE_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


class SensitiveDataFilter(logging.Filter):
    """
    Redact credentials from log records.

    Attached to every handler created by ``setup_logging``. Masks the message
    and any string or dict arguments before formatting.
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


def mask_sensitive_data(data: Any, mask_value: str = "***") -> Any:
    """
    Recursively redact sensitive fields from nested structures.

    Keys matching ``SENSITIVE_FIELDS`` keep only their last four characters
    (strings) or are fully masked; every other string is run through the
    regex patterns.

    Args:
        data: dict, list, tuple, str or any other value.
        mask_value: Replacement text.

    Returns:
        A masked copy of ``data``.
    """
    if isinstance(data, dict):
        masked = {}
        for key, value in data.items():
            if str(key).lower() in SENSITIVE_FIELDS:
                if isinstance(value, str) and len(value) > 8:
                    masked[key] = f"{mask_value}{value[-4:]}"
                else:
                    masked[key] = mask_value
            else:
                masked[key] = mask_sensitive_data(value, mask_value)
        return masked

    if isinstance(data, (list, tuple)):
        return type(data)(mask_sensitive_data(item, mask_value) for item in data)

    if isinstance(data, str):
        return _mask_string(data)

    return data


def setup_logging(
    log_level: int = logging.DEBUG,
    console_level: int = logging.INFO,
    log_dir: Optional[Path] = None,
    log_format: Optional[str] = None
) -> Path:
    """
    Initialize application-wide logging.

    - Root logger at DEBUG, handlers filter.
    - File handler: ``log_level`` detail, overwritten on every run.
    - Console handler: ``console_level`` to stdout.

    Args:
        log_level: Level for the log file.
        console_level: Level for the terminal.
        log_dir: Directory for the log file (defaults to ``<project>/logs``).
        log_format: Optional custom format string.

    Returns:
        Path of the log file.
    """
    log_dir = log_dir or LOG_DIR
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

    # urllib3 logs full URLs at DEBUG; keep them out of the console noise
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    logging.debug(f"Logging initialized - log file: {log_file}")
    return log_file


def log_config(config_name: str, config_data: Dict[str, Any], logger: Optional[logging.Logger] = None):
    """Log a settings dictionary with credentials masked."""
    if logger is None:
        logger = logging.getLogger(__name__)

    masked_config = mask_sensitive_data(config_data)
    logger.info(f"Configuration: {config_name}")
    logger.debug(f"{config_name} details: {json.dumps(masked_config, indent=2, default=str)}")


def log_api_request(
    logger: logging.Logger,
    method: str,
    endpoint: str,
    headers: Optional[Dict] = None,
):
    """
    Log an outgoing API request with masked headers.

    Request bodies are never logged: they carry the base64 image.
    """
    logger.info(f"API Request: {method} {endpoint}")
    if headers:
        logger.debug(f"Request headers: {mask_sensitive_data(headers)}")


def log_api_response(
    logger: logging.Logger,
    status_code: int,
    elapsed_time: Optional[float] = None
):
    """
    Log an API response status with timing.

    Response bodies are never logged: they carry generated metadata the
    normalizer reports on separately.
    """
    timing_info = f" ({elapsed_time:.3f}s)" if elapsed_time else ""
    logger.info(f"API Response: {status_code}{timing_info}")
