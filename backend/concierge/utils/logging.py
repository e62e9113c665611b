"""Logging configuration for the listing concierge."""

import logging
import os
import re
import sys
import uuid
from logging.handlers import RotatingFileHandler

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_BACKUP_COUNT = 5

# Third-party loggers kept at WARNING
NOISY_LOGGERS = [
    "httpx",
    "httpcore",
    "hpack",
    "openai",
    "langchain",
    "langsmith",
    "postgrest",
    "supabase",
    "watchfiles",
]

# Credential shapes that must never reach a log line
SECRET_PATTERNS = [
    re.compile(r"sk-[A-Za-z0-9_\-]{8,}"),
    re.compile(r"eyJ[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+"),
    re.compile(r"(?i)(bearer\s+)[A-Za-z0-9_\-.]{8,}"),
]
REDACTED = "[REDACTED]"


def redact_secrets(text: str) -> str:
    """Mask API keys and tokens in a formatted log line."""
    for pattern in SECRET_PATTERNS:
        if pattern.groups:
            text = pattern.sub(lambda m: f"{m.group(1)}{REDACTED}", text)
        else:
            text = pattern.sub(REDACTED, text)
    return text


class RedactingFormatter(logging.Formatter):
    """Formatter that masks credentials, tracebacks included."""

    def format(self, record: logging.LogRecord) -> str:
        return redact_secrets(super().format(record))


def setup_logging(name: str = "concierge") -> logging.Logger:
    """
    Set up and return a configured logger.

    Logs to stdout. If LOG_FILE_ENABLED=true, also logs to a rotating file
    with a UUID filename under backend/logs.

    Args:
        name: Logger name.

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    logger.setLevel(getattr(logging, log_level, logging.INFO))

    formatter = RedactingFormatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_file_enabled = os.getenv("LOG_FILE_ENABLED", "false").lower() == "true"
    if log_file_enabled:
        log_dir = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "logs")
        os.makedirs(log_dir, exist_ok=True)
        log_filename = os.path.join(log_dir, f"concierge_{uuid.uuid4()}.log")
        file_handler = RotatingFileHandler(
            log_filename,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        logger.info("Logging to file: %s", log_filename)

    for noisy_logger in NOISY_LOGGERS:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    return logger


logger = setup_logging()
