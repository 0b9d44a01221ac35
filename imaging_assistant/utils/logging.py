"""
Structured Logging Configuration

Provides consistent logging across all modules with structured output.
Gemini API keys are masked before any handler writes a record.
"""
import logging
import os
import re
import sys
from typing import Optional
from datetime import datetime, timezone

# Google API keys, plus `key=` query parameters echoed back in SDK error text
_GOOGLE_KEY_PATTERN = re.compile(r"AIza[0-9A-Za-z_\-]{35}")
_KEY_PARAM_PATTERN = re.compile(r"([?&]key=)[^&\s'\"]+")

# Transport-level loggers that log every request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "urllib3", "google_genai", "grpc")


def mask_secret(value: Optional[str]) -> str:
    """Render an API key as `abcde...wxyz` so it can appear in log lines."""
    if not value:
        return "<none>"
    if len(value) <= 9:
        return "*" * len(value)
    return f"{value[:5]}...{value[-4:]}"


class SecretRedactionFilter(logging.Filter):
    """Mask Gemini API keys in the rendered message of every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = _GOOGLE_KEY_PATTERN.sub(lambda m: mask_secret(m.group(0)), message)
        redacted = _KEY_PARAM_PATTERN.sub(r"\1<redacted>", redacted)

        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class StructuredFormatter(logging.Formatter):
    """Custom formatter with structured output for better parsing."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m'
    }

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        # Add timestamp
        record.timestamp = datetime.now(timezone.utc).isoformat()

        # Add color for terminal output
        if self.use_color:
            color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
            reset = self.COLORS['RESET']
        else:
            color = reset = ""

        # Format message
        log_message = (
            f"{color}[{record.timestamp}] "
            f"{record.levelname:8} "
            f"[{record.name}] "
            f"{record.getMessage()}{reset}"
        )

        # Add exception info if present
        if record.exc_info:
            log_message += f"\n{self.formatException(record.exc_info)}"

        return log_message


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Falls back to the LOG_LEVEL environment variable, then INFO.
        log_file: Optional file path for log output
    """
    level = level or os.getenv("LOG_LEVEL", "INFO")
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Clear existing handlers
    root_logger.handlers.clear()
    redaction = SecretRedactionFilter()

    # Console handler, colored only when attached to a terminal
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredFormatter(use_color=sys.stdout.isatty()))
    console_handler.addFilter(redaction)
    root_logger.addHandler(console_handler)

    # File handler if specified
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s | %(levelname)s | %(name)s | %(message)s'
        ))
        file_handler.addFilter(redaction)
        root_logger.addHandler(file_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


# Initialize logging on module import
setup_logging()
