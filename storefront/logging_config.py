"""
Logging setup for the storefront.

Module loggers are created with ``logging.getLogger(__name__)``; this module
attaches a single stream handler to the package logger and masks secrets
(session tokens, reset tokens, passwords, email addresses) before records
are emitted.
"""

import logging
import re
from typing import Pattern

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class SecretMaskingFilter(logging.Filter):
    """
    Logging filter that masks sensitive data in log records.

    Masks:
    - JWT session tokens
    - Password reset tokens (40 hex chars)
    - Passwords
    - Email addresses
    """

    PATTERNS: list[tuple[Pattern, str]] = [
        (re.compile(r'\beyJ[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+'), '[REDACTED_JWT]'),
        (re.compile(r'\b[a-fA-F0-9]{40}\b'), '[REDACTED_RESET_TOKEN]'),
        (re.compile(r'(password["\']?\s*[:=]\s*["\']?)([^\s"\']+)(["\']?)', re.IGNORECASE), r'\1[REDACTED_PASSWORD]\3'),
        (re.compile(r'\b([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})\b'), '[REDACTED_EMAIL]'),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        for pattern, replacement in self.PATTERNS:
            message = pattern.sub(replacement, message)
        record.msg = message
        record.args = None
        return True


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach the masking stream handler to the ``storefront`` logger once."""
    logger = logging.getLogger("storefront")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not any(getattr(h, "_storefront", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(SecretMaskingFilter())
        handler._storefront = True
        logger.addHandler(handler)

    return logger
