"""Logging filters that scrub credentials and device tokens."""

from __future__ import annotations

import logging
import re

_SENSITIVE_PATTERN = re.compile(
    r"(Authorization: Bearer\s+[\w\.-]+"
    r"|access_token\"\s*:\s*\"[^\"]+\""
    r"|password\"\s*:\s*\"[^\"]+\""
    r"|token\"\s*:\s*\"[^\"]+\")",
    re.IGNORECASE,
)


def scrub(message: str) -> str:
    return _SENSITIVE_PATTERN.sub("**REDACTED**", message)


class SensitiveFilter(logging.Filter):
    """Replace sensitive values in log messages with a redaction marker."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = scrub(record.msg)
        return True


def install(logger_names: tuple[str, ...] = ("uvicorn", "uvicorn.access", "uvicorn.error", "")) -> None:
    """Attach one ``SensitiveFilter`` to each named logger."""
    for name in logger_names:
        target = logging.getLogger(name)
        if not any(isinstance(flt, SensitiveFilter) for flt in target.filters):
            target.addFilter(SensitiveFilter())


__all__ = ["SensitiveFilter", "install", "scrub"]
