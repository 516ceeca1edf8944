"""Log rotation and key-material scrubbing for signedlicense.

Provides a logging filter that redacts private keys, passwords and other
secrets from log output, and a helper to configure a rotating file handler
with the scrub filter installed.

Only stdlib modules are used.
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


_DEFAULT_LOG_DIR = os.path.join(str(Path.home()), ".signedlicense", "logs")

_REDACTED = "***REDACTED***"

# Patterns that match sensitive values in log messages.
_SCRUB_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"-----BEGIN ((?:[A-Z0-9]+ )*PRIVATE KEY)-----.*?-----END \1-----", re.DOTALL),
     r"-----BEGIN \1-----" + _REDACTED + r"-----END \1-----"),
    (re.compile(r'(private_key["\x27]?\s*[:=]\s*["\x27]?)([^"\x27\s,}{\]]+)', re.IGNORECASE),
     r"\1" + _REDACTED),
    (re.compile(r'(password["\x27]?\s*[:=]\s*["\x27]?)([^"\x27\s,}{\]]+)', re.IGNORECASE),
     r"\1" + _REDACTED),
    (re.compile(r'(passphrase["\x27]?\s*[:=]\s*["\x27]?)([^"\x27\s,}{\]]+)', re.IGNORECASE),
     r"\1" + _REDACTED),
    (re.compile(r'(secret["\x27]?\s*[:=]\s*["\x27]?)([^"\x27\s,}{\]]+)', re.IGNORECASE),
     r"\1" + _REDACTED),
    (re.compile(r'(token["\x27]?\s*[:=]\s*["\x27]?)([^"\x27\s,}{\]]+)', re.IGNORECASE),
     r"\1" + _REDACTED),
    (re.compile(r"(Authorization:\s*(?:Bearer|Basic)\s+)(\S+)", re.IGNORECASE),
     r"\1" + _REDACTED),
]


class ScrubFilter(logging.Filter):
    """Logging filter that redacts key material and secrets from log messages.

    Replaces PEM private key bodies, ``password=``/``secret=``/``token=``
    style values and Authorization headers with ``***REDACTED***``.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.msg and isinstance(record.msg, str):
            record.msg = _scrub(record.msg)
        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    k: _scrub(v) if isinstance(v, str) else v
                    for k, v in record.args.items()
                }
            elif isinstance(record.args, tuple):
                record.args = tuple(
                    _scrub(a) if isinstance(a, str) else a
                    for a in record.args
                )
        return True


def _scrub(text: str) -> str:
    """Apply all scrub patterns to *text*."""
    for pattern, replacement in _SCRUB_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def configure_logging(
    log_dir: Optional[str] = None,
    *,
    max_bytes: int = 5_000_000,
    backup_count: int = 3,
    level: Optional[str] = None,
) -> None:
    """Configure logging with rotation and secret scrubbing.

    :param log_dir: Directory for log files.  Reads ``SIGNEDLICENSE_LOG_DIR``
        env var, then falls back to ``~/.signedlicense/logs/``.
    :param max_bytes: Maximum log file size before rotation (default 5 MB).
    :param backup_count: Number of rotated log files to keep (default 3).
    :param level: Log level string.  Reads ``SIGNEDLICENSE_LOG_LEVEL`` env
        var, then falls back to ``"INFO"``.
    """
    log_dir = log_dir or os.environ.get("SIGNEDLICENSE_LOG_DIR", _DEFAULT_LOG_DIR)
    level = level or os.environ.get("SIGNEDLICENSE_LOG_LEVEL", "INFO")

    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, "signedlicense.log")

    log_level = getattr(logging, level.upper(), logging.INFO)

    scrub_filter = ScrubFilter()

    package_logger = logging.getLogger("signedlicense")
    package_logger.setLevel(log_level)

    # One rotating handler per log file.
    has_rotating = any(
        isinstance(h, RotatingFileHandler)
        and os.path.abspath(h.baseFilename) == os.path.abspath(log_path)
        for h in package_logger.handlers
    )
    if not has_rotating:
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(name)s %(levelname)s %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        package_logger.addHandler(file_handler)

    # Install scrub filter on every handler of the package logger.
    for handler in package_logger.handlers:
        if not any(isinstance(f, ScrubFilter) for f in handler.filters):
            handler.addFilter(scrub_filter)
