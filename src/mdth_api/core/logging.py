"""Loguru logging configuration for the API process and the CLI.

Human-readable lines go to stderr; records bound with ``json_output=True``
are emitted as serialized JSON instead.  Every message passes through a
patcher that masks JWTs and bcrypt hashes.
"""

import re
import sys
from pathlib import Path

from loguru import logger

_LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} | {message}"
_LOG_FILE_NAME = "mdth-api.log"

_JWT_PATTERN = re.compile(r"\beyJ[\w-]*\.[\w-]+\.[\w-]+")
_BCRYPT_PATTERN = re.compile(r"\$2[abxy]?\$\d{2}\$[./A-Za-z0-9]{53}")


def redact(message: str) -> str:
    """Mask bearer tokens and password hashes in a log message."""
    message = _JWT_PATTERN.sub("<jwt>", message)
    return _BCRYPT_PATTERN.sub("<bcrypt-hash>", message)


def _redact_record(record) -> None:  # type: ignore[no-untyped-def]
    record["message"] = redact(record["message"])


def _is_json(record) -> bool:  # type: ignore[no-untyped-def]
    return bool(record["extra"].get("json_output", False))


def setup_logging(log_level: str = "INFO", log_dir: str | None = None) -> None:
    """Configure Loguru sinks.

    Safe to call more than once; existing sinks are replaced.

    Args:
        log_level: Minimum log level to emit (case-insensitive).
        log_dir: Optional directory for log files.  When set, a file sink
            rotated every 24 hours and retained for 7 days is added.
    """
    level = log_level.upper()
    logger.remove()
    logger.configure(patcher=_redact_record)
    logger.add(sys.stderr, level=level, format=_LOG_FORMAT, filter=lambda record: not _is_json(record))
    logger.add(sys.stderr, level=level, serialize=True, filter=_is_json)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path / _LOG_FILE_NAME,
            level=level,
            format=_LOG_FORMAT,
            rotation="24h",
            retention="7 days",
        )
