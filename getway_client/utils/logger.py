"""Logging setup for the GetWay client."""

import logging
import re
import sys
from pathlib import Path
from typing import Optional, Union

LOGGER_NAME = "getway_client"

# "Bearer <token>" and bare JWTs (three base64url segments).
_SECRET_PATTERNS = (
    re.compile(r"(Bearer\s+)[A-Za-z0-9\-_.~+/]+=*", re.IGNORECASE),
    re.compile(r"eyJ[A-Za-z0-9\-_]+\.[A-Za-z0-9\-_]+\.[A-Za-z0-9\-_]+"),
)


def redact_secrets(text: str) -> str:
    """Mask bearer tokens and JWTs so session credentials never reach a log sink."""
    text = _SECRET_PATTERNS[0].sub(r"\1[REDACTED]", text)
    return _SECRET_PATTERNS[1].sub("[REDACTED]", text)


class RedactSecretsFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact_secrets(message)
        if redacted != message:
            record.msg = redacted
            record.args = ()
        return True


def setup_logger(
    name: str = LOGGER_NAME,
    level: Union[int, str, None] = None,
    log_file: Optional[Path] = None,
    debug: bool = False,
) -> logging.Logger:
    """
    Configure and return the client logger.

    Args:
        name: Logger name.
        level: Logging level, as a number or a name such as "WARNING". Defaults to INFO.
        log_file: Optional path to log file. If None, logs to stderr only.
        debug: Force DEBUG, whatever `level` says (GETWAY_DEBUG_MODE).

    Returns:
        Configured logger. Calling again returns it unchanged.
    """
    log = logging.getLogger(name)
    if log.handlers:
        return log

    log.setLevel(logging.DEBUG if debug else (level or logging.INFO))
    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    redact = RedactSecretsFilter()

    h = logging.StreamHandler(sys.stderr)
    h.setFormatter(fmt)
    h.addFilter(redact)
    log.addHandler(h)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setFormatter(fmt)
        fh.addFilter(redact)
        log.addHandler(fh)

    return log


def get_logger(component: Optional[str] = None) -> logging.Logger:
    """
    Return the client logger, or a child such as "getway_client.cache" that
    shares its handlers.
    """
    return logging.getLogger(f"{LOGGER_NAME}.{component}" if component else LOGGER_NAME)
