"""Logging helpers shared by the codec, the builder and the evaluator."""

import logging
from typing import Optional

from dynquery.settings import settings as api_settings

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def resolve_level(level: Optional[str]) -> int:
    """Map a level name to its numeric value, treating unknown or empty names as INFO."""
    return _LEVELS.get((level or "").upper(), logging.INFO)


def setup_global_logging(level: str = "INFO") -> None:
    """Configure the root logger once in a standardized format.

    Args:
        level: Log level name (e.g., "DEBUG", "INFO")
    """
    global _configured
    if _configured:
        return
    logging.basicConfig(level=resolve_level(level), format=LOG_FORMAT)
    _configured = True


def get_logger(name: Optional[str] = None) -> "Logger":
    """Return a module/class logger. Ensures global logging is configured.

    Args:
        name: Logger name, usually __name__
    """
    return Logger(name or "dynquery")


class Logger:
    """Thin wrapper over standard logging.

    `.message(text)` is used for routine lifecycle events (query parsed,
    query reset). It logs at whatever level `LOG_LEVEL` names, so those
    events show up at the configured verbosity without callers picking
    a level themselves.
    """

    def __init__(self, name: Optional[str] = None) -> None:
        if not _configured:
            setup_global_logging(api_settings.LOG_LEVEL)
        self._logger = logging.getLogger(name or "dynquery")

    @property
    def name(self) -> str:
        return self._logger.name

    def is_enabled_for(self, level: str) -> bool:
        return self._logger.isEnabledFor(resolve_level(level))

    def debug(self, msg: str, *args, **kwargs) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs) -> None:
        self._logger.error(msg, *args, **kwargs)

    def critical(self, msg: str, *args, **kwargs) -> None:
        self._logger.critical(msg, *args, **kwargs)

    def message(self, msg: str, *args, **kwargs) -> None:
        self._logger.log(resolve_level(api_settings.LOG_LEVEL), msg, *args, **kwargs)
