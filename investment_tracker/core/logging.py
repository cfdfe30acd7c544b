import logging
import sys
from typing import Optional

from investment_tracker.config import Settings, settings as default_settings

PACKAGE_LOGGER = "investment_tracker"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: Optional[str] = None, app_settings: Optional[Settings] = None) -> logging.Logger:
    """
    Attach a stdout handler to the package logger.

    The level comes from the argument, else LOG_LEVEL in settings. The root
    logger is left alone so that an embedding application keeps its own
    configuration.
    """
    app_settings = app_settings or default_settings
    resolved = getattr(logging, (level or app_settings.LOG_LEVEL).upper(), logging.INFO)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(resolved)
    if not any(getattr(h, "stream", None) is sys.stdout for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Retrieve a logger namespaced under the package.
    """
    if not name.startswith(PACKAGE_LOGGER):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
