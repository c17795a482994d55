import logging

from .config import settings

LOG_LEVEL = settings.LOG_LEVEL.upper()


def configure_logging():
    """Configure basic logging for the application.

    Uses a simple format including level, module, and message. Only the first
    call installs handlers; later calls are no-ops.
    """
    if logging.getLogger().handlers:
        # Already configured (avoid duplicate handlers in reload / dev)
        return
    fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    logging.basicConfig(level=LOG_LEVEL, format=fmt)


def get_logger(name: str):
    configure_logging()
    return logging.getLogger(name)
