"""Process-wide logging setup for the API and the worker."""

import logging
import sys

from thirdplace.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(log_level: str | None = None) -> None:
    """Attach a stdout handler to the root logger.

    Args:
        log_level: Python log level name. Defaults to ``settings.LOG_LEVEL``.
    """
    root = logging.getLogger()
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel((log_level or settings.LOG_LEVEL).upper())

    # httpx logs every request at INFO; the dispatcher already logs each send
    logging.getLogger("httpx").setLevel(logging.WARNING)
