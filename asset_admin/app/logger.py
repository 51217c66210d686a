"""Logging setup shared by the application, services and routes.

Every module asks for a named logger under the ``asset_admin`` root::

    logger = get_logger("asset_admin.services.assignments")
"""
import logging
import sys

ROOT_LOGGER = "asset_admin"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(name=ROOT_LOGGER):
    return logging.getLogger(name)


def setup_logging(app):
    """Attach a stream handler to the ``asset_admin`` logger and to ``app.logger``."""
    level = logging.getLevelName(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    if not isinstance(level, int):
        level = logging.INFO

    root = get_logger()
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.propagate = False

    app.logger.setLevel(level)
    return root
