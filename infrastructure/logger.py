import logging
import sys

from infrastructure.config import get_settings

ROOT_LOGGER_NAME = "hotel_booking"


def get_logger(name: str = None) -> logging.Logger:
    """
    Returns the application logger, or a child of it when name is given.
    The application logger is configured on first use.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        _configure_logger(root)

    if name:
        return root.getChild(name)
    return root


def _configure_logger(logger: logging.Logger) -> None:
    level = getattr(logging, get_settings().LOG_LEVEL.upper(), logging.INFO)
    logger.setLevel(level)

    formatter = logging.Formatter(
        '[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
