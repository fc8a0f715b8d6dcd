"""Logger hierarchy of the sTest harness.

Records go to the ``stest`` logger, which only carries a NullHandler;
the driver program decides where diagnostics end up.
"""

import logging

ROOT_LOGGER_NAME = "stest"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the ``stest`` root logger.

    Args:
        name: Logger name (typically __name__ of the calling module).
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def set_log_level(level: int) -> None:
    """Set the level of all sTest loggers, e.g. logging.DEBUG to trace events."""
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(level)
