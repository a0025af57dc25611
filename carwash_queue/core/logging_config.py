"""
Basic logging configuration for the application.

The ``setup_logging`` function configures the root logger with a
console handler. Log format includes the timestamp, logger name,
log level and message. Calling it more than once is harmless.
"""

import logging


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once.

    Parameters
    ----------
    level : str
        Logging level name (e.g. ``"DEBUG"``, ``"INFO"``). Case insensitive.
    """
    logger = logging.getLogger()
    if logger.handlers:
        # Already configured (uvicorn, pytest or a second create_app call)
        return

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
