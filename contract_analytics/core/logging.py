import logging
import sys

LOGGER_NAME = "contract_analytics"


def setup_logger(log_level: str = "INFO") -> logging.Logger:
    """
    Configure and return the service logger.

    Args:
        log_level: Logging level name; unknown names fall back to INFO

    Returns:
        Configured logger instance
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    # Uvicorn configures the root logger; keep records from printing twice
    logger.propagate = False

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    handler.setFormatter(formatter)

    logger.addHandler(handler)

    return logger
