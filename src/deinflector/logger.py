# deinflector/logger.py
import logging
import sys

APP_NAME = "deinflector"

TRACE_LEVEL_NUM = 5
logging.addLevelName(TRACE_LEVEL_NUM, "TRACE")


def setup_logging(level=logging.INFO):
    """Send log records to stdout with the application prefix.

    `level` may be an int or a level name ("DEBUG", "TRACE", ...).
    """
    if isinstance(level, str):
        name = level.upper()
        level = TRACE_LEVEL_NUM if name == "TRACE" else logging.getLevelName(name)
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {name}")

    log_formatter = logging.Formatter(
        f"%(asctime)s - [%(levelname)-5s] - [{APP_NAME}] - %(message)s",
        datefmt='%H:%M:%S'
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(log_formatter)

    logger = logging.getLogger()
    logger.setLevel(level)

    if logger.hasHandlers():
        logger.handlers.clear()
    logger.addHandler(handler)
