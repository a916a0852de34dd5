"""
Logger Setup
------------
loguru sinks for the auth service.

Debug mode logs to the console only, with variable values in tracebacks. Outside
debug mode a daily log file is added, and tracebacks never include local values
so secrets, password hashes and tokens held in frames stay out of the logs.
"""

import sys
from loguru import logger
from auth_service.core.config_manager import settings

LOG_FILE_PATH = "logs/auth_service_{time:YYYY-MM-DD}.log"

_LOCATION = "{name}:{function}:{line}"

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    f"<cyan>{_LOCATION}</cyan> | "
    "<level>{message}</level>"
)

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | " + _LOCATION + " | {message}"


def configure_logger() -> None:
    """Replace loguru's default sink with the service's console and file sinks."""
    logger.remove()

    logger.add(
        sys.stdout,
        format=CONSOLE_FORMAT,
        level=settings.log_level,
        colorize=True,
        backtrace=True,
        diagnose=settings.debug,
    )

    if not settings.debug:
        logger.add(
            LOG_FILE_PATH,
            rotation="500 MB",
            retention="10 days",
            level=settings.log_level,
            format=FILE_FORMAT,
            backtrace=True,
            diagnose=False,
        )

    sinks = "console" if settings.debug else "console and file"
    logger.info(f"Auth service logging at {settings.log_level} to {sinks}")
