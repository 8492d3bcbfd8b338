import logging
import sys
from settings import DEBUG, LOG_FILE, LOG_FILE_MODE

# Configure logging
logging.basicConfig(
    filename= LOG_FILE,
    filemode= LOG_FILE_MODE,
    level= logging.DEBUG if DEBUG else logging.INFO,
    format='%(asctime)s - %(levelname)s [%(name)s]: %(message)s',
)

# paramiko logs every packet exchange at debug level
logging.getLogger("paramiko").setLevel(logging.WARNING)


def log_info(
        msg: str,
        logger: logging.Logger | None = None,
    ) -> None:
    """
    Logs an informational message and prints it to the console.

    Args:
        msg (str): The message to log.
        logger (logging.Logger | None): Optional logger instance. Defaults to root logger.
    """
    if logger is None:
        logger = logging.getLogger()

    logger.info(msg)
    print(msg)

def log_warning(
        msg: str,
        logger: logging.Logger | None = None,
    ) -> None:
    """
    Logs a warning message and prints it to the console with a 'WARNING:' prefix.

    Args:
        msg (str): The warning message to log.
        logger (logging.Logger | None): Optional logger instance. Defaults to root logger.
    """
    if logger is None:
        logger = logging.getLogger()

    logger.warning(msg)
    print(f"WARNING: {msg}")

def log_error(msg: str, logger: logging.Logger | None = None) -> None:
    """
    Logs an error message and prints it to stderr with an 'ERROR:' prefix.
    """
    if logger is None:
        logger = logging.getLogger()
    logger.error(msg)
    print(f"ERROR: {msg}", file=sys.stderr)

def log_debug(msg: str, logger: logging.Logger | None = None) -> None:
    """
    Logs a debug message and, in debug mode, prints it to the console with a 'DEBUG:' prefix.
    """
    if logger is None:
        logger = logging.getLogger()
    logger.debug(msg)
    if DEBUG:
        print(f"DEBUG: {msg}")
