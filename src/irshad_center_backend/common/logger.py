'''
universal logger
'''
import logging
import sys

from .config import settings

LOG_FORMAT = '%(asctime)s - %(module)s - %(levelname)s\n - %(message)s'

def setup_logger(name: str = 'irshad-backend', level: str = settings.LOG_LEVEL) -> logging.Logger:
    """
    Configures and returns the application logger, writing to stdout.
    Calling it again for the same name does not stack handlers.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level.upper())

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger

# Create a single logger instance to be imported by other modules
log = setup_logger()
