import sys
from loguru import logger
from inventory_history.config import get_config

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

class AppLogger:
    """Global logger configuration for the inventory history tracker.

    Sets the log level from get_config().log_level and, when log_file is set,
    also writes to a rotating file so a long-running poller keeps its history.
    """
    def __init__(self) -> None:
        config = get_config()
        log_level = config.log_level.upper()
        logger.remove()
        logger.add(sink=sys.stderr, level=log_level, format=LOG_FORMAT)
        if config.log_file:
            # enqueue: the tracker may log from worker threads (CSV reads)
            logger.add(config.log_file, level=log_level, format=LOG_FORMAT,
                       rotation="10 MB", retention=5, enqueue=True, colorize=False)
        self.logger = logger

    def get_logger(self, name: str = None):
        """Get the configured logger instance.

        Args:
            name (str, optional): Name for the logger context. Defaults to None.
        Returns:
            loguru.Logger: The configured logger instance.
        """
        if name:
            return self.logger.bind(name=name)
        return self.logger

def get_logger(name: str = None):
    """Get a new application logger using the latest config."""
    return AppLogger().get_logger(name)
