import sys
from loguru import logger
from opsconsole.config import get_config

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

class AppLogger:
    """Global logger configuration for the console.

    Sets the level from get_config().log_level and adds a file sink when
    get_config().log_file is set.
    """
    def __init__(self) -> None:
        config = get_config()
        log_level = config.log_level.upper()
        logger.remove()
        logger.configure(extra={"name": "opsconsole"})
        logger.add(sink=sys.stdout, level=log_level, format=LOG_FORMAT)
        if config.log_file:
            logger.add(config.log_file, level=log_level, format=LOG_FORMAT, colorize=False)
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
    """Get a new console logger using the latest config."""
    return AppLogger().get_logger(name)
