"""
This module provides logging functionality for the Quadmotion application.
"""

import logging
from pathlib import Path

from quadmotion.singleton import Singleton

QUADMOTION = 'Quadmotion'


class Logger(metaclass=Singleton):
    """A singleton logger class for setting up logging handlers."""

    def __init__(self, logs_folder: str = 'logs/'):
        """Initialize the logger with file and stream handlers."""
        Path(logs_folder).mkdir(parents=True, exist_ok=True)

        # file handler receives everything the loggers let through
        self.logging_file_handler = logging.FileHandler(str(Path(logs_folder) / (QUADMOTION + '.log')))

        self.logging_stream_handler = logging.StreamHandler()

        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        self.logging_file_handler.setFormatter(formatter)
        self.logging_stream_handler.setFormatter(formatter)

        self._level = logging.INFO
        self._loggers: list[logging.Logger] = []

    def setup_logger(self, logger_name=None, enable_stream_handler=False):
        """Set up a logger with the given name and return it.

        Args:
            logger_name (str, optional): Name of the logger. Defaults to None.
            enable_stream_handler (bool): Whether to add the stream handler for console output. Defaults to False.

        Returns:
            logging.Logger: The configured logger.
        """
        if not logger_name:
            logger_name = QUADMOTION
        else:
            logger_name = QUADMOTION + ' ' + logger_name

        logger = logging.getLogger(f"{logger_name:<32}")

        logger.setLevel(self._level)

        if self.logging_file_handler not in logger.handlers:
            logger.addHandler(self.logging_file_handler)
        if enable_stream_handler and self.logging_stream_handler not in logger.handlers:
            logger.addHandler(self.logging_stream_handler)

        if logger not in self._loggers:
            self._loggers.append(logger)

        return logger

    def set_level(self, level: int) -> None:
        """Change the level of every logger handed out so far (and of future ones)."""
        self._level = level
        for logger in self._loggers:
            logger.setLevel(level)

    def enable_console(self) -> None:
        """Mirror every known logger to the console."""
        for logger in self._loggers:
            if self.logging_stream_handler not in logger.handlers:
                logger.addHandler(self.logging_stream_handler)
