"""
Group Image Cropper v1.0 - Logging Module
==========================================
Centralized logging system
"""

import logging
import sys
from typing import Optional
import config

ROOT_LOGGER_NAME = "cropper"

class CropperLogger:
    """Centralized logger for the application"""

    _root: Optional[logging.Logger] = None

    @classmethod
    def get_logger(cls, name: str = ROOT_LOGGER_NAME) -> logging.Logger:
        """Get a child of the configured application logger"""
        if cls._root is None:
            cls._root = cls._setup_logger(ROOT_LOGGER_NAME)
        if not name or name == ROOT_LOGGER_NAME:
            return cls._root
        return cls._root.getChild(name)

    @classmethod
    def _setup_logger(cls, name: str) -> logging.Logger:
        """Setup logger with file and console handlers"""
        logger = logging.getLogger(name)
        logger.setLevel(getattr(logging, config.LOG_LEVEL, logging.INFO))

        # Prevent duplicate handlers on Streamlit reruns
        if logger.handlers:
            return logger

        # Console handler
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(logging.Formatter('%(levelname)s - %(message)s'))
        logger.addHandler(console_handler)

        # File handler
        if config.LOG_TO_FILE:
            try:
                log_path = config.get_project_root() / config.LOG_FILE
                file_handler = logging.FileHandler(log_path, encoding='utf-8')
                file_handler.setLevel(logging.DEBUG)
                file_handler.setFormatter(logging.Formatter(config.LOG_FORMAT))
                logger.addHandler(file_handler)
            except OSError as e:
                logger.warning(f"Could not setup file logging: {e}")

        return logger

# Convenience function
def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Get logger instance"""
    return CropperLogger.get_logger(name)
