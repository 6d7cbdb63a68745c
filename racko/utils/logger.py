"""Structured logging configuration."""
import logging
import sys
from typing import Optional

from racko.config import config

ROOT_LOGGER = "racko"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def _configure_root(level: Optional[str] = None) -> logging.Logger:
    """Attach the stdout handler to the package root logger once."""
    root = logging.getLogger(ROOT_LOGGER)
    
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)
        root.propagate = False
    
    level_name = (level or config.log_level).upper()
    root.setLevel(getattr(logging, level_name, logging.INFO))
    return root


def get_logger(name: Optional[str] = None, level: Optional[str] = None) -> logging.Logger:
    """Get a configured logger instance.
    
    Module loggers (``racko.game.engine`` etc.) propagate to the package
    root, so only the root carries a handler.
    
    Args:
        name: Logger name, typically __name__ of the calling module.
        level: Optional level name overriding ``config.log_level``.
        
    Returns:
        Configured logger instance.
    """
    root = logging.getLogger(ROOT_LOGGER)
    if level or not root.handlers:
        _configure_root(level)
    if not name or name == ROOT_LOGGER:
        return root
    
    if not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
