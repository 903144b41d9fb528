"""
Core package containing application configuration and utilities.
"""

from .config import settings  # noqa
from .errors import BadRequestError, ConflictError, NotFoundError, PromptError  # noqa
from .logger import get_logger, setup_logging  # noqa

__all__ = [
    "settings",
    "get_logger",
    "setup_logging",
    "PromptError",
    "NotFoundError",
    "BadRequestError",
    "ConflictError",
]
