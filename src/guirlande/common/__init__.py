"""Common utilities and types"""

from .exceptions import (
    AccessDeniedError,
    AuthenticationError,
    ConfigurationError,
    GuirlandeError,
    LoopParseError,
    ModuleError,
    NotFoundError,
    ValidationError,
)
from .text import slugify

__all__ = [
    "GuirlandeError",
    "ValidationError",
    "NotFoundError",
    "ModuleError",
    "LoopParseError",
    "AccessDeniedError",
    "AuthenticationError",
    "ConfigurationError",
    "slugify",
]
