"""
Core modules for Night Owl Gallery.

This package contains fundamental utilities used across the application:
- config: Application settings and configuration
- security: JWT token handling and authentication
- redis: Redis connection management
- exceptions: Custom exception classes
"""

from .config import Settings, get_settings
from .exceptions import (
    AppException,
    AuthenticationError,
    ContentFetchError,
    ContentNotFoundError,
    ExternalServiceError,
    MutationError,
    NotFoundError,
    ValidationError,
)

__all__ = [
    # Config
    "get_settings",
    "Settings",
    # Exceptions
    "AppException",
    "AuthenticationError",
    "NotFoundError",
    "ContentNotFoundError",
    "ValidationError",
    "ExternalServiceError",
    "ContentFetchError",
    "MutationError",
]
