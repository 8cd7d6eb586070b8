"""
Shared building blocks for the SkilLink ledgers

This module provides:
- Settings loaded from the environment
- The error taxonomy shared by every ledger
- Storage repositories and the in-memory user directory
- An injectable clock
"""

from .clock import Clock, utc_now
from .config import Settings, get_settings
from .log_config import configure_logging
from .errors import (
    SkilLinkError,
    ValidationError,
    NotFoundError,
    ConflictError,
    AuthorizationError,
    InvalidStateError,
    InsufficientBalanceError,
    UnknownActionError,
)
from .storage import Repository, InMemoryRepository
from .users import User, CreateUserRequest, UpdateLocationRequest, UserDirectory

__all__ = [
    "Clock",
    "utc_now",
    "Settings",
    "get_settings",
    "configure_logging",
    "SkilLinkError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "AuthorizationError",
    "InvalidStateError",
    "InsufficientBalanceError",
    "UnknownActionError",
    "Repository",
    "InMemoryRepository",
    "User",
    "CreateUserRequest",
    "UpdateLocationRequest",
    "UserDirectory",
]
