# Common utilities and shared modules
"""
Shared components used by the engine and the support bridge:
- Project configuration (YAML + .env)
- Logging configuration
- Failure taxonomy
"""

from .config import settings, PROJECT_ROOT, DATA_DIR
from .errors import (
    CommerceError,
    MalformedPersistedData,
    NotFound,
    RemoteOperationFailed,
    Unauthenticated,
    ValidationFailed,
)
from .logging import setup_logging

__all__ = [
    "settings",
    "PROJECT_ROOT",
    "DATA_DIR",
    "setup_logging",
    "CommerceError",
    "MalformedPersistedData",
    "NotFound",
    "RemoteOperationFailed",
    "Unauthenticated",
    "ValidationFailed",
]
