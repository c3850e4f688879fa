"""Operation boundary: engine failures become user notifications.

Public ledger and session operations are wrapped with ``operation`` (or
``async_operation``). A CommerceError raised inside is logged, published
as a ShowNotification on the owner's bus, and the call returns None.
Model validation errors (pydantic ``ValidationError``) and unparseable
decimals are reported the same way, as ValidationFailed. Anything else
propagates unchanged.
"""

from __future__ import annotations

import functools
import logging
from decimal import InvalidOperation

from pydantic import ValidationError

from ..common.errors import CommerceError, ValidationFailed

logger = logging.getLogger(__name__)


def _as_commerce_error(error: Exception) -> CommerceError:
    if isinstance(error, CommerceError):
        return error
    if isinstance(error, ValidationError):
        return ValidationFailed(f"Invalid input ({error.error_count()} error(s))")
    return ValidationFailed("Invalid number")


def _report(owner, func, error: Exception) -> None:
    error = _as_commerce_error(error)
    logger.warning("%s aborted (%s): %s", func.__qualname__, type(error).__name__, error.message)
    owner.bus.notify(error.notification_type, error.message)


def operation(func):
    """Wrap a synchronous method whose owner exposes ``self.bus``."""

    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except (CommerceError, ValidationError, InvalidOperation) as e:
            _report(self, func, e)
            return None

    return wrapper


def async_operation(func):
    """Coroutine variant of ``operation``."""

    @functools.wraps(func)
    async def wrapper(self, *args, **kwargs):
        try:
            return await func(self, *args, **kwargs)
        except (CommerceError, ValidationError, InvalidOperation) as e:
            _report(self, func, e)
            return None

    return wrapper
