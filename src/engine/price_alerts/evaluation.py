"""Price-alert trigger decision.

Pure functions; the caller supplies the observed price from whatever
feed it uses.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from ...common.errors import ValidationFailed
from ..models import AlertType, PriceAlert


def parse_observed(observed: Any) -> Decimal:
    """Observed prices must be finite, non-negative numbers."""
    try:
        price = Decimal(str(observed))
    except InvalidOperation as e:
        raise ValidationFailed(f"Observed price must be a number, got {observed!r}") from e
    if not price.is_finite() or price < 0:
        raise ValidationFailed(f"Observed price out of range: {observed!r}")
    return price


def should_trigger(alert: PriceAlert, observed: Decimal) -> bool:
    """Inclusive threshold test in the alert's direction."""
    observed = parse_observed(observed)
    if alert.alert_type == AlertType.BELOW:
        return observed <= alert.target_price
    return observed >= alert.target_price


def evaluate_alert(alert: PriceAlert, observed: Decimal, now: datetime) -> tuple[PriceAlert, bool]:
    """Apply an observed price to an alert.

    Returns a new alert and whether it fired. Paused or already-triggered
    alerts come back unchanged: a triggered alert is never re-evaluated.
    """
    if not alert.is_armed:
        return alert, False

    observed = parse_observed(observed)
    if should_trigger(alert, observed):
        fired = alert.model_copy(update={
            "current_price": observed,
            "triggered_at": now,
            "is_active": False,
        })
        return fired, True
    return alert.model_copy(update={"current_price": observed}), False
