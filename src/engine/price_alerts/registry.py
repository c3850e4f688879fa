"""Price-Alert Registry - target-price watches per user.

Usage:
    alerts = PriceAlertRegistry(store, bus, auth)
    alert = alerts.create(product, target_price=Decimal("50.00"), alert_type="below")
    alerts.evaluate(alert.id, Decimal("49.99"))   # fires, notifies
    alerts.check_prices(RandomWalkFeed())         # demo feed over all armed alerts
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from ...common.config import settings
from ...common.errors import NotFound, ValidationFailed
from ..boundary import operation
from ..event_bus import NotificationType, PriceAlertsUpdated
from ..ledger import Ledger, new_id
from ..models import AlertType, PriceAlert, Product
from ..pricing import format_eur, money
from ..store import EntityKind
from .evaluation import evaluate_alert
from .feeds import PriceFeed

logger = logging.getLogger(__name__)


def suggest_target(current_price: Decimal, ratio: Decimal | None = None) -> Decimal:
    """Default target offered in the create form: 10% under the current price."""
    ratio = ratio if ratio is not None else settings.price_alerts.suggested_target_ratio
    return money(Decimal(current_price) * ratio)


def _parse_target(target_price: Any) -> Decimal:
    if target_price is None or (isinstance(target_price, str) and not target_price.strip()):
        raise ValidationFailed("Please enter a target price")
    try:
        target = Decimal(str(target_price))
    except InvalidOperation as e:
        raise ValidationFailed("Target price must be a number") from e
    if not target.is_finite() or target <= 0:
        raise ValidationFailed("Target price must be greater than zero")
    return target


def _parse_direction(alert_type: Any) -> AlertType:
    try:
        return AlertType(alert_type)
    except ValueError as e:
        raise ValidationFailed(f"Unknown alert type: {alert_type!r}") from e


class PriceAlertRegistry(Ledger):
    kind = EntityKind.PRICE_ALERTS
    sign_in_message = "Please sign in to manage price alerts"

    # --- reads ---

    def alerts(self) -> list[PriceAlert]:
        return self._load()

    def count(self) -> int:
        return len(self._load())

    def armed(self) -> list[PriceAlert]:
        return [a for a in self._load() if a.is_armed]

    # --- mutations ---

    @operation
    def create(
        self,
        product: Product | dict,
        target_price: Any,
        alert_type: AlertType | str = AlertType.BELOW,
    ) -> PriceAlert:
        user_id = self._require_user("Please sign in to create price alerts")
        product = self._product(product)
        target = _parse_target(target_price)
        direction = _parse_direction(alert_type)

        alert = PriceAlert(
            id=new_id(),
            product_id=product.id,
            product_title=product.title,
            product_image=product.image_url,
            current_price=product.price,
            target_price=target,
            alert_type=direction,
            is_active=True,
            created_at=self.clock(),
        )
        alerts = self._load(user_id)
        alerts.append(alert)
        self._commit(user_id, alerts)
        self.bus.notify(NotificationType.SUCCESS, "Price alert created successfully!")
        return alert

    @operation
    def update(
        self,
        alert_id: str,
        target_price: Any,
        alert_type: AlertType | str = AlertType.BELOW,
    ) -> PriceAlert:
        user_id = self._require_user()
        target = _parse_target(target_price)
        direction = _parse_direction(alert_type)

        alerts = self._load(user_id)
        alert = self._find(alerts, alert_id)
        alert.target_price = target
        alert.alert_type = direction
        self._commit(user_id, alerts)
        self.bus.notify(NotificationType.SUCCESS, "Price alert updated successfully!")
        return alert

    @operation
    def remove(self, alert_id: str) -> list[PriceAlert]:
        user_id = self._require_user()
        alerts = self._load(user_id)
        alerts.remove(self._find(alerts, alert_id))
        self._commit(user_id, alerts)
        self.bus.notify(NotificationType.INFO, "Price alert deleted")
        return alerts

    @operation
    def toggle_active(self, alert_id: str) -> PriceAlert:
        """Pause or resume an alert. Resuming a triggered alert re-arms it."""
        user_id = self._require_user()
        alerts = self._load(user_id)
        alert = self._find(alerts, alert_id)
        if alert.triggered_at is not None:
            alert.triggered_at = None
            alert.is_active = True
        else:
            alert.is_active = not alert.is_active
        self._commit(user_id, alerts)
        return alert

    @operation
    def evaluate(self, alert_id: str, observed_price: Decimal) -> PriceAlert:
        """Apply one observed price to one alert, persisting the outcome."""
        user_id = self._require_user()
        alerts = self._load(user_id)
        index = alerts.index(self._find(alerts, alert_id))

        updated, fired = evaluate_alert(alerts[index], observed_price, self.clock())
        if updated is alerts[index]:
            return updated
        alerts[index] = updated
        self._commit(user_id, alerts)
        if fired:
            self._announce(updated)
        return updated

    @operation
    def check_prices(self, feed: PriceFeed) -> list[PriceAlert]:
        """Run every armed alert against ``feed``; returns the alerts that fired."""
        user_id = self._require_user()
        alerts = self._load(user_id)
        now = self.clock()
        fired_alerts: list[PriceAlert] = []
        checked = 0

        for index, alert in enumerate(alerts):
            if not alert.is_armed:
                continue
            try:
                observed = feed(alert)
                if observed is None:
                    continue
                updated, fired = evaluate_alert(alert, observed, now)
            except ValidationFailed as e:
                logger.warning("Bad quote for %s: %s", alert.product_id, e.message)
                continue
            except Exception as e:
                logger.warning("Price feed failed for %s: %s", alert.product_id, e)
                continue
            alerts[index] = updated
            checked += 1
            if fired:
                fired_alerts.append(updated)

        if checked:
            self._commit(user_id, alerts)
        for alert in fired_alerts:
            self._announce(alert)
        logger.info(
            "Price check for %s: %d quoted, %d fired", user_id, checked, len(fired_alerts),
        )
        return fired_alerts

    # --- internals ---

    def _announce(self, alert: PriceAlert) -> None:
        self.bus.notify(
            NotificationType.SUCCESS,
            f"Price Alert: {alert.product_title} is now {format_eur(alert.current_price)}!",
        )

    @staticmethod
    def _find(alerts: list[PriceAlert], alert_id: str) -> PriceAlert:
        alert = next((a for a in alerts if a.id == str(alert_id)), None)
        if alert is None:
            raise NotFound("Price alert not found")
        return alert

    def _commit(self, user_id: str, alerts: list[PriceAlert]) -> None:
        self._save(user_id, alerts)
        self.bus.publish(PriceAlertsUpdated(alerts=self._snapshot(alerts)))
