"""Package tracking hand-off for the embedded tracking widget."""

from __future__ import annotations

import logging
from typing import Optional

from ..engine.event_bus import EventBus, NotificationType

logger = logging.getLogger(__name__)

WIDGET_CONTAINER_ID = "track123-tracking-widget"


class TrackingLookup:
    def __init__(self, bus: EventBus) -> None:
        self.bus = bus
        self.last_tracked: Optional[str] = None

    def track(self, tracking_number: Optional[str]) -> Optional[dict]:
        """Validate the number and return what the widget needs to render it."""
        number = (tracking_number or "").strip()
        if not number:
            self.bus.notify(NotificationType.ERROR, "Please enter a tracking number")
            return None

        self.last_tracked = number
        logger.info("Tracking %s", number)
        return {"container_id": WIDGET_CONTAINER_ID, "tracking_number": number}
