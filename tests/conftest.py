"""Shared test fixtures for the storefront commerce-state engine."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Ensure src is importable
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.engine.auth import AuthContext
from src.engine.cart import CartLedger
from src.engine.event_bus import EventBus, Topic
from src.engine.price_alerts import PriceAlertRegistry
from src.engine.store import KeyedLocalStore
from src.engine.wishlist import WishlistLedger


class FakeClock:
    """Deterministic clock: each call advances one minute."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        current = self.now
        self.now += timedelta(minutes=1)
        return current


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def store(tmp_path) -> KeyedLocalStore:
    """Keyed store over a temporary SQLite database."""
    return KeyedLocalStore(tmp_path / "test_state.db")


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def auth() -> AuthContext:
    """Auth context signed in as user-1."""
    ctx = AuthContext()
    ctx.sign_in("user-1", "user1@example.com")
    return ctx


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def notifications(bus) -> list:
    """Collects every ShowNotification published on the bus."""
    seen: list = []
    bus.subscribe(Topic.SHOW_NOTIFICATION, seen.append)
    return seen


@pytest.fixture
def cart(store, bus, auth, clock) -> CartLedger:
    return CartLedger(store, bus, auth, clock=clock)


@pytest.fixture
def wishlist(store, bus, auth, clock) -> WishlistLedger:
    return WishlistLedger(store, bus, auth, clock=clock)


@pytest.fixture
def alerts(store, bus, auth, clock) -> PriceAlertRegistry:
    return PriceAlertRegistry(store, bus, auth, clock=clock)


@pytest.fixture
def sample_product() -> dict:
    """Raw marketplace product as handed over by a product card."""
    return {
        "num_iid": "6012",
        "title": "Desk lamp",
        "price": "20.00",
        "pic_url": "https://img.example.com/lamp.jpg",
        "nick": "LightHouse",
    }


@pytest.fixture
def second_product() -> dict:
    return {
        "id": "7730",
        "title": "Wireless mouse",
        "price": "12.50",
        "seller_name": "PeriphCo",
        "weight": "0.2",
    }
