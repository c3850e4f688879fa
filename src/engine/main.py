"""CLI entry point for the commerce-state engine.

Usage:
    python -m src.engine.main --user u1 cart show
    python -m src.engine.main --user u1 cart add --id 6012 --title "Desk lamp" --price 20.00
    python -m src.engine.main --user u1 cart addons 6012 --inspection
    python -m src.engine.main --user u1 wishlist list --sort price_low
    python -m src.engine.main --user u1 alerts create --id 6012 --title "Desk lamp" \\
        --price 20.00 --target 18.00
    python -m src.engine.main --user u1 alerts check --quote 6012=17.50
"""

from __future__ import annotations

import argparse
import json
import logging
import random
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from ..common.config import settings
from ..common.logging import setup_logging
from .auth import AuthContext
from .cart import CartLedger
from .event_bus import EventBus, ShowNotification, Topic
from .models import Addons
from .price_alerts import PriceAlertRegistry, RandomWalkFeed, StaticPriceFeed, suggest_target
from .store import KeyedLocalStore
from .wishlist import WishlistLedger, WishlistSort

logger = logging.getLogger(__name__)


@dataclass
class Engine:
    """All ledgers wired to one store, bus and identity."""

    store: KeyedLocalStore
    bus: EventBus
    auth: AuthContext
    cart: CartLedger
    wishlist: WishlistLedger
    alerts: PriceAlertRegistry
    notifications: list[dict] = field(default_factory=list)


def build_engine(user_id: str | None, db_path: str | None = None) -> Engine:
    store = KeyedLocalStore(db_path)
    bus = EventBus()
    auth = AuthContext()
    if user_id:
        auth.sign_in(user_id)

    engine = Engine(
        store=store,
        bus=bus,
        auth=auth,
        cart=CartLedger(store, bus, auth, fees=settings.fees),
        wishlist=WishlistLedger(store, bus, auth),
        alerts=PriceAlertRegistry(store, bus, auth),
    )

    def collect(message: ShowNotification) -> None:
        engine.notifications.append({"type": message.type.value, "message": message.message})

    bus.subscribe(Topic.SHOW_NOTIFICATION, collect)
    return engine


def _product_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--id", required=True, help="Product id")
    parser.add_argument("--title", required=True, help="Product title")
    parser.add_argument("--price", required=True, help="Unit price (EUR)")
    parser.add_argument("--weight", help="Weight per unit (kg)")
    parser.add_argument("--image-url", default="", help="Product image URL")
    parser.add_argument("--seller", help="Seller name")


def _product(args: argparse.Namespace) -> dict:
    return {
        "id": args.id,
        "title": args.title,
        "price": args.price,
        "weight": args.weight,
        "image_url": args.image_url,
        "seller_name": args.seller,
    }


def _quote(pair: str) -> tuple[str, Decimal]:
    """argparse type for PRODUCT_ID=PRICE."""
    product_id, _, price = pair.partition("=")
    try:
        return product_id, Decimal(price)
    except InvalidOperation as e:
        raise argparse.ArgumentTypeError(f"Expected PRODUCT_ID=PRICE, got '{pair}'") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Storefront commerce-state engine")
    parser.add_argument("--user", type=str, help="Signed-in user id (omit to act signed out)")
    parser.add_argument("--db", type=str, help="SQLite path (default: settings.store.database_path)")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")

    domains = parser.add_subparsers(dest="domain", required=True)

    # cart
    cart = domains.add_parser("cart", help="Shopping cart").add_subparsers(dest="command", required=True)
    cart.add_parser("show", help="List lines and totals")
    add = cart.add_parser("add", help="Add a product")
    _product_args(add)
    add.add_argument("--qty", type=int, default=1, help="Quantity (default: 1)")
    qty = cart.add_parser("qty", help="Set a line's quantity (0 removes)")
    qty.add_argument("item_id")
    qty.add_argument("quantity", type=int)
    addons = cart.add_parser("addons", help="Set a line's add-on services")
    addons.add_argument("item_id")
    addons.add_argument("--inspection", action="store_true", help="Quality inspection")
    addons.add_argument("--consolidation", action="store_true", help="Package consolidation")
    remove = cart.add_parser("remove", help="Remove a line")
    remove.add_argument("item_id")
    cart.add_parser("clear", help="Empty the cart")

    # wishlist
    wishlist = domains.add_parser("wishlist", help="Wishlist").add_subparsers(dest="command", required=True)
    toggle = wishlist.add_parser("toggle", help="Save or unsave a product")
    _product_args(toggle)
    listing = wishlist.add_parser("list", help="List saved products")
    listing.add_argument("--query", default="", help="Filter on title/seller")
    listing.add_argument(
        "--sort",
        default=WishlistSort.NEWEST.value,
        choices=[s.value for s in WishlistSort],
    )

    # alerts
    alerts = domains.add_parser("alerts", help="Price alerts").add_subparsers(dest="command", required=True)
    create = alerts.add_parser("create", help="Create a price alert")
    _product_args(create)
    create.add_argument("--target", help="Target price (default: 90%% of price)")
    create.add_argument("--type", default="below", choices=["below", "above"])
    alerts.add_parser("list", help="List alerts")
    check = alerts.add_parser("check", help="Evaluate armed alerts")
    check.add_argument(
        "--quote",
        action="append",
        type=_quote,
        default=[],
        metavar="PRODUCT_ID=PRICE",
        help="Observed price (repeatable). Without quotes a random-walk feed is used.",
    )
    check.add_argument("--seed", type=int, help="Random-walk seed")

    return parser


def run(args: argparse.Namespace, engine: Engine) -> object:
    """Dispatch one command; returns a JSON-serializable result."""
    if args.domain == "cart":
        cart = engine.cart
        if args.command == "add":
            cart.add_item(_product(args), args.qty)
        elif args.command == "qty":
            cart.set_quantity(args.item_id, args.quantity)
        elif args.command == "addons":
            cart.set_addons(
                args.item_id,
                Addons(quality_inspection=args.inspection, package_consolidation=args.consolidation),
            )
        elif args.command == "remove":
            cart.remove_item(args.item_id)
        elif args.command == "clear":
            cart.clear()
        return {
            "items": [i.model_dump(mode="json") for i in cart.items()],
            "count": cart.count(),
            "totals": cart.totals().to_dict(),
        }

    if args.domain == "wishlist":
        wishlist = engine.wishlist
        if args.command == "toggle":
            wishlist.toggle(_product(args))
            return {"count": wishlist.count()}
        return [e.model_dump(mode="json") for e in wishlist.list(args.query, args.sort)]

    registry = engine.alerts
    if args.command == "create":
        target = args.target or suggest_target(Decimal(args.price))
        alert = registry.create(_product(args), target, args.type)
        return alert.model_dump(mode="json") if alert else None
    if args.command == "check":
        if args.quote:
            feed = StaticPriceFeed(dict(args.quote))
        else:
            feed = RandomWalkFeed(
                step=settings.price_alerts.random_walk_step,
                floor=settings.price_alerts.price_floor,
                rng=random.Random(args.seed),
            )
        fired = registry.check_prices(feed) or []
        return {"fired": [a.model_dump(mode="json") for a in fired]}
    return [a.model_dump(mode="json") for a in registry.alerts()]


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else settings.log_level)

    engine = build_engine(args.user, args.db)
    result = run(args, engine)

    for note in engine.notifications:
        logger.info("[%s] %s", note["type"], note["message"])

    print(json.dumps(
        {"result": result, "notifications": engine.notifications},
        ensure_ascii=False,
        indent=2,
    ))


if __name__ == "__main__":
    main()
