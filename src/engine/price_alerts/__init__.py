"""Price-Alert Registry Module - target-price watches and their evaluation."""

from .evaluation import evaluate_alert, parse_observed, should_trigger
from .feeds import PriceFeed, RandomWalkFeed, StaticPriceFeed
from .poller import PriceAlertPoller
from .registry import PriceAlertRegistry, suggest_target

__all__ = [
    "PriceAlertPoller",
    "PriceAlertRegistry",
    "PriceFeed",
    "RandomWalkFeed",
    "StaticPriceFeed",
    "evaluate_alert",
    "parse_observed",
    "should_trigger",
    "suggest_target",
]
