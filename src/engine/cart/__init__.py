"""Cart Ledger Module - shopping cart state per user."""

from .ledger import CartLedger

__all__ = ["CartLedger"]
