"""Wishlist Ledger Module - saved products with toggle semantics."""

from .ledger import WishlistLedger, WishlistSort, filter_and_sort

__all__ = ["WishlistLedger", "WishlistSort", "filter_and_sort"]
