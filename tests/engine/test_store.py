"""Tests for the keyed local store and its persisted-data schemas."""

from __future__ import annotations

import json
from decimal import Decimal

import pytest

from src.common.errors import MalformedPersistedData
from src.engine.models import LineItem, PriceAlert, WishlistEntry
from src.engine.store import CURRENT_VERSION, EntityKind, KeyedLocalStore, get_connection, storage_key
from src.engine.store.schemas import decode, encode


def _line(item_id="6012", price="20.00", quantity=1) -> LineItem:
    return LineItem(id=item_id, title="Desk lamp", price=Decimal(price), quantity=quantity)


class TestStorageKey:
    def test_key_layout(self):
        assert storage_key(EntityKind.CART, "u1") == "cart_u1"
        assert storage_key(EntityKind.WISHLIST, "u1") == "wishlist_u1"
        assert storage_key(EntityKind.PRICE_ALERTS, "u1") == "priceAlerts_u1"

    def test_accepts_plain_string_kind(self):
        assert storage_key("cart", "u2") == "cart_u2"


class TestSchemaCodec:
    def test_encode_writes_envelope(self):
        payload = json.loads(encode(EntityKind.CART, [_line()]))
        assert payload["schema"] == "cart"
        assert payload["version"] == CURRENT_VERSION
        assert payload["items"][0]["id"] == "6012"
        assert payload["items"][0]["price"] == "20.00"
        assert payload["items"][0]["addons"] == {
            "quality_inspection": False,
            "package_consolidation": False,
        }

    def test_legacy_bare_array_is_migrated(self):
        legacy = json.dumps([
            {
                "id": 6012,
                "title": "Desk lamp",
                "price": 20,
                "quantity": 2,
                "image_url": "",
                "addons": {"qualityInspection": True, "packageConsolidation": False},
            }
        ])
        items = decode(EntityKind.CART, legacy)
        assert len(items) == 1
        assert items[0].id == "6012"
        assert items[0].quantity == 2
        assert items[0].addons.quality_inspection is True

    def test_legacy_wishlist_camel_case(self):
        legacy = json.dumps([
            {
                "id": "w1",
                "productId": "6012",
                "title": "Desk lamp",
                "price": 20,
                "originalPrice": 25,
                "image_url": "",
                "rating": 0,
                "addedAt": "2024-01-01T00:00:00Z",
                "priceHistory": [{"price": 20, "date": "2024-01-01T00:00:00Z"}],
            }
        ])
        entry = decode(EntityKind.WISHLIST, legacy)[0]
        assert isinstance(entry, WishlistEntry)
        assert entry.product_id == "6012"
        assert entry.rating == 4
        assert len(entry.price_history) == 1

    def test_legacy_price_alert(self):
        legacy = json.dumps([
            {
                "id": "a1",
                "productId": "6012",
                "productTitle": "Desk lamp",
                "productImage": "",
                "currentPrice": 55,
                "targetPrice": 50,
                "alertType": "below",
                "isActive": True,
                "createdAt": "2024-01-01T00:00:00Z",
                "triggeredAt": "2024-01-02T00:00:00Z",
            }
        ])
        alert = decode(EntityKind.PRICE_ALERTS, legacy)[0]
        assert isinstance(alert, PriceAlert)
        # a triggered alert is never active
        assert alert.is_active is False
        assert alert.is_armed is False

    def test_invalid_records_dropped(self):
        raw = json.dumps({
            "schema": "cart",
            "version": 1,
            "items": [
                {"id": "a", "title": "ok", "price": "1.00", "quantity": 1},
                {"id": "b", "title": "zero qty", "price": "1.00", "quantity": 0},
                {"id": "c", "title": "negative", "price": "-3", "quantity": 1},
                "not a record",
            ],
        })
        items = decode(EntityKind.CART, raw)
        assert [i.id for i in items] == ["a"]

    def test_invalid_json_raises(self):
        with pytest.raises(MalformedPersistedData):
            decode(EntityKind.CART, "{not json")

    def test_future_version_raises(self):
        raw = json.dumps({"schema": "cart", "version": CURRENT_VERSION + 1, "items": []})
        with pytest.raises(MalformedPersistedData, match="unsupported schema version"):
            decode(EntityKind.CART, raw)

    def test_schema_mismatch_raises(self):
        raw = json.dumps({"schema": "wishlist", "version": 1, "items": []})
        with pytest.raises(MalformedPersistedData):
            decode(EntityKind.CART, raw)

    def test_scalar_payload_raises(self):
        with pytest.raises(MalformedPersistedData):
            decode(EntityKind.CART, "42")


class TestKeyedLocalStore:
    def test_missing_key_reads_empty(self, store):
        assert store.read(EntityKind.CART, "nobody") == []

    def test_write_then_read(self, store):
        store.write(EntityKind.CART, "u1", [_line(quantity=3)])
        items = store.read(EntityKind.CART, "u1")
        assert len(items) == 1
        assert items[0].quantity == 3
        assert items[0].price == Decimal("20.00")

    def test_users_are_partitioned(self, store):
        store.write(EntityKind.CART, "u1", [_line()])
        assert store.read(EntityKind.CART, "u2") == []
        assert store.read(EntityKind.WISHLIST, "u1") == []

    def test_write_replaces_collection(self, store):
        store.write(EntityKind.CART, "u1", [_line("a"), _line("b")])
        store.write(EntityKind.CART, "u1", [_line("c")])
        assert [i.id for i in store.read(EntityKind.CART, "u1")] == ["c"]

    def test_malformed_value_reads_empty_without_raising(self, store, caplog):
        store.write_raw("cart_u1", "{{{ definitely not json")
        with caplog.at_level("WARNING"):
            assert store.read(EntityKind.CART, "u1") == []
        assert "malformed" in caplog.text.lower()

    def test_legacy_array_read_through_store(self, store):
        store.write_raw("cart_u1", json.dumps([{"id": "1", "title": "t", "price": 5, "quantity": 1}]))
        items = store.read(EntityKind.CART, "u1")
        assert items[0].price == Decimal("5")

    def test_rewrite_upgrades_legacy_value(self, store):
        store.write_raw("cart_u1", json.dumps([{"id": "1", "title": "t", "price": 5, "quantity": 1}]))
        store.write(EntityKind.CART, "u1", store.read(EntityKind.CART, "u1"))
        payload = json.loads(store.read_raw("cart_u1"))
        assert payload["version"] == CURRENT_VERSION

    def test_keys_and_delete(self, store):
        store.write(EntityKind.CART, "u1", [_line()])
        store.write(EntityKind.WISHLIST, "u1", [])
        assert store.keys() == ["cart_u1", "wishlist_u1"]
        store.delete(EntityKind.CART, "u1")
        assert store.keys() == ["wishlist_u1"]

    def test_table_schema(self, tmp_path):
        db = tmp_path / "schema.db"
        KeyedLocalStore(db)
        conn = get_connection(db)
        try:
            columns = [row["name"] for row in conn.execute("PRAGMA table_info(local_store)")]
        finally:
            conn.close()
        assert columns == ["key", "value", "updated_at"]

    def test_persists_across_instances(self, tmp_path):
        db = tmp_path / "shared.db"
        KeyedLocalStore(db).write(EntityKind.CART, "u1", [_line()])
        assert len(KeyedLocalStore(db).read(EntityKind.CART, "u1")) == 1
