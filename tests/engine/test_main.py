"""Tests for the engine CLI."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from src.engine.main import build_engine, build_parser, main, run


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "cli.db")


def _invoke(capsys, db_path, *argv) -> dict:
    with patch("src.engine.main.setup_logging"):
        main(["--db", db_path, *argv])
    return json.loads(capsys.readouterr().out)


class TestCli:
    def test_cart_add_and_show(self, capsys, db_path):
        out = _invoke(capsys, db_path, "--user", "u1", "cart", "add",
                      "--id", "6012", "--title", "Desk lamp", "--price", "20.00")
        assert out["result"]["count"] == 1
        assert out["result"]["totals"]["estimated_total"] == "21.50"
        assert out["notifications"] == [{"type": "success", "message": "Desk lamp added to cart!"}]

        out = _invoke(capsys, db_path, "--user", "u1", "cart", "addons", "6012", "--inspection")
        assert out["result"]["totals"]["estimated_total"] == "28.49"

    def test_cart_signed_out(self, capsys, db_path):
        out = _invoke(capsys, db_path, "cart", "add",
                      "--id", "1", "--title", "x", "--price", "1")
        assert out["result"]["count"] == 0
        assert out["notifications"][0]["type"] == "error"

    def test_wishlist_toggle_and_list(self, capsys, db_path):
        _invoke(capsys, db_path, "--user", "u1", "wishlist", "toggle",
                "--id", "1", "--title", "Lamp", "--price", "20")
        out = _invoke(capsys, db_path, "--user", "u1", "wishlist", "list", "--query", "lamp")
        assert [e["product_id"] for e in out["result"]] == ["1"]

    def test_alerts_create_default_target_and_check(self, capsys, db_path):
        out = _invoke(capsys, db_path, "--user", "u1", "alerts", "create",
                      "--id", "1", "--title", "Lamp", "--price", "20.00")
        assert out["result"]["target_price"] == "18.00"

        out = _invoke(capsys, db_path, "--user", "u1", "alerts", "check", "--quote", "1=17.99")
        assert len(out["result"]["fired"]) == 1
        assert out["notifications"][-1]["message"] == "Price Alert: Lamp is now €17.99!"

    def test_bad_quote_rejected(self, db_path):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--db", db_path, "alerts", "check", "--quote", "1=abc"])

    def test_run_without_main(self, db_path):
        engine = build_engine("u2", db_path)
        args = build_parser().parse_args(["cart", "show"])
        assert run(args, engine)["items"] == []
