"""
Tests for the development launcher.
"""

import pytest

import start_dev
from src.database.models import Item
from src.demo_data import DemoDataGenerator


def test_check_forecast_needs_items(app):
    with pytest.raises(RuntimeError, match="No items to forecast"):
        start_dev.check_forecast(app)


def test_load_demo_data_then_check_forecast(app):
    assert start_dev.load_demo_data(app, count=2, days=30, seed=3) == (2, True)
    assert start_dev.load_demo_data(app, count=2, days=30, seed=3) == (2, False)

    summary = start_dev.check_forecast(app)

    assert summary["item"] in {"TS-001", "TS-002"}
    assert summary["history_days"] > 0
    assert summary["trend"] in {"increasing", "decreasing", "stable"}
    assert summary["action"] in {"order", "monitor"}


def test_demo_store_follows_the_seed(app):
    start_dev.load_demo_data(app, count=3, days=20, seed=11)

    expected = DemoDataGenerator(seed=11).generate(days=20, item_count=3)
    loaded = {i.code: i.stock_qty for i in Item.query.all()}
    assert loaded == {i["code"]: i["stock_qty"] for i in expected.items}
