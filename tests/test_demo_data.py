"""
Tests for the demo inventory generator.
"""

from datetime import date

from src.database.models import db, Item, StockIn, StockOut, User
from src.demo_data import CATALOG, DemoDataGenerator, load_demo_data_to_db
from src.forecasting import ForecastEngine

TODAY = date(2024, 6, 30)


def test_generator_is_reproducible():
    first = DemoDataGenerator(seed=7).generate(days=30, today=TODAY)
    second = DemoDataGenerator(seed=7).generate(days=30, today=TODAY)

    assert [i["stock_qty"] for i in first.items] == [i["stock_qty"] for i in second.items]
    assert [r["qty"] for r in first.stock_out] == [r["qty"] for r in second.stock_out]


def test_generated_inventory_is_consistent():
    inventory = DemoDataGenerator(seed=1).generate(days=90, today=TODAY)

    assert [u["username"] for u in inventory.users] == ["admin", "owner", "supplier1"]
    assert [c["name"] for c in inventory.categories] == ["Apparel", "Accessories", "Sports"]
    assert len(inventory.items) == len(CATALOG)
    assert all(item["stock_qty"] >= 0 for item in inventory.items)

    codes = [r["transaction_code"] for r in inventory.stock_in + inventory.stock_out]
    assert len(codes) == len(set(codes))
    assert all(r["date"] <= TODAY.isoformat() for r in inventory.stock_out)
    assert min(r["date"] for r in inventory.stock_out) >= "2024-04-02"


def test_item_count_limits_catalog():
    inventory = DemoDataGenerator(seed=1).generate(days=10, item_count=2, today=TODAY)

    assert [i["code"] for i in inventory.items] == [c["code"] for c in CATALOG[:2]]


def test_load_demo_data_to_db(repo):
    item_ids = load_demo_data_to_db(db.session, count=3, days=30)

    assert len(item_ids) == 3
    assert Item.query.count() == 3
    assert User.query.count() == 3
    assert StockIn.query.count() + StockOut.query.count() > 0

    history = repo.daily_movements(item_ids[0], days=30)
    assert history

    result = ForecastEngine.from_records(history, value_key="stock_out").predict(7)
    assert len(result.predictions) == 7
