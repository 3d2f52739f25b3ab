import os
import sys
import pytest

# ensure workspace root is on sys.path so the application packages can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# web.app builds a module-level app on import; point it at the testing config
os.environ["FLASK_ENV"] = "testing"

from config.settings import TestingConfig
from src.database.models import db
from src.database.repository import InventoryRepository
from web.app import create_app


@pytest.fixture
def app():
    """Fresh application with an empty in-memory database per test"""
    app = create_app(TestingConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def repo(app):
    return InventoryRepository(db.session)


@pytest.fixture
def supplier(repo):
    return repo.create_user({
        "username": "supplier1",
        "password": "secret",
        "email": "supplier1@inventory.com",
        "role": "supplier",
        "name": "Supplier 1",
    })


@pytest.fixture
def item(repo):
    return repo.create_item({
        "code": "TS-001",
        "name": "Basic T-Shirt",
        "stock_qty": 50,
        "min_stock": 10,
        "max_stock": 200,
        "price": 85000,
    })
