"""
Demo Data Generator for Stock Forecast

Generates a small apparel store's inventory for demonstrations and testing.
Creates the default users and categories, a catalog of items and 90 days of
stock movements with a per-item demand trend.
"""

import random
import uuid
from datetime import datetime, date, time, timedelta
from typing import Dict, List, Optional, Any
from dataclasses import dataclass

from werkzeug.security import generate_password_hash

DEFAULT_PASSWORD = "password"

DEFAULT_USERS = [
    {"username": "admin", "email": "admin@inventory.com", "role": "admin",
     "name": "Administrator", "phone": "081234567890"},
    {"username": "owner", "email": "owner@inventory.com", "role": "owner",
     "name": "Owner", "phone": "081234567891"},
    {"username": "supplier1", "email": "supplier1@inventory.com", "role": "supplier",
     "name": "Supplier 1", "phone": "081234567892"},
]

DEFAULT_CATEGORIES = [
    ("Apparel", "Clothing and fashion"),
    ("Accessories", "Fashion accessories"),
    ("Sports", "Sports equipment"),
]

# Catalog with demand profiles: base daily demand and growth over the window
CATALOG = [
    {"code": "TS-001", "name": "Basic T-Shirt", "model": "Crew Neck", "color": "White", "size": "M",
     "category": "Apparel", "price": 85000, "min_stock": 20, "max_stock": 400,
     "base_demand": 6, "growth": 0.8},
    {"code": "TS-002", "name": "Basic T-Shirt", "model": "Crew Neck", "color": "Black", "size": "L",
     "category": "Apparel", "price": 85000, "min_stock": 20, "max_stock": 400,
     "base_demand": 5, "growth": 0.3},
    {"code": "JK-001", "name": "Denim Jacket", "model": "Trucker", "color": "Blue", "size": "L",
     "category": "Apparel", "price": 350000, "min_stock": 5, "max_stock": 80,
     "base_demand": 2, "growth": -0.5},
    {"code": "HD-001", "name": "Hoodie", "model": "Pullover", "color": "Grey", "size": "XL",
     "category": "Apparel", "price": 220000, "min_stock": 10, "max_stock": 150,
     "base_demand": 3, "growth": 0.0},
    {"code": "CP-001", "name": "Baseball Cap", "model": "Snapback", "color": "Navy", "size": "All",
     "category": "Accessories", "price": 65000, "min_stock": 15, "max_stock": 200,
     "base_demand": 4, "growth": 0.2},
    {"code": "BL-001", "name": "Leather Belt", "model": "Classic", "color": "Brown", "size": "32",
     "category": "Accessories", "price": 120000, "min_stock": 8, "max_stock": 100,
     "base_demand": 2, "growth": -0.3},
    {"code": "SK-001", "name": "Running Socks", "model": "Ankle", "color": "White", "size": "All",
     "category": "Sports", "price": 35000, "min_stock": 30, "max_stock": 600,
     "base_demand": 9, "growth": 1.0},
    {"code": "SH-001", "name": "Running Shoes", "model": "Trail", "color": "Black", "size": "42",
     "category": "Sports", "price": 650000, "min_stock": 5, "max_stock": 60,
     "base_demand": 1, "growth": 0.5},
]

# Relative demand by weekday, Monday first
WEEKDAY_FACTORS = [0.8, 0.85, 0.9, 1.0, 1.15, 1.4, 1.2]

PURPOSES = ["Sales", "Sales", "Sales", "Online Order", "Display", "General Use"]


@dataclass
class GeneratedInventory:
    """Generated inventory data structure"""
    users: List[Dict[str, Any]]
    categories: List[Dict[str, Any]]
    items: List[Dict[str, Any]]
    stock_in: List[Dict[str, Any]]
    stock_out: List[Dict[str, Any]]


class DemoDataGenerator:
    """
    Generate realistic demo data for Stock Forecast.

    Creates a complete store with:
    - Default admin, owner and supplier accounts
    - Default categories and an item catalog
    - Daily stock-out demand with a trend per item
    - Stock-in restocks whenever an item runs low

    Example:
        generator = DemoDataGenerator(seed=42)
        inventory = generator.generate(days=90)

        print(len(inventory.items), len(inventory.stock_out))
    """

    def __init__(self, seed: Optional[int] = None):
        """Initialize generator with optional random seed for reproducibility"""
        self.random = random.Random(seed)
        self._sequences: Dict[str, int] = {}

    def generate(
        self,
        days: int = 90,
        item_count: Optional[int] = None,
        today: Optional[date] = None
    ) -> GeneratedInventory:
        """
        Generate users, categories, items and their movement history.

        Args:
            days: Number of days of movements to generate
            item_count: Limit on catalog items (all when None)
            today: Last day of the history (defaults to the current date)

        Returns:
            GeneratedInventory with all data populated
        """
        today = today or date.today()
        start_date = today - timedelta(days=days - 1)
        self._sequences = {}

        users = [dict(user, id=str(uuid.uuid4())) for user in DEFAULT_USERS]
        supplier_id = next(u["id"] for u in users if u["role"] == "supplier")
        admin_id = next(u["id"] for u in users if u["role"] == "admin")

        categories = [
            {"id": str(uuid.uuid4()), "name": name, "description": description}
            for name, description in DEFAULT_CATEGORIES
        ]
        category_ids = {c["name"]: c["id"] for c in categories}

        catalog = CATALOG if item_count is None else CATALOG[:item_count]

        items = []
        stock_in = []
        stock_out = []

        for entry in catalog:
            item_id = str(uuid.uuid4())
            level = self.random.randint(entry["min_stock"] * 2, entry["max_stock"] // 2)
            restock_qty = max(entry["min_stock"] * 3, entry["max_stock"] // 3)
            cost = round(entry["price"] * 0.6)

            for offset in range(days):
                day = start_date + timedelta(days=offset)

                # Restock before trading when stock is running low
                if level <= entry["min_stock"] * 2:
                    qty = min(restock_qty, entry["max_stock"] - level)
                    if qty > 0:
                        stock_in.append({
                            "id": str(uuid.uuid4()),
                            "transaction_code": self._next_code("IN", day),
                            "item_id": item_id,
                            "supplier_id": supplier_id,
                            "qty": qty,
                            "price": cost,
                            "total_price": qty * cost,
                            "date": day.isoformat(),
                            "notes": "Restock",
                            "created_by": admin_id,
                            "created_at": self._timestamp(day, 8)
                        })
                        level += qty

                demand = self._daily_demand(entry, offset, days, day)
                qty = min(demand, level)
                if qty <= 0:
                    continue

                stock_out.append({
                    "id": str(uuid.uuid4()),
                    "transaction_code": self._next_code("OUT", day),
                    "item_id": item_id,
                    "qty": qty,
                    "purpose": self.random.choice(PURPOSES),
                    "recipient": None,
                    "date": day.isoformat(),
                    "notes": None,
                    "created_by": admin_id,
                    "created_at": self._timestamp(day, self.random.randint(10, 20))
                })
                level -= qty

            items.append({
                "id": item_id,
                "code": entry["code"],
                "name": entry["name"],
                "model": entry["model"],
                "color": entry["color"],
                "size": entry["size"],
                "category_id": category_ids[entry["category"]],
                "stock_qty": level,
                "min_stock": entry["min_stock"],
                "max_stock": entry["max_stock"],
                "unit": "pcs",
                "price": entry["price"],
                "description": f"{entry['name']} ({entry['color']}, {entry['size']})"
            })

        return GeneratedInventory(
            users=users,
            categories=categories,
            items=items,
            stock_in=stock_in,
            stock_out=stock_out
        )

    def _daily_demand(self, entry: Dict[str, Any], offset: int, days: int, day: date) -> int:
        """Units sold on one day: trend, weekday pattern and noise"""
        # Quiet days
        if self.random.random() < 0.15:
            return 0

        trend = entry["base_demand"] * (1 + entry["growth"] * offset / days)
        expected = trend * WEEKDAY_FACTORS[day.weekday()]
        return max(0, int(round(expected * self.random.uniform(0.7, 1.3))))

    def _next_code(self, kind: str, day: date) -> str:
        prefix = f"TXN-{kind}-{day.strftime('%Y%m%d')}"
        self._sequences[prefix] = self._sequences.get(prefix, 0) + 1
        return f"{prefix}-{self._sequences[prefix]:03d}"

    def _timestamp(self, day: date, hour: int) -> str:
        return datetime.combine(day, time(hour, self.random.randint(0, 59))).isoformat()


def load_demo_data_to_db(
    db_session,
    count: Optional[int] = None,
    days: int = 90,
    seed: int = 42
) -> List[str]:
    """
    Load demo data directly into the database.

    Args:
        db_session: SQLAlchemy database session
        count: Number of catalog items to create (all when None)
        days: Days of movement history
        seed: Random seed; the same seed always yields the same store

    Returns:
        List of created item IDs
    """
    from .database.models import User, Category, Item, StockIn, StockOut

    generator = DemoDataGenerator(seed=seed)
    inventory = generator.generate(days=days, item_count=count)
    password_hash = generate_password_hash(DEFAULT_PASSWORD)

    for user_data in inventory.users:
        db_session.add(User(password_hash=password_hash, **user_data))

    for category_data in inventory.categories:
        db_session.add(Category(**category_data))

    for item_data in inventory.items:
        db_session.add(Item(**item_data))

    for record in inventory.stock_in:
        db_session.add(StockIn(
            **dict(record,
                   date=date.fromisoformat(record["date"]),
                   created_at=datetime.fromisoformat(record["created_at"]))
        ))

    for record in inventory.stock_out:
        db_session.add(StockOut(
            **dict(record,
                   date=date.fromisoformat(record["date"]),
                   created_at=datetime.fromisoformat(record["created_at"]))
        ))

    db_session.commit()
    return [item["id"] for item in inventory.items]


# Quick test function
if __name__ == "__main__":
    generator = DemoDataGenerator(seed=42)
    inventory = generator.generate()

    print(f"Users: {len(inventory.users)}")
    print(f"Items: {len(inventory.items)}")
    print(f"Stock In: {len(inventory.stock_in)}")
    print(f"Stock Out: {len(inventory.stock_out)}")
    for item in inventory.items:
        print(f"  {item['code']} {item['name']}: {item['stock_qty']} on hand")
