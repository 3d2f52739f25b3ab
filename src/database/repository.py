"""
Inventory Repository

All persistence and query logic for the inventory API. A repository is
constructed around a SQLAlchemy session and handed to whoever needs data;
the forecasting code never touches the database itself.
"""

import logging
import math
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.security import generate_password_hash

from .models import (
    Category,
    Item,
    Order,
    OrderItem,
    ORDER_STATUSES,
    StockIn,
    StockOut,
    User,
    USER_ROLES
)
from ..inventory.transaction_codes import (
    generate_fallback_code,
    generate_order_code,
    generate_transaction_code,
    transaction_code_exists
)

logger = logging.getLogger(__name__)


class ConflictError(ValueError):
    """Raised when a unique value is already taken"""


class NotFoundError(LookupError):
    """Raised when a requested record does not exist"""


def parse_date(value: Any, field_name: str = "date") -> date:
    """Parse a YYYY-MM-DD string (or date/datetime) into a date"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value), '%Y-%m-%d').date()
    except (TypeError, ValueError):
        raise ValueError(f"Invalid {field_name}: expected YYYY-MM-DD") from None


def _quantity(value: Any, field_name: str = "qty") -> int:
    try:
        qty = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field_name} must be a whole number") from None
    if qty <= 0:
        raise ValueError(f"{field_name} must be greater than zero")
    return qty


def _money(value: Any, field_name: str = "price") -> float:
    if value is None or value == '':
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field_name} must be a number") from None


def _level(value: Any, field_name: str, default: Optional[int] = None) -> int:
    """Whole, non-negative stock level; missing values take the default when there is one"""
    if (value is None or value == '') and default is not None:
        return default
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be a whole number")
    try:
        level = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field_name} must be a whole number") from None
    if level < 0:
        raise ValueError(f"{field_name} cannot be negative")
    return level


def _check_limits(min_stock: int, max_stock: int) -> None:
    if min_stock > max_stock:
        raise ValueError("min_stock cannot exceed max_stock")


def _months_ago(today: date, months: int) -> date:
    month_index = today.year * 12 + (today.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    # Clamp to the last day of the target month
    next_month = date(year + (month // 12), (month % 12) + 1, 1)
    last_day = (next_month - timedelta(days=1)).day
    return date(year, month, min(today.day, last_day))


class InventoryRepository:
    """
    Data access for items, categories, stock movements, orders and users.

    Example:
    ```python
    repo = InventoryRepository(db.session)
    item = repo.create_item({"code": "TS-001", "name": "T-Shirt"})
    repo.record_stock_out({"item_id": item.id, "qty": 3, "date": "2024-05-01"})
    history = repo.daily_movements(item.id, days=90)
    ```
    """

    def __init__(
        self,
        session,
        page_size: int = 10,
        auto_reject_days: int = 7
    ):
        """
        Initialize repository.

        Args:
            session: SQLAlchemy session used for every query
            page_size: Default page size for list queries
            auto_reject_days: Days before a pending order is auto-rejected
        """
        self.session = session
        self.page_size = page_size
        self.auto_reject_days = auto_reject_days

    # =========================================================================
    # Helpers
    # =========================================================================

    def _paginate(self, query, page: int = 1, limit: Optional[int] = None):
        limit = limit if limit and limit > 0 else self.page_size
        page = page if page and page > 0 else 1

        total = query.order_by(None).count()
        rows = query.limit(limit).offset((page - 1) * limit).all()

        return rows, {
            'current': page,
            'total': math.ceil(total / limit) if total else 0,
            'total_items': total
        }

    def _get(self, model, record_id, label: str):
        record = self.session.get(model, record_id) if record_id else None
        if record is None:
            raise NotFoundError(f"{label} not found")
        return record

    def _next_code(self, kind: str, on_date: date) -> str:
        try:
            return generate_transaction_code(self.session, kind, on_date)
        except SQLAlchemyError as e:
            logger.warning(f"Error generating transaction code, using fallback: {e}")
            return generate_fallback_code(kind)

    def _commit(self):
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise ConflictError("Record conflicts with existing data") from e
        except SQLAlchemyError:
            self.session.rollback()
            raise

    # =========================================================================
    # Items
    # =========================================================================

    def list_items(
        self,
        page: int = 1,
        limit: Optional[int] = None,
        search: str = '',
        category_id: Optional[str] = None
    ) -> Tuple[List[Item], Dict[str, int]]:
        """List active items, newest first"""
        query = self.session.query(Item).filter(Item.is_active.is_(True))

        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Item.name.like(pattern), Item.code.like(pattern)))
        if category_id:
            query = query.filter(Item.category_id == category_id)

        query = query.order_by(Item.created_at.desc())
        return self._paginate(query, page, limit)

    def get_item(self, item_id: str) -> Item:
        item = self._get(Item, item_id, "Item")
        if not item.is_active:
            raise NotFoundError("Item not found")
        return item

    def create_item(self, data: Dict[str, Any]) -> Item:
        """Create an item; code and name are required and code must be unique"""
        code = (data.get('code') or '').strip()
        name = (data.get('name') or '').strip()
        if not code or not name:
            raise ValueError("Code and name are required")

        if self.session.query(Item.id).filter(Item.code == code).first():
            raise ConflictError("Item code already exists")

        stock_qty = _level(data.get('stock_qty'), 'stock_qty', default=0)
        min_stock = _level(data.get('min_stock'), 'min_stock', default=10)
        max_stock = _level(data.get('max_stock'), 'max_stock', default=1000)
        _check_limits(min_stock, max_stock)

        category_id = data.get('category_id') or None
        if category_id:
            self._get(Category, category_id, "Category")

        item = Item(
            code=code,
            name=name,
            model=data.get('model'),
            color=data.get('color'),
            size=data.get('size'),
            category_id=category_id,
            stock_qty=stock_qty,
            min_stock=min_stock,
            max_stock=max_stock,
            unit=data.get('unit') or 'pcs',
            price=_money(data.get('price')),
            description=data.get('description')
        )
        self.session.add(item)
        self._commit()

        logger.info(f"Created item: {item.code}")
        return item

    def update_item(self, item_id: str, data: Dict[str, Any]) -> Item:
        """Partial update; every field is validated before the item is touched"""
        item = self.get_item(item_id)

        code = item.code
        if 'code' in data and data['code'] != item.code:
            code = (data.get('code') or '').strip()
            if not code:
                raise ValueError("Code and name are required")
            duplicate = self.session.query(Item.id)\
                                    .filter(Item.code == code, Item.id != item.id)\
                                    .first()
            if duplicate:
                raise ConflictError("Item code already exists")

        name = item.name
        if 'name' in data:
            name = (data.get('name') or '').strip()
            if not name:
                raise ValueError("Code and name are required")

        category_id = item.category_id
        if 'category_id' in data:
            category_id = data.get('category_id') or None
            if category_id:
                self._get(Category, category_id, "Category")

        min_stock = _level(data['min_stock'], 'min_stock') if 'min_stock' in data else item.min_stock
        max_stock = _level(data['max_stock'], 'max_stock') if 'max_stock' in data else item.max_stock
        _check_limits(min_stock, max_stock)
        price = _money(data['price']) if 'price' in data else item.price

        item.code = code
        item.name = name
        item.category_id = category_id
        item.min_stock = min_stock
        item.max_stock = max_stock
        item.price = price
        for field_name in ('model', 'color', 'size', 'unit', 'description'):
            if field_name in data:
                setattr(item, field_name, data[field_name])

        self._commit()
        return item

    def deactivate_item(self, item_id: str) -> None:
        """Soft delete: the item disappears from listings but keeps its history"""
        item = self.get_item(item_id)
        item.is_active = False
        self._commit()
        logger.info(f"Deactivated item: {item.code}")

    # =========================================================================
    # Categories
    # =========================================================================

    def list_categories(self) -> List[Category]:
        return self.session.query(Category).order_by(Category.name).all()

    def get_category(self, category_id: str) -> Category:
        return self._get(Category, category_id, "Category")

    def create_category(self, data: Dict[str, Any]) -> Category:
        name = (data.get('name') or '').strip()
        if not name:
            raise ValueError("Category name is required")

        category = Category(name=name, description=data.get('description'))
        self.session.add(category)
        self._commit()
        return category

    def update_category(self, category_id: str, data: Dict[str, Any]) -> Category:
        category = self.get_category(category_id)
        if 'name' in data:
            name = (data.get('name') or '').strip()
            if not name:
                raise ValueError("Category name is required")
            category.name = name
        if 'description' in data:
            category.description = data['description']
        self._commit()
        return category

    def delete_category(self, category_id: str) -> None:
        category = self.get_category(category_id)
        for item in category.items:
            item.category_id = None
        self.session.delete(category)
        self._commit()

    # =========================================================================
    # Stock In
    # =========================================================================

    def list_stock_in(self, page: int = 1, limit: Optional[int] = None, search: str = ''):
        query = self.session.query(StockIn).join(Item, StockIn.item_id == Item.id)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(StockIn.transaction_code.like(pattern), Item.name.like(pattern)))
        query = query.order_by(StockIn.created_at.desc())
        return self._paginate(query, page, limit)

    def get_stock_in(self, record_id: str) -> StockIn:
        return self._get(StockIn, record_id, "Stock in record")

    def record_stock_in(self, data: Dict[str, Any], created_by: Optional[str] = None) -> StockIn:
        """Receive goods and raise the item's stock level"""
        if not data.get('item_id') or not data.get('qty') or not data.get('date'):
            raise ValueError("Required fields are missing")

        qty = _quantity(data['qty'])
        on_date = parse_date(data['date'])
        item = self.get_item(data['item_id'])

        supplier_id = data.get('supplier_id') or None
        if supplier_id:
            self._get(User, supplier_id, "Supplier")

        code = data.get('transaction_code') or self._next_code('IN', on_date)
        if transaction_code_exists(self.session, code, 'IN'):
            raise ConflictError("Transaction code already exists")

        price = _money(data.get('price'))
        total_price = data.get('total_price')
        total_price = _money(total_price, 'total_price') if total_price not in (None, '') else qty * price

        record = StockIn(
            transaction_code=code,
            item_id=item.id,
            supplier_id=supplier_id,
            qty=qty,
            price=price,
            total_price=total_price,
            date=on_date,
            notes=data.get('notes'),
            created_by=created_by
        )
        item.stock_qty = (item.stock_qty or 0) + qty

        self.session.add(record)
        self._commit()

        logger.info(f"Recorded stock in {code}: {qty} x {item.code}")
        return record

    def update_stock_in(self, record_id: str, data: Dict[str, Any]) -> StockIn:
        record = self.get_stock_in(record_id)

        new_item = self.get_item(data.get('item_id') or record.item_id)
        new_qty = _quantity(data['qty']) if 'qty' in data else record.qty
        new_date = parse_date(data['date']) if 'date' in data else record.date
        price = _money(data['price']) if 'price' in data else record.price
        total_price = _money(data['total_price'], 'total_price') if 'total_price' in data else record.total_price

        code = data.get('transaction_code') or record.transaction_code
        if code != record.transaction_code and transaction_code_exists(self.session, code, 'IN'):
            raise ConflictError("Transaction code already exists")

        # Units already issued from this receipt cannot be taken back
        remaining = (record.item.stock_qty or 0) - record.qty
        if new_item.id == record.item_id:
            remaining += new_qty
        if remaining < 0:
            raise ValueError("Insufficient stock")

        record.item.stock_qty -= record.qty
        new_item.stock_qty = (new_item.stock_qty or 0) + new_qty

        record.transaction_code = code
        record.item_id = new_item.id
        record.qty = new_qty
        record.date = new_date
        record.price = price
        record.total_price = total_price
        if 'supplier_id' in data:
            record.supplier_id = data['supplier_id'] or None
        if 'notes' in data:
            record.notes = data['notes']

        self._commit()
        return record

    def delete_stock_in(self, record_id: str) -> None:
        record = self.get_stock_in(record_id)
        if (record.item.stock_qty or 0) < record.qty:
            raise ValueError("Insufficient stock")
        record.item.stock_qty -= record.qty
        self.session.delete(record)
        self._commit()
        logger.info(f"Deleted stock in {record.transaction_code}")

    # =========================================================================
    # Stock Out
    # =========================================================================

    def list_stock_out(self, page: int = 1, limit: Optional[int] = None, search: str = ''):
        query = self.session.query(StockOut).join(Item, StockOut.item_id == Item.id)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(StockOut.transaction_code.like(pattern), Item.name.like(pattern)))
        query = query.order_by(StockOut.created_at.desc())
        return self._paginate(query, page, limit)

    def get_stock_out(self, record_id: str) -> StockOut:
        return self._get(StockOut, record_id, "Stock out record")

    def record_stock_out(self, data: Dict[str, Any], created_by: Optional[str] = None) -> StockOut:
        """Issue goods; rejected when the item has fewer units than requested"""
        if not data.get('item_id') or not data.get('qty') or not data.get('date'):
            raise ValueError("Required fields are missing")

        qty = _quantity(data['qty'])
        on_date = parse_date(data['date'])
        item = self.get_item(data['item_id'])

        if (item.stock_qty or 0) < qty:
            raise ValueError("Insufficient stock")

        code = data.get('transaction_code') or self._next_code('OUT', on_date)
        if transaction_code_exists(self.session, code, 'OUT'):
            raise ConflictError("Transaction code already exists")

        record = StockOut(
            transaction_code=code,
            item_id=item.id,
            qty=qty,
            purpose=data.get('purpose') or 'General Use',
            recipient=data.get('recipient'),
            date=on_date,
            notes=data.get('notes'),
            created_by=created_by
        )
        item.stock_qty -= qty

        self.session.add(record)
        self._commit()

        logger.info(f"Recorded stock out {code}: {qty} x {item.code}")
        return record

    def update_stock_out(self, record_id: str, data: Dict[str, Any]) -> StockOut:
        record = self.get_stock_out(record_id)

        new_item = self.get_item(data.get('item_id') or record.item_id)
        new_qty = _quantity(data['qty']) if 'qty' in data else record.qty
        new_date = parse_date(data['date']) if 'date' in data else record.date

        available = new_item.stock_qty or 0
        if new_item.id == record.item_id:
            available += record.qty
        if available < new_qty:
            raise ValueError("Insufficient stock")

        code = data.get('transaction_code') or record.transaction_code
        if code != record.transaction_code and transaction_code_exists(self.session, code, 'OUT'):
            raise ConflictError("Transaction code already exists")

        record.item.stock_qty += record.qty
        new_item.stock_qty -= new_qty

        record.transaction_code = code
        record.item_id = new_item.id
        record.qty = new_qty
        record.date = new_date
        if 'purpose' in data:
            record.purpose = data['purpose'] or 'General Use'
        for field_name in ('recipient', 'notes'):
            if field_name in data:
                setattr(record, field_name, data[field_name])

        self._commit()
        return record

    def delete_stock_out(self, record_id: str) -> None:
        record = self.get_stock_out(record_id)
        record.item.stock_qty += record.qty
        self.session.delete(record)
        self._commit()
        logger.info(f"Deleted stock out {record.transaction_code}")

    # =========================================================================
    # Orders
    # =========================================================================

    def list_orders(
        self,
        page: int = 1,
        limit: Optional[int] = None,
        status: Optional[str] = None,
        search: str = '',
        supplier_id: Optional[str] = None
    ):
        query = self.session.query(Order).join(User, Order.supplier_id == User.id)
        if supplier_id:
            query = query.filter(Order.supplier_id == supplier_id)
        if status:
            query = query.filter(Order.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Order.order_code.like(pattern), User.name.like(pattern)))
        query = query.order_by(Order.created_at.desc())
        return self._paginate(query, page, limit)

    def get_order(self, order_id: str) -> Order:
        return self._get(Order, order_id, "Order")

    def create_order(self, data: Dict[str, Any], supplier_id: Optional[str] = None) -> Order:
        """
        Place a purchase order.

        Args:
            data: {"supplier_id", "items": [{"item_id", "qty", "price", "notes"}], "notes"}
            supplier_id: Overrides data["supplier_id"] (a supplier ordering for itself)

        Returns:
            Created Order
        """
        supplier_id = supplier_id or data.get('supplier_id')
        lines = data.get('items') or []
        if not supplier_id or not lines:
            raise ValueError("Supplier and items are required")

        self._get(User, supplier_id, "Supplier")

        parsed_lines = []
        for line in lines:
            item = self.get_item(line.get('item_id'))
            parsed_lines.append((item, _quantity(line.get('qty')), _money(line.get('price')), line.get('notes')))

        now = datetime.utcnow()
        order = Order(
            order_code=generate_order_code(self.session),
            supplier_id=supplier_id,
            status='pending',
            total_amount=sum(qty * price for _, qty, price, _ in parsed_lines),
            notes=data.get('notes'),
            order_date=now,
            auto_reject_at=now + timedelta(days=self.auto_reject_days)
        )
        self.session.add(order)

        for item, qty, price, notes in parsed_lines:
            self.session.add(OrderItem(
                order=order,
                item_id=item.id,
                qty=qty,
                price=price,
                total_price=qty * price,
                notes=notes
            ))

        self._commit()

        logger.info(f"Created order {order.order_code} ({len(lines)} lines)")
        return order

    def update_order_status(self, order_id: str, status: str, user_id: Optional[str] = None) -> Order:
        if not status:
            raise ValueError("Status is required")
        if status not in ORDER_STATUSES:
            raise ValueError(f"Invalid status: {status}")

        order = self.get_order(order_id)
        order.status = status

        if status == 'confirmed':
            order.confirmed_at = datetime.utcnow()
            order.confirmed_by = user_id
        elif status == 'shipped':
            order.shipped_at = datetime.utcnow()

        self._commit()
        return order

    def delete_order(self, order_id: str) -> None:
        order = self.get_order(order_id)
        self.session.delete(order)
        self._commit()
        logger.info(f"Deleted order {order.order_code}")

    # =========================================================================
    # Users
    # =========================================================================

    def list_users(self, page: int = 1, limit: Optional[int] = None, role: Optional[str] = None, search: str = ''):
        query = self.session.query(User)
        if role:
            query = query.filter(User.role == role)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(User.username.like(pattern), User.name.like(pattern)))
        query = query.order_by(User.created_at.desc())
        return self._paginate(query, page, limit)

    def get_user(self, user_id: str) -> User:
        return self._get(User, user_id, "User")

    def create_user(self, data: Dict[str, Any]) -> User:
        required = ('username', 'password', 'email', 'role', 'name')
        if any(not data.get(key) for key in required):
            raise ValueError("Username, password, email, role and name are required")
        if data['role'] not in USER_ROLES:
            raise ValueError(f"Invalid role: {data['role']}")

        duplicate = self.session.query(User.id)\
                                .filter(or_(User.username == data['username'], User.email == data['email']))\
                                .first()
        if duplicate:
            raise ConflictError("Username or email already exists")

        user = User(
            username=data['username'],
            password_hash=generate_password_hash(data['password']),
            email=data['email'],
            role=data['role'],
            name=data['name'],
            phone=data.get('phone'),
            address=data.get('address')
        )
        self.session.add(user)
        self._commit()

        logger.info(f"Created user: {user.username} ({user.role})")
        return user

    def update_user(self, user_id: str, data: Dict[str, Any]) -> User:
        user = self.get_user(user_id)

        if 'role' in data and data['role'] not in USER_ROLES:
            raise ValueError(f"Invalid role: {data['role']}")
        if 'email' in data and data['email'] != user.email:
            taken = self.session.query(User.id)\
                                .filter(User.email == data['email'], User.id != user.id)\
                                .first()
            if taken:
                raise ConflictError("Username or email already exists")

        for field_name in ('email', 'role', 'name', 'phone', 'address', 'is_active'):
            if field_name in data:
                setattr(user, field_name, data[field_name])
        if data.get('password'):
            user.password_hash = generate_password_hash(data['password'])

        self._commit()
        return user

    def delete_user(self, user_id: str) -> None:
        user = self.get_user(user_id)
        self.session.delete(user)
        self._commit()
        logger.info(f"Deleted user: {user.username}")

    # =========================================================================
    # Forecast inputs
    # =========================================================================

    def daily_movements(
        self,
        item_id: str,
        days: int = 90,
        today: Optional[date] = None
    ) -> List[Dict[str, Any]]:
        """
        Daily stock movement totals for one item.

        Args:
            item_id: Item to aggregate
            days: Look-back window in days
            today: End of the window (defaults to the current date)

        Returns:
            Rows {date, stock_in, stock_out, net_movement} for each day with
            any movement, oldest first
        """
        today = today or date.today()
        start = today - timedelta(days=days)

        incoming = self.session.query(StockIn.date, func.sum(StockIn.qty))\
                               .filter(StockIn.item_id == item_id, StockIn.date >= start)\
                               .group_by(StockIn.date)\
                               .all()
        outgoing = self.session.query(StockOut.date, func.sum(StockOut.qty))\
                               .filter(StockOut.item_id == item_id, StockOut.date >= start)\
                               .group_by(StockOut.date)\
                               .all()

        days_data: Dict[date, Dict[str, int]] = {}
        for day, qty in incoming:
            days_data.setdefault(day, {'stock_in': 0, 'stock_out': 0})['stock_in'] = int(qty or 0)
        for day, qty in outgoing:
            days_data.setdefault(day, {'stock_in': 0, 'stock_out': 0})['stock_out'] = int(qty or 0)

        return [
            {
                'date': day.isoformat(),
                'stock_in': totals['stock_in'],
                'stock_out': totals['stock_out'],
                'net_movement': totals['stock_in'] - totals['stock_out']
            }
            for day, totals in sorted(days_data.items())
        ]

    def monthly_stock_in(self, months: int = 12, today: Optional[date] = None) -> List[Dict[str, Any]]:
        """
        Monthly stock totals across all items.

        Returns:
            Rows {month: "YYYY-MM", total_in, total_out} for each month with
            stock received, oldest first
        """
        today = today or date.today()
        start = _months_ago(today, months)

        def by_month(model):
            totals: Dict[str, int] = {}
            rows = self.session.query(model.date, model.qty).filter(model.date >= start).all()
            for day, qty in rows:
                key = f"{day.year:04d}-{day.month:02d}"
                totals[key] = totals.get(key, 0) + int(qty or 0)
            return totals

        incoming = by_month(StockIn)
        outgoing = by_month(StockOut)

        return [
            {'month': month, 'total_in': incoming[month], 'total_out': outgoing.get(month, 0)}
            for month in sorted(incoming)
        ]

    # =========================================================================
    # Dashboard
    # =========================================================================

    def dashboard_stats(self) -> Dict[str, Any]:
        active_items = self.session.query(Item).filter(Item.is_active.is_(True))

        return {
            'total_items': active_items.count(),
            'total_categories': self.session.query(Category).count(),
            'total_suppliers': self.session.query(User)
                                           .filter(User.role == 'supplier', User.is_active.is_(True))
                                           .count(),
            'low_stock_items': active_items.filter(Item.stock_qty <= Item.min_stock).count(),
            'total_stock': int(self.session.query(func.coalesce(func.sum(Item.stock_qty), 0))
                                           .filter(Item.is_active.is_(True))
                                           .scalar()),
            'pending_orders': self.session.query(Order).filter(Order.status == 'pending').count()
        }

    def recent_movements(self, days: int = 7, limit: int = 10, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Latest stock-in and stock-out records created in the last few days"""
        since = (now or datetime.utcnow()) - timedelta(days=days)

        movements = []
        for kind, model in (('in', StockIn), ('out', StockOut)):
            records = self.session.query(model)\
                                  .filter(model.created_at >= since)\
                                  .order_by(model.created_at.desc())\
                                  .limit(limit)\
                                  .all()
            for record in records:
                movements.append({
                    'type': kind,
                    'transaction_code': record.transaction_code,
                    'item_name': record.item.name if record.item else None,
                    'qty': record.qty,
                    'date': record.date.isoformat(),
                    'created_at': record.created_at
                })

        movements.sort(key=lambda m: m['created_at'], reverse=True)
        for movement in movements:
            movement['created_at'] = movement['created_at'].isoformat()
        return movements[:limit]

    def low_stock_items(self, limit: int = 10) -> List[Item]:
        return self.session.query(Item)\
                           .filter(Item.is_active.is_(True), Item.stock_qty <= Item.min_stock)\
                           .order_by(Item.stock_qty.asc())\
                           .limit(limit)\
                           .all()

    # =========================================================================
    # Reports
    # =========================================================================

    def stock_report(self) -> List[Dict[str, Any]]:
        items = self.session.query(Item)\
                            .filter(Item.is_active.is_(True))\
                            .order_by(Item.stock_qty.asc())\
                            .all()
        return [
            {
                'code': item.code,
                'name': item.name,
                'model': item.model,
                'color': item.color,
                'size': item.size,
                'stock_qty': item.stock_qty,
                'min_stock': item.min_stock,
                'max_stock': item.max_stock,
                'category_name': item.category.name if item.category else None,
                'stock_status': item.stock_status
            }
            for item in items
        ]

    def movement_report(self, start: date, end: date) -> List[Dict[str, Any]]:
        rows = []

        incoming = self.session.query(StockIn).filter(StockIn.date.between(start, end)).all()
        for record in incoming:
            rows.append({
                'type': 'IN',
                'transaction_code': record.transaction_code,
                'item_name': record.item.name,
                'qty': record.qty,
                'price': record.price,
                'total_price': record.total_price,
                'date': record.date.isoformat(),
                'supplier_name': record.supplier.name if record.supplier else None
            })

        outgoing = self.session.query(StockOut).filter(StockOut.date.between(start, end)).all()
        for record in outgoing:
            rows.append({
                'type': 'OUT',
                'transaction_code': record.transaction_code,
                'item_name': record.item.name,
                'qty': record.qty,
                'price': 0,
                'total_price': 0,
                'date': record.date.isoformat(),
                'supplier_name': record.recipient
            })

        rows.sort(key=lambda r: r['date'], reverse=True)
        return rows

    def orders_report(self, start: date, end: date) -> List[Dict[str, Any]]:
        window_start = datetime.combine(start, datetime.min.time())
        window_end = datetime.combine(end, datetime.max.time())

        orders = self.session.query(Order)\
                             .filter(Order.order_date.between(window_start, window_end))\
                             .order_by(Order.order_date.desc())\
                             .all()
        return [
            {
                'order_code': order.order_code,
                'status': order.status,
                'total_amount': order.total_amount,
                'order_date': order.order_date.isoformat() if order.order_date else None,
                'confirmed_at': order.confirmed_at.isoformat() if order.confirmed_at else None,
                'shipped_at': order.shipped_at.isoformat() if order.shipped_at else None,
                'supplier_name': order.supplier.name if order.supplier else None,
                'total_items': order.lines.count()
            }
            for order in orders
        ]
