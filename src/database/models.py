"""
Database Models for Stock Forecast

SQLAlchemy models for users, categories, items, stock movements and
purchase orders.
"""

import uuid
from datetime import datetime
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

USER_ROLES = ('admin', 'owner', 'supplier')
ORDER_STATUSES = ('pending', 'confirmed', 'shipped', 'completed', 'rejected', 'cancelled')


def generate_uuid():
    return str(uuid.uuid4())


def _iso(value):
    return value.isoformat() if value else None


class User(db.Model):
    """
    Application user.

    Admins manage the catalog, owners review reports, suppliers fulfil
    purchase orders.
    """
    __tablename__ = 'users'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    username = db.Column(db.String(50), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(100), unique=True, nullable=False)
    role = db.Column(db.String(20), nullable=False)  # admin, owner, supplier
    name = db.Column(db.String(100), nullable=False)
    phone = db.Column(db.String(20))
    address = db.Column(db.Text)
    is_active = db.Column(db.Boolean, default=True)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'role': self.role,
            'name': self.name,
            'phone': self.phone,
            'address': self.address,
            'is_active': self.is_active,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }


class Category(db.Model):
    """Item category"""
    __tablename__ = 'categories'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    items = db.relationship('Item', backref='category', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }


class Item(db.Model):
    """
    Stocked item.

    stock_qty is kept in step with the stock-in and stock-out records.
    """
    __tablename__ = 'items'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    code = db.Column(db.String(50), unique=True, nullable=False)
    name = db.Column(db.String(100), nullable=False)
    model = db.Column(db.String(100))
    color = db.Column(db.String(50))
    size = db.Column(db.String(20))
    category_id = db.Column(db.String(36), db.ForeignKey('categories.id', ondelete='SET NULL'))

    # Stock levels
    stock_qty = db.Column(db.Integer, default=0)
    min_stock = db.Column(db.Integer, default=10)
    max_stock = db.Column(db.Integer, default=1000)
    unit = db.Column(db.String(20), default='pcs')
    price = db.Column(db.Float, default=0)

    description = db.Column(db.Text)
    is_active = db.Column(db.Boolean, default=True)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    stock_in = db.relationship('StockIn', backref='item', lazy='dynamic',
                               cascade='all, delete-orphan')
    stock_out = db.relationship('StockOut', backref='item', lazy='dynamic',
                                cascade='all, delete-orphan')

    @property
    def stock_status(self):
        """low / high / normal relative to the item's limits"""
        if self.stock_qty <= self.min_stock:
            return 'low'
        if self.stock_qty >= self.max_stock:
            return 'high'
        return 'normal'

    def to_dict(self):
        return {
            'id': self.id,
            'code': self.code,
            'name': self.name,
            'model': self.model,
            'color': self.color,
            'size': self.size,
            'category_id': self.category_id,
            'category_name': self.category.name if self.category else None,
            'stock_qty': self.stock_qty,
            'min_stock': self.min_stock,
            'max_stock': self.max_stock,
            'stock_status': self.stock_status,
            'unit': self.unit,
            'price': self.price,
            'description': self.description,
            'is_active': self.is_active,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }


class StockIn(db.Model):
    """Goods received into stock"""
    __tablename__ = 'stock_in'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    transaction_code = db.Column(db.String(50), unique=True, nullable=False)
    item_id = db.Column(db.String(36), db.ForeignKey('items.id', ondelete='CASCADE'), nullable=False)
    supplier_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='SET NULL'))
    qty = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Float, default=0)
    total_price = db.Column(db.Float, default=0)
    date = db.Column(db.Date, nullable=False)
    notes = db.Column(db.Text)
    created_by = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='SET NULL'))

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    supplier = db.relationship('User', foreign_keys=[supplier_id])

    def to_dict(self):
        return {
            'id': self.id,
            'transaction_code': self.transaction_code,
            'item_id': self.item_id,
            'item_name': self.item.name if self.item else None,
            'item_code': self.item.code if self.item else None,
            'supplier_id': self.supplier_id,
            'supplier_name': self.supplier.name if self.supplier else None,
            'qty': self.qty,
            'price': self.price,
            'total_price': self.total_price,
            'date': _iso(self.date),
            'notes': self.notes,
            'created_by': self.created_by,
            'created_at': _iso(self.created_at)
        }


class StockOut(db.Model):
    """Goods issued from stock"""
    __tablename__ = 'stock_out'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    transaction_code = db.Column(db.String(50), unique=True, nullable=False)
    item_id = db.Column(db.String(36), db.ForeignKey('items.id', ondelete='CASCADE'), nullable=False)
    qty = db.Column(db.Integer, nullable=False)
    purpose = db.Column(db.String(100), nullable=False, default='General Use')
    recipient = db.Column(db.String(100))
    date = db.Column(db.Date, nullable=False)
    notes = db.Column(db.Text)
    created_by = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='SET NULL'))

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'transaction_code': self.transaction_code,
            'item_id': self.item_id,
            'item_name': self.item.name if self.item else None,
            'item_code': self.item.code if self.item else None,
            'qty': self.qty,
            'purpose': self.purpose,
            'recipient': self.recipient,
            'date': _iso(self.date),
            'notes': self.notes,
            'created_by': self.created_by,
            'created_at': _iso(self.created_at)
        }


class Order(db.Model):
    """
    Purchase order placed with a supplier.

    Pending orders carry an auto-reject deadline.
    """
    __tablename__ = 'orders'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    order_code = db.Column(db.String(50), unique=True, nullable=False)
    supplier_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False)
    status = db.Column(db.String(20), default='pending')
    total_amount = db.Column(db.Float, default=0)
    notes = db.Column(db.Text)

    order_date = db.Column(db.DateTime, default=datetime.utcnow)
    auto_reject_at = db.Column(db.DateTime)
    confirmed_at = db.Column(db.DateTime)
    confirmed_by = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='SET NULL'))
    shipped_at = db.Column(db.DateTime)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    supplier = db.relationship('User', foreign_keys=[supplier_id])
    lines = db.relationship('OrderItem', backref='order', lazy='dynamic',
                            cascade='all, delete-orphan')

    def to_dict(self, include_lines=False):
        data = {
            'id': self.id,
            'order_code': self.order_code,
            'supplier_id': self.supplier_id,
            'supplier_name': self.supplier.name if self.supplier else None,
            'supplier_email': self.supplier.email if self.supplier else None,
            'status': self.status,
            'total_amount': self.total_amount,
            'notes': self.notes,
            'order_date': _iso(self.order_date),
            'auto_reject_at': _iso(self.auto_reject_at),
            'confirmed_at': _iso(self.confirmed_at),
            'confirmed_by': self.confirmed_by,
            'shipped_at': _iso(self.shipped_at),
            'created_at': _iso(self.created_at)
        }
        if include_lines:
            data['items'] = [line.to_dict() for line in self.lines]
        return data


class OrderItem(db.Model):
    """Purchase order line"""
    __tablename__ = 'order_items'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    order_id = db.Column(db.String(36), db.ForeignKey('orders.id'), nullable=False)
    item_id = db.Column(db.String(36), db.ForeignKey('items.id'), nullable=False)
    qty = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Float, default=0)
    total_price = db.Column(db.Float, default=0)
    notes = db.Column(db.Text)

    item = db.relationship('Item')

    def to_dict(self):
        return {
            'id': self.id,
            'order_id': self.order_id,
            'item_id': self.item_id,
            'item_name': self.item.name if self.item else None,
            'item_code': self.item.code if self.item else None,
            'model': self.item.model if self.item else None,
            'qty': self.qty,
            'price': self.price,
            'total_price': self.total_price,
            'notes': self.notes
        }
