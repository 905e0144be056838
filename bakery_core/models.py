# bakery_core/models.py

from datetime import datetime, timezone, date
from enum import Enum as PyEnum

from flask_login import UserMixin

from bakery_core import db


def utcnow():
    return datetime.now(timezone.utc)


class User(db.Model, UserMixin):
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password = db.Column(db.String(200), nullable=False)
    role = db.Column(db.String(20), default='staff', nullable=False)
    full_name = db.Column(db.String(100))

    profile = db.relationship('Profile', back_populates='user', uselist=False,
                              cascade='all, delete-orphan')
    invoice_settings = db.relationship('InvoiceSettings', back_populates='user', uselist=False,
                                       cascade='all, delete-orphan')
    orders = db.relationship('Order', back_populates='created_by')

    @property
    def is_admin(self):
        return self.role == 'admin'

    def __repr__(self):
        return f"<User {self.email}>"


class Profile(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), unique=True, nullable=False)
    full_name = db.Column(db.String(100))
    email = db.Column(db.String(120))
    phone = db.Column(db.String(20))
    address = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    user = db.relationship('User', back_populates='profile')

    def __repr__(self):
        return f"<Profile {self.email}>"


product_tags = db.Table(
    'product_tags',
    db.Column('product_id', db.Integer, db.ForeignKey('product.id', ondelete='CASCADE'), primary_key=True),
    db.Column('tag_id', db.Integer, db.ForeignKey('tag.id', ondelete='CASCADE'), primary_key=True),
)


class Tag(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), unique=True, nullable=False)

    products = db.relationship('Product', secondary=product_tags, back_populates='tags')

    def __repr__(self):
        return f"<Tag {self.name}>"


class Product(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    mrp = db.Column(db.Float, nullable=True)
    price = db.Column(db.Float, nullable=False)
    category = db.Column(db.String(50))
    description = db.Column(db.Text)
    image = db.Column(db.String(500))
    stock = db.Column(db.Integer, default=0)
    base_weight = db.Column(db.Float, default=500)
    weight_unit = db.Column(db.String(20), default='grams')
    # list of {"weight": 250, "price": 199, "unit": "grams"}
    weight_options = db.Column(db.JSON, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    tags = db.relationship('Tag', secondary=product_tags, back_populates='products',
                           order_by='Tag.name')

    @property
    def in_stock(self):
        return (self.stock or 0) > 0

    @property
    def has_discount(self):
        return bool(self.mrp) and self.mrp > self.price

    def __repr__(self):
        return f"<Product {self.name} ₹{self.price}>"


class OrderStatus(PyEnum):
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def label(self):
        return self.value.title()


class Order(db.Model):
    __tablename__ = 'orders'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    customer_name = db.Column(db.String(100), nullable=False)
    customer_email = db.Column(db.String(120))
    customer_phone = db.Column(db.String(20))
    customer_address = db.Column(db.Text)
    notes = db.Column(db.Text)

    subtotal = db.Column(db.Float, default=0.0, nullable=False)
    shipping_charges = db.Column(db.Float, default=0.0)
    discount_percent = db.Column(db.Float, default=0.0)
    discount_amount = db.Column(db.Float, default=0.0)
    total = db.Column(db.Float, default=0.0, nullable=False)

    status = db.Column(db.Enum(OrderStatus, values_callable=lambda e: [m.value for m in e]),
                       nullable=False, default=OrderStatus.PENDING)
    order_date = db.Column(db.DateTime, default=utcnow, nullable=False)
    custom_order_date = db.Column(db.Date, nullable=True)
    custom_invoice_date = db.Column(db.Date, nullable=True)
    delivery_date = db.Column(db.Date, nullable=True)
    shipment_number = db.Column(db.String(100), nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    created_by = db.relationship('User', back_populates='orders')
    items = db.relationship('OrderItem', back_populates='order', cascade='all, delete-orphan',
                            order_by='OrderItem.id')

    @property
    def invoice_number(self):
        return f"INV-{self.id:05d}" if self.id else "INV-DRAFT"

    @property
    def effective_order_date(self):
        return self.custom_order_date or (self.order_date.date() if self.order_date else date.today())

    @property
    def effective_invoice_date(self):
        return self.custom_invoice_date or date.today()

    def __repr__(self):
        return f"<Order {self.invoice_number} {self.customer_name} ₹{self.total}>"


class OrderItem(db.Model):
    __tablename__ = 'order_items'

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False)
    # Bonus lines may not map to a catalog product
    product_id = db.Column(db.Integer, db.ForeignKey('product.id', ondelete='SET NULL'), nullable=True)
    product_name = db.Column(db.String(200), nullable=False)
    product_price = db.Column(db.Float, nullable=False, default=0.0)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    total = db.Column(db.Float, nullable=False, default=0.0)
    weight = db.Column(db.Float, nullable=True)
    weight_unit = db.Column(db.String(20), nullable=True)
    is_bonus = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    order = db.relationship('Order', back_populates='items')
    product = db.relationship('Product')

    def __repr__(self):
        return f"<OrderItem {self.product_name[:30]} x{self.quantity}>"


DEFAULT_INVOICE_SETTINGS = {
    'business_name': 'PRIYUM',
    'business_subtitle': 'Cakes & Bakes',
    'phone': '+91 98765 43210',
    'email': 'orders@priyumbakes.com',
}


class InvoiceSettings(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), unique=True, nullable=False)
    business_name = db.Column(db.String(128), nullable=False, default=DEFAULT_INVOICE_SETTINGS['business_name'])
    business_subtitle = db.Column(db.String(128), nullable=False, default=DEFAULT_INVOICE_SETTINGS['business_subtitle'])
    phone = db.Column(db.String(30), nullable=False, default=DEFAULT_INVOICE_SETTINGS['phone'])
    email = db.Column(db.String(120), nullable=False, default=DEFAULT_INVOICE_SETTINGS['email'])
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    user = db.relationship('User', back_populates='invoice_settings')

    def __repr__(self):
        return f"<InvoiceSettings {self.business_name}>"


def get_or_create_invoice_settings(user):
    """Get the letterhead for ``user``, creating the default one on first use."""
    settings = db.session.execute(
        db.select(InvoiceSettings).filter_by(user_id=user.id)
    ).scalar()
    if not settings:
        settings = InvoiceSettings(user_id=user.id, **DEFAULT_INVOICE_SETTINGS)
        db.session.add(settings)
        db.session.commit()
    return settings


def get_storefront_contact():
    """Contact details shown on the public storefront (first letterhead on file)."""
    settings = db.session.execute(
        db.select(InvoiceSettings).order_by(InvoiceSettings.id).limit(1)
    ).scalar()
    if settings:
        return {
            'business_name': settings.business_name,
            'phone': settings.phone,
            'email': settings.email,
        }
    return dict(DEFAULT_INVOICE_SETTINGS)
