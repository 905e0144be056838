# bakery_core/orders.py
import logging

from bakery_core import db
from bakery_core.models import Order, OrderItem, OrderStatus
from utils.pricing import compute_order_totals, line_total, to_decimal

logger = logging.getLogger(__name__)


class EmptyCartError(ValueError):
    pass


def order_item_from_line(line):
    return OrderItem(
        product_id=line.get('product_id'),
        product_name=line['name'],
        product_price=float(line['price']),
        quantity=int(line['quantity']),
        total=float(line_total(line['price'], line['quantity'])),
        weight=line.get('weight'),
        weight_unit=line.get('weight_unit'),
        is_bonus=bool(line.get('is_bonus')),
    )


def create_order_from_cart(cart, customer, user=None, shipping=0, discount_percent=0,
                           order_date=None, invoice_date=None, delivery_date=None):
    """
    Persist an order and its line items (bonus lines included) in one commit.

    ``customer`` carries name, phone, email, address and notes.
    """
    if not cart:
        raise EmptyCartError("Cannot place an order with an empty cart")

    items = [order_item_from_line(line) for line in cart]
    subtotal = sum((to_decimal(item.total) for item in items), to_decimal(0))
    totals = compute_order_totals(subtotal, shipping, discount_percent)

    order = Order(
        user_id=user.id if user else None,
        customer_name=customer['name'].strip(),
        customer_phone=(customer.get('phone') or '').strip() or None,
        customer_email=(customer.get('email') or '').strip() or None,
        customer_address=(customer.get('address') or '').strip() or None,
        notes=(customer.get('notes') or '').strip() or None,
        status=OrderStatus.PENDING,
        custom_order_date=order_date,
        custom_invoice_date=invoice_date,
        delivery_date=delivery_date,
        items=items,
        **totals
    )
    db.session.add(order)
    db.session.commit()
    logger.info("Order %s saved for %s (total %s)", order.invoice_number, order.customer_name, order.total)
    return order


def recalculate_order(order):
    """Refresh line totals and the order's money fields from its items."""
    subtotal = to_decimal(0)
    for item in order.items:
        item.total = float(line_total(item.product_price, item.quantity))
        subtotal += to_decimal(item.total)
    totals = compute_order_totals(subtotal, order.shipping_charges or 0, order.discount_percent or 0)
    for field, value in totals.items():
        setattr(order, field, value)
    return order


def order_stats(orders, product_count):
    return {
        'total_products': product_count,
        'total_orders': len(orders),
        'total_revenue': sum(order.total or 0 for order in orders),
        'pending_orders': sum(1 for order in orders if order.status == OrderStatus.PENDING),
        'shipped_orders': sum(1 for order in orders if order.status == OrderStatus.SHIPPED),
    }
