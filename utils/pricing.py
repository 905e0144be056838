# utils/pricing.py
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP


def to_decimal(value, default='0.00'):
    if value is None or value == '' or value == 'None':
        return Decimal(default)
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return Decimal(default)


def round_price(value):
    """Round to a whole rupee, halves going up (12.5 -> 13)."""
    return int(to_decimal(value).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def line_total(price, quantity):
    return to_decimal(price) * to_decimal(quantity, default='0')


def compute_order_totals(subtotal, shipping=0, discount_percent=0):
    """
    Derive the money fields of an order.

    The discount is a percentage of the subtotal, rounded to a whole rupee,
    and the total is ``subtotal + shipping - discount`` rounded the same way.
    """
    subtotal = to_decimal(subtotal)
    shipping = to_decimal(shipping)
    discount_percent = to_decimal(discount_percent)

    discount_amount = round_price(subtotal * discount_percent / Decimal('100'))
    total = round_price(subtotal + shipping - discount_amount)
    return {
        'subtotal': float(subtotal),
        'shipping_charges': float(shipping),
        'discount_percent': float(discount_percent),
        'discount_amount': float(discount_amount),
        'total': float(total),
    }


def format_rupees(value):
    amount = to_decimal(value)
    if amount == amount.to_integral_value():
        return f"₹{int(amount):,}"
    return f"₹{amount.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):,}"
