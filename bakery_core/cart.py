# bakery_core/cart.py
"""
Shopping cart and promotional bonus lines.

A cart is a plain list of line dicts so it can live in the Flask session.
Every mutation returns a new list with the bonus lines recomputed from
scratch, so the bonus state is always derived from the paid lines.
"""
from typing import Any, Dict, List, Optional

from flask import session

from utils.pricing import to_decimal

CartLine = Dict[str, Any]

COOKIE_BONUS_THRESHOLD = 1000
COOKIE_BONUS_PRODUCT = "Choco Chip Cookie (Free)"
BROWNIE_BONUS_PRODUCT = "Brownie Bite (Free)"

STOREFRONT_CART = 'cart'
ORDER_BUILDER_CART = 'order_cart'


def make_line_key(product_id, weight=None) -> str:
    if weight in (None, ''):
        return f"{product_id}-base"
    weight = int(weight) if float(weight).is_integer() else weight
    return f"{product_id}-{weight}"


def display_name(product, weight=None, unit=None) -> str:
    category = (product.category or '').lower()
    name = product.name
    if 'brownie' in category:
        name += ' (Eggless)' if 'eggless' in category else ' (Regular)'
    if weight and unit:
        weight = int(weight) if float(weight).is_integer() else weight
        name += f" ({weight}{unit})"
    return name


def line_amount(line: CartLine):
    return to_decimal(line.get('price')) * int(line.get('quantity', 0))


def _bonus_line(rule: str, name: str, quantity: int) -> CartLine:
    return {
        'key': f"bonus-{rule}",
        'product_id': None,
        'name': name,
        'price': 0,
        'quantity': quantity,
        'image': None,
        'weight': None,
        'weight_unit': None,
        'is_bonus': True,
        'bonus_rule': rule,
    }


def paid_lines(cart: List[CartLine]) -> List[CartLine]:
    return [line for line in cart if not line.get('is_bonus')]


def apply_bonus_rules(cart: List[CartLine]) -> List[CartLine]:
    """
    Drop any stale bonus lines and regenerate them from the paid lines.

    - Cookies: one free cookie once the cookie subtotal is strictly above
      ``COOKIE_BONUS_THRESHOLD``.
    - Brownies and blondies: one free bite for every two units bought.
    """
    lines = [dict(line) for line in paid_lines(cart)]

    cookie_subtotal = sum(
        (line_amount(line) for line in lines if 'cookie' in line['name'].lower()),
        to_decimal(0),
    )
    if cookie_subtotal > COOKIE_BONUS_THRESHOLD:
        lines.append(_bonus_line('cookie', COOKIE_BONUS_PRODUCT, 1))

    brownie_units = sum(
        int(line['quantity']) for line in lines
        if 'brownie' in line['name'].lower() or 'blondie' in line['name'].lower()
    )
    free_bites = brownie_units // 2
    if free_bites > 0:
        lines.append(_bonus_line('brownie', BROWNIE_BONUS_PRODUCT, free_bites))

    return lines


def add_item(cart: List[CartLine], product, weight_option: Optional[Dict[str, Any]] = None) -> List[CartLine]:
    """Add one unit of ``product`` (optionally a specific weight option)."""
    weight = unit = None
    price = product.price
    if weight_option:
        weight = weight_option.get('weight')
        unit = weight_option.get('unit')
        price = weight_option.get('price', price)

    key = make_line_key(product.id, weight)
    lines = paid_lines(cart)
    for line in lines:
        if line['key'] == key:
            updated = [
                dict(item, quantity=item['quantity'] + 1) if item['key'] == key else item
                for item in lines
            ]
            return apply_bonus_rules(updated)

    lines = lines + [{
        'key': key,
        'product_id': product.id,
        'name': display_name(product, weight, unit),
        'price': float(price),
        'quantity': 1,
        'image': product.image,
        'weight': weight,
        'weight_unit': unit,
        'is_bonus': False,
        'bonus_rule': None,
    }]
    return apply_bonus_rules(lines)


def update_quantity(cart: List[CartLine], key: str, quantity: int) -> List[CartLine]:
    """Set a paid line's quantity; zero or less removes it. Bonus lines are read-only."""
    if quantity <= 0:
        return remove_item(cart, key)
    lines = [dict(line, quantity=quantity) if line['key'] == key else line for line in paid_lines(cart)]
    return apply_bonus_rules(lines)


def remove_item(cart: List[CartLine], key: str) -> List[CartLine]:
    return apply_bonus_rules([line for line in paid_lines(cart) if line['key'] != key])


def clear_cart() -> List[CartLine]:
    return []


def cart_subtotal(cart: List[CartLine]):
    return sum((line_amount(line) for line in cart), to_decimal(0))


def cart_summary(cart: List[CartLine]) -> Dict[str, Any]:
    return {
        'items': cart,
        'items_count': len(cart),
        'total_units': sum(int(line.get('quantity', 0)) for line in cart),
        'subtotal': float(cart_subtotal(cart)),
        'bonus_lines': [line for line in cart if line.get('is_bonus')],
    }


# -------------------
# Session persistence
# -------------------

def load_cart(session_key: str = STOREFRONT_CART) -> List[CartLine]:
    return list(session.get(session_key, []))


def save_cart(cart: List[CartLine], session_key: str = STOREFRONT_CART) -> None:
    session[session_key] = cart
    session.modified = True
