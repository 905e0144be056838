# utils/whatsapp.py
import re
from urllib.parse import quote

from utils.pricing import format_rupees, line_total, to_decimal

WHATSAPP_BASE_URL = "https://wa.me"


def build_order_message(cart, customer):
    """Plain-text order summary the customer sends to the bakery."""
    lines = ["Hello! I'd like to place an order:", ""]
    subtotal = to_decimal(0)
    for item in cart:
        amount = line_total(item['price'], item['quantity'])
        subtotal += amount
        if item.get('is_bonus'):
            lines.append(f"- {item['name']} x {item['quantity']} (FREE)")
        else:
            lines.append(f"- {item['name']} x {item['quantity']} = {format_rupees(amount)}")

    lines += ["", f"Subtotal: {format_rupees(subtotal)}", ""]
    lines.append(f"Name: {customer.get('name', '')}")
    lines.append(f"Phone: {customer.get('phone', '')}")
    lines.append(f"Address: {customer.get('address', '')}")
    if customer.get('notes'):
        lines.append(f"Notes: {customer['notes']}")
    return "\n".join(lines)


def build_whatsapp_link(number, text):
    digits = re.sub(r"\D", "", number or "")
    if not digits:
        raise ValueError("A WhatsApp number is required to build the checkout link")
    return f"{WHATSAPP_BASE_URL}/{digits}?text={quote(text, safe='')}"
