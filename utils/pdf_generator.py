# utils/pdf_generator.py
import logging
import re
from io import BytesIO

from reportlab.pdfgen import canvas
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit

from utils.pricing import round_price, to_decimal

logger = logging.getLogger(__name__)

MARGIN_LEFT = 15 * mm
RIGHT_EDGE = 195 * mm
TOP_Y = A4[1] - 20 * mm
# Rows below this line go to a new page
BOTTOM_LIMIT = 27 * mm

COLUMNS = {
    'item': MARGIN_LEFT,
    'weight': 112 * mm,
    'qty': 140 * mm,
    'price': 155 * mm,
    'total': 175 * mm,
}
ROW_HEIGHT = 5 * mm
# Header row plus room for the first item
TABLE_HEADER_HEIGHT = 15 * mm
FOOTER_TEXT = "Thank you for choosing {name}! Made with love for delicious moments."


class InvoiceGenerationError(Exception):
    """Raised when the invoice layout fails; no partial document is returned."""


def amount(value):
    return f"Rs. {round_price(value):,}"


def format_date(value):
    if not value:
        return "-"
    return value.strftime("%d %b %y")


def invoice_filename(order):
    safe_name = re.sub(r"[^a-zA-Z0-9]", "-", order.customer_name or "customer")
    return f"{safe_name}-invoice-{order.invoice_number}.pdf"


def _settings_value(settings, field, default=""):
    if settings is None:
        return default
    if isinstance(settings, dict):
        return settings.get(field) or default
    return getattr(settings, field, None) or default


def _draw_table_header(c, y):
    c.setFont("Helvetica-Bold", 10)
    c.drawString(COLUMNS['item'], y, "Item")
    c.drawString(COLUMNS['weight'], y, "Weight")
    c.drawString(COLUMNS['qty'], y, "Qty")
    c.drawString(COLUMNS['price'], y, "Price")
    c.drawString(COLUMNS['total'], y, "Total")
    y -= 3 * mm
    c.line(MARGIN_LEFT, y, RIGHT_EDGE, y)
    c.setFont("Helvetica", 10)
    return y - 6 * mm


def render_invoice(order, items, settings=None):
    """
    Lay out the invoice and return ``(pdf_bytes, page_count)``.

    Long item names wrap inside the Item column, and the table continues on
    a new page (header repeated) once a row would cross ``BOTTOM_LIMIT``.
    """
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(f"Invoice {order.invoice_number}")
    y = TOP_Y

    business_name = _settings_value(settings, 'business_name', 'PRIYUM')

    # --- Letterhead ---
    c.setFont("Helvetica-Bold", 18)
    c.drawString(MARGIN_LEFT, y, business_name)
    y -= 6 * mm
    c.setFont("Helvetica", 10)
    c.drawString(MARGIN_LEFT, y, _settings_value(settings, 'business_subtitle', 'Cakes & Bakes'))
    y -= 6 * mm
    c.drawString(MARGIN_LEFT, y, f"Phone: {_settings_value(settings, 'phone', '-')}")
    y -= 5 * mm
    c.drawString(MARGIN_LEFT, y, f"Email: {_settings_value(settings, 'email', '-')}")
    y -= 8 * mm

    c.setFont("Helvetica-Bold", 12)
    c.drawString(MARGIN_LEFT, y, f"Invoice #{order.invoice_number}")
    c.setFont("Helvetica", 10)
    c.drawString(MARGIN_LEFT + 80 * mm, y, f"Order ID: {order.id}")
    y -= 6 * mm
    c.drawString(MARGIN_LEFT, y, f"Invoice Date: {format_date(order.effective_invoice_date)}")
    c.drawString(MARGIN_LEFT + 80 * mm, y, f"Order Date: {format_date(order.effective_order_date)}")
    y -= 10 * mm

    # --- Customer ---
    c.setFont("Helvetica-Bold", 10)
    c.drawString(MARGIN_LEFT, y, "Customer Details")
    c.setFont("Helvetica", 10)
    y -= 6 * mm
    customer_lines = [
        f"Name: {order.customer_name}",
        f"Phone: {order.customer_phone or 'N/A'}",
    ]
    customer_lines += simpleSplit(f"Address: {order.customer_address or 'N/A'}", "Helvetica", 10,
                                  RIGHT_EDGE - MARGIN_LEFT)
    customer_lines.append(f"Delivery Date: {format_date(order.delivery_date)}")
    if order.shipment_number:
        customer_lines.append(f"Shipment Number: {order.shipment_number}")
    if order.notes:
        customer_lines += simpleSplit(f"Notes: {order.notes}", "Helvetica", 10, RIGHT_EDGE - MARGIN_LEFT)
    for line in customer_lines:
        if y - ROW_HEIGHT < BOTTOM_LIMIT:
            c.showPage()
            c.setFont("Helvetica", 10)
            y = TOP_Y
        c.drawString(MARGIN_LEFT, y, line)
        y -= ROW_HEIGHT
    y -= 5 * mm

    # --- Items ---
    if y - TABLE_HEADER_HEIGHT < BOTTOM_LIMIT:
        c.showPage()
        y = TOP_Y
    y = _draw_table_header(c, y)
    name_width = COLUMNS['weight'] - COLUMNS['item'] - 2 * mm

    if not items:
        c.drawString(MARGIN_LEFT, y, "No items listed.")
        y -= 2 * ROW_HEIGHT

    for item in items:
        name = item.product_name + (" (FREE)" if item.is_bonus else "")
        name_lines = simpleSplit(name, "Helvetica", 10, name_width) or [""]
        row_height = max(6 * mm, len(name_lines) * ROW_HEIGHT + 1 * mm)

        if y - row_height < BOTTOM_LIMIT:
            c.showPage()
            y = _draw_table_header(c, TOP_Y)

        for idx, line in enumerate(name_lines):
            c.drawString(COLUMNS['item'], y - idx * ROW_HEIGHT, line)
        weight = f"{item.weight:g} {item.weight_unit or ''}".strip() if item.weight else "N/A"
        c.drawString(COLUMNS['weight'], y, weight)
        c.drawString(COLUMNS['qty'], y, str(item.quantity))
        c.drawString(COLUMNS['price'], y, amount(item.product_price))
        c.drawString(COLUMNS['total'], y, amount(to_decimal(item.product_price) * item.quantity))
        y -= row_height

    # --- Totals ---
    totals_height = 50 * mm
    if y - totals_height < BOTTOM_LIMIT:
        c.showPage()
        y = TOP_Y
    totals_x = 120 * mm
    y -= 4 * mm
    c.line(totals_x, y, RIGHT_EDGE, y)
    y -= 6 * mm
    c.setFont("Helvetica", 10)
    c.drawString(totals_x, y, f"Subtotal: {amount(order.subtotal)}")
    y -= 6 * mm
    c.drawString(totals_x, y, f"Shipping: {amount(order.shipping_charges or 0)}")
    if order.discount_amount and order.discount_amount > 0:
        y -= 6 * mm
        label = f"Discount ({order.discount_percent:g}%)" if order.discount_percent else "Discount"
        c.drawString(totals_x, y, f"{label}: -{amount(order.discount_amount)}")
    y -= 8 * mm
    c.setFont("Helvetica-Bold", 11)
    c.drawString(totals_x, y, f"Total Amount: {amount(order.total)}")
    y -= 14 * mm

    # --- Footer ---
    c.setFont("Helvetica", 9)
    c.drawString(MARGIN_LEFT, y, FOOTER_TEXT.format(name=business_name))

    page_count = c.getPageNumber()
    c.save()
    return buffer.getvalue(), page_count


def generate_invoice_pdf(order, items, settings=None):
    """Return the invoice as PDF bytes, or raise InvoiceGenerationError."""
    logger.info("Generating invoice %s with %d items", order.invoice_number, len(items))
    try:
        pdf_bytes, page_count = render_invoice(order, items, settings)
    except Exception as exc:
        logger.exception("Invoice layout failed for order %s", order.id)
        raise InvoiceGenerationError(str(exc)) from exc
    logger.debug("Invoice %s rendered on %d page(s)", order.invoice_number, page_count)
    return pdf_bytes
