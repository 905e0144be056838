import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.base import MIMEBase
from email.mime.text import MIMEText
from email import encoders

from flask import current_app
from markupsafe import escape

from utils.pdf_generator import invoice_filename
from utils.pricing import format_rupees

logger = logging.getLogger(__name__)


def build_message(sender, recipient, subject, body, pdf_bytes, filename):
    msg = MIMEMultipart()
    msg['From'] = sender
    msg['To'] = recipient
    msg['Subject'] = subject

    msg.attach(MIMEText(body, 'html'))

    part = MIMEBase('application', 'pdf')
    part.set_payload(pdf_bytes)
    encoders.encode_base64(part)
    part.add_header('Content-Disposition', f'attachment; filename={filename}')
    msg.attach(part)
    return msg


def _items_html(items):
    rows = []
    for item in items:
        price = "FREE" if item.is_bonus else format_rupees(item.total)
        rows.append(f"<li>{escape(item.product_name)} - Qty: {item.quantity} - {price}</li>")
    return "".join(rows)


def customer_email_body(order, items, settings):
    return (
        f"<h1>Thank you for your order, {escape(order.customer_name)}!</h1>"
        f"<p>Your order <strong>{order.invoice_number}</strong> has been confirmed.</p>"
        f"<h3>Order Details:</h3><ul>{_items_html(items)}</ul>"
        f"<p><strong>Total: {format_rupees(order.total)}</strong></p>"
        f"<p>Please find your invoice attached.</p>"
        f"<p>Best regards,<br>{escape(settings.business_name)}</p>"
    )


def admin_email_body(order, items):
    return (
        f"<h1>New Order Received</h1>"
        f"<p>Order: <strong>{order.invoice_number}</strong></p>"
        f"<p>Customer: {escape(order.customer_name)} ({escape(order.customer_phone or '-')})</p>"
        f"<p>Date: {order.effective_order_date:%d %b %Y}</p>"
        f"<h3>Order Items:</h3><ul>{_items_html(items)}</ul>"
        f"<p><strong>Total: {format_rupees(order.total)}</strong></p>"
    )


def send_pdf_email(recipient, subject, body, pdf_bytes, filename):
    config = current_app.config
    if not config.get('MAIL_SERVER'):
        logger.warning("MAIL_SERVER not configured, skipping email to %s", recipient)
        return False

    msg = build_message(config['MAIL_DEFAULT_SENDER'], recipient, subject, body, pdf_bytes, filename)
    try:
        with smtplib.SMTP(config['MAIL_SERVER'], config['MAIL_PORT']) as server:
            if config.get('MAIL_USE_TLS'):
                server.starttls()
            if config.get('MAIL_USERNAME'):
                server.login(config['MAIL_USERNAME'], config['MAIL_PASSWORD'])
            server.sendmail(config['MAIL_DEFAULT_SENDER'], [recipient], msg.as_string())
        return True
    except (smtplib.SMTPException, OSError):
        logger.exception("Email to %s failed", recipient)
        return False


def send_order_email(order, items, pdf_bytes, settings, admin_email=None):
    """
    Mail the invoice to the customer (when an address is on file) and a copy
    to the admin. Returns True only if every attempted message went out.
    """
    filename = invoice_filename(order)
    sent = []
    if order.customer_email:
        sent.append(send_pdf_email(
            order.customer_email,
            f"Order Confirmation - {order.invoice_number}",
            customer_email_body(order, items, settings),
            pdf_bytes,
            filename,
        ))
    if admin_email:
        sent.append(send_pdf_email(
            admin_email,
            f"New Order Received - {order.invoice_number}",
            admin_email_body(order, items),
            pdf_bytes,
            filename,
        ))
    return bool(sent) and all(sent)
