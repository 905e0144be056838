import unittest
from urllib.parse import urlparse, parse_qs

from utils.whatsapp import build_order_message, build_whatsapp_link

CART = [
    {'name': 'Walnut Brownies (Regular)', 'price': 449, 'quantity': 2, 'is_bonus': False},
    {'name': 'Brownie Bite (Free)', 'price': 0, 'quantity': 1, 'is_bonus': True},
]
CUSTOMER = {'name': 'Asha', 'phone': '98765 43210', 'address': 'MG Road', 'notes': 'Ring twice'}


class WhatsAppTestCase(unittest.TestCase):
    def test_message_lists_items_and_customer(self):
        text = build_order_message(CART, CUSTOMER)
        self.assertIn("- Walnut Brownies (Regular) x 2 = ₹898", text)
        self.assertIn("- Brownie Bite (Free) x 1 (FREE)", text)
        self.assertIn("Subtotal: ₹898", text)
        self.assertIn("Name: Asha", text)
        self.assertIn("Notes: Ring twice", text)

    def test_link_encodes_message(self):
        link = build_whatsapp_link("+91 96773 49169", "Hi & bye\nthanks")
        parsed = urlparse(link)
        self.assertEqual(parsed.netloc, "wa.me")
        self.assertEqual(parsed.path, "/919677349169")
        self.assertEqual(parse_qs(parsed.query)['text'], ["Hi & bye\nthanks"])

    def test_link_requires_number(self):
        with self.assertRaises(ValueError):
            build_whatsapp_link("", "hello")


if __name__ == '__main__':
    unittest.main()
