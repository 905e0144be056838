import unittest
from types import SimpleNamespace

from bakery_core.cart import (
    COOKIE_BONUS_PRODUCT,
    BROWNIE_BONUS_PRODUCT,
    add_item,
    update_quantity,
    remove_item,
    apply_bonus_rules,
    cart_summary,
    make_line_key,
    display_name,
)


def product(id, name, price, category):
    return SimpleNamespace(id=id, name=name, price=price, category=category, image=None)


COOKIE = product(1, "Chocolate Chip Cookies", 299, "cookies")
BROWNIE = product(2, "Double Fudge Brownies", 399, "brownies")
EGGLESS = product(3, "Eggless Brownies", 349, "eggless brownies")
BLONDIE = product(4, "Lotus Blondie", 150, "pastries")
CROISSANT = product(5, "Butter Croissants", 199, "pastries")


def add_many(cart, item, times, option=None):
    for _ in range(times):
        cart = add_item(cart, item, option)
    return cart


def bonus(cart, rule):
    return [line for line in cart if line.get('bonus_rule') == rule]


class CartTestCase(unittest.TestCase):
    def test_line_key(self):
        self.assertEqual(make_line_key(7), "7-base")
        self.assertEqual(make_line_key(7, 250.0), "7-250")
        self.assertEqual(make_line_key(7, 0.5), "7-0.5")

    def test_display_name_marks_brownie_type(self):
        self.assertEqual(display_name(BROWNIE), "Double Fudge Brownies (Regular)")
        self.assertEqual(display_name(EGGLESS), "Eggless Brownies (Eggless)")
        self.assertEqual(display_name(COOKIE, 250, "grams"), "Chocolate Chip Cookies (250grams)")

    def test_same_product_and_weight_increments(self):
        cart = add_many([], CROISSANT, 3)
        self.assertEqual(len(cart), 1)
        self.assertEqual(cart[0]['quantity'], 3)

    def test_weight_options_are_separate_lines(self):
        cart = add_item([], COOKIE)
        cart = add_item(cart, COOKIE, {'weight': 250, 'price': 150, 'unit': 'grams'})
        self.assertEqual([line['key'] for line in cart], ["1-base", "1-250"])
        self.assertEqual(cart[1]['price'], 150)

    def test_cookie_bonus_needs_more_than_threshold(self):
        # 299 * 3 = 897, 299 * 4 = 1196
        cart = add_many([], COOKIE, 3)
        self.assertEqual(bonus(cart, 'cookie'), [])
        cart = add_item(cart, COOKIE)
        lines = bonus(cart, 'cookie')
        self.assertEqual(len(lines), 1)
        self.assertEqual(lines[0]['name'], COOKIE_BONUS_PRODUCT)
        self.assertEqual(lines[0]['quantity'], 1)
        self.assertEqual(lines[0]['price'], 0)

    def test_cookie_bonus_not_granted_at_exact_threshold(self):
        exact = product(9, "Cookie Box", 500, "cookies")
        cart = add_many([], exact, 2)
        self.assertEqual(bonus(cart, 'cookie'), [])

    def test_cookie_bonus_removed_when_subtotal_drops(self):
        cart = add_many([], COOKIE, 4)
        cart = update_quantity(cart, "1-base", 2)
        self.assertEqual(bonus(cart, 'cookie'), [])

    def test_brownie_bonus_is_half_of_units(self):
        cart = add_many([], BROWNIE, 3)
        cart = add_many(cart, EGGLESS, 2)
        cart = add_item(cart, BLONDIE)
        lines = bonus(cart, 'brownie')
        self.assertEqual(len(lines), 1)
        self.assertEqual(lines[0]['name'], BROWNIE_BONUS_PRODUCT)
        self.assertEqual(lines[0]['quantity'], 3)

    def test_single_brownie_gets_no_bonus(self):
        cart = add_item([], BROWNIE)
        self.assertEqual(bonus(cart, 'brownie'), [])

    def test_bonus_lines_do_not_count_towards_rules(self):
        cart = add_many([], BROWNIE, 4)
        again = apply_bonus_rules(apply_bonus_rules(cart))
        self.assertEqual(bonus(again, 'brownie')[0]['quantity'], 2)
        self.assertEqual(cart, again)

    def test_bonus_lines_are_read_only(self):
        cart = add_many([], BROWNIE, 2)
        cart = update_quantity(cart, "bonus-brownie", 10)
        self.assertEqual(bonus(cart, 'brownie')[0]['quantity'], 1)
        cart = remove_item(cart, "bonus-brownie")
        self.assertEqual(bonus(cart, 'brownie')[0]['quantity'], 1)

    def test_zero_quantity_removes_line(self):
        cart = add_many([], BROWNIE, 2)
        cart = update_quantity(cart, "2-base", 0)
        self.assertEqual(cart, [])

    def test_removing_every_line_drops_all_bonuses(self):
        cart = add_many([], COOKIE, 4)
        cart = add_many(cart, BROWNIE, 2)
        self.assertEqual(len(bonus(cart, 'cookie')), 1)
        self.assertEqual(len(bonus(cart, 'brownie')), 1)
        cart = remove_item(cart, "1-base")
        cart = remove_item(cart, "2-base")
        self.assertEqual(cart, [])
        self.assertEqual(cart_summary(cart)['bonus_lines'], [])

    def test_summary(self):
        cart = add_many([], BROWNIE, 2)
        cart = add_item(cart, CROISSANT)
        summary = cart_summary(cart)
        self.assertEqual(summary['subtotal'], 997.0)
        self.assertEqual(summary['total_units'], 4)
        self.assertEqual(len(summary['bonus_lines']), 1)


if __name__ == '__main__':
    unittest.main()
