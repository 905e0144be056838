import unittest
from types import SimpleNamespace

from bakery_core.catalog import (
    parse_weight_options,
    format_weight,
    filter_products,
    sort_products,
    group_by_category,
)


def product(name, price, category, stock=5, description="", tags=()):
    return SimpleNamespace(
        name=name, price=price, category=category, stock=stock, description=description,
        tags=[SimpleNamespace(name=t) for t in tags], in_stock=stock > 0,
    )


PRODUCTS = [
    product("Chocolate Chip Cookies", 299, "cookies", tags=["bestseller"]),
    product("Walnut Brownies", 449, "brownies", stock=0),
    product("Butter Croissants", 99, "pastries", description="Flaky and buttery"),
    product("Red Velvet Cake", 650, "cakes"),
]


class CatalogTestCase(unittest.TestCase):
    def test_parse_weight_options_from_json_string(self):
        options = parse_weight_options('[{"weight": "250", "price": 199, "unit": "grams"}]')
        self.assertEqual(options, [{'weight': 250.0, 'price': 199.0, 'unit': 'grams'}])

    def test_parse_weight_options_skips_bad_rows(self):
        self.assertEqual(parse_weight_options('not json'), [])
        self.assertEqual(parse_weight_options([{'weight': 1}, 'x', {'weight': 1, 'price': 2}]),
                         [{'weight': 1.0, 'price': 2.0, 'unit': 'grams'}])
        self.assertEqual(parse_weight_options(None), [])

    def test_format_weight(self):
        self.assertEqual(format_weight(250.0, "grams"), "250grams")
        self.assertEqual(format_weight(1.5, "kg"), "1.5kg")

    def test_search_matches_name_description_and_tags(self):
        names = lambda items: [p.name for p in items]
        self.assertEqual(names(filter_products(PRODUCTS, query="flaky")), ["Butter Croissants"])
        self.assertEqual(names(filter_products(PRODUCTS, query="BESTSELLER")), ["Chocolate Chip Cookies"])

    def test_filters(self):
        self.assertEqual(len(filter_products(PRODUCTS, category="cakes")), 1)
        self.assertEqual(len(filter_products(PRODUCTS, price_range="0-100")), 1)
        self.assertEqual(len(filter_products(PRODUCTS, price_range="500+")), 1)
        self.assertEqual(len(filter_products(PRODUCTS, availability="available")), 3)

    def test_sort_and_group(self):
        ordered = sort_products(PRODUCTS, "price-desc")
        self.assertEqual(ordered[0].name, "Red Velvet Cake")
        grouped = group_by_category(PRODUCTS)
        self.assertEqual(sorted(grouped), ["Brownies", "Cakes", "Cookies", "Pastries"])


if __name__ == '__main__':
    unittest.main()
