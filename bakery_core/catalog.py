# bakery_core/catalog.py
"""Storefront catalog helpers: weight options, search, filters and grouping."""
import json
import logging

logger = logging.getLogger(__name__)

CATEGORIES = ["cookies", "brownies", "eggless brownies", "pastries", "cakes"]
WEIGHT_UNITS = ["grams", "kg", "pieces"]

PRICE_RANGES = {
    "all": (None, None),
    "0-100": (0, 100),
    "100-200": (100, 200),
    "200-500": (200, 500),
    "500+": (500, None),
}

SORT_OPTIONS = {
    "name": (lambda p: (p.name or "").lower(), False),
    "name-desc": (lambda p: (p.name or "").lower(), True),
    "price": (lambda p: p.price or 0, False),
    "price-desc": (lambda p: p.price or 0, True),
}


def parse_weight_options(raw):
    """
    Normalise the ``weight_options`` column into a list of dicts.

    Rows written by older clients stored the list as a JSON string, so both
    shapes are accepted. Malformed entries are skipped.
    """
    if not raw:
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring malformed weight_options: %r", raw)
            return []
    if not isinstance(raw, list):
        return []

    options = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        try:
            options.append({
                'weight': float(entry['weight']),
                'price': float(entry['price']),
                'unit': str(entry.get('unit') or 'grams'),
            })
        except (KeyError, TypeError, ValueError):
            logger.warning("Skipping weight option %r", entry)
    return options


def format_weight(weight, unit):
    if weight is None:
        return ""
    weight = int(weight) if float(weight).is_integer() else weight
    return f"{weight}{unit or ''}"


def normalise_category(category):
    if not category:
        return "Others"
    return category[:1].upper() + category[1:].lower()


def filter_products(products, query=None, category=None, price_range="all", availability="all"):
    query = (query or "").strip().lower()
    low, high = PRICE_RANGES.get(price_range or "all", (None, None))

    result = []
    for product in products:
        if query:
            haystack = " ".join([
                product.name or "",
                product.description or "",
                " ".join(tag.name for tag in product.tags),
            ]).lower()
            if query not in haystack:
                continue
        if category and category.lower() != "all" and (product.category or "").lower() != category.lower():
            continue
        price = product.price or 0
        if low is not None and price < low:
            continue
        if high is not None and price > high:
            continue
        if availability == "available" and not product.in_stock:
            continue
        result.append(product)
    return result


def sort_products(products, sort_by="name"):
    key, reverse = SORT_OPTIONS.get(sort_by or "name", SORT_OPTIONS["name"])
    return sorted(products, key=key, reverse=reverse)


def group_by_category(products):
    grouped = {}
    for product in products:
        grouped.setdefault(normalise_category(product.category), []).append(product)
    return grouped
