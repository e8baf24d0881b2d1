"""
Price List Service - table views over products for the UI and exports.

Builds pandas DataFrames for the attar list (stored variants) and the
perfume list (derived prices), plus the product filters the pages use.
"""
from typing import Iterable, Optional

import pandas as pd

from ..engine.pricing_engine import PricingEngine
from .records_service import Product


VIEW_MODES = ('all', 'attar', 'perfume')

ATTAR_COLUMNS = ['No', 'Product', 'Size', 'Price']
PERFUME_COLUMNS = ['No', 'Product', 'Perfume Size', 'Price']


def search_products(products: Iterable[Product], search: Optional[str] = None) -> list[Product]:
    """Case-insensitive name search."""
    needle = (search or '').strip().lower()
    return [p for p in products if needle in (p.name or '').lower()]


def filter_products(
    products: Iterable[Product],
    engine: PricingEngine,
    search: Optional[str] = None,
    view_mode: str = 'all',
) -> list[Product]:
    """
    Apply the page search box and view mode.

    ``attar`` and ``all`` show every product; ``perfume`` keeps products with
    at least one derived perfume price.
    """
    if view_mode not in VIEW_MODES:
        raise ValueError(f"Unknown view mode '{view_mode}', expected one of {', '.join(VIEW_MODES)}")

    filtered = search_products(products, search)
    if view_mode == 'perfume':
        filtered = [p for p in filtered if engine.derive_for_product(p).has_data]
    return filtered


def attar_price_frame(products: Iterable[Product]) -> pd.DataFrame:
    """One row per stored variant; products without variants get a '-' row."""
    rows = []
    for no, product in enumerate(products, start=1):
        if not product.variants:
            rows.append({'No': no, 'Product': product.name, 'Size': '-', 'Price': None})
            continue
        for variant in product.variants:
            rows.append({
                'No': no,
                'Product': product.name,
                'Size': str(variant.get('size', '')),
                'Price': variant.get('price'),
            })
    return pd.DataFrame(rows, columns=ATTAR_COLUMNS)


def perfume_price_frame(products: Iterable[Product], engine: PricingEngine) -> pd.DataFrame:
    """
    One row per derived slot for products with any derived price.

    Unavailable slots keep a row with an empty price so every listed
    product shows the full size ladder.
    """
    rows = []
    no = 0
    for product in products:
        derived = engine.derive_for_product(product)
        if not derived.has_data:
            continue
        no += 1
        for slot in derived.slots:
            rows.append({'No': no, 'Product': product.name, 'Perfume Size': slot.label, 'Price': slot.price})
    frame = pd.DataFrame(rows, columns=PERFUME_COLUMNS)
    frame['Price'] = frame['Price'].astype('Int64')
    return frame


def perfume_price_rows(products: Iterable[Product], engine: PricingEngine) -> list[dict]:
    """JSON-friendly perfume list: one entry per product with its derived prices."""
    rows = []
    for product in products:
        derived = engine.derive_for_product(product)
        if not derived.has_data:
            continue
        rows.append({'_id': product.record_id, 'name': product.name, 'prices': derived.as_dict()})
    return rows


def variant_editor_frame(variants: list[dict]) -> pd.DataFrame:
    """Editable size/price grid for a product; missing cells are blank, not "None"."""
    rows = [
        {key: '' if variant.get(key) is None else str(variant.get(key)) for key in ('size', 'price')}
        for variant in variants or []
    ]
    return pd.DataFrame(rows or [{'size': '', 'price': ''}], columns=['size', 'price'])


def format_price(value, currency: str = "Rs") -> str:
    """Render a price cell; missing values print as '-'."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return "-"
    return f"{currency} {value}"
