from datetime import datetime

import pandas as pd
import pytest

from scent_tool.services.records_service import Order, Product
from scent_tool.services.price_list_service import (
    attar_price_frame, filter_products, format_price, perfume_price_frame, perfume_price_rows, search_products,
    variant_editor_frame,
)
from scent_tool.services.pdf_export import (
    build_attar_price_list, build_order_receipt, build_perfume_price_list,
)


@pytest.fixture
def products():
    return [
        Product(name='Oud Al Khaleeji', record_id='a',
                variants=[{'size': '3ml', 'price': 500}, {'size': '12ml ( Tola )', 'price': 1800}]),
        Product(name='Rose Taifi', record_id='b', variants=[{'size': '6ml', 'price': 900}]),
        Product(name='White Musk', record_id='c', variants=[{'size': '12ml ( Tola )', 'price': 1200}]),
        Product(name='Sample Pack', record_id='d', variants=[]),
    ]


def test_search_products(products):
    assert [p.name for p in search_products(products, 'MUSK')] == ['White Musk']
    assert len(search_products(products, None)) == 4


@pytest.mark.parametrize("view_mode, expected", [
    ('all', ['a', 'b', 'c', 'd']),
    ('attar', ['a', 'b', 'c', 'd']),
    ('perfume', ['a', 'c']),
])
def test_filter_products_view_modes(products, engine, view_mode, expected):
    assert [p.record_id for p in filter_products(products, engine, view_mode=view_mode)] == expected


def test_filter_products_search_and_view(products, engine):
    assert [p.record_id for p in filter_products(products, engine, 'oud', 'perfume')] == ['a']


def test_filter_products_unknown_view(products, engine):
    with pytest.raises(ValueError):
        filter_products(products, engine, view_mode='gifts')


def test_attar_price_frame(products):
    frame = attar_price_frame(products)
    assert list(frame.columns) == ['No', 'Product', 'Size', 'Price']
    assert len(frame) == 5
    last = frame.iloc[-1]
    assert (last['No'], last['Product'], last['Size']) == (4, 'Sample Pack', '-')
    assert pd.isna(last['Price'])


def test_perfume_price_frame_numbers_listed_products(products, engine):
    frame = perfume_price_frame(products, engine)

    assert sorted(frame['Product'].unique()) == ['Oud Al Khaleeji', 'White Musk']
    assert len(frame) == 10
    musk = frame[frame['Product'] == 'White Musk']
    assert set(musk['No']) == {2}
    assert pd.isna(musk.iloc[0]['Price'])  # no 3ml price → no 5ml perfume
    assert musk.iloc[1]['Price'] == 680
    assert str(frame['Price'].dtype) == 'Int64'


def test_perfume_price_frame_empty(engine):
    frame = perfume_price_frame([], engine)
    assert frame.empty
    assert list(frame.columns) == ['No', 'Product', 'Perfume Size', 'Price']


def test_perfume_price_rows(products, engine):
    rows = perfume_price_rows(products, engine)
    assert [r['_id'] for r in rows] == ['a', 'c']
    assert rows[0]['prices']['100ml'] == 6200
    assert rows[1]['prices']['5ml'] is None


@pytest.mark.parametrize("value, expected", [
    (500, "Rs 500"),
    (None, "-"),
    (float('nan'), "-"),
    (pd.NA, "-"),
    ("abc", "Rs abc"),
])
def test_format_price(value, expected):
    assert format_price(value) == expected



def test_variant_editor_frame_blanks_missing_cells():
    frame = variant_editor_frame([{'size': '3ml', 'price': 500}, {'size': '6ml', 'price': None}, {'size': '12ml'}])
    assert frame.to_dict(orient='records') == [
        {'size': '3ml', 'price': '500'},
        {'size': '6ml', 'price': ''},
        {'size': '12ml', 'price': ''},
    ]


def test_variant_editor_frame_empty_product():
    assert variant_editor_frame([]).to_dict(orient='records') == [{'size': '', 'price': ''}]

# ============================================================================
# PDF EXPORT
# ============================================================================

def test_attar_pdf(products, settings):
    pdf = build_attar_price_list(products, settings, generated_at=datetime(2025, 1, 1, 9, 30))
    assert pdf.startswith(b'%PDF')
    assert len(pdf) > 1000


def test_perfume_pdf(products, engine, settings):
    pdf = build_perfume_price_list(products, engine, settings)
    assert pdf.startswith(b'%PDF')


def test_pdfs_with_no_products(engine, settings):
    assert build_attar_price_list([], settings).startswith(b'%PDF')
    assert build_perfume_price_list([], engine, settings).startswith(b'%PDF')


def test_pdf_escapes_markup_in_names(engine, settings):
    product = Product(name='Oud & <Amber>', variants=[{'size': '3ml', 'price': 300}])
    assert build_perfume_price_list([product], engine, settings).startswith(b'%PDF')


def test_order_receipt(settings):
    order = Order(product_name='Oud 12ml', product_price=1800, remaining_payment=300,
                  payment_method='Cash', description='Deliver Friday', created_at='2025-03-01T10:00:00.000+00:00')
    assert build_order_receipt(order, settings).startswith(b'%PDF')
