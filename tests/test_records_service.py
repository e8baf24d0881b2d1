import json

import pytest

from scent_tool.services.records_service import (
    OtherItem, Product, RecordNotFoundError, RecordStore, RecordValidationError,
)


def test_create_product_assigns_id_and_timestamps(stores, attar_payload):
    product = stores.products.create_record(attar_payload)

    assert product.record_id
    assert product.created_at and product.created_at == product.updated_at
    assert product.name == 'Oud Al Khaleeji'
    # numeric strings are stored as numbers
    assert product.variants[0] == {'size': '3ml', 'price': 500}


def test_create_product_trims_and_drops_blank_variant_rows(stores):
    product = stores.products.create_record({
        'name': '  Musk Tahara ',
        'variants': [{'size': ' 3ml ', 'price': '350'}, {'size': '', 'price': ''}],
    })
    assert product.name == 'Musk Tahara'
    assert product.variants == [{'size': '3ml', 'price': 350}]
    assert product.description is None


def test_create_product_keeps_non_numeric_price(stores):
    """Bad prices are kept as entered; the engine treats them as absent."""
    product = stores.products.create_record({
        'name': 'Amber', 'variants': [{'size': '3ml', 'price': '400'}, {'size': '12ml ( Tola )', 'price': 'abc'}],
    })
    assert product.variants[1]['price'] == 'abc'


@pytest.mark.parametrize("payload, field", [
    ({'variants': [{'size': '3ml', 'price': 500}]}, 'name'),
    ({'name': 'Rose'}, 'variants'),
    ({'name': 'Rose', 'variants': []}, 'variants'),
    ({'name': 'Rose', 'variants': [{'size': '3ml', 'price': ''}]}, 'variants'),
])
def test_product_validation(stores, payload, field):
    with pytest.raises(RecordValidationError) as exc_info:
        stores.products.create_record(payload)
    assert field in exc_info.value.errors
    assert stores.products.count() == 0


def test_list_is_newest_first(stores):
    first = stores.orders.create_record({'productName': 'Oud', 'productPrice': 1000})
    second = stores.orders.create_record({'productName': 'Rose', 'productPrice': 800})

    ids = [o.record_id for o in stores.orders.list_records()]
    assert ids == [second.record_id, first.record_id]


def test_get_and_missing_record(stores, attar_payload):
    created = stores.products.create_record(attar_payload)
    assert stores.products.get_record(created.record_id) == created

    with pytest.raises(RecordNotFoundError):
        stores.products.get_record('does-not-exist')


def test_update_merges_fields(stores, attar_payload):
    created = stores.products.create_record(attar_payload)
    updated = stores.products.update_record(created.record_id, {'name': 'Oud Royale'})

    assert updated.name == 'Oud Royale'
    assert updated.variants == created.variants
    assert updated.created_at == created.created_at
    assert stores.products.get_record(created.record_id).name == 'Oud Royale'


def test_update_validates(stores, attar_payload):
    created = stores.products.create_record(attar_payload)
    with pytest.raises(RecordValidationError):
        stores.products.update_record(created.record_id, {'name': '  '})
    assert stores.products.get_record(created.record_id).name == 'Oud Al Khaleeji'


def test_update_missing_record(stores):
    with pytest.raises(RecordNotFoundError):
        stores.orders.update_record('nope', {'productName': 'x'})


def test_delete(stores, attar_payload):
    created = stores.products.create_record(attar_payload)
    removed = stores.products.delete_record(created.record_id)

    assert removed.record_id == created.record_id
    assert stores.products.count() == 0
    with pytest.raises(RecordNotFoundError):
        stores.products.delete_record(created.record_id)


def test_other_item_profit_defaults_to_margin(stores):
    item = stores.others.create_record({'name': 'Fancy Bottle', 'buyingPrice': '120', 'sellingPrice': 200})
    assert (item.buying_price, item.selling_price, item.profit) == (120, 200, 80)


def test_other_item_explicit_profit(stores):
    item = stores.others.create_record({'name': 'Box', 'buyingPrice': 300, 'sellingPrice': 450, 'profit': 100})
    assert item.profit == 100


def test_other_item_profit_follows_price_update(stores):
    item = stores.others.create_record({'name': 'Box', 'buyingPrice': 300, 'sellingPrice': 450})
    updated = stores.others.update_record(item.record_id, {'sellingPrice': 500})
    assert updated.profit == 200


def test_other_item_validation(stores):
    with pytest.raises(RecordValidationError) as exc_info:
        stores.others.create_record({'name': '', 'buyingPrice': 'abc'})
    errors = exc_info.value.errors
    assert errors['name'] == "This field is required"
    assert errors['buyingPrice'] == "Must be a number"
    assert errors['sellingPrice'] == "This field is required"


def test_order_fields(stores):
    order = stores.orders.create_record({
        'productName': 'Oud 12ml', 'productPrice': '1800', 'remainingPayment': '300',
        'paymentMethod': 'Cash', 'description': '',
    })
    assert order.product_price == 1800
    assert order.remaining_payment == 300
    assert order.payment_method == 'Cash'
    assert order.description is None


def test_order_requires_name_and_price(stores):
    with pytest.raises(RecordValidationError) as exc_info:
        stores.orders.create_record({'remainingPayment': 'x'})
    assert set(exc_info.value.errors) == {'productName', 'productPrice', 'remainingPayment'}


def test_search(stores):
    stores.orders.create_record({'productName': 'Oud Royale', 'productPrice': 1000, 'paymentMethod': 'Card'})
    stores.orders.create_record({'productName': 'Rose', 'productPrice': 800, 'paymentMethod': 'Cash'})

    assert [o.product_name for o in stores.orders.search('oud')] == ['Oud Royale']
    assert [o.product_name for o in stores.orders.search('CASH')] == ['Rose']
    assert len(stores.orders.search('')) == 2
    assert len(stores.orders.search(None)) == 2


def test_records_persist_as_json_documents(settings, stores, attar_payload):
    created = stores.products.create_record(attar_payload)

    with open(settings.products_path, encoding='utf-8') as f:
        rows = json.load(f)
    assert rows[0]['_id'] == created.record_id
    assert {'createdAt', 'updatedAt', 'variants'} <= set(rows[0])

    reopened = RecordStore(settings.products_path, Product)
    assert reopened.get_record(created.record_id) == created


def test_corrupt_collection_file(tmp_path):
    path = tmp_path / 'others.json'
    path.write_text('{"not": "a list"}', encoding='utf-8')
    with pytest.raises(ValueError):
        RecordStore(path, OtherItem).list_records()


def test_counts(stores, attar_payload):
    stores.products.create_record(attar_payload)
    stores.others.create_record({'name': 'Box', 'buyingPrice': 1, 'sellingPrice': 2})
    assert stores.counts() == {'products': 1, 'others': 1, 'orders': 0}
