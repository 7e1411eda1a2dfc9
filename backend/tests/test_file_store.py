import json

import pytest

from inventorypro.records import StoreState
from inventorypro.services import sales_service
from inventorypro.storage import JsonFileStore


def test_missing_file_bootstraps_empty_store(file_store, data_file):
    assert not data_file.exists()

    assert file_store.list_inventory() == []

    document = json.loads(data_file.read_text())
    assert document == {"inventory": [], "sales": [], "nextSaleNumber": 1}


def test_malformed_file_is_set_aside_and_reinitialized(data_file):
    data_file.parent.mkdir(parents=True)
    data_file.write_text("{not json")

    store = JsonFileStore(data_file)
    try:
        assert store.list_sales() == []
    finally:
        store.close()

    assert json.loads(data_file.read_text())["nextSaleNumber"] == 1
    backups = list(data_file.parent.glob(f"{data_file.name}.corrupt-*"))
    assert len(backups) == 1
    assert backups[0].read_text() == "{not json"


def test_wrong_shape_is_treated_as_absent(data_file):
    data_file.parent.mkdir(parents=True)
    data_file.write_text(json.dumps({"inventory": {}, "sales": []}))

    store = JsonFileStore(data_file)
    try:
        assert store.snapshot().next_sale_number == 1
        assert store.list_inventory() == []
    finally:
        store.close()


def test_missing_counter_is_derived_from_receipts(data_file):
    data_file.parent.mkdir(parents=True)
    sale = {
        "id": "s1",
        "receiptNumber": 7,
        "items": [],
        "total": 0,
        "profit": 0,
        "date": "2026-01-01T00:00:00.000Z",
    }
    data_file.write_text(json.dumps({"inventory": [], "sales": [sale]}))

    store = JsonFileStore(data_file)
    try:
        assert store.snapshot().next_sale_number == 8
    finally:
        store.close()


def test_counter_below_existing_receipts_is_raised(data_file):
    data_file.parent.mkdir(parents=True)
    sale = {
        "id": "s1",
        "receiptNumber": 4,
        "items": [],
        "total": 0,
        "profit": 0,
        "date": "2026-01-01T00:00:00.000Z",
    }
    data_file.write_text(json.dumps({"inventory": [], "sales": [sale], "nextSaleNumber": 2}))

    state = JsonFileStore(data_file).load()
    assert state.next_sale_number == 5


def test_persist_then_reload_is_identical(file_store, data_file, add_item):
    tea = add_item(file_store, name="Tea", stockLevel=10)
    cake = add_item(file_store, name="Cake", price=3.5, costPrice=1.25, stockLevel=4)
    sales_service.process_sale(file_store, [
        {"itemId": tea.id, "quantity": 2, "price": 10},
        {"itemId": cake.id, "quantity": 1, "price": 3.5},
    ])
    before = file_store.snapshot()

    reloaded = JsonFileStore(data_file)
    try:
        after = reloaded.snapshot()
    finally:
        reloaded.close()

    assert after.items() == before.items()
    assert after.sales == before.sales
    assert after.next_sale_number == before.next_sale_number == 2


def test_document_uses_camel_case_fields(file_store, data_file, add_item):
    add_item(file_store)
    item = json.loads(data_file.read_text())["inventory"][0]
    assert set(item) == {
        "id", "name", "category", "price", "costPrice",
        "stockLevel", "lowStockThreshold", "lastSoldDate",
    }
    assert item["lastSoldDate"] is None


def test_failed_write_leaves_published_state_untouched(file_store, add_item, monkeypatch):
    add_item(file_store, name="Tea")
    before = file_store.snapshot()

    def broken_write(document):
        raise OSError("read-only filesystem")

    monkeypatch.setattr(file_store, "_write_file", broken_write)

    with pytest.raises(OSError):
        add_item(file_store, name="Cake")

    assert file_store.snapshot() == before


def test_state_copy_is_independent():
    state = StoreState.empty()
    working = state.copy()
    working.sales.append("x")
    working.inventory["a"] = "y"
    assert state.sales == []
    assert state.inventory == {}


def test_undecodable_file_is_set_aside_and_reinitialized(data_file):
    data_file.parent.mkdir(parents=True)
    garbage = b'{"inventory": [], "sales": [], "nextSaleNumber": 1}\xff\xfe'
    data_file.write_bytes(garbage)

    store = JsonFileStore(data_file)
    try:
        assert store.list_inventory() == []
    finally:
        store.close()

    assert json.loads(data_file.read_text())["nextSaleNumber"] == 1
    backups = list(data_file.parent.glob(f"{data_file.name}.corrupt-*"))
    assert [b.read_bytes() for b in backups] == [garbage]


def _stored_item(**overrides):
    item = {
        "id": "a",
        "name": "Tea",
        "category": "Drinks",
        "price": 10,
        "costPrice": 2,
        "stockLevel": 5,
        "lowStockThreshold": 1,
        "lastSoldDate": None,
    }
    item.update(overrides)
    return item


def test_numeric_strings_in_file_are_loaded_as_numbers(data_file):
    data_file.parent.mkdir(parents=True)
    data_file.write_text(json.dumps({
        "inventory": [_stored_item(costPrice="2", price="10.50")],
        "sales": [],
        "nextSaleNumber": 1,
    }))

    store = JsonFileStore(data_file)
    try:
        assert store.get_item("a").cost_price == 2
        result = sales_service.process_sale(store, [{"itemId": "a", "quantity": 1, "price": 10}])
    finally:
        store.close()

    assert result.sale.profit == 8


@pytest.mark.parametrize("overrides", [
    {"name": None},
    {"category": 7},
    {"stockLevel": 5.7},
    {"costPrice": "two"},
    {"price": True},
    {"lastSoldDate": 12},
])
def test_badly_typed_item_makes_file_malformed(data_file, overrides):
    data_file.parent.mkdir(parents=True)
    data_file.write_text(json.dumps({
        "inventory": [_stored_item(**overrides)],
        "sales": [],
        "nextSaleNumber": 1,
    }))

    store = JsonFileStore(data_file)
    try:
        assert store.list_inventory() == []
    finally:
        store.close()

    assert len(list(data_file.parent.glob(f"{data_file.name}.corrupt-*"))) == 1


def test_badly_typed_sale_makes_file_malformed(data_file):
    data_file.parent.mkdir(parents=True)
    sale = {
        "id": "s1",
        "receiptNumber": 1,
        "items": [{"itemId": "a", "quantity": 1.5, "price": 10}],
        "total": 15,
        "profit": 12,
        "date": "2026-01-01T00:00:00.000Z",
    }
    data_file.write_text(json.dumps({"inventory": [_stored_item()], "sales": [sale], "nextSaleNumber": 2}))

    store = JsonFileStore(data_file)
    try:
        assert store.list_sales() == []
        assert store.list_inventory() == []
    finally:
        store.close()
