from datetime import datetime

import pytest

from quotes_admin.services.commands import (
    AssignContainer,
    DeleteQuote,
    EditQuote,
    ToggleOrderSelection,
    dispatch,
)
from quotes_admin.services.imports import (
    get_import,
    import_quotes,
    list_imports,
    parse_import_key,
    update_import_metadata,
    update_import_quotes,
)
from quotes_admin.services.store import SqlQuoteStore


def _seed_import(store, factory_id=1, created_at=datetime(2024, 3, 1, 10, 15, 30)):
    return store.create_quotes(
        [
            {"factoryId": factory_id, "ref": "A-1", "ctns": 10, "unitCtn": 12, "unitPrice": 2.5, "qty": 120, "amount": 300, "cbm": 0.02, "cbmTotal": 0.2},
            {"factoryId": factory_id, "ref": "A-2", "ctns": 5, "unitCtn": 4, "unitPrice": 3, "amount": 0, "cbm": 0.1},
        ],
        created_at=created_at,
    )


def test_store_returns_documents_with_schema_field_names(db):
    store = SqlQuoteStore(db)
    created = store.create_quote({"factoryId": 3, "ctns": 2, "unitCtn": 6, "unitPrice": 1.5})

    doc = store.get_quote(created["id"])
    assert doc["factoryId"] == 3
    assert doc["unitCtn"] == 6
    assert doc["unitPrice"] == 1.5
    assert doc["selectedForOrder"] is False
    assert doc["containerId"] is None
    assert isinstance(doc["createdAt"], datetime)


def test_store_lists_by_factory_and_container(db):
    store = SqlQuoteStore(db)
    q1 = store.create_quote({"factoryId": 1, "containerId": 9})
    store.create_quote({"factoryId": 1})
    store.create_quote({"factoryId": 2, "containerId": 9})

    assert len(store.list_quotes_by_factory(1)) == 2
    assert [q["factoryId"] for q in store.list_quotes_by_container(9)] == [1, 2]
    assert store.list_quotes_by_container(9)[0]["id"] == q1["id"]


def test_store_update_missing_quote_raises(db):
    with pytest.raises(ValueError, match="not found"):
        SqlQuoteStore(db).update_quote(404, {"ctns": 1})


def test_store_upsert_import_metadata(db):
    store = SqlQuoteStore(db)
    store.upsert_import_metadata(1, "2024-03-01T10:15", {"importName": "Primeira", "lotePedido": "L-01"})
    store.upsert_import_metadata(1, "2024-03-01T10:15", {"dataPedido": "2024-03-10", "ignorado": "x"})

    metas = store.list_import_metadata(1)
    assert len(metas) == 1
    assert metas[0]["updateDate"] == "2024-03-01T10:15"
    assert metas[0]["importName"] == "Primeira"
    assert metas[0]["lotePedido"] == "L-01"
    assert metas[0]["dataPedido"] == "2024-03-10"
    assert store.list_import_metadata(2) == []


def test_edit_command_recomputes_derived_fields(db):
    store = SqlQuoteStore(db)
    quote = store.create_quote({"factoryId": 1, "ctns": 10, "unitCtn": 12, "unitPrice": 2.5, "cbm": 0.02})

    updated = dispatch(store, EditQuote(quote_id=quote["id"], fields={"ctns": 20, "qty": 1}))

    assert updated["qty"] == 240
    assert updated["amount"] == 600
    assert updated["cbmTotal"] == pytest.approx(0.4)


def test_toggle_order_selection_round_trip(db):
    store = SqlQuoteStore(db)
    quote = store.create_quote({"factoryId": 1})

    selected = dispatch(store, ToggleOrderSelection(quote_id=quote["id"]))
    assert selected["selectedForOrder"] is True
    assert selected["orderStatus"] == "selected"
    assert selected["orderDate"] is not None

    pending = dispatch(store, ToggleOrderSelection(quote_id=quote["id"]))
    assert pending["selectedForOrder"] is False
    assert pending["orderStatus"] == "pending"
    assert pending["orderDate"] is None


def test_assign_and_delete_commands(db):
    store = SqlQuoteStore(db)
    quote = store.create_quote({"factoryId": 1})

    assert dispatch(store, AssignContainer(quote_id=quote["id"], container_id=5))["containerId"] == 5
    assert dispatch(store, AssignContainer(quote_id=quote["id"]))["containerId"] is None

    assert dispatch(store, DeleteQuote(quote_id=quote["id"])) is None
    assert store.get_quote(quote["id"]) is None


def test_commands_on_missing_quote_raise(db):
    store = SqlQuoteStore(db)
    with pytest.raises(ValueError, match="not found"):
        dispatch(store, ToggleOrderSelection(quote_id=123))
    with pytest.raises(ValueError, match="not found"):
        dispatch(store, DeleteQuote(quote_id=123))


def test_dispatch_rejects_unknown_command(db):
    with pytest.raises(TypeError):
        dispatch(SqlQuoteStore(db), object())


def test_list_imports_merges_metadata_and_rollup(db):
    store = SqlQuoteStore(db)
    older = _seed_import(store)
    newer = store.create_quotes(
        [{"factoryId": 1, "ref": "B-1", "amount": 10, "quoteName": "Cotação B"}],
        created_at=datetime(2024, 3, 2, 9, 0, 5),
    )
    store.create_quote({"factoryId": 2}, created_at=datetime(2024, 3, 1, 10, 15, 40))
    dispatch(store, ToggleOrderSelection(quote_id=older[1]["id"]))
    store.upsert_import_metadata(1, "2024-03-01T10:15", {"importName": "Março", "quoteName": "Cotação A"})

    imports = list_imports(store, 1)

    assert [i["id"] for i in imports] == ["2024-03-02T09:00", "2024-03-01T10:15"]
    latest, first = imports
    assert latest["count"] == 1
    assert latest["quoteName"] == "Cotação B"
    assert latest["quotes"][0]["id"] == newer[0]["id"]

    assert first["count"] == 2
    assert first["importName"] == "Março"
    assert first["quoteName"] == "Cotação A"
    assert first["totalValue"] == 360
    assert first["rollup"] == {"totalAmount": 60, "selectedCount": 1, "totalCBM": pytest.approx(0.5)}
    assert first["date"] == "01/03/2024"
    assert first["time"] == "10:15"


def test_get_import_not_found_and_invalid_key(db):
    store = SqlQuoteStore(db)
    _seed_import(store)

    assert get_import(store, 1, "2024-03-01T10:15")["count"] == 2
    with pytest.raises(ValueError, match="not found"):
        get_import(store, 1, "2024-03-01T10:16")
    with pytest.raises(ValueError, match="inválida"):
        get_import(store, 1, "ontem")


def test_update_import_metadata_validates_key(db):
    store = SqlQuoteStore(db)
    with pytest.raises(ValueError):
        update_import_metadata(store, 1, "2024-03-01", {"importName": "x"})
    meta = update_import_metadata(store, 1, "2024-03-01T10:15", {"importName": "x"})
    assert meta["importName"] == "x"


def test_update_import_quotes_updates_and_creates_in_same_import(db):
    store = SqlQuoteStore(db)
    seeded = _seed_import(store)

    updated, created = update_import_quotes(
        store,
        1,
        "2024-03-01T10:15",
        [
            {"id": seeded[0]["id"], "unitPrice": 3},
            {"ref": "NOVA", "ctns": 1, "unitCtn": 10, "unitPrice": 1},
            {"id": 999, "ref": "SUMIU", "ctns": 2},
        ],
    )

    assert (updated, created) == (1, 2)
    assert store.get_quote(seeded[0]["id"])["amount"] == 360

    imports = list_imports(store, 1)
    assert len(imports) == 1
    assert imports[0]["count"] == 4
    assert {q["ref"] for q in imports[0]["quotes"]} == {"A-1", "A-2", "NOVA", "SUMIU"}


def test_parse_import_key():
    assert parse_import_key("2024-03-01T10:15") == datetime(2024, 3, 1, 10, 15)
    with pytest.raises(ValueError):
        parse_import_key("2024-03-01 10:15")


def test_update_import_quotes_rejects_quote_from_other_factory_or_import(db):
    store = SqlQuoteStore(db)
    seeded = _seed_import(store)
    other_factory = store.create_quote({"factoryId": 2, "ctns": 1}, created_at=datetime(2024, 3, 1, 10, 15, 5))
    other_import = store.create_quote({"factoryId": 1, "ctns": 1}, created_at=datetime(2024, 3, 1, 11, 0))

    for foreign in (other_factory, other_import):
        with pytest.raises(ValueError, match="não pertence"):
            update_import_quotes(
                store,
                1,
                "2024-03-01T10:15",
                [{"id": seeded[0]["id"], "unitPrice": 9}, {"id": foreign["id"], "ctns": 99}],
            )

    # nada foi gravado, nem a linha válida do mesmo lote
    assert store.get_quote(seeded[0]["id"])["unitPrice"] == 2.5
    assert store.get_quote(other_factory["id"])["ctns"] == 1
    assert store.get_quote(other_import["id"])["ctns"] == 1
    assert len(list_imports(store, 1)[1]["quotes"]) == 2


def test_import_quotes_shares_created_at_and_fills_batch_names(db):
    store = SqlQuoteStore(db)
    created = import_quotes(
        store,
        7,
        [{"ref": "A", "ctns": 2, "unitCtn": 0, "unitPrice": 4}, {"ref": "B", "quoteName": "Própria"}],
        quote_name="Cotação Lote",
    )

    assert len({q["createdAt"] for q in created}) == 1
    assert [q["quoteName"] for q in created] == ["Cotação Lote", "Própria"]
    assert created[0]["amount"] == 8
    assert all(q["factoryId"] == 7 for q in created)

    with pytest.raises(ValueError):
        import_quotes(store, 7, [])
