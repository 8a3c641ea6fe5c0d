from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from quotes_admin.services.aggregation import (
    Rollup,
    coerce_numeric,
    compute_container_load,
    compute_import_rollup,
    group_by_import_batch,
    import_batch_key,
    quote_amount,
    quote_cbm_total,
    recompute_derived_fields,
    selected_quote_ids,
)


@pytest.mark.parametrize(
    "value,default,expected",
    [
        (3, 0.0, 3.0),
        (2.5, 0.0, 2.5),
        (Decimal("1.25"), 0.0, 1.25),
        ("12", 0.0, 12.0),
        (" 2,5 ", 0.0, 2.5),
        ("1.234,56", 0.0, 1234.56),
        ("1,234.56", 0.0, 1234.56),
        ("abc", 0.0, 0.0),
        ("", 7.0, 7.0),
        (None, 1.0, 1.0),
        (True, 0.0, 0.0),
        ({"value": 3}, 0.0, 0.0),
        ([1, 2], 0.0, 0.0),
        (float("nan"), 0.0, 0.0),
        (float("inf"), 5.0, 5.0),
    ],
)
def test_coerce_numeric(value, default, expected):
    assert coerce_numeric(value, default) == pytest.approx(expected)


def test_recompute_concrete_scenario():
    quote = {"ctns": 10, "unitCtn": 12, "unitPrice": 2.5, "cbm": 0.02}
    result = recompute_derived_fields(quote)

    assert result["qty"] == 120
    assert result["amount"] == 300
    assert result["cbmTotal"] == pytest.approx(0.2)
    assert result["totalGrossWeight"] == 0
    assert result["totalNetWeight"] == 0


def test_recompute_does_not_mutate_input():
    quote = {"id": 1, "ctns": 2, "unitCtn": 3, "unitPrice": 4, "qty": 999, "amount": 1}
    snapshot = dict(quote)
    recompute_derived_fields(quote)
    assert quote == snapshot


@pytest.mark.parametrize(
    "quote",
    [
        {"ctns": 10, "unitCtn": 12, "unitPrice": 2.5, "cbm": 0.02},
        {"ctns": "7", "unitCtn": "6", "unitPrice": "1,75", "grossWeight": 12.4, "netWeight": 11.1},
        {"ctns": 3.3, "unitPrice": 0.1, "cbm": 0.037},
        {},
    ],
)
def test_recompute_keeps_invariants_and_is_idempotent(quote):
    once = recompute_derived_fields(quote)
    twice = recompute_derived_fields(once)

    assert once["qty"] == once["ctns"] * once["unitCtn"]
    assert once["amount"] == once["qty"] * once["unitPrice"]
    assert once["cbmTotal"] == once["cbm"] * once["ctns"]
    assert once["totalGrossWeight"] == once["grossWeight"] * once["ctns"]
    assert once["totalNetWeight"] == once["netWeight"] * once["ctns"]
    assert twice == once


def test_recompute_missing_unit_ctn_defaults_to_one():
    result = recompute_derived_fields({"ctns": 8, "unitPrice": 2})
    assert result["unitCtn"] == 1
    assert result["qty"] == 8
    assert result["amount"] == 16


@pytest.mark.parametrize("unit_ctn", [0, "0", -3, "", "abc"])
def test_recompute_zero_or_invalid_unit_ctn_becomes_one(unit_ctn):
    result = recompute_derived_fields({"ctns": 10, "unitCtn": unit_ctn, "unitPrice": 2})
    assert result["unitCtn"] == 1
    assert result["qty"] == 10
    assert result["amount"] == 20


def test_amount_fallback_ignores_zero_unit_ctn():
    assert quote_amount({"amount": 0, "ctns": 5, "unitCtn": 0, "unitPrice": 3}) == 15


def test_recompute_corrupted_fields_degrade_to_zero():
    result = recompute_derived_fields({"ctns": "dez", "unitCtn": 4, "unitPrice": {"nested": 1}})
    assert result["ctns"] == 0
    assert result["qty"] == 0
    assert result["amount"] == 0


def test_group_by_import_batch_minute_buckets():
    quotes = [
        {"id": "a", "createdAt": "2024-03-01T10:15:02Z"},
        {"id": "c", "createdAt": "2024-03-01T10:16:01Z"},
        {"id": "b", "createdAt": "2024-03-01T10:15:47Z"},
    ]
    groups = group_by_import_batch(quotes)

    assert list(groups) == ["2024-03-01T10:15", "2024-03-01T10:16"]
    assert [q["id"] for q in groups["2024-03-01T10:15"]] == ["a", "b"]
    assert [q["id"] for q in groups["2024-03-01T10:16"]] == ["c"]


def test_group_by_import_batch_drops_quotes_without_created_at():
    quotes = [
        {"id": 1, "createdAt": datetime(2024, 3, 1, 10, 15, 2)},
        {"id": 2},
        {"id": 3, "createdAt": None},
        {"id": 4, "createdAt": "não é data"},
    ]
    groups = group_by_import_batch(quotes)
    assert groups == {"2024-03-01T10:15": [quotes[0]]}


def test_group_by_import_batch_empty_and_single():
    assert group_by_import_batch([]) == {}
    only = {"id": 1, "createdAt": datetime(2024, 1, 5, 8, 0, 59)}
    assert group_by_import_batch([only]) == {"2024-01-05T08:00": [only]}


def test_group_by_import_batch_is_a_partition_independent_of_order():
    base = datetime(2024, 3, 1, 10, 0, 0)
    quotes = [{"id": i, "createdAt": base + timedelta(seconds=17 * i)} for i in range(40)]

    forward = group_by_import_batch(quotes)
    backward = group_by_import_batch(list(reversed(quotes)))

    ids = [q["id"] for members in forward.values() for q in members]
    assert sorted(ids) == list(range(40))
    assert len(ids) == len(set(ids))
    assert {k: {q["id"] for q in v} for k, v in forward.items()} == {
        k: {q["id"] for q in v} for k, v in backward.items()
    }


def test_import_batch_key_normalizes_timezone_to_utc():
    sao_paulo = timezone(timedelta(hours=-3))
    assert import_batch_key(datetime(2024, 3, 1, 7, 15, 30, tzinfo=sao_paulo)) == "2024-03-01T10:15"
    assert import_batch_key("2024-03-01T07:15:30-03:00") == "2024-03-01T10:15"
    assert import_batch_key(None) is None


def test_import_rollup_only_counts_selected_quotes():
    quotes = [
        {"id": 1, "amount": 100.0, "cbmTotal": 1.5},
        {"id": 2, "amount": 50.0, "cbmTotal": 0.5},
        {"id": 3, "amount": 999.0, "cbmTotal": 9.0},
    ]
    rollup = compute_import_rollup(quotes, {1, 2})

    assert rollup == Rollup(total_amount=150.0, selected_count=2, total_cbm=2.0)


def test_import_rollup_falls_back_to_recomputed_amount():
    quotes = [{"id": "q1", "amount": 0, "ctns": 5, "unitCtn": 4, "unitPrice": 3}]
    rollup = compute_import_rollup(quotes, {"q1"})
    assert rollup.total_amount == 60


def test_import_rollup_cbm_falls_back_to_cbm_times_ctns():
    quotes = [{"id": 1, "cbm": 0.5, "ctns": 4}]
    assert compute_import_rollup(quotes, {1}).total_cbm == 2.0


def test_import_rollup_is_additive_over_disjoint_sets():
    first = [
        {"id": 1, "amount": 10.5, "cbmTotal": 0.25},
        {"id": 2, "ctns": 2, "unitCtn": 3, "unitPrice": 1.5, "cbm": 0.125},
    ]
    second = [
        {"id": 3, "amount": "7,25", "cbmTotal": 1},
        {"id": 4, "amount": 1000, "cbmTotal": 3},
    ]
    selected = {1, 2, 3}

    together = compute_import_rollup(first + second, selected)
    parts = compute_import_rollup(first, selected) + compute_import_rollup(second, selected)

    assert together.selected_count == parts.selected_count == 3
    assert together.total_amount == pytest.approx(parts.total_amount)
    assert together.total_cbm == pytest.approx(parts.total_cbm)


def test_rollup_to_dict_uses_document_names():
    assert Rollup(1.0, 2, 3.0).to_dict() == {"totalAmount": 1.0, "selectedCount": 2, "totalCBM": 3.0}


def test_selected_quote_ids():
    quotes = [
        {"id": 1, "selectedForOrder": True},
        {"id": 2, "selectedForOrder": False},
        {"id": 3},
    ]
    assert selected_quote_ids(quotes) == {1}


def test_container_load_can_go_negative():
    container = {"id": 7, "capacidadeCBM": 10}
    quotes = [{"cbmTotal": 7.0}, {"cbmTotal": 5.0}]

    load = compute_container_load(container, quotes)

    assert load.total_cbm == 12
    assert load.remaining_capacity == -2
    assert load.over_capacity is True
    assert load.quote_count == 2


def test_container_load_totals_value_with_fallback():
    container = {"id": 1, "capacidadeCBM": 68}
    quotes = [
        {"amount": 300, "cbm": 0.02, "ctns": 10},
        {"amount": None, "ctns": 5, "unitCtn": 4, "unitPrice": 3, "cbmTotal": 1.0},
    ]
    load = compute_container_load(container, quotes)

    assert load.total_value == 360
    assert load.total_cbm == pytest.approx(1.2)
    assert load.remaining_capacity == pytest.approx(66.8)
    assert load.over_capacity is False
    assert load.to_dict()["overCapacity"] is False


def test_container_load_without_quotes():
    load = compute_container_load({"id": 1, "capacidadeCBM": "33,2"}, [])
    assert load.total_cbm == 0
    assert load.remaining_capacity == pytest.approx(33.2)
    assert load.quote_count == 0


def test_quote_helpers():
    assert quote_amount({"amount": -5, "ctns": 1, "unitPrice": 2}) == 2
    assert quote_amount({"amount": "12.5"}) == 12.5
    assert quote_cbm_total({"cbmTotal": 0, "cbm": 1, "ctns": 3}) == 0
    assert quote_cbm_total({"cbmTotal": "x", "cbm": 1, "ctns": 3}) == 3
