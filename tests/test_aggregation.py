import math

import pytest

from ledger.aggregation import aggregate_by_model
from ledger.data_models import HistoricalRecord


def _rec(brand, model, bought=None, sold=None, year=None):
    return HistoricalRecord(brand=brand, model=model, year=year, bought_price=bought, sold_price=sold)


def test_aggregate_empty():
    assert aggregate_by_model([]) == []


def test_aggregate_means_over_eligible_records_only():
    records = [
        _rec("Maruti", "Swift", 450000, 520000, "2018"),
        _rec("Maruti", "Swift", 400000, 460000, "2019"),
        _rec("Maruti", "Swift", None, 500000, "2018"),
        _rec("Maruti", "Swift", 0, 100000, "2020"),
        _rec("Maruti", "Swift", float("nan"), 100000, ""),
    ]
    [group] = aggregate_by_model(records)
    assert group.brand_model == "Maruti Swift"
    assert group.count == 5
    expected = ((520000 - 450000) / 450000 * 100 + (460000 - 400000) / 400000 * 100) / 2
    assert group.avg_margin == pytest.approx(expected)
    assert group.years == ("2018", "2019", "2020")


def test_groups_without_eligible_records_are_omitted():
    records = [
        _rec("Tata", "Nexon", None, None),
        _rec("Tata", "Punch", 500000, 550000),
    ]
    groups = aggregate_by_model(records)
    assert [g.brand_model for g in groups] == ["Tata Punch"]
    assert not any(math.isnan(g.avg_margin) for g in groups)


def test_missing_brand_or_model_uses_unknown_token():
    groups = aggregate_by_model([_rec(None, "City", 100, 110), _rec("Honda", None, 100, 90)])
    assert {g.brand_model for g in groups} == {"Unknown City", "Honda Unknown"}


def test_groups_sorted_by_count_with_first_seen_ties():
    records = [
        _rec("Kia", "Sonet", 100, 110),
        _rec("Kia", "Seltos", 100, 120),
        _rec("Kia", "Carens", 100, 105),
        _rec("Kia", "Carens", 100, 115),
    ]
    groups = aggregate_by_model(records)
    assert [g.brand_model for g in groups] == ["Kia Carens", "Kia Sonet", "Kia Seltos"]
    assert groups[0].count == 2
    assert groups[0].avg_margin == pytest.approx(10.0)
    assert groups[0].years == ()


def test_sold_price_of_zero_is_still_a_price():
    [group] = aggregate_by_model([_rec("Fiat", "Punto", 200000, 0)])
    assert group.avg_margin == pytest.approx(-100.0)
