import math

import pytest

from ledger.data_models import HistoricalRecord, MarginSummary, ValuationInsight


def test_historical_record_margin():
    rec = HistoricalRecord(brand="Maruti", model="Swift", year="2018", bought_price=450000.0, sold_price=520000.0)
    assert rec.has_prices
    assert rec.margin_pct == pytest.approx(15.5556, abs=1e-4)


def test_historical_record_absent_prices_never_zero():
    assert HistoricalRecord(bought_price=0.0, sold_price=100.0).margin_pct is None
    assert HistoricalRecord(bought_price=math.nan, sold_price=100.0).margin_pct is None
    assert HistoricalRecord(sold_price=100.0).margin_pct is None


def test_valuation_insight_dict_round_trip():
    insight = ValuationInsight(
        insights="Historical database contains 2 transaction records.",
        margin_data=MarginSummary(percentage=15.28, description="2 similar Maruti Swift transactions"),
    )
    payload = insight.to_dict()
    assert payload["marginData"] == {"percentage": 15.28, "description": "2 similar Maruti Swift transactions"}
    assert ValuationInsight.from_dict(payload) == insight
    assert ValuationInsight(insights="x").to_dict() == {"insights": "x", "marginData": None}
