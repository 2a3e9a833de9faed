import json
import logging

from gateway.logging_config import JSONFormatter, correlation_id


def test_json_formatter_includes_correlation_and_data():
    token = correlation_id.set("cid-1")
    try:
        record = logging.LogRecord("ledger.pipeline", logging.INFO, __file__, 1, "History summary composed", None, None)
        record.extra_data = {"records": 2, "selected": 2}
        entry = json.loads(JSONFormatter().format(record))
    finally:
        correlation_id.reset(token)
    assert entry["level"] == "INFO"
    assert entry["logger"] == "ledger.pipeline"
    assert entry["correlation_id"] == "cid-1"
    assert entry["data"] == {"records": 2, "selected": 2}


def test_pipeline_logs_counts_not_content(caplog):
    from ledger.data_models import TargetVehicle
    from ledger.pipeline import sanitize

    with caplog.at_level(logging.INFO, logger="ledger.pipeline"):
        sanitize("Brand,Model,Bought,Sold\nMaruti,Swift,450000,520000", TargetVehicle("Maruti", "Swift"))
    [record] = [r for r in caplog.records if r.name == "ledger.pipeline"]
    assert record.extra_data["records"] == 1
    assert record.extra_data["looks_sensitive"] is True
    assert "450000" not in record.getMessage()


def test_redaction_filter_scrubs_ledger_fields_and_prices():
    from gateway.logging_config import REDACTED, LedgerRedactionFilter

    record = logging.LogRecord("gateway.api", logging.INFO, __file__, 1, "request", None, None)
    record.extra_data = {
        "ledger_text": "Brand,Model\nMaruti,Swift",
        "note": "bought for 450000",
        "brand": "Maruti",
        "counts": [3, "sold at 12"],
    }
    assert LedgerRedactionFilter().filter(record) is True
    entry = json.loads(JSONFormatter().format(record))
    assert entry["data"] == {
        "ledger_text": REDACTED,
        "note": REDACTED,
        "brand": "Maruti",
        "counts": [3, REDACTED],
    }


def test_text_format_carries_correlation_id():
    from gateway.logging_config import LedgerRedactionFilter

    token = correlation_id.set("cid-9")
    try:
        record = logging.LogRecord("gateway.api", logging.INFO, __file__, 1, "hello", None, None)
        LedgerRedactionFilter().filter(record)
    finally:
        correlation_id.reset(token)
    line = logging.Formatter("%(message)s [cid=%(correlation_id)s]").format(record)
    assert line == "hello [cid=cid-9]"
