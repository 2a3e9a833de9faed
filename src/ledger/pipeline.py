from __future__ import annotations

import logging

from ledger.aggregation import aggregate_by_model
from ledger.config import SummaryConfig
from ledger.data_models import TargetVehicle, ValuationInsight
from ledger.insights import compose_insight
from ledger.parser import parse_ledger
from ledger.scoring import select_top_records
from ledger.sensitivity import contains_sensitive_data

logger = logging.getLogger(__name__)

NO_HISTORY_TEXT = "No historical data available."
NO_VALID_HISTORY_TEXT = "No valid historical data found."


def sanitize(
    ledger_text: str | None,
    target: TargetVehicle,
    config: SummaryConfig | None = None,
) -> ValuationInsight:
    """
    Reduce a raw transaction ledger to a privacy-safe summary for ``target``.

    Pure and deterministic: parse, score and keep the top records, aggregate
    per model, then compose the report.
    """
    cfg = config or SummaryConfig()
    if not ledger_text or not ledger_text.strip():
        return ValuationInsight(insights=NO_HISTORY_TEXT)

    records = parse_ledger(ledger_text)
    if not records:
        return ValuationInsight(insights=NO_VALID_HISTORY_TEXT)

    selected = select_top_records(records, target, max_records=cfg.max_records, config=cfg)
    groups = aggregate_by_model(selected, config=cfg)
    insight = compose_insight(records, selected, groups, target, config=cfg)

    logger.info(
        "History summary composed",
        extra={
            "extra_data": {
                "records": len(records),
                "selected": len(selected),
                "groups": len(groups),
                "has_margin": insight.margin_data is not None,
                "looks_sensitive": contains_sensitive_data(insight.insights),
            }
        },
    )
    return insight
