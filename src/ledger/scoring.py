from __future__ import annotations

from typing import Sequence

from ledger.config import SummaryConfig
from ledger.data_models import HistoricalRecord, ScoredRecord, TargetVehicle


def _norm(value: str | None) -> str:
    return (value or "").strip().lower()


def relevance_score(
    record: HistoricalRecord,
    target: TargetVehicle,
    config: SummaryConfig | None = None,
) -> int:
    cfg = config or SummaryConfig()
    score = 0

    rec_brand, tgt_brand = _norm(record.brand), _norm(target.brand)
    if rec_brand and tgt_brand and rec_brand == tgt_brand:
        score += cfg.brand_weight

    rec_model, tgt_model = _norm(record.model), _norm(target.model)
    if rec_model and tgt_model:
        if rec_model == tgt_model:
            score += cfg.model_weight
        elif rec_model in tgt_model or tgt_model in rec_model:
            score += cfg.partial_model_weight

    return score


def select_top_records(
    records: Sequence[HistoricalRecord],
    target: TargetVehicle,
    max_records: int = 50,
    config: SummaryConfig | None = None,
) -> list[HistoricalRecord]:
    """
    Keep the ``max_records`` most relevant records, best first.

    Zero-score records are dropped outright; equal scores keep ledger order.
    """
    if max_records <= 0:
        return []
    scored = [ScoredRecord(record=r, score=relevance_score(r, target, config)) for r in records]
    relevant = [s for s in scored if s.score > 0]
    relevant.sort(key=lambda s: s.score, reverse=True)
    return [s.record for s in relevant[:max_records]]
