from __future__ import annotations

from typing import Sequence

import pandas as pd

from ledger.config import SummaryConfig
from ledger.data_models import AggregatedGroup, HistoricalRecord


def _distinct_years(years: pd.Series) -> tuple[str, ...]:
    return tuple(dict.fromkeys(y for y in years if isinstance(y, str) and y))


def records_frame(records: Sequence[HistoricalRecord], unknown_token: str = "Unknown") -> pd.DataFrame:
    return pd.DataFrame(
        {
            "brand_model": [f"{r.brand or unknown_token} {r.model or unknown_token}" for r in records],
            "margin": pd.Series([r.margin_pct for r in records], dtype=float),
            "year": pd.Series([r.year for r in records], dtype=object),
        }
    )


def aggregate_by_model(
    records: Sequence[HistoricalRecord],
    config: SummaryConfig | None = None,
) -> list[AggregatedGroup]:
    """
    Group records by "brand model" and summarise each group.

    ``avg_margin`` only averages rows with both prices and a positive buy
    price; groups without any such row are left out. Output is ordered by
    group size, largest first, ties in first-seen order.
    """
    cfg = config or SummaryConfig()
    if not records:
        return []

    frame = records_frame(records, unknown_token=cfg.unknown_token)
    grouped = frame.groupby("brand_model", sort=False)
    summary = grouped.agg(
        count=("margin", "size"),
        eligible=("margin", "count"),
        avg_margin=("margin", "mean"),
    )
    years = {key: _distinct_years(values) for key, values in grouped["year"]}
    summary = summary[summary["eligible"] > 0]
    summary = summary.sort_values("count", ascending=False, kind="stable")

    return [
        AggregatedGroup(
            brand_model=str(key),
            count=int(row["count"]),
            avg_margin=float(row["avg_margin"]),
            years=years[key],
        )
        for key, row in summary.iterrows()
    ]
