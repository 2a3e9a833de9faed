from __future__ import annotations

from typing import Sequence

from ledger.config import SummaryConfig
from ledger.data_models import (
    AggregatedGroup,
    HistoricalRecord,
    MarginSummary,
    TargetVehicle,
    ValuationInsight,
    is_present,
)


def _same(a: str | None, b: str | None) -> bool:
    return (a or "").strip().lower() == (b or "").strip().lower()


def find_exact_matches(records: Sequence[HistoricalRecord], target: TargetVehicle) -> list[HistoricalRecord]:
    return [
        r for r in records
        if r.brand and r.model and _same(r.brand, target.brand) and _same(r.model, target.model)
    ]


def _lakhs(value: float | None, divisor: float) -> str:
    if not is_present(value):
        return "N/A"
    return f"₹{value / divisor:.2f}L"


def format_transaction_line(record: HistoricalRecord, config: SummaryConfig) -> str:
    descriptor = " ".join(p for p in (record.brand, record.model, record.variant, record.year) if p)
    margin = record.margin_pct
    margin_text = "N/A" if margin is None else f"{margin:.1f}%"
    return (
        f"- {record.date or 'N/A'}: {descriptor} | "
        f"Bought: {_lakhs(record.bought_price, config.lakh_divisor)} | "
        f"Sold: {_lakhs(record.sold_price, config.lakh_divisor)} | "
        f"Margin: {margin_text}"
    )


def brand_groups(groups: Sequence[AggregatedGroup], brand: str) -> list[AggregatedGroup]:
    """Groups whose key contains ``brand``; an empty brand matches every group."""
    needle = brand.strip().lower()
    return [g for g in groups if needle in g.brand_model.lower()]


def compose_insight(
    all_records: Sequence[HistoricalRecord],
    selected: Sequence[HistoricalRecord],
    groups: Sequence[AggregatedGroup],
    target: TargetVehicle,
    config: SummaryConfig | None = None,
) -> ValuationInsight:
    """
    Render the history summary handed to the reasoning service.

    Exact brand+model matches are listed individually, prices only in
    rounded Lakhs. Without exact matches the brand-level weighted margin is
    reported instead. ``margin_data`` stays ``None`` when neither yields a
    usable margin.
    """
    cfg = config or SummaryConfig()
    lines: list[str] = []
    margin_data: MarginSummary | None = None
    label = f"{target.brand} {target.model}"

    exact = find_exact_matches(selected, target)
    if exact:
        lines.append(f"PRIORITY: {len(exact)} exact {label} transactions from your history:")
        lines.extend(format_transaction_line(r, cfg) for r in exact[: cfg.max_exact_lines])

        margins = [m for m in (r.margin_pct for r in exact) if m is not None]
        if margins:
            avg = sum(margins) / len(margins)
            lines.append(f"Average margin on exact matches: {avg:.1f}% across {len(margins)} transactions.")
            margin_data = MarginSummary(
                percentage=avg,
                description=f"{len(margins)} similar {label} transactions",
            )
    else:
        lines.append(f"No exact {label} transactions found in your history.")
        related = brand_groups(groups, target.brand)
        if related:
            total = sum(g.count for g in related)
            weighted = sum(g.avg_margin * g.count for g in related) / total
            lines.append(
                f"Brand-level data: {total} {target.brand} transactions across "
                f"{len(related)} models, average margin {weighted:.1f}%."
            )
            years = tuple(dict.fromkeys(y for g in related for y in g.years))
            if years:
                lines.append(f"Model years seen: {', '.join(years)}.")
            margin_data = MarginSummary(
                percentage=weighted,
                description=f"{total} {target.brand} transactions (brand average)",
            )
        else:
            lines.append(f"No {target.brand} transactions found in your history either.")

    lines.append(f"Historical database contains {len(all_records)} transaction records.")
    return ValuationInsight(insights="\n".join(lines), margin_data=margin_data)
