from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any


def is_present(value: float | None) -> bool:
    return value is not None and not math.isnan(value)


@dataclass(frozen=True)
class HistoricalRecord:
    brand: str | None = None
    model: str | None = None
    variant: str | None = None
    year: str | None = None
    date: str | None = None
    bought_price: float | None = None
    sold_price: float | None = None

    @property
    def has_prices(self) -> bool:
        return is_present(self.bought_price) and is_present(self.sold_price)

    @property
    def margin_pct(self) -> float | None:
        if not self.has_prices or self.bought_price <= 0:
            return None
        return (self.sold_price - self.bought_price) / self.bought_price * 100


@dataclass(frozen=True)
class TargetVehicle:
    brand: str
    model: str


@dataclass(frozen=True)
class ScoredRecord:
    record: HistoricalRecord
    score: int


@dataclass(frozen=True)
class AggregatedGroup:
    brand_model: str
    count: int
    avg_margin: float
    years: tuple[str, ...]


@dataclass(frozen=True)
class MarginSummary:
    percentage: float
    description: str


@dataclass(frozen=True)
class ValuationInsight:
    insights: str
    margin_data: MarginSummary | None = None

    def to_dict(self) -> dict[str, Any]:
        margin = None
        if self.margin_data is not None:
            margin = {
                "percentage": self.margin_data.percentage,
                "description": self.margin_data.description,
            }
        return {"insights": self.insights, "marginData": margin}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> ValuationInsight:
        margin = payload.get("marginData")
        return cls(
            insights=payload["insights"],
            margin_data=MarginSummary(**margin) if margin else None,
        )
