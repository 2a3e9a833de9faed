from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SummaryConfig:
    max_records: int = 50
    max_exact_lines: int = 5
    lakh_divisor: float = 100_000.0
    brand_weight: int = 50
    model_weight: int = 100
    partial_model_weight: int = 75  # substring match, exclusive with model_weight
    unknown_token: str = "Unknown"
