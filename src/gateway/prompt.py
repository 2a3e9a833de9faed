from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

VALUATION_BLOCK = re.compile(r"\|\|VALUATION_DATA\|(.*?)\|\|", re.DOTALL)


class CarDetails(BaseModel):
    brand: str = Field(min_length=1)
    model: str = Field(min_length=1)
    variant: str = ""
    year: int = Field(ge=1980, le=2035)
    fuel: str = "Petrol"
    transmission: str = "Manual"
    ownership: int = Field(default=1, ge=1)
    km_driven: int = Field(ge=0)
    location: str = ""


class PriceBand(BaseModel):
    min: float = 0
    max: float = 0
    currency: str = "INR"


class ParsedValuation(BaseModel):
    price_band: PriceBand
    original_msrp: str = "Unknown"
    reasoning: str


_PROMPT_TEMPLATE = """You are a TOUGH, CONSERVATIVE used car buyer for a dealership in India.

TASK: Determine the SAFE DEALER BUYING PRICE. Your goal is to protect the dealer's profit.
It is better to quote TOO LOW than too high.

SEARCH STRATEGY:
1. Find the LOWEST listed prices for this car on CarWale, CarDekho, OLX.
2. Assume actual transaction prices are 5-10% LOWER than online listings.

VALUATION FORMULA (Apply Strictly):
1. Start with the estimated Market Transaction Price (not asking price).
2. DEDUCT Dealer Margin: MINIMUM 15-20% (for profit + risk).
3. DEDUCT Refurbishment: MINIMUM ₹15,000 - ₹25,000 (tires, paint, service).
4. DEDUCT Ownership Penalty:
   - 2nd Owner: -10%
   - 3rd Owner: -20%
5. DEDUCT Mileage Penalty: If >15k km/year, deduct extra.

HISTORICAL CONTEXT:
{history}

CAR DETAILS:
{brand} {model} {variant}
Year: {year} | Fuel: {fuel} | Transmission: {transmission}
Ownership: {ownership} | KM: {km_driven} | Location: {location}

OUTPUT:
- Explain your calculation step by step, in Lakhs.
- Be direct and conservative.
- End with EXACT JSON: ||VALUATION_DATA|{{"min": 400000, "max": 425000, "currency": "INR", "originalMsrp": "₹9.5L (Ex-Showroom 2018)"}}||

Note: Currency=INR, use Lakhs/Crores in text, JSON numbers as integers."""


def build_valuation_prompt(car: CarDetails, history_summary: str) -> str:
    """The summary is embedded verbatim; callers must pass sanitized text only."""
    return _PROMPT_TEMPLATE.format(history=history_summary, **car.model_dump())


def _safe_float(val: Any) -> float:
    try:
        return float(val)
    except (TypeError, ValueError):
        return 0.0


def parse_valuation_response(text: str) -> ParsedValuation:
    match = VALUATION_BLOCK.search(text or "")
    band = PriceBand()
    msrp = "Unknown"
    if match:
        try:
            data = json.loads(match.group(1))
            band = PriceBand(
                min=_safe_float(data.get("min")),
                max=_safe_float(data.get("max")),
                currency=str(data.get("currency") or "INR"),
            )
            msrp = str(data.get("originalMsrp") or "Unknown")
        except (json.JSONDecodeError, AttributeError) as exc:
            logger.warning("Failed to parse valuation block: %s", exc)
    else:
        logger.warning("Valuation block missing from model response")

    reasoning = VALUATION_BLOCK.sub("", text or "", count=1).strip()
    return ParsedValuation(price_band=band, original_msrp=msrp, reasoning=reasoning)
