from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request, Response, status
from pydantic import BaseModel, Field

from gateway.cache import InsightCache, insight_cache_key, vehicle_fingerprint
from gateway.logging_config import configure_logging, correlation_id, new_correlation_id
from gateway.prompt import CarDetails, ParsedValuation, build_valuation_prompt, parse_valuation_response
from gateway.settings import GatewaySettings
from ledger.config import SummaryConfig
from ledger.data_models import TargetVehicle, ValuationInsight
from ledger.pipeline import sanitize
from ledger.sensitivity import contains_sensitive_data

logger = logging.getLogger(__name__)


# ── Request / Response Models ───────────────────────────────────────

class InsightRequest(BaseModel):
    ledger_text: str = ""
    brand: str = Field(min_length=1)
    model: str = Field(min_length=1)
    year: int | None = None
    km_driven: int | None = Field(default=None, ge=0)
    fuel: str = ""


class MarginDataModel(BaseModel):
    percentage: float
    description: str


class InsightResponse(BaseModel):
    insights: str
    marginData: MarginDataModel | None = None
    cached: bool = False


class SensitivityRequest(BaseModel):
    text: str


class SensitivityResponse(BaseModel):
    sensitive: bool


class PromptRequest(BaseModel):
    car: CarDetails
    ledger_text: str = ""


class PromptResponse(BaseModel):
    prompt: str
    marginData: MarginDataModel | None = None


class ParseRequest(BaseModel):
    text: str


class HealthResponse(BaseModel):
    status: str


# ── App Factory ─────────────────────────────────────────────────────

def create_app() -> FastAPI:
    settings = GatewaySettings()
    configure_logging(level=settings.log_level, fmt=settings.log_format)

    summary_cfg = SummaryConfig(max_records=settings.max_records)
    cache = InsightCache(redis_url=settings.redis_url, namespace=settings.cache_namespace)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        await cache.connect()
        try:
            yield
        finally:
            await cache.close()

    app = FastAPI(title="Ledger Insights API", version="0.3.0", lifespan=lifespan)

    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next: Any) -> Response:
        cid = request.headers.get("X-Correlation-ID") or new_correlation_id()
        correlation_id.set(cid)
        response = await call_next(request)
        response.headers["X-Correlation-ID"] = cid
        return response

    def _check_size(text: str, what: str = "Ledger text") -> None:
        if len(text.encode("utf-8")) > settings.max_ledger_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_CONTENT_TOO_LARGE,
                detail=f"{what} too large",
            )

    async def _summarize(ledger_text: str, brand: str, model: str, fingerprint: str) -> tuple[ValuationInsight, bool]:
        key = insight_cache_key(fingerprint, ledger_text, brand=brand, model=model)
        cached = await cache.get_json(key)
        if cached is not None:
            logger.info("Insight cache hit")
            return ValuationInsight.from_dict(cached), True

        insight = sanitize(ledger_text, TargetVehicle(brand=brand, model=model), config=summary_cfg)
        await cache.set_json(key, insight.to_dict(), ttl_seconds=settings.insight_cache_ttl_seconds)
        return insight, False

    # ── Insights ────────────────────────────────────────────────────

    @app.post("/insights", response_model=InsightResponse)
    async def insights(payload: InsightRequest) -> InsightResponse:
        _check_size(payload.ledger_text)
        fingerprint = vehicle_fingerprint(
            payload.brand, payload.model, payload.year or "", payload.km_driven, payload.fuel,
        )
        insight, hit = await _summarize(payload.ledger_text, payload.brand, payload.model, fingerprint)
        return InsightResponse(**insight.to_dict(), cached=hit)

    @app.post("/sensitivity", response_model=SensitivityResponse)
    async def sensitivity(payload: SensitivityRequest) -> SensitivityResponse:
        _check_size(payload.text, what="Text")
        return SensitivityResponse(sensitive=contains_sensitive_data(payload.text))

    # ── Valuation Prompt ────────────────────────────────────────────

    @app.post("/valuation/prompt", response_model=PromptResponse)
    async def valuation_prompt(payload: PromptRequest) -> PromptResponse:
        _check_size(payload.ledger_text)
        car = payload.car
        fingerprint = vehicle_fingerprint(car.brand, car.model, car.year, car.km_driven, car.fuel)
        insight, _ = await _summarize(payload.ledger_text, car.brand, car.model, fingerprint)
        body = insight.to_dict()
        return PromptResponse(
            prompt=build_valuation_prompt(car, insight.insights),
            marginData=body["marginData"],
        )

    @app.post("/valuation/parse", response_model=ParsedValuation)
    async def valuation_parse(payload: ParseRequest) -> ParsedValuation:
        return parse_valuation_response(payload.text)

    # ── Cache ───────────────────────────────────────────────────────

    @app.get("/cache/stats")
    async def cache_stats() -> dict[str, int]:
        return await cache.stats()

    @app.delete("/cache")
    async def cache_clear() -> dict[str, int]:
        cleared = await cache.clear()
        logger.info("Insight cache cleared", extra={"extra_data": {"cleared": cleared}})
        return {"cleared": cleared}

    # ── Health ──────────────────────────────────────────────────────

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    return app


app = create_app()
