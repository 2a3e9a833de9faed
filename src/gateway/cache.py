from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import re
import time
from typing import Any, Callable

import redis.asyncio as redis

logger = logging.getLogger(__name__)

_KM_BUCKETS: tuple[tuple[int, str], ...] = (
    (20_000, "0-20k"),
    (40_000, "20-40k"),
    (60_000, "40-60k"),
    (80_000, "60-80k"),
    (100_000, "80-100k"),
)


def km_bucket(km_driven: Any) -> str:
    try:
        km = int(float(km_driven))
    except (TypeError, ValueError):
        return "unknown"
    for upper, label in _KM_BUCKETS:
        if km < upper:
            return label
    return "100k+"


def vehicle_fingerprint(
    brand: str,
    model: str,
    year: Any = "",
    km_driven: Any = None,
    fuel: str = "",
) -> str:
    """Normalised vehicle key; mileage is bucketed so nearby odometers share entries."""
    raw = f"{brand}_{model}_{year if year is not None else ''}_{km_bucket(km_driven)}_{fuel or ''}"
    return re.sub(r"\s+", "_", raw.strip().lower())


def insight_cache_key(fingerprint: str, ledger_text: str, brand: str = "", model: str = "") -> str:
    """
    The fingerprint is case-folded but the summary repeats the caller's
    spelling of brand and model, so the exact spelling is part of the digest.
    """
    hasher = hashlib.sha256()
    for part in (brand, model, ledger_text):
        hasher.update(part.encode("utf-8"))
        hasher.update(b"\x00")
    digest = hasher.hexdigest()[:16]
    return f"insight:{fingerprint}:{digest}"


class InsightCache:
    """
    JSON cache with per-entry expiry.

    Uses Redis when it answers a ping on ``connect``; otherwise entries live
    in process memory and expire lazily on read.
    """

    def __init__(
        self,
        redis_url: str,
        namespace: str = "valuation_cache",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.redis_url = redis_url
        self.namespace = namespace
        self.clock = clock
        self._client: Any = None
        self._mem: dict[str, str] = {}
        self._expiry: dict[str, float] = {}

    def _build_key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def connect(self) -> None:
        self._client = redis.from_url(self.redis_url, decode_responses=True)
        try:
            await asyncio.wait_for(self._client.ping(), timeout=0.75)
        except Exception as exc:
            logger.warning("Redis unavailable at %s, using in-memory cache: %s", self.redis_url, exc)
            self._client = None

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def ping(self) -> bool:
        if self._client is None:
            return False
        try:
            return bool(await asyncio.wait_for(self._client.ping(), timeout=0.75))
        except Exception:
            return False

    def _evict_expired(self) -> None:
        now = self.clock()
        for full_key in [k for k, exp in self._expiry.items() if now > exp]:
            self._mem.pop(full_key, None)
            self._expiry.pop(full_key, None)

    async def get_json(self, key: str) -> dict[str, Any] | None:
        full_key = self._build_key(key)
        if self._client is not None:
            try:
                raw = await self._client.get(full_key)
                return None if raw is None else json.loads(raw)["data"]
            except Exception as exc:
                logger.warning("Cache read failed for %s: %s", key, exc)
                return None
        self._evict_expired()
        raw = self._mem.get(full_key)
        return None if raw is None else json.loads(raw)["data"]

    async def set_json(self, key: str, value: dict[str, Any], ttl_seconds: int) -> None:
        full_key = self._build_key(key)
        payload = json.dumps({"data": value, "stored_at": self.clock()})
        if self._client is not None:
            try:
                await self._client.set(full_key, payload, ex=ttl_seconds)
                return
            except Exception as exc:
                logger.warning("Cache write failed for %s, keeping it in memory: %s", key, exc)
        self._mem[full_key] = payload
        self._expiry[full_key] = self.clock() + ttl_seconds

    async def _entries(self) -> dict[str, str]:
        if self._client is not None:
            entries: dict[str, str] = {}
            async for full_key in self._client.scan_iter(match=f"{self.namespace}:*"):
                raw = await self._client.get(full_key)
                if raw is not None:
                    entries[full_key] = raw
            return entries
        self._evict_expired()
        return dict(self._mem)

    async def clear(self) -> int:
        entries = await self._entries()
        if self._client is not None:
            if entries:
                await self._client.delete(*entries)
        else:
            self._mem.clear()
            self._expiry.clear()
        return len(entries)

    async def stats(self) -> dict[str, int]:
        entries = await self._entries()
        now = self.clock()
        oldest_age = 0.0
        for raw in entries.values():
            try:
                stored_at = float(json.loads(raw).get("stored_at", now))
            except (ValueError, TypeError, AttributeError):
                continue
            oldest_age = max(oldest_age, now - stored_at)
        return {"count": len(entries), "oldest_age_minutes": int(oldest_age // 60)}
