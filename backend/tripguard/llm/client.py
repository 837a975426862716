"""Detour candidate selection with OpenAI integration.

Security: Reads API key from settings only, never hardcoded.
Provides deterministic fallback when no key present for testing.
"""

import json
import logging
import re
import time
from datetime import datetime, timedelta

from openai import AsyncOpenAI
from pydantic import TypeAdapter, ValidationError

from backend.tripguard.adapters.base import DetourSelector
from backend.tripguard.config import Settings
from backend.tripguard.models.places import PlaceResult
from backend.tripguard.models.remedy import DetourCandidate
from backend.tripguard.utils.geo import haversine_m
from backend.tripguard.utils.logging import StructuredProviderLogger

logger = logging.getLogger(__name__)

MAX_CANDIDATES = 3

# Walking speed used by the stub to estimate arrival (km/h)
WALK_SPEED_KMH = 5.0
STUB_STAY_MINUTES = 30

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")
_candidate = TypeAdapter(DetourCandidate)


class DeterministicStubSelector:
    """Deterministic selector for testing (no API key required).

    Keeps the first candidates of the pool in order and estimates arrival as a
    walk from the current position.
    """

    async def select_candidates(
        self,
        pool: list[PlaceResult],
        now: datetime,
        next_start_time: datetime | None = None,
        lat: float | None = None,
        lng: float | None = None,
    ) -> list[DetourCandidate]:
        """Pick the first three pool entries."""
        candidates: list[DetourCandidate] = []
        for place in pool[:MAX_CANDIDATES]:
            if lat is not None and lng is not None:
                distance_m = haversine_m(lat, lng, place.lat, place.lng)
            else:
                distance_m = 0.0

            walk_seconds = int(distance_m / 1000 / WALK_SPEED_KMH * 3600)
            candidates.append(
                DetourCandidate(
                    place_id=place.place_id,
                    name=place.name,
                    lat=place.lat,
                    lng=place.lng,
                    address=place.address,
                    rationale=f"About {round(distance_m)} m away on foot.",
                    start_time=now + timedelta(seconds=walk_seconds),
                    stay_minutes=STUB_STAY_MINUTES,
                )
            )
        return candidates


class OpenAIDetourSelector:
    """OpenAI-backed detour selection."""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini"):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (read from settings)
            model: Model name to use
        """
        self.client = AsyncOpenAI(api_key=api_key)
        self.model = model
        self._log = StructuredProviderLogger()

    async def select_candidates(
        self,
        pool: list[PlaceResult],
        now: datetime,
        next_start_time: datetime | None = None,
        lat: float | None = None,
        lng: float | None = None,
    ) -> list[DetourCandidate]:
        """Ask the model for up to three candidates out of pool.

        Returns an empty list when the call fails or the reply has no usable
        JSON array.
        """
        if not pool:
            return []

        prompt = self._build_prompt(pool, now, next_start_time, lat, lng)

        started = time.perf_counter()
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self._build_system_prompt()},
                    {"role": "user", "content": prompt},
                ],
                temperature=0.4,
                max_tokens=1500,
            )
            text = response.choices[0].message.content or ""
        except Exception as e:
            latency_ms = (time.perf_counter() - started) * 1000
            self._log.log_call(
                "openai", "select_candidates", "error", latency_ms, error_reason=type(e).__name__
            )
            logger.error(f"OpenAI API call failed: {e}")
            return []

        latency_ms = (time.perf_counter() - started) * 1000
        candidates = self._parse_candidates(text)
        if candidates:
            self._log.log_call(
                "openai",
                "select_candidates",
                "success",
                latency_ms,
                model=self.model,
                candidate_count=len(candidates),
            )
        else:
            self._log.log_call(
                "openai",
                "select_candidates",
                "error",
                latency_ms,
                error_reason="no_usable_candidates",
                model=self.model,
            )
        return candidates

    def _parse_candidates(self, text: str) -> list[DetourCandidate]:
        match = _JSON_ARRAY.search(text)
        if not match:
            logger.warning(f"No JSON array in detour selection reply: {text[:200]}")
            return []

        try:
            raw = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            logger.warning(f"Detour selection reply is not valid JSON: {e}")
            return []
        if not isinstance(raw, list):
            return []

        # Only the first three entries count; malformed ones are skipped
        candidates: list[DetourCandidate] = []
        for entry in raw[:MAX_CANDIDATES]:
            try:
                candidates.append(_candidate.validate_python(entry))
            except ValidationError as e:
                logger.warning(f"Detour candidate rejected: {e}")
        return candidates

    def _build_system_prompt(self) -> str:
        """Build system prompt for detour selection."""
        return """You are a travel planning assistant. The traveler's itinerary just broke and
they need somewhere worthwhile to spend the time instead.

CRITICAL CONSTRAINTS:
- Choose ONLY from the candidate list provided. Never invent places.
- Copy place_id, name, lat, lng and address exactly as given.
- Return at most 3 candidates (fewer if the list is shorter).
- Respond with a JSON array only, no markdown."""

    def _build_prompt(
        self,
        pool: list[PlaceResult],
        now: datetime,
        next_start_time: datetime | None,
        lat: float | None,
        lng: float | None,
    ) -> str:
        """Build context string for the model."""
        lines = []

        lines.append("## Context")
        lines.append(f"- Current time: {now.isoformat()}")
        next_start = next_start_time.isoformat() if next_start_time else "unknown"
        lines.append(f"- Next stop starts at: {next_start}")
        lines.append(
            f"- Current position: lat={lat if lat is not None else 'unknown'}, "
            f"lng={lng if lng is not None else 'unknown'}"
        )
        lines.append("")

        lines.append("## Candidates")
        for i, place in enumerate(pool, start=1):
            lines.append(
                f'{i}. name: "{place.name}", place_id: "{place.place_id}", '
                f"lat: {place.lat}, lng: {place.lng}, "
                f'address: "{place.address}", types: [{", ".join(place.types)}]'
            )
        lines.append("")

        lines.append("## For each chosen candidate add")
        lines.append("- rationale: one sentence on why it is worth visiting")
        lines.append("- start_time: expected arrival (ISO 8601 with offset), allowing for travel")
        lines.append("- stay_minutes: suggested stay length (integer minutes)")
        lines.append("")

        lines.append("## Output format")
        lines.append(
            '[{"place_id": "...", "name": "...", "lat": 0.0, "lng": 0.0, "address": "...", '
            '"rationale": "...", "start_time": "...", "stay_minutes": 0}]'
        )

        return "\n".join(lines)


def get_detour_selector(settings: Settings) -> DetourSelector:
    """Factory function to get appropriate selector based on config.

    Returns:
        OpenAIDetourSelector if API key is configured, DeterministicStubSelector otherwise
    """
    api_key = settings.openai_api_key

    if api_key and api_key.get_secret_value():
        logger.info("Using OpenAI detour selector")
        return OpenAIDetourSelector(
            api_key=api_key.get_secret_value(),
            model=settings.openai_model,
        )
    else:
        logger.warning("No OpenAI API key configured, using deterministic stub selector")
        return DeterministicStubSelector()
