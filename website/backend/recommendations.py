import hashlib
import json
import logging
import os
import re
import threading
import time
from pathlib import Path

import httpx
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from constants import GROQ_API_URL, RECOMMENDATION_CACHE_EXPIRY
from models import County, FilterSettings, Recommendation, RecommendationResult

logger = logging.getLogger(__name__)

GROQ_API_KEY = os.environ.get("GROQ_API_KEY")
GROQ_MODEL = os.environ.get("GROQ_MODEL", "llama-3.1-8b-instant")
RECOMMENDATION_CACHE_PATH = os.environ.get(
    "RECOMMENDATION_CACHE_PATH", str(Path(__file__).parent / "data" / ".recommendation_cache.json")
)

SYSTEM_PROMPT = "You are a healthcare policy expert providing data-driven recommendations for US counties."
JSON_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


def cache_key(county: County, filters: FilterSettings) -> str:
    dependencies = {
        "fips": county.fips,
        "healthcare": county.healthcare_access,
        "vulnerability": county.vulnerability_index,
        "opportunity": county.opportunity_score,
        "population": county.population,
        "poverty": county.poverty_rate,
        "disability": county.disability_rate,
        "filters": {
            "region": filters.region,
            "healthcareRange": filters.healthcare_range,
            "populationRange": filters.population_range,
        },
    }
    return hashlib.sha256(json.dumps(dependencies, sort_keys=True).encode()).hexdigest()


class RecommendationCache:
    """JSON file of key -> {data, timestamp}.

    Expired or malformed entries are dropped on read and reported as misses.
    Reads and writes are serialized by a lock so concurrent updates are not lost.
    """

    def __init__(self, path: str | None = RECOMMENDATION_CACHE_PATH, expiry: float = RECOMMENDATION_CACHE_EXPIRY,
                 clock=time.time):
        self.path = Path(path) if path else None
        self.expiry = expiry
        self.clock = clock
        self._lock = threading.Lock()

    def _read(self) -> dict:
        if self.path is None or not self.path.exists():
            return {}
        try:
            entries = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Recommendation cache unreadable, starting empty: %s", e)
            return {}
        if not isinstance(entries, dict):
            logger.warning("Recommendation cache is not a JSON object, starting empty")
            return {}
        return entries

    def _write(self, entries: dict):
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(entries), encoding="utf-8")
        except OSError as e:
            logger.warning("Failed to cache recommendations: %s", e)

    def get(self, key: str):
        with self._lock:
            entries = self._read()
            entry = entries.get(key)
            if entry is None:
                return None
            try:
                expired = self.clock() - float(entry["timestamp"]) > self.expiry
                data = entry["data"]
            except (KeyError, TypeError, ValueError):
                logger.warning("Dropping malformed recommendation cache entry %s", key)
                expired, data = True, None
            if expired:
                del entries[key]
                self._write(entries)
                return None
            return data

    def set(self, key: str, data):
        with self._lock:
            entries = self._read()
            entries[key] = {"data": data, "timestamp": self.clock()}
            self._write(entries)

    def clear(self):
        with self._lock:
            if self.path is not None and self.path.exists():
                self.path.unlink()


def fallback_recommendations(county: County) -> list[Recommendation]:
    recommendations = []

    if county.healthcare_access < 50:
        recommendations.append(Recommendation(
            priority="High",
            category="Access",
            title="Improve Healthcare Access",
            description=(
                f"{county.county} has a healthcare access score of {county.healthcare_access:.1f}, "
                "indicating significant access barriers. Immediate intervention is needed to address healthcare gaps."
            ),
            actions=[
                "Establish mobile health clinics",
                "Expand telehealth services",
                "Improve transportation to medical facilities",
            ],
            impact="Could improve access for thousands of residents",
            cost="$2-5M annually",
            timeline="12-18 months",
        ))

    if county.vulnerability_index > 60:
        recommendations.append(Recommendation(
            priority="High",
            category="Policy",
            title="Address Social Determinants",
            description=(
                f"High vulnerability index of {county.vulnerability_index:.1f} indicates social barriers to health. "
                "Comprehensive approach needed to address underlying issues."
            ),
            actions=[
                "Expand community health worker programs",
                "Improve health insurance enrollment",
                "Address transportation barriers",
            ],
            impact="Reduce health disparities and improve outcomes",
            cost="$1-3M annually",
            timeline="6-12 months",
        ))

    if county.opportunity_score > 50:
        recommendations.append(Recommendation(
            priority="Medium",
            category="Infrastructure",
            title="Leverage Improvement Opportunity",
            description=(
                f"Opportunity score of {county.opportunity_score:.1f} suggests high potential for meaningful "
                "improvements. Strategic investments could yield significant returns."
            ),
            actions=[
                "Target specific improvement areas",
                "Implement evidence-based interventions",
                "Monitor progress with data-driven approaches",
            ],
            impact="Maximize return on healthcare investments",
            cost="$500K-2M",
            timeline="3-6 months",
        ))

    return recommendations[:3]


def build_prompt(county: County, peers: list[County]) -> str:
    peer_lines = "\n".join(
        f"- {p.county}: {p.healthcare_access:.1f} score, {p.population:,} pop" for p in peers[:3]
    )
    return f"""You are a healthcare policy analyst. Analyze this county's healthcare situation and provide 3 specific, actionable recommendations.

County: {county.county}, {county.state}
Population: {county.population:,}
Healthcare Access Score: {county.healthcare_access:.1f}/100
Vulnerability Index: {county.vulnerability_index:.1f}/100
Opportunity Score: {county.opportunity_score:.1f}/100
Poverty Rate: {county.poverty_rate:.1f}%
Disability Rate: {county.disability_rate:.1f}%
Insurance Coverage: {county.insurance_rate:.1f}%
County Type: {county.cluster_name_detailed}

Top Peer Counties (same cluster):
{peer_lines}

Provide response as JSON array with 3 recommendations, each having:
{{
  "priority": "High|Medium|Low",
  "category": "Infrastructure|Workforce|Access|Policy",
  "title": "Brief title",
  "description": "2-sentence problem description",
  "actions": ["action1", "action2", "action3"],
  "impact": "Expected outcome description",
  "cost": "Estimated cost range",
  "timeline": "Implementation timeframe"
}}

Focus on specific, implementable solutions based on the county's actual needs and performance gaps."""


def parse_recommendations(content: str, county: County) -> list[Recommendation]:
    """Pull the JSON array out of a chat reply; malformed replies fall back to the rule-based list."""
    match = JSON_ARRAY_RE.search(content)
    try:
        raw = json.loads(match.group(0) if match else content)
    except json.JSONDecodeError:
        return fallback_recommendations(county)
    if not isinstance(raw, list):
        raise ValueError("Invalid AI response format")
    try:
        return [Recommendation.model_validate(item) for item in raw]
    except ValidationError:
        return fallback_recommendations(county)


class RecommendationClient:
    def __init__(self, client: httpx.AsyncClient, api_key: str | None = GROQ_API_KEY,
                 model: str = GROQ_MODEL, cache: RecommendationCache | None = None):
        self.client = client
        self.api_key = api_key
        self.model = model
        self.cache = cache if cache is not None else RecommendationCache()

    async def get_recommendations(self, county: County, filters: FilterSettings,
                                  peers: list[County]) -> RecommendationResult:
        if not self.api_key:
            return RecommendationResult(
                error="AI recommendations unavailable - API key not configured",
                fallback=fallback_recommendations(county),
            )

        key = cache_key(county, filters)
        cached = await run_in_threadpool(self.cache.get, key)
        if cached is not None:
            try:
                recommendations = [Recommendation.model_validate(r) for r in cached]
            except (ValidationError, TypeError) as e:
                logger.warning("Ignoring invalid cached recommendations for %s: %s", county.fips, e)
            else:
                logger.debug("Recommendation cache hit for %s", county.fips)
                return RecommendationResult(recommendations=recommendations, cached=True)

        try:
            resp = await self.client.post(
                GROQ_API_URL,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "model": self.model,
                    "messages": [
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": build_prompt(county, peers)},
                    ],
                    "temperature": 0.3,
                    "max_tokens": 1500,
                },
            )
            if resp.status_code != 200:
                raise ValueError(f"Groq API error: {resp.status_code}")

            choices = resp.json().get("choices") or [{}]
            content = (choices[0].get("message") or {}).get("content")
            if not content:
                raise ValueError("Empty AI response")

            recommendations = parse_recommendations(content, county)
            if not recommendations:
                raise ValueError("Invalid AI response format")
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("AI recommendations failed for %s: %s", county.fips, e)
            return RecommendationResult(error=str(e), fallback=fallback_recommendations(county))

        await run_in_threadpool(self.cache.set, key, [r.model_dump() for r in recommendations])
        return RecommendationResult(recommendations=recommendations, cached=False)
