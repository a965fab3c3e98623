"""Macro estimation from food photos or text via an LLM."""

import base64
import json
import logging
import re
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import Protocol

from pydantic import ValidationError

from nutrition_calculator.domain.errors import EstimateError, SupersededEstimateError
from nutrition_calculator.domain.estimates import MacroEstimate
from nutrition_calculator.services.cache import Cache

_logger = logging.getLogger(__name__)

_MACRO_PROPERTIES: dict[str, object] = {
    "calories": {"type": "number", "minimum": 0},
    "protein": {"type": "number", "minimum": 0},
    "fat": {"type": "number", "minimum": 0},
    "carbs": {"type": "number", "minimum": 0},
}

ESTIMATE_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        **_MACRO_PROPERTIES,
        "weight": {"anyOf": [{"type": "number", "minimum": 0}, {"type": "null"}]},
        "alternative_sources": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {"source": {"type": "string"}, **_MACRO_PROPERTIES},
                "required": ["source", "calories", "protein", "fat", "carbs"],
                "additionalProperties": False,
            },
        },
    },
    "required": [
        "name",
        "calories",
        "protein",
        "fat",
        "carbs",
        "weight",
        "alternative_sources",
    ],
    "additionalProperties": False,
}

PHOTO_PROMPT = (
    "This is a photo of food. Identify the dish and estimate the whole "
    "visible serving: name, calories (kcal), protein, fat and carbs in grams, "
    "and its weight in grams if you can judge it. List values reported by "
    "other nutrition sources under alternative_sources."
)

_TEXT_PROMPT = (
    "Estimate the nutrition of this food: {query}. Return its name, calories "
    "(kcal), protein, fat and carbs in grams for one typical serving, the "
    "serving weight in grams if known, and values from other nutrition "
    "sources under alternative_sources."
)

_CODE_FENCE = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)


class MacroEstimatorClient(Protocol):
    """Interface for LLM macro estimation."""

    async def estimate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
        image_data_url: str | None = None,
    ) -> str:
        """Return the model's raw text answer."""


@dataclass
class LatestRequestGate:
    """Tracks the newest request per kind so stale results can be dropped."""

    _sequence: dict[str, int] = field(default_factory=dict)

    def begin(self, kind: str) -> int:
        """Start a request and return its sequence number."""
        token = self._sequence.get(kind, 0) + 1
        self._sequence[kind] = token
        return token

    def is_latest(self, kind: str, token: int) -> bool:
        return self._sequence.get(kind, 0) == token


@dataclass
class MacroEstimatorService:
    """Service that prompts the estimator and validates its answers."""

    client: MacroEstimatorClient
    model: str
    reasoning_effort: str | None
    store: bool
    cache: Cache
    text_ttl_seconds: int = 3600
    gate: LatestRequestGate = field(default_factory=LatestRequestGate)

    async def estimate_photo(self, image_bytes: bytes) -> MacroEstimate:
        """Estimate macros for a food photo."""
        if not image_bytes:
            raise EstimateError("Image is empty")
        data_url = _to_data_url(image_bytes)
        token = self.gate.begin("photo")
        return await self._finish(
            "photo", token, self._request(PHOTO_PROMPT, image_data_url=data_url)
        )

    async def estimate_text(self, query: str) -> MacroEstimate:
        """Estimate macros for a food described in text.

        A cache hit still counts as the newest text request, so an older
        request that is still running gets superseded.
        """
        cleaned = query.strip()
        if not cleaned:
            raise EstimateError("Query is empty")
        token = self.gate.begin("text")
        cache_key = f"estimate:text:{cleaned.lower()}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, MacroEstimate):
            return cached
        estimate = await self._finish(
            "text", token, self._request(_TEXT_PROMPT.format(query=cleaned))
        )
        self.cache.set(cache_key, estimate, ttl_seconds=self.text_ttl_seconds)
        return estimate

    async def _finish(
        self, kind: str, token: int, pending: Awaitable[MacroEstimate]
    ) -> MacroEstimate:
        try:
            estimate = await pending
        except EstimateError as exc:
            if not self.gate.is_latest(kind, token):
                raise SupersededEstimateError(f"Newer {kind} request started") from exc
            raise
        if not self.gate.is_latest(kind, token):
            raise SupersededEstimateError(f"Newer {kind} request started")
        return estimate

    async def _request(
        self, prompt: str, image_data_url: str | None = None
    ) -> MacroEstimate:
        try:
            raw = await self.client.estimate(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                prompt=prompt,
                schema=ESTIMATE_SCHEMA,
                image_data_url=image_data_url,
            )
        except Exception as exc:
            _logger.warning("Macro estimate request failed: %s", exc)
            raise EstimateError(f"Estimator request failed: {exc}") from exc
        return parse_estimate(raw)


def parse_estimate(raw: str) -> MacroEstimate:
    """Parse the estimator's text answer into a validated estimate."""
    text = _strip_code_fence(raw or "")
    if not text:
        raise EstimateError("Estimator returned an empty response")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        _logger.info("Estimator answer is not JSON: %.200s", text)
        raise EstimateError("Estimator response is not JSON") from exc
    if not isinstance(payload, dict):
        raise EstimateError("Estimator response is not a JSON object")
    try:
        return MacroEstimate.model_validate(payload)
    except ValidationError as exc:
        raise EstimateError(f"Estimator response is incomplete: {exc}") from exc


def _strip_code_fence(text: str) -> str:
    """Return the JSON inside a Markdown code fence, or the text itself."""
    match = _CODE_FENCE.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    if image_bytes[4:12] in {b"ftypheic", b"ftypheix", b"ftypmif1"}:
        return "image/heic"
    return "image/jpeg"
