"""
DinnerSnap - Image labeling / OCR provider (Google Cloud Vision).

One images:annotate call with TEXT_DETECTION, LABEL_DETECTION and
OBJECT_LOCALIZATION. Returns raw lowercase tokens; turning them into a
pantry is the normalizer's job.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any

import httpx

from dinnersnap.pantry.lexicon import FOODISH_OCR_WORDS
from dinnersnap.providers.base import ProviderError, ProviderUnavailable, http_error

logger = logging.getLogger(__name__)

VISION_URL = "https://vision.googleapis.com/v1/images:annotate"
MIN_OCR_TOKEN_LENGTH = 3

_DATA_URI_PREFIX = re.compile(r"^data:image/[\w.+-]+;base64,")


@dataclass(frozen=True)
class VisionTokens:
    """Raw tokens from one image, by annotation type."""

    ocr: list[str] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)
    objects: list[str] = field(default_factory=list)

    def all(self) -> list[str]:
        return [*self.ocr, *self.labels, *self.objects]

    def as_dict(self) -> dict[str, list[str]]:
        return {"ocr": self.ocr, "labels": self.labels, "objects": self.objects}


def strip_data_uri(image_base64: str) -> str:
    """Raw base64 payload from a data URI (or the input unchanged)."""
    return _DATA_URI_PREFIX.sub("", image_base64.strip())


def build_annotate_request(image_base64: str) -> dict[str, Any]:
    return {
        "requests": [
            {
                "image": {"content": strip_data_uri(image_base64)},
                "features": [
                    {"type": "TEXT_DETECTION", "maxResults": 1},
                    {"type": "LABEL_DETECTION", "maxResults": 10},
                    {"type": "OBJECT_LOCALIZATION", "maxResults": 10},
                ],
            }
        ]
    }


def parse_annotate_response(payload: Any) -> VisionTokens:
    """
    Extract tokens from an annotate response.

    OCR text is split on non-letters and only food-ish words are kept;
    packaging text is mostly noise otherwise.
    """
    if not isinstance(payload, dict):
        raise ProviderError("vision: response is not an object")

    responses = payload.get("responses") or [{}]
    if not isinstance(responses, list):
        raise ProviderError("vision: 'responses' is not a list")
    res = responses[0] if isinstance(responses[0], dict) else {}
    if isinstance(res.get("error"), dict):
        raise ProviderError(f"vision: {res['error'].get('message', 'annotate error')}")

    text_annotations = res.get("textAnnotations") or []
    raw_text = ""
    if text_annotations and isinstance(text_annotations[0], dict):
        raw_text = str(text_annotations[0].get("description") or "").lower()

    ocr = [
        t for t in re.split(r"[^a-z]+", raw_text)
        if len(t) >= MIN_OCR_TOKEN_LENGTH and t in FOODISH_OCR_WORDS
    ]
    labels = [
        str(a["description"]).lower()
        for a in res.get("labelAnnotations") or []
        if isinstance(a, dict) and a.get("description")
    ]
    objects = [
        str(a["name"]).lower()
        for a in res.get("localizedObjectAnnotations") or []
        if isinstance(a, dict) and a.get("name")
    ]
    return VisionTokens(ocr=ocr, labels=labels, objects=objects)


class VisionClient:
    """Google Cloud Vision annotate client."""

    name = "vision"

    def __init__(
        self,
        api_key: str | None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_key = api_key
        self._transport = transport

    @property
    def available(self) -> bool:
        return bool(self._api_key)

    async def annotate(self, image_base64: str) -> VisionTokens:
        """Annotate one image. Raises ProviderError on any failure."""
        if not self.available:
            raise ProviderUnavailable("vision: no GCV_KEY")

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    VISION_URL,
                    params={"key": self._api_key},
                    json=build_annotate_request(image_base64),
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as e:
            raise http_error(self.name, e) from e
        except ValueError as e:
            raise ProviderError(f"vision: invalid JSON body: {e}") from e

        tokens = parse_annotate_response(payload)
        logger.debug(
            f"Vision tokens: ocr={len(tokens.ocr)} labels={len(tokens.labels)} objects={len(tokens.objects)}"
        )
        return tokens
