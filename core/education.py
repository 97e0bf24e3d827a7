"""
education.py -- Academy explanations from the Google Generative Language API.

lookup() never raises. Without an API key, or on any failure talking to the
model, it returns FALLBACK text so the academy page always has something to
render.
"""

import json
import logging
from typing import Any

import requests

from core.models import EducationalContent

logger = logging.getLogger("flapper.education")

GENAI_API = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

ACADEMY_TOPICS = ("BadUSB Attacks", "Responder Exploits", "RDP Brute Force", "SMB Relay")

_PROMPT = (
    'Explain the security risks associated with "{topic}" for a desktop computer. '
    "Specifically discuss how tools like Flipper Zero or BadUSB might exploit this. "
    "Keep it educational but concise."
)

_FIELDS = ("title", "summary", "technicalDetails", "remediationSteps")

_RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {name: {"type": "STRING"} for name in _FIELDS},
    "required": list(_FIELDS),
}

_session = requests.Session()
_session.max_redirects = 3


def fallback_content(topic: str) -> EducationalContent:
    return EducationalContent(
        title=topic,
        summary="Security explanation unavailable offline.",
        technical_details="Error connecting to security intelligence database.",
        remediation_steps="Manually review system security documentation.",
    )


def _extract(payload: dict[str, Any]) -> EducationalContent:
    """Pull the model's JSON answer out of a generateContent response."""
    text = payload["candidates"][0]["content"]["parts"][0]["text"]
    data = json.loads(text or "{}")
    if not isinstance(data, dict):
        raise ValueError("model answer is not an object")
    missing = [name for name in _FIELDS if not isinstance(data.get(name), str)]
    if missing:
        raise ValueError(f"model response missing fields: {', '.join(missing)}")
    return EducationalContent(
        title=data["title"],
        summary=data["summary"],
        technical_details=data["technicalDetails"],
        remediation_steps=data["remediationSteps"],
    )


class EducationProvider:
    def __init__(self, api_key: str = "", model: str = "gemini-1.5-pro", timeout: float = 15.0) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    def lookup(self, topic: str) -> EducationalContent:
        topic = topic.strip()
        if not self.api_key:
            return fallback_content(topic)
        body = {
            "contents": [{"parts": [{"text": _PROMPT.format(topic=topic)}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": _RESPONSE_SCHEMA,
            },
        }
        try:
            resp = _session.post(
                GENAI_API.format(model=self.model),
                params={"key": self.api_key},
                json=body,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            return _extract(resp.json())
        except (requests.RequestException, ValueError, KeyError, IndexError, TypeError) as e:
            logger.error("Academy lookup failed for %r: %s", topic, e)
            return fallback_content(topic)
