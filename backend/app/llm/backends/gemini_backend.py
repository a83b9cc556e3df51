from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from app.core.errors import ConfigurationError, ServiceError
from app.llm.client import CompletionRequest

logger = logging.getLogger(__name__)


def to_gemini_schema(schema: dict) -> dict:
    """Gemini's responseSchema spells JSON-schema types in upper case."""
    converted: dict = {}
    for key, value in schema.items():
        if key == "type" and isinstance(value, str):
            converted[key] = value.upper()
        elif key == "properties" and isinstance(value, dict):
            converted[key] = {name: to_gemini_schema(sub) for name, sub in value.items()}
        elif key == "items" and isinstance(value, dict):
            converted[key] = to_gemini_schema(value)
        else:
            converted[key] = value
    return converted


@dataclass
class GeminiBackend:
    """Calls the Generative Language ``generateContent`` endpoint."""

    api_key: Optional[str]
    model: str = "gemini-2.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout: Optional[float] = None

    def _payload(self, request: CompletionRequest) -> dict:
        payload: dict = {"contents": [{"role": "user", "parts": [{"text": request.prompt}]}]}
        if request.system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": request.system_instruction}]}
        if request.structured:
            payload["generationConfig"] = {
                "responseMimeType": "application/json",
                "responseSchema": to_gemini_schema(request.response_schema),
            }
        else:
            payload["generationConfig"] = {"responseMimeType": "text/plain"}
        return payload

    def complete(self, request: CompletionRequest) -> str:
        if not self.api_key:
            raise ConfigurationError(
                "Gemini API key is not configured (set GEMINI_API_KEY or API_KEY)."
            )
        url = f"{self.base_url}/models/{self.model}:generateContent"
        try:
            resp = requests.post(
                url,
                json=self._payload(request),
                headers={"x-goog-api-key": self.api_key},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ServiceError(f"Gemini request failed: {exc}") from exc

        if resp.status_code in (401, 403):
            raise ConfigurationError(
                f"Gemini rejected the API key (HTTP {resp.status_code})."
            )
        if resp.status_code == 400 and "API_KEY_INVALID" in resp.text:
            raise ConfigurationError("Gemini rejected the API key.")
        try:
            resp.raise_for_status()
        except requests.HTTPError as exc:
            raise ServiceError(f"Gemini request failed: {exc}") from exc

        try:
            data = resp.json()
        except ValueError as exc:
            raise ServiceError(f"Gemini returned a non-JSON body: {exc}") from exc
        return self._extract_text(data)

    @staticmethod
    def _extract_text(data: dict) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            logger.warning("Gemini returned no candidates: %s", data.get("promptFeedback"))
            return ""
        parts = candidates[0].get("content", {}).get("parts", [])
        return "".join(part.get("text", "") for part in parts)
