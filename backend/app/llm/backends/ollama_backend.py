from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

import requests

from app.core.errors import ServiceError
from app.llm.client import CompletionRequest

logger = logging.getLogger(__name__)


@dataclass
class OllamaBackend:
    """
    Backend using Ollama's chat API. Structured requests pass the JSON schema
    as ``format`` so the model answers with a matching object.
    """

    host: str = "http://localhost:11434"
    model: str = "llama3"
    timeout: Optional[float] = None

    def _build_messages(self, request: CompletionRequest) -> List[dict]:
        messages = []
        if request.system_instruction:
            messages.append({"role": "system", "content": request.system_instruction})
        messages.append({"role": "user", "content": request.prompt})
        return messages

    def complete(self, request: CompletionRequest) -> str:
        payload = {
            "model": self.model,
            "messages": self._build_messages(request),
            "stream": False,
        }
        if request.structured:
            payload["format"] = request.response_schema
        try:
            resp = requests.post(f"{self.host}/api/chat", json=payload, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise ServiceError(f"Ollama request failed: {exc}") from exc

        try:
            data = resp.json()
        except ValueError as exc:
            raise ServiceError(f"Ollama returned a non-JSON body: {exc}") from exc
        return data.get("message", {}).get("content", "")
