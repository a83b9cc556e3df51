import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional, Protocol

from app.core.errors import ConfigurationError

if TYPE_CHECKING:
    from app.models.schemas import CalendarEvent, UserPreferences

logger = logging.getLogger(__name__)


@dataclass
class SuggestionContext:
    preferences: "UserPreferences"
    travel_event: "CalendarEvent"
    feedback_history: list


@dataclass
class EmailContext:
    suggestions: list
    recipient_name: str


@dataclass
class CompletionRequest:
    """
    One call to the generation service. A ``response_schema`` asks for JSON
    constrained to that schema; without it the reply is free-form text.
    ``context`` carries the typed inputs the prompt was built from so offline
    backends can answer without reading the prompt.
    """

    prompt: str
    response_schema: Optional[dict] = None
    system_instruction: Optional[str] = None
    context: Any = None

    @property
    def structured(self) -> bool:
        return self.response_schema is not None


class GenerationBackend(Protocol):
    def complete(self, request: CompletionRequest) -> str:
        ...


class LLMClient:
    """
    Pluggable LLM client abstraction. The default backend is an offline mock;
    Gemini and Ollama backends talk to real models over HTTP.
    """

    def __init__(self, backend: GenerationBackend):
        self.backend = backend

    def complete(self, request: CompletionRequest) -> str:
        try:
            return self.backend.complete(request)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "%s request failed: %s",
                "Structured" if request.structured else "Free-form",
                exc,
            )
            raise


def build_backend(settings) -> GenerationBackend:
    provider = settings.llm_provider.lower()
    if provider == "mock":
        from app.llm.backends.mock_backend import MockGenerationBackend

        return MockGenerationBackend()
    if provider == "gemini":
        from app.llm.backends.gemini_backend import GeminiBackend

        return GeminiBackend(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout=settings.llm_timeout_seconds,
        )
    if provider == "ollama":
        from app.llm.backends.ollama_backend import OllamaBackend

        return OllamaBackend(
            host=settings.ollama_host,
            model=settings.ollama_model,
            timeout=settings.llm_timeout_seconds,
        )
    raise ConfigurationError(f"Unknown LLM provider: {settings.llm_provider}")
