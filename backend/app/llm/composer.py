import logging
from typing import Sequence

from app.core.errors import CompositionError, ConfigurationError, ServiceError
from app.llm.client import CompletionRequest, EmailContext, LLMClient
from app.llm.prompts import build_email_prompt
from app.models.schemas import TripSuggestion

logger = logging.getLogger(__name__)

FALLBACK_EMAIL_HTML = "<p>Error generating email.</p>"


class EmailComposer:
    def __init__(self, client: LLMClient, default_recipient: str = "Traveler"):
        self.client = client
        self.default_recipient = default_recipient

    def compose(self, suggestions: Sequence[TripSuggestion], recipient_name: str | None = None) -> str:
        """Ask for a summary email of this batch; the HTML is returned verbatim."""
        name = recipient_name or self.default_recipient
        request = CompletionRequest(
            prompt=build_email_prompt(suggestions, name),
            context=EmailContext(suggestions=list(suggestions), recipient_name=name),
        )
        try:
            html = self.client.complete(request)
        except ConfigurationError:
            raise
        except ServiceError as exc:
            raise CompositionError(f"Failed to compose email: {exc}") from exc

        if not html or not html.strip():
            logger.warning("Email composition returned nothing, using fallback")
            return FALLBACK_EMAIL_HTML
        return html
